"""Pydantic models used across qsearch configuration flow."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_WFS_URL = (
    "http://wfs.geonet.org.nz/geonet/ows?service=WFS&version=1.0.0"
    "&request=GetFeature&typeName=geonet:quake_search_v1&outputFormat=json"
)
DEFAULT_QUAKEML_URL = "http://quakeml.geonet.org.nz/quakeml/1.2/"
DEFAULT_SEISCOMPML_URL = "http://seiscompml07.s3-website-ap-southeast-2.amazonaws.com/"


class DocumentDialect(str, Enum):
    """Event document dialects served by the catalog endpoints."""

    QUAKEML = "quakeml"
    SEISCOMPML = "seiscompml"
    JSON = "json"


class CatalogConfig(BaseModel):
    """Remote endpoints queried by the catalog clients."""

    wfs_url: str = DEFAULT_WFS_URL
    quakeml_url: str = DEFAULT_QUAKEML_URL
    seiscompml_url: str = DEFAULT_SEISCOMPML_URL
    # Required when document_dialect is json
    event_json_url: str | None = None
    document_dialect: DocumentDialect = DocumentDialect.QUAKEML

    @field_validator("wfs_url", "quakeml_url", "seiscompml_url", "event_json_url")
    @classmethod
    def _require_http(cls, value: str | None) -> str | None:
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError(f"Endpoint must be an http(s) URL: {value}")
        return value


class PoolConfig(BaseModel):
    """Worker pool sizing and cancellation polling."""

    event_workers: int = 15
    search_workers: int = 10
    poll_interval: float = 0.1
    progress_every: int = 50

    @model_validator(mode="after")
    def _validate_positive(self) -> "PoolConfig":
        if self.event_workers < 1:
            raise ValueError("event_workers must be >= 1")
        if self.search_workers < 1:
            raise ValueError("search_workers must be >= 1")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if self.progress_every < 1:
            raise ValueError("progress_every must be >= 1")
        return self


class HttpConfig(BaseModel):
    """HTTP client options shared by every worker."""

    timeout: float | None = 30.0
    user_agent: str | None = "qsearch"
    follow_redirects: bool = True

    @field_validator("timeout", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: Any) -> float | None:
        if value in (None, "", 0):
            return None
        timeout = float(value)
        if timeout < 0:
            raise ValueError("timeout must be non-negative")
        return timeout


class QSearchConfig(BaseModel):
    """Top level configuration document."""

    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    pool: PoolConfig = Field(default_factory=PoolConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)


__all__ = [
    "CatalogConfig",
    "DocumentDialect",
    "HttpConfig",
    "PoolConfig",
    "QSearchConfig",
]
