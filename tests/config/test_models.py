from __future__ import annotations

import pytest

from qsearch.config import CatalogConfig, DocumentDialect, HttpConfig, PoolConfig, QSearchConfig
from qsearch.config.models import DEFAULT_QUAKEML_URL, DEFAULT_SEISCOMPML_URL


def test_defaults_point_at_geonet() -> None:
    config = QSearchConfig()
    assert config.catalog.quakeml_url == DEFAULT_QUAKEML_URL
    assert config.catalog.seiscompml_url == DEFAULT_SEISCOMPML_URL
    assert config.catalog.wfs_url.endswith("outputFormat=json")
    assert config.catalog.event_json_url is None
    assert config.catalog.document_dialect is DocumentDialect.QUAKEML
    assert (config.pool.event_workers, config.pool.search_workers) == (15, 10)


def test_catalog_requires_http_endpoints() -> None:
    with pytest.raises(ValueError):
        CatalogConfig(quakeml_url="ftp://quakeml.test/")
    assert CatalogConfig(event_json_url="https://events.test/").event_json_url == "https://events.test/"


@pytest.mark.parametrize(
    "overrides",
    [{"event_workers": 0}, {"search_workers": -1}, {"poll_interval": 0}, {"progress_every": 0}],
)
def test_pool_validation(overrides: dict) -> None:
    with pytest.raises(ValueError):
        PoolConfig(**overrides)


def test_http_timeout_coercion() -> None:
    assert HttpConfig(timeout="12.5").timeout == 12.5
    assert HttpConfig(timeout=0).timeout is None
    assert HttpConfig(timeout="").timeout is None
    with pytest.raises(ValueError):
        HttpConfig(timeout=-1)


def test_dialect_from_plain_string() -> None:
    config = QSearchConfig.model_validate({"catalog": {"document_dialect": "seiscompml"}})
    assert config.catalog.document_dialect is DocumentDialect.SEISCOMPML
