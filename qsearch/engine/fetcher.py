"""HTTP retrieval of request targets."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from ..config import HttpConfig
from .errors import TransportError
from .query import RequestTarget


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    content: bytes


class Fetcher:
    """Issue plain GET requests; any transport error or non-2xx status fails."""

    def __init__(
        self,
        http_config: HttpConfig | None = None,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.http_config = http_config or HttpConfig()
        self.logger = logger or structlog.get_logger("qsearch.fetcher")
        self._owns_client = client is None
        # httpx.Client is safe to share between worker threads
        self._client = client or httpx.Client(
            follow_redirects=self.http_config.follow_redirects,
            timeout=self.http_config.timeout,
            headers={"User-Agent": self.http_config.user_agent} if self.http_config.user_agent else None,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    def fetch(self, target: RequestTarget) -> FetchResponse:
        try:
            response = self._client.get(target.url)
        except httpx.HTTPError as exc:
            self.logger.warning("fetch_error", url=target.url, error=str(exc))
            raise TransportError(f"Request failed: {exc}", url=target.url) from exc
        self.logger.debug(
            "fetched",
            url=target.url,
            status=response.status_code,
            content_type=response.headers.get("content-type", ""),
            size=len(response.content),
        )
        if not response.is_success:
            raise TransportError(
                f"Non 200 response code: {response.status_code}",
                url=target.url,
                status_code=response.status_code,
            )
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            content=response.content,
        )


__all__ = ["Fetcher", "FetchResponse"]
