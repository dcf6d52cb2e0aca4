"""Catalog orchestrator wiring query building, fetching, parsing, linking and aggregation."""

from __future__ import annotations

from typing import Iterable

import httpx

from .config import DocumentDialect, QSearchConfig
from .engine import (
    AggregationMode,
    CancellationToken,
    EventDocument,
    Fetcher,
    FetchResponse,
    FetchResult,
    Parser,
    Query,
    QuakeFeature,
    RequestTarget,
    ResultAggregator,
    WorkerPool,
    document_targets,
    link,
    search_targets,
)
from .logging_conf import component_logger


def _merge_features(result: FetchResult[list[QuakeFeature]]) -> Iterable[tuple[str, QuakeFeature]]:
    # Chunk boundaries overlap by a second; keying by public id drops the duplicate
    return ((feature.public_id, feature) for feature in result.value or [])


class Orchestrator:
    """Central coordinator for the feature search and event document fetch."""

    def __init__(self, config: QSearchConfig | None = None, client: httpx.Client | None = None) -> None:
        self.config = config or QSearchConfig()
        self.parser = Parser()
        self._client = client
        self.logger = component_logger("orchestrator")

    # ------------------------------------------------------------------
    def search(self, query: Query, token: CancellationToken | None = None) -> dict[str, QuakeFeature]:
        """Search the feature endpoint, chunked by year.

        Any failed chunk aborts the search and is raised; nothing partial is
        returned.
        """

        targets = list(search_targets(query, self.config.catalog.wfs_url))
        self.logger.info("search_started", chunks=len(targets))
        token = token or CancellationToken()

        def handle(_target: RequestTarget, response: FetchResponse) -> list[QuakeFeature]:
            return self.parser.parse_features(response.content)

        aggregator = ResultAggregator(
            AggregationMode.STRICT,
            merge=_merge_features,
            progress_every=self.config.pool.progress_every,
            logger=component_logger("search"),
        )
        with self._fetcher() as fetcher:
            pool = WorkerPool(
                fetcher,
                handle,
                workers=self.config.pool.search_workers,
                poll_interval=self.config.pool.poll_interval,
            )
            aggregate = aggregator.collect(pool.run(targets, token), token)
        self.logger.info("search_finished", quakes=len(aggregate.items))
        return aggregate.items

    def fetch_documents(
        self,
        event_ids: Iterable[str],
        dialect: DocumentDialect | None = None,
        token: CancellationToken | None = None,
    ) -> dict[str, EventDocument]:
        """Fetch and link one document per event id.

        Failures are logged and skipped, so the result may hold fewer
        entries than ``event_ids``.
        """

        dialect = dialect or self.config.catalog.document_dialect
        targets = self._document_targets(event_ids, dialect)

        def handle(target: RequestTarget, response: FetchResponse) -> EventDocument:
            flat = self.parser.parse_document(response.content, dialect)
            return link(flat, public_id=flat.public_id or target.key)

        aggregator = ResultAggregator(
            AggregationMode.TOLERANT,
            progress_every=self.config.pool.progress_every,
            logger=component_logger("documents"),
        )
        with self._fetcher() as fetcher:
            pool = WorkerPool(
                fetcher,
                handle,
                workers=self.config.pool.event_workers,
                poll_interval=self.config.pool.poll_interval,
            )
            aggregate = aggregator.collect(pool.run(targets, token), token)
        self.logger.info(
            "documents_finished",
            dialect=dialect.value,
            found=len(aggregate.items),
            failed=len(aggregate.failures),
        )
        return aggregate.items

    # ------------------------------------------------------------------
    def _document_targets(self, event_ids: Iterable[str], dialect: DocumentDialect) -> Iterable[RequestTarget]:
        catalog = self.config.catalog
        if dialect is DocumentDialect.SEISCOMPML:
            return document_targets(event_ids, catalog.seiscompml_url, suffix=".xml")
        if dialect is DocumentDialect.JSON:
            if not catalog.event_json_url:
                raise ValueError("catalog.event_json_url must be set to fetch JSON documents")
            return document_targets(event_ids, catalog.event_json_url)
        return document_targets(event_ids, catalog.quakeml_url)

    def _fetcher(self) -> Fetcher:
        return Fetcher(self.config.http, client=self._client, logger=component_logger("fetcher"))


__all__ = ["Orchestrator"]
