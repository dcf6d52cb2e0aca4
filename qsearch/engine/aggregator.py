"""Fan-in of worker results under a strict or tolerant failure policy."""

from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, Iterable, Iterator, TypeVar

import structlog

from .worker_pool import CancellationToken, FetchResult

T = TypeVar("T")
V = TypeVar("V")


class AggregationMode(str, Enum):
    # Failures are logged and their keys left out
    TOLERANT = "tolerant"
    # First failure cancels the run and is raised
    STRICT = "strict"


@dataclass(slots=True)
class FailedKey:
    key: str
    error: Exception


@dataclass(slots=True)
class Aggregate(Generic[V]):
    items: dict[str, V] = field(default_factory=dict)
    failures: list[FailedKey] = field(default_factory=list)


def _merge_single(result: FetchResult) -> Iterable[tuple[str, object]]:
    return ((result.key, result.value),)


class ResultAggregator(Generic[T, V]):
    """Collect results into a mapping.

    ``merge`` turns one successful result into ``(key, item)`` pairs; the
    default keys the value by the target key. Later pairs overwrite earlier
    ones with the same key.
    """

    def __init__(
        self,
        mode: AggregationMode,
        merge: Callable[[FetchResult[T]], Iterable[tuple[str, V]]] | None = None,
        progress_every: int = 50,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.mode = mode
        self.merge = merge or _merge_single
        self.progress_every = progress_every
        self.logger = logger or structlog.get_logger("qsearch.aggregator")

    def collect(
        self, results: Iterator[FetchResult[T]], token: CancellationToken | None = None
    ) -> Aggregate[V]:
        aggregate: Aggregate[V] = Aggregate()
        since_progress = 0
        with closing(results):
            for result in results:
                if not result.ok:
                    if self.mode is AggregationMode.STRICT:
                        if token is not None:
                            token.cancel()
                        self.logger.error(
                            "aggregation_aborted", key=result.key, error=str(result.error)
                        )
                        raise result.error
                    self.logger.warning("fetch_failed", key=result.key, error=str(result.error))
                    aggregate.failures.append(FailedKey(result.key, result.error))
                    continue
                for key, item in self.merge(result):
                    aggregate.items[key] = item
                    since_progress += 1
                if since_progress >= self.progress_every:
                    self.logger.info("downloaded", count=len(aggregate.items))
                    since_progress = 0
        return aggregate


__all__ = ["Aggregate", "AggregationMode", "FailedKey", "ResultAggregator"]
