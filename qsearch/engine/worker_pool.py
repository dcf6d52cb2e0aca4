"""Bounded producer → N workers → fan-in pool with cooperative cancellation."""

from __future__ import annotations

import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from threading import Event, Lock
from typing import Any, Callable, Generic, Iterable, Iterator, TypeVar

import structlog

from .fetcher import Fetcher, FetchResponse
from .query import RequestTarget

T = TypeVar("T")

_CLOSED = object()
# Key of the failure reported when iterating the targets raises
TARGETS_KEY = "<targets>"


class CancellationToken:
    """Shared, idempotent stop signal observed by producer and workers."""

    def __init__(self) -> None:
        self._event = Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


@dataclass(frozen=True, slots=True)
class FetchResult(Generic[T]):
    """Outcome for one target: a value or an error, never both."""

    key: str
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _offer(channel: queue.Queue, item: Any, token: CancellationToken, poll_interval: float) -> bool:
    """Put ``item`` unless cancellation is observed first."""

    while not token.cancelled:
        try:
            channel.put(item, timeout=poll_interval)
            return True
        except queue.Full:
            continue
    return False


class WorkerPool(Generic[T]):
    """Run ``handler(target, response)`` for every target on ``workers`` threads."""

    def __init__(
        self,
        fetcher: Fetcher,
        handler: Callable[[RequestTarget, FetchResponse], T],
        workers: int,
        poll_interval: float = 0.1,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.fetcher = fetcher
        self.handler = handler
        self.workers = workers
        self.poll_interval = poll_interval
        self.logger = logger or structlog.get_logger("qsearch.worker_pool")

    def run(
        self, targets: Iterable[RequestTarget], token: CancellationToken | None = None
    ) -> Iterator[FetchResult[T]]:
        """Yield results in completion order.

        Closing the iterator early raises the token; every thread is joined
        before the generator finishes.
        """

        token = token or CancellationToken()
        sources: queue.Queue = queue.Queue(maxsize=self.workers)
        results: queue.Queue = queue.Queue(maxsize=self.workers)
        exhausted = Event()
        remaining = [self.workers]
        remaining_lock = Lock()

        def produce() -> None:
            try:
                for target in targets:
                    if not _offer(sources, target, token, self.poll_interval):
                        return
            except Exception as exc:  # noqa: BLE001
                # Sent before ``exhausted`` so it lands ahead of the close marker
                self.logger.error("targets_failed", error=str(exc))
                _offer(results, FetchResult(key=TARGETS_KEY, error=exc), token, self.poll_interval)
            finally:
                exhausted.set()

        def work() -> None:
            try:
                while True:
                    target = self._take(sources, exhausted, token)
                    if target is None:
                        return
                    result = self._process(target)
                    if not _offer(results, result, token, self.poll_interval):
                        return
            finally:
                with remaining_lock:
                    remaining[0] -= 1
                    last = remaining[0] == 0
                if last:
                    _offer(results, _CLOSED, token, self.poll_interval)

        executor = ThreadPoolExecutor(max_workers=self.workers + 1, thread_name_prefix="qsearch")
        futures: list[Future] = [executor.submit(produce)]
        futures.extend(executor.submit(work) for _ in range(self.workers))
        try:
            while True:
                try:
                    item = results.get(timeout=self.poll_interval)
                except queue.Empty:
                    if token.cancelled:
                        return
                    continue
                if item is _CLOSED:
                    return
                yield item
        finally:
            token.cancel()
            executor.shutdown(wait=True)
            for future in futures:
                error = future.exception()
                if error is not None:
                    self.logger.error("worker_crashed", error=str(error))

    def _take(
        self, sources: queue.Queue, exhausted: Event, token: CancellationToken
    ) -> RequestTarget | None:
        while not token.cancelled:
            try:
                return sources.get(timeout=self.poll_interval)
            except queue.Empty:
                # Producer finishes every put before setting ``exhausted``
                if exhausted.is_set() and sources.empty():
                    return None
        return None

    def _process(self, target: RequestTarget) -> FetchResult[T]:
        try:
            response = self.fetcher.fetch(target)
            return FetchResult(key=target.key, value=self.handler(target, response))
        except Exception as exc:  # noqa: BLE001
            return FetchResult(key=target.key, error=exc)


__all__ = ["CancellationToken", "FetchResult", "TARGETS_KEY", "WorkerPool"]
