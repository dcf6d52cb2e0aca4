"""Deterministic request construction and date-range chunking."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Iterator

UNSET_PHASE_COUNT = -999
UNSET_MAGNITUDE = -999.9
_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
_AND = "+AND+"


@dataclass(frozen=True, slots=True)
class RequestTarget:
    """One unit of work for the worker pool."""

    key: str
    url: str


@dataclass(frozen=True, slots=True)
class Query:
    """Logical feature search: by event id, or by time window plus filters."""

    event_id: str = ""
    start: datetime | None = None
    end: datetime | None = None
    min_used_phase_count: int = UNSET_PHASE_COUNT
    min_magnitude: float = UNSET_MAGNITUDE
    bbox: str = ""

    @property
    def by_event_id(self) -> bool:
        return bool(self.event_id)

    def cql_filter(self) -> str:
        if self.by_event_id:
            return f"publicid=='{self.event_id}'"
        if self.start is None or self.end is None:
            raise ValueError("A time window query requires both start and end")
        clauses = [
            f"origintime>='{self.start.strftime(_TIME_FORMAT)}'",
            f"origintime<='{self.end.strftime(_TIME_FORMAT)}'",
        ]
        if self.min_used_phase_count != UNSET_PHASE_COUNT:
            clauses.append(f"usedphasecount>={format_number(self.min_used_phase_count)}")
        if self.min_magnitude != UNSET_MAGNITUDE:
            clauses.append(f"magnitude>={format_number(self.min_magnitude)}")
        if self.bbox:
            clauses.append(f"BBOX(origin_geom,{self.bbox})")
        return _AND.join(clauses)

    def url(self, base_url: str) -> str:
        return f"{base_url}&cql_filter={self.cql_filter()}"


def format_number(value: float | int) -> str:
    """Shortest decimal rendering: ``6.1`` stays ``6.1``, ``6.0`` becomes ``6``."""

    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def add_years(moment: datetime, years: int) -> datetime:
    """Add calendar years, rolling Feb 29 over to Mar 1 in non-leap years."""

    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, month=3, day=1)


def chunk_query(query: Query) -> Iterator[Query]:
    """Split a time window into yearly sub-queries.

    Adjacent chunks share their boundary instant, so events on a boundary
    second may be returned twice; callers key results by public id.
    """

    if query.by_event_id:
        yield query
        return
    if query.start is None or query.end is None:
        raise ValueError("A time window query requires both start and end")
    span = query.end.year - query.start.year
    chunk_start = query.start
    for _ in range(span):
        chunk_end = add_years(chunk_start, 1)
        yield replace(query, start=chunk_start, end=chunk_end)
        chunk_start = chunk_end
    yield replace(query, start=chunk_start, end=query.end)


def search_targets(query: Query, base_url: str) -> Iterator[RequestTarget]:
    for chunk in chunk_query(query):
        url = chunk.url(base_url)
        yield RequestTarget(key=url, url=url)


def document_targets(event_ids: Iterable[str], base_url: str, suffix: str = "") -> Iterator[RequestTarget]:
    for event_id in event_ids:
        yield RequestTarget(key=event_id, url=f"{base_url}{event_id}{suffix}")


__all__ = [
    "Query",
    "RequestTarget",
    "UNSET_MAGNITUDE",
    "UNSET_PHASE_COUNT",
    "add_years",
    "chunk_query",
    "document_targets",
    "format_number",
    "search_targets",
]
