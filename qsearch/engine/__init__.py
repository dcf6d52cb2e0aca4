"""Engine components orchestrating build → fetch → parse → link → aggregate."""

from .aggregator import Aggregate, AggregationMode, FailedKey, ResultAggregator
from .documents import (
    Arrival,
    EventDocument,
    FlatArrival,
    FlatEvent,
    FlatOrigin,
    Magnitude,
    Origin,
    Pick,
    QuakeFeature,
    TimeValue,
    WaveformID,
)
from .errors import (
    DecodeError,
    IncompleteCondition,
    IncompleteDocument,
    QSearchError,
    TransportError,
)
from .fetcher import Fetcher, FetchResponse
from .linker import link
from .parser import Parser
from .query import Query, RequestTarget, chunk_query, document_targets, search_targets
from .worker_pool import CancellationToken, FetchResult, WorkerPool

__all__ = [
    "Aggregate",
    "AggregationMode",
    "Arrival",
    "CancellationToken",
    "DecodeError",
    "EventDocument",
    "FailedKey",
    "FetchResponse",
    "FetchResult",
    "Fetcher",
    "FlatArrival",
    "FlatEvent",
    "FlatOrigin",
    "IncompleteCondition",
    "IncompleteDocument",
    "Magnitude",
    "Origin",
    "Parser",
    "Pick",
    "QSearchError",
    "Query",
    "QuakeFeature",
    "RequestTarget",
    "ResultAggregator",
    "TimeValue",
    "TransportError",
    "WaveformID",
    "WorkerPool",
    "chunk_query",
    "document_targets",
    "link",
    "search_targets",
]
