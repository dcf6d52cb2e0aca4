"""Error taxonomy for the fetch → parse → link pipeline."""

from __future__ import annotations

from enum import Enum


class QSearchError(Exception):
    """Base class for all pipeline failures."""


class TransportError(QSearchError):
    """Network failure or non-success status for a single request."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(QSearchError):
    """The wire document could not be decoded."""


class IncompleteCondition(str, Enum):
    MISSING_PREFERRED_ORIGIN = "MissingPreferredOrigin"
    MISSING_PREFERRED_MAGNITUDE = "MissingPreferredMagnitude"
    NO_ORIGINS = "NoOrigins"
    NO_MAGNITUDES = "NoMagnitudes"


_CONDITION_MESSAGES = {
    IncompleteCondition.MISSING_PREFERRED_ORIGIN: "Empty PreferredOriginID",
    IncompleteCondition.MISSING_PREFERRED_MAGNITUDE: "Empty PreferredMagnitudeID",
    IncompleteCondition.NO_ORIGINS: "Found no origins",
    IncompleteCondition.NO_MAGNITUDES: "Found no magnitudes",
}


class IncompleteDocument(QSearchError):
    """Document decoded but lacks the entities required for linking."""

    def __init__(self, condition: IncompleteCondition) -> None:
        super().__init__(_CONDITION_MESSAGES[condition])
        self.condition = condition


__all__ = [
    "DecodeError",
    "IncompleteCondition",
    "IncompleteDocument",
    "QSearchError",
    "TransportError",
]
