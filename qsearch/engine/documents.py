"""Event document types.

Decoding produces the ``Flat*`` types, which still refer to each other by
identifier. Linking turns them into :class:`EventDocument`, whose origins,
arrivals and preferred selections hold direct references.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


@dataclass(frozen=True, slots=True)
class TimeValue:
    value: datetime | None = None
    uncertainty: float = 0.0


@dataclass(frozen=True, slots=True)
class WaveformID:
    network_code: str = ""
    station_code: str = ""
    location_code: str = ""
    channel_code: str = ""


@dataclass(frozen=True, slots=True)
class Magnitude:
    public_id: str
    value: float = 0.0
    uncertainty: float = 0.0
    type: str = ""
    method_id: str = ""
    station_count: int = 0


@dataclass(frozen=True, slots=True)
class Pick:
    public_id: str
    time: TimeValue = field(default_factory=TimeValue)
    waveform_id: WaveformID = field(default_factory=WaveformID)
    phase_hint: str = ""
    evaluation_mode: str = ""
    evaluation_status: str = ""


# ----------------------------------------------------------------------
# Flat (decoded, un-linked) representation
# ----------------------------------------------------------------------
@dataclass(slots=True)
class FlatArrival:
    pick_id: str = ""
    phase: str = ""
    azimuth: float = 0.0
    distance: float = 0.0
    time_residual: float = 0.0
    time_weight: float = 0.0


@dataclass(slots=True)
class FlatOrigin:
    public_id: str
    time: TimeValue = field(default_factory=TimeValue)
    arrivals: list[FlatArrival] = field(default_factory=list)
    # Only populated by dialects that nest magnitudes under origins
    magnitudes: list[Magnitude] = field(default_factory=list)


@dataclass(slots=True)
class FlatEvent:
    public_id: str = ""
    preferred_origin_id: str = ""
    preferred_magnitude_id: str = ""
    origins: list[FlatOrigin] = field(default_factory=list)
    magnitudes: list[Magnitude] = field(default_factory=list)
    picks: list[Pick] = field(default_factory=list)


# ----------------------------------------------------------------------
# Linked representation
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Arrival:
    pick_id: str
    phase: str = ""
    azimuth: float = 0.0
    distance: float = 0.0
    time_residual: float = 0.0
    time_weight: float = 0.0
    pick: Pick | None = None


@dataclass(frozen=True, slots=True)
class Origin:
    public_id: str
    time: TimeValue = field(default_factory=TimeValue)
    arrivals: tuple[Arrival, ...] = ()
    magnitudes: tuple[Magnitude, ...] = ()


@dataclass(frozen=True)
class EventDocument:
    """A fully linked event. Treat as read-only once returned by the linker."""

    public_id: str
    preferred_origin_id: str
    preferred_magnitude_id: str
    origins: dict[str, Origin]
    magnitudes: dict[str, Magnitude]
    picks: dict[str, Pick]
    preferred_origin: Origin | None = None
    preferred_magnitude: Magnitude | None = None


# ----------------------------------------------------------------------
# Feature-query records
# ----------------------------------------------------------------------
class QuakeFeature(BaseModel):
    """Properties of one feature returned by the feature-query endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    public_id: str = ""
    event_type: str = ""
    origin_time: str = ""
    modification_time: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    depth: float = 0.0
    magnitude: float = 0.0
    evaluation_method: str = ""
    evaluation_status: str = ""
    evaluation_mode: str = ""
    earth_model: str = ""
    depth_type: str = ""
    origin_error: float = 0.0
    used_phase_count: int = 0
    used_station_count: int = 0
    minimum_distance: float = 0.0
    azimuthal_gap: float = 0.0
    magnitude_type: str = ""
    magnitude_uncertainty: float = 0.0
    magnitude_station_count: int = 0

    @model_validator(mode="before")
    @classmethod
    def _normalise_keys(cls, value: Any) -> Any:
        """Match wire keys case-insensitively and treat nulls as absent."""

        if not isinstance(value, dict):
            return value
        lookup = {name.replace("_", ""): name for name in cls.model_fields}
        normalised: dict[str, Any] = {}
        for key, item in value.items():
            name = lookup.get(str(key).replace("_", "").lower())
            if name is None or item is None:
                continue
            normalised[name] = item
        return normalised


__all__ = [
    "Arrival",
    "EventDocument",
    "FlatArrival",
    "FlatEvent",
    "FlatOrigin",
    "Magnitude",
    "Origin",
    "Pick",
    "QuakeFeature",
    "TimeValue",
    "WaveformID",
]
