"""Field vocabularies and per-record string mappings for tabular output."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Mapping

from .engine.documents import Arrival, EventDocument, Origin, Pick, QuakeFeature
from .engine.query import format_number

EVENT_FIELDS: dict[str, str] = {
    "EventID": "e.g., 2014p072856.  The public id of the event.",
    "EventType": "e.g., earthquake",
    "OriginTime": "e.g., 2014-07-23T06:04:43.625Z",
    "ModificationTime": "e.g., 2014-07-23T06:07:12.232Z",
    "Latitude": "e.g., -39.648535",
    "Longitude": "e.g., 173.47803",
    "Depth": "e.g., 7.343750 (km)",
    "Magnitude": "e.g., 2.6416703",
    "EvaluationMethod": "e.g., NonLinLoc",
    "EvaluationStatus": "e.g., confirmed",
    "EvaluationMode": "e.g., automatic",
    "EarthModel": "e.g., nz3drx",
    "DepthType": "e.g., operator assigned",
    "OriginError": "e.g., 0.48022989",
    "UsedPhaseCount": "e.g., 23",
    "UsedStationCount": "e.g., 23",
    "MinimumDistance": "e.g., 0.38872472",
    "AzimuthalGap": "e.g., 206.88617",
    "MagnitudeType": "e.g., M",
    "MagnitudeUncertainty": "e.g., 0",
    "MagnitudeStationCount": "e.g., 13",
}

PICK_FIELDS: dict[str, str] = {
    "EventID": "e.g., 2014p072856.  The public id used to request the event.",
    "NetworkCode": "e.g., NZ",
    "StationCode": "e.g., SNZO",
    "ChannelCode": "e.g., HHZ",
    "LocationCode": "e.g., 10",
    "PhaseHint": "e.g., P",
    "PhaseTime": "e.g., 2012-01-27T04:06:29.798393Z",
}

ARRIVAL_FIELDS: dict[str, str] = {
    "EventID": "e.g., 2014p072856.  The public id used to request the event.",
    "NetworkCode": "e.g., NZ",
    "StationCode": "e.g., SNZO",
    "ChannelCode": "e.g., HHZ",
    "LocationCode": "e.g., 10",
    "Phase": "e.g., P",
    "PhaseTime": "e.g., 2012-01-27T04:06:29.798393Z",
    "PhaseOriginOffset": "e.g., 4.428928 (PhaseTime - OriginTime, s)",
    "TimeResidual": "e.g., -0.000000",
    "TimeWeight": "e.g., 1.532536",
}


def format_time(value: datetime | None) -> str:
    """RFC3339 with trailing fractional zeros trimmed and ``Z`` for UTC."""

    if value is None:
        return ""
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    fraction = f"{value.microsecond:06d}".rstrip("0")
    if fraction:
        text = f"{text}.{fraction}"
    offset = value.utcoffset()
    if offset is None:
        return text
    if offset == timedelta(0):
        return text + "Z"
    zone = value.strftime("%z")
    return f"{text}{zone[:3]}:{zone[3:5]}"


def _fixed(value: float) -> str:
    return f"{value:f}"


def event_row(feature: QuakeFeature, event_id: str | None = None) -> dict[str, str]:
    return {
        "EventID": event_id or feature.public_id,
        "EventType": feature.event_type,
        "OriginTime": feature.origin_time,
        "ModificationTime": feature.modification_time,
        "Latitude": format_number(feature.latitude),
        "Longitude": format_number(feature.longitude),
        "Depth": _fixed(feature.depth),
        "Magnitude": format_number(feature.magnitude),
        "EvaluationMethod": feature.evaluation_method,
        "EvaluationStatus": feature.evaluation_status,
        "EvaluationMode": feature.evaluation_mode,
        "EarthModel": feature.earth_model,
        "DepthType": feature.depth_type,
        "OriginError": format_number(feature.origin_error),
        "UsedPhaseCount": str(feature.used_phase_count),
        "UsedStationCount": str(feature.used_station_count),
        "MinimumDistance": format_number(feature.minimum_distance),
        "AzimuthalGap": format_number(feature.azimuthal_gap),
        "MagnitudeType": feature.magnitude_type,
        "MagnitudeUncertainty": format_number(feature.magnitude_uncertainty),
        "MagnitudeStationCount": str(feature.magnitude_station_count),
    }


def _waveform_fields(pick: Pick | None) -> dict[str, str]:
    if pick is None:
        return {"NetworkCode": "", "StationCode": "", "ChannelCode": "", "LocationCode": ""}
    return {
        "NetworkCode": pick.waveform_id.network_code,
        "StationCode": pick.waveform_id.station_code,
        "ChannelCode": pick.waveform_id.channel_code,
        "LocationCode": pick.waveform_id.location_code,
    }


def pick_rows(document: EventDocument, event_id: str | None = None) -> list[dict[str, str]]:
    rows = []
    for pick in document.picks.values():
        row = {"EventID": event_id or document.public_id}
        row.update(_waveform_fields(pick))
        row["PhaseHint"] = pick.phase_hint
        row["PhaseTime"] = format_time(pick.time.value)
        rows.append(row)
    return rows


def _arrival_row(arrival: Arrival, origin: Origin, event_id: str) -> dict[str, str]:
    row = {"EventID": event_id}
    row.update(_waveform_fields(arrival.pick))
    row["Phase"] = arrival.phase
    pick_time = arrival.pick.time.value if arrival.pick is not None else None
    row["PhaseTime"] = format_time(pick_time)
    if pick_time is not None and origin.time.value is not None:
        row["PhaseOriginOffset"] = _fixed((pick_time - origin.time.value).total_seconds())
    else:
        row["PhaseOriginOffset"] = ""
    row["TimeResidual"] = _fixed(arrival.time_residual)
    row["TimeWeight"] = _fixed(arrival.time_weight)
    return row


def arrival_rows(origin: Origin | None, event_id: str) -> list[dict[str, str]]:
    if origin is None:
        return []
    return [_arrival_row(arrival, origin, event_id) for arrival in origin.arrivals]


def invalid_fields(selection: str, vocabulary: Mapping[str, str]) -> list[str]:
    return [name for name in selection.split(",") if name not in vocabulary]


def vocabulary_string(vocabulary: Mapping[str, str]) -> str:
    return ",".join(sorted(vocabulary))


def select(row: Mapping[str, str], fields: Iterable[str]) -> str:
    return ",".join(row.get(name, "") for name in fields)


__all__ = [
    "ARRIVAL_FIELDS",
    "EVENT_FIELDS",
    "PICK_FIELDS",
    "arrival_rows",
    "event_row",
    "format_time",
    "invalid_fields",
    "pick_rows",
    "select",
    "vocabulary_string",
]
