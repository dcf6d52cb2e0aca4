"""Decode catalog wire documents into flat, un-linked structures."""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any, Callable, Iterator

from pydantic import ValidationError

from ..config import DocumentDialect
from .documents import (
    FlatArrival,
    FlatEvent,
    FlatOrigin,
    Magnitude,
    Pick,
    QuakeFeature,
    TimeValue,
    WaveformID,
)
from .errors import DecodeError

_FRACTION = re.compile(r"\.(\d+)")


def parse_time(text: str | None) -> datetime | None:
    """Parse an RFC3339 timestamp, keeping up to microsecond precision."""

    if text is None:
        return None
    value = text.strip()
    if not value:
        return None
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    # fromisoformat accepts at most six fractional digits
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    try:
        moment = datetime.fromisoformat(value)
    except ValueError as exc:
        raise DecodeError(f"Invalid time value: {text!r}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _number(text: Any, cast: Callable[[Any], Any], field_name: str) -> Any:
    if text is None:
        return cast(0)
    if isinstance(text, str):
        text = text.strip()
        if not text:
            return cast(0)
    try:
        return cast(text)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Invalid {field_name}: {text!r}") from exc


# ----------------------------------------------------------------------
# XML helpers: elements are matched by local name so namespaces are ignored
# ----------------------------------------------------------------------
def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _children(element: ET.Element | None, name: str) -> Iterator[ET.Element]:
    if element is None:
        return iter(())
    return (child for child in element if _local(child.tag) == name)


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    return next(_children(element, name), None)


def _text(element: ET.Element | None, *path: str) -> str:
    node = element
    for name in path:
        node = _child(node, name)
        if node is None:
            return ""
    return (node.text or "").strip() if node is not None else ""


def _xml_time(element: ET.Element | None) -> TimeValue:
    node = _child(element, "time")
    if node is None:
        return TimeValue()
    value_node = _child(node, "value")
    return TimeValue(
        value=parse_time(value_node.text) if value_node is not None else None,
        uncertainty=_number(_text(node, "uncertainty"), float, "time uncertainty"),
    )


def _xml_pick(element: ET.Element) -> Pick:
    waveform = _child(element, "waveformID")
    attrs = waveform.attrib if waveform is not None else {}
    return Pick(
        public_id=element.get("publicID", ""),
        time=_xml_time(element),
        waveform_id=WaveformID(
            network_code=attrs.get("networkCode", ""),
            station_code=attrs.get("stationCode", ""),
            location_code=attrs.get("locationCode", ""),
            channel_code=attrs.get("channelCode", ""),
        ),
        phase_hint=_text(element, "phaseHint"),
        evaluation_mode=_text(element, "evaluationMode"),
        evaluation_status=_text(element, "evaluationStatus"),
    )


def _xml_magnitude(element: ET.Element, value_tag: str) -> Magnitude:
    return Magnitude(
        public_id=element.get("publicID", ""),
        value=_number(_text(element, value_tag, "value"), float, "magnitude value"),
        uncertainty=_number(_text(element, value_tag, "uncertainty"), float, "magnitude uncertainty"),
        type=_text(element, "type"),
        method_id=_text(element, "methodID"),
        station_count=_number(_text(element, "stationCount"), int, "stationCount"),
    )


def _xml_arrival(element: ET.Element, weight_tag: str) -> FlatArrival:
    return FlatArrival(
        pick_id=_text(element, "pickID"),
        phase=_text(element, "phase"),
        azimuth=_number(_text(element, "azimuth"), float, "azimuth"),
        distance=_number(_text(element, "distance"), float, "distance"),
        time_residual=_number(_text(element, "timeResidual"), float, "timeResidual"),
        time_weight=_number(_text(element, weight_tag), float, weight_tag),
    )


class Parser:
    """Decode event documents and feature collections."""

    def parse_document(self, payload: bytes | str, dialect: DocumentDialect) -> FlatEvent:
        if dialect is DocumentDialect.QUAKEML:
            return self.parse_quakeml(payload)
        if dialect is DocumentDialect.SEISCOMPML:
            return self.parse_seiscompml(payload)
        if dialect is DocumentDialect.JSON:
            return self.parse_event_json(payload)
        raise ValueError(f"Unsupported document dialect: {dialect}")

    # ------------------------------------------------------------------
    def parse_quakeml(self, payload: bytes | str) -> FlatEvent:
        """QuakeML 1.2: origins, magnitudes and picks all sit under ``event``."""

        root = self._xml_root(payload)
        event = _child(_child(root, "eventParameters"), "event")
        if event is None:
            return FlatEvent()
        return FlatEvent(
            public_id=event.get("publicID", ""),
            preferred_origin_id=_text(event, "preferredOriginID"),
            preferred_magnitude_id=_text(event, "preferredMagnitudeID"),
            origins=[
                FlatOrigin(
                    public_id=origin.get("publicID", ""),
                    time=_xml_time(origin),
                    arrivals=[_xml_arrival(a, "timeWeight") for a in _children(origin, "arrival")],
                )
                for origin in _children(event, "origin")
            ],
            magnitudes=[_xml_magnitude(m, "mag") for m in _children(event, "magnitude")],
            picks=[_xml_pick(p) for p in _children(event, "pick")],
        )

    def parse_seiscompml(self, payload: bytes | str) -> FlatEvent:
        """SeisComPML 0.7: origins and picks are siblings of ``event``, magnitudes nest in origins."""

        root = self._xml_root(payload)
        parameters = _child(root, "EventParameters")
        event = _child(parameters, "event")
        return FlatEvent(
            public_id=event.get("publicID", "") if event is not None else "",
            preferred_origin_id=_text(event, "preferredOriginID"),
            preferred_magnitude_id=_text(event, "preferredMagnitudeID"),
            origins=[
                FlatOrigin(
                    public_id=origin.get("publicID", ""),
                    time=_xml_time(origin),
                    arrivals=[_xml_arrival(a, "weight") for a in _children(origin, "arrival")],
                    magnitudes=[_xml_magnitude(m, "magnitude") for m in _children(origin, "magnitude")],
                )
                for origin in _children(parameters, "origin")
            ],
            picks=[_xml_pick(p) for p in _children(parameters, "pick")],
        )

    def parse_event_json(self, payload: bytes | str) -> FlatEvent:
        """JSON event document using camel-case keys and plural entity lists."""

        data = self._json(payload)
        event = data.get("event", data)
        if not isinstance(event, dict):
            raise DecodeError("JSON event document must be an object")
        try:
            return FlatEvent(
                public_id=str(event.get("publicID") or ""),
                preferred_origin_id=str(event.get("preferredOriginID") or ""),
                preferred_magnitude_id=str(event.get("preferredMagnitudeID") or ""),
                origins=[self._json_origin(o) for o in event.get("origins") or []],
                magnitudes=[self._json_magnitude(m) for m in event.get("magnitudes") or []],
                picks=[self._json_pick(p) for p in event.get("picks") or []],
            )
        except (AttributeError, TypeError) as exc:
            raise DecodeError(f"Malformed JSON event document: {exc}") from exc

    def parse_features(self, payload: bytes | str) -> list[QuakeFeature]:
        """Feature collection from the feature-query endpoint."""

        data = self._json(payload)
        features = data.get("features") or []
        if not isinstance(features, list):
            raise DecodeError("'features' must be a list")
        try:
            return [
                QuakeFeature.model_validate((feature or {}).get("properties") or {})
                for feature in features
            ]
        except (ValidationError, AttributeError) as exc:
            raise DecodeError(f"Malformed feature collection: {exc}") from exc

    # ------------------------------------------------------------------
    @staticmethod
    def _xml_root(payload: bytes | str) -> ET.Element:
        try:
            return ET.fromstring(payload)
        except ET.ParseError as exc:
            raise DecodeError(f"Malformed XML document: {exc}") from exc

    @staticmethod
    def _json(payload: bytes | str) -> dict[str, Any]:
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"Malformed JSON document: {exc}") from exc
        if not isinstance(data, dict):
            raise DecodeError("JSON document must be an object")
        return data

    @staticmethod
    def _json_time(data: dict[str, Any] | None) -> TimeValue:
        if not data:
            return TimeValue()
        return TimeValue(
            value=parse_time(data.get("value")),
            uncertainty=_number(data.get("uncertainty"), float, "time uncertainty"),
        )

    def _json_origin(self, data: dict[str, Any]) -> FlatOrigin:
        return FlatOrigin(
            public_id=str(data.get("publicID") or ""),
            time=self._json_time(data.get("time")),
            arrivals=[
                FlatArrival(
                    pick_id=str(a.get("pickID") or ""),
                    phase=str(a.get("phase") or ""),
                    azimuth=_number(a.get("azimuth"), float, "azimuth"),
                    distance=_number(a.get("distance"), float, "distance"),
                    time_residual=_number(a.get("timeResidual"), float, "timeResidual"),
                    time_weight=_number(a.get("timeWeight"), float, "timeWeight"),
                )
                for a in data.get("arrivals") or []
            ],
            magnitudes=[self._json_magnitude(m) for m in data.get("magnitudes") or []],
        )

    @staticmethod
    def _json_magnitude(data: dict[str, Any]) -> Magnitude:
        mag = data.get("mag") or {}
        return Magnitude(
            public_id=str(data.get("publicID") or ""),
            value=_number(mag.get("value"), float, "magnitude value"),
            uncertainty=_number(mag.get("uncertainty"), float, "magnitude uncertainty"),
            type=str(data.get("type") or ""),
            method_id=str(data.get("methodID") or ""),
            station_count=_number(data.get("stationCount"), int, "stationCount"),
        )

    def _json_pick(self, data: dict[str, Any]) -> Pick:
        waveform = data.get("waveformID") or {}
        return Pick(
            public_id=str(data.get("publicID") or ""),
            time=self._json_time(data.get("time")),
            waveform_id=WaveformID(
                network_code=str(waveform.get("networkCode") or ""),
                station_code=str(waveform.get("stationCode") or ""),
                location_code=str(waveform.get("locationCode") or ""),
                channel_code=str(waveform.get("channelCode") or ""),
            ),
            phase_hint=str(data.get("phaseHint") or ""),
            evaluation_mode=str(data.get("evaluationMode") or ""),
            evaluation_status=str(data.get("evaluationStatus") or ""),
        )


__all__ = ["Parser", "parse_time"]
