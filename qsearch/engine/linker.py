"""Resolve identifier references in a flat event into a linked document."""

from __future__ import annotations

from .documents import Arrival, EventDocument, FlatEvent, FlatOrigin, Magnitude, Origin, Pick
from .errors import IncompleteCondition, IncompleteDocument


def _origin(flat: FlatOrigin, picks: dict[str, Pick] | None = None) -> Origin:
    return Origin(
        public_id=flat.public_id,
        time=flat.time,
        arrivals=tuple(
            Arrival(
                pick_id=a.pick_id,
                phase=a.phase,
                azimuth=a.azimuth,
                distance=a.distance,
                time_residual=a.time_residual,
                time_weight=a.time_weight,
                pick=picks.get(a.pick_id) if picks is not None else None,
            )
            for a in flat.arrivals
        ),
        magnitudes=tuple(flat.magnitudes),
    )


def link(flat: FlatEvent, public_id: str | None = None) -> EventDocument:
    """Build an :class:`EventDocument`, raising :class:`IncompleteDocument` on missing parts.

    References naming an id absent from the document resolve to ``None``.
    Only arrivals of the preferred origin get their picks resolved.
    """

    if not flat.preferred_origin_id:
        raise IncompleteDocument(IncompleteCondition.MISSING_PREFERRED_ORIGIN)
    if not flat.preferred_magnitude_id:
        raise IncompleteDocument(IncompleteCondition.MISSING_PREFERRED_MAGNITUDE)
    if not flat.origins:
        raise IncompleteDocument(IncompleteCondition.NO_ORIGINS)

    magnitudes: list[Magnitude] = list(flat.magnitudes)
    for origin in flat.origins:
        magnitudes.extend(origin.magnitudes)
    if not magnitudes:
        raise IncompleteDocument(IncompleteCondition.NO_MAGNITUDES)

    picks = {pick.public_id: pick for pick in flat.picks}
    magnitude_map = {magnitude.public_id: magnitude for magnitude in magnitudes}
    origins = {
        origin.public_id: _origin(
            origin, picks if origin.public_id == flat.preferred_origin_id else None
        )
        for origin in flat.origins
    }

    return EventDocument(
        public_id=public_id or flat.public_id,
        preferred_origin_id=flat.preferred_origin_id,
        preferred_magnitude_id=flat.preferred_magnitude_id,
        origins=origins,
        magnitudes=magnitude_map,
        picks=picks,
        preferred_origin=origins.get(flat.preferred_origin_id),
        preferred_magnitude=magnitude_map.get(flat.preferred_magnitude_id),
    )


__all__ = ["link"]
