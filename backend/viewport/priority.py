from __future__ import annotations

from geo.bounds import Position
from geo.distance import distance_km
from markers.types import Marker


MAX_VISIBLE_MARKERS = 200


def prioritize(
    markers: list[Marker],
    center: Position,
    zoom: float,
    max_visible: int = MAX_VISIBLE_MARKERS,
) -> list[Marker]:
    """
    Rank markers (priority tier desc, then distance from center asc) and keep the
    first `max_visible`.

    Runs before clustering so clusters are only ever built from kept markers.
    `zoom` is accepted for call-site symmetry with the clusterers; ranking ignores it.
    """
    # sorted() is stable: equal keys keep input order.
    ranked = sorted(
        markers,
        key=lambda m: (-m.priority_rank, distance_km(m.position, center)),
    )
    return ranked[: max(0, int(max_visible))]
