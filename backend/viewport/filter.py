from __future__ import annotations

from geo.bounds import Bounds, Position
from markers.types import Marker


VIEWPORT_BUFFER_RATIO = 0.1


def is_within_viewport(
    position: Position, bounds: Bounds, buffer_ratio: float = VIEWPORT_BUFFER_RATIO
) -> bool:
    return bounds.expanded(buffer_ratio).contains(position)


def filter_in_viewport(
    markers: list[Marker], bounds: Bounds, buffer_ratio: float = VIEWPORT_BUFFER_RATIO
) -> list[Marker]:
    """
    Keep markers inside `bounds` grown by `buffer_ratio` on each side (inclusive).

    The buffer keeps pins from popping in right at the viewport edge while panning.
    Antimeridian-crossing bounds are not special-cased.
    """
    box = bounds.expanded(buffer_ratio)
    return [m for m in markers if box.contains(m.position)]
