from __future__ import annotations

from dataclasses import dataclass

from geo.bounds import Bounds, Position


@dataclass(frozen=True)
class ViewportState:
    """
    What the map widget reports once a pan/zoom settles.
    """

    bounds: Bounds
    zoom: float
    center: Position
    # Optional: real pixel size of the map viewport. Used for "fit view" heuristics.
    viewport: dict[str, int] | None = None
