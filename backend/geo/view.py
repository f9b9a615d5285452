from __future__ import annotations

import math

from geo.bounds import Bounds, Position


def fit_view_to_bounds(
    bounds: Bounds,
    *,
    viewport: dict[str, int] | None = None,
    max_zoom: float = 20.0,
) -> tuple[Position, float]:
    """
    Center + zoom that fits `bounds` into the viewport (used when a cluster is clicked).
    """
    width = int((viewport or {}).get("width") or 900)
    height = int((viewport or {}).get("height") or 600)
    zoom = bounds_to_zoom(bounds, width=width, height=height)
    return bounds.center, float(min(zoom, max_zoom))


def bounds_to_zoom(bounds: Bounds, *, width: int, height: int) -> float:
    # WebMercator bbox -> zoom heuristic.
    def lat_to_rad(lat: float) -> float:
        s = math.sin(lat * math.pi / 180.0)
        return math.log((1 + s) / (1 - s)) / 2.0

    lng_delta = bounds.east - bounds.west
    lat_delta = (lat_to_rad(bounds.north) - lat_to_rad(bounds.south)) * 180.0 / math.pi

    # avoid division by zero
    lng_delta = max(lng_delta, 1e-6)
    lat_delta = max(lat_delta, 1e-6)

    # 256px tiles
    zoom_x = math.log2((width * 360.0) / (256.0 * lng_delta))
    zoom_y = math.log2((height * 170.0) / (256.0 * lat_delta))
    return float(min(zoom_x, zoom_y))
