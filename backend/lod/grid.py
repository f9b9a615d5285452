from __future__ import annotations

import math

from geo.bounds import Bounds, Position
from lod.units import singleton_units, units_for_group
from markers.types import ClusterUnit, Marker
from settings.types import ClusteringOptions


def grid_cell_size(grid_size: float, zoom: float) -> float:
    """
    Cell edge in degrees: halves with every zoom level.

    Note: `grid_size` is a pixel-ish constant used directly in degree space.
    Kept as-is so cell assignment stays stable across versions.
    """
    return grid_size / (2.0 ** (zoom - 1))


def _cell_index(value: float, cell_size: float) -> int | float:
    q = value / cell_size
    # Non-finite coordinates get their own (inf/nan) cell instead of raising.
    return math.floor(q) if math.isfinite(q) else q


def grid_key(position: Position, cell_size: float) -> str:
    x = _cell_index(position.lng, cell_size)
    y = _cell_index(position.lat, cell_size)
    return f"{x}_{y}"


def cluster_grid(
    markers: list[Marker],
    zoom: float,
    bounds: Bounds,
    options: ClusteringOptions | None = None,
) -> list[ClusterUnit]:
    """
    Grid clustering in lng/lat space.

    - zoom > maxZoom: one singleton per marker (no bounds filtering).
    - otherwise: markers inside `bounds` (exact, inclusive) are bucketed into cells;
      cells with >= minimumClusterSize members become one cluster, the rest singletons.

    Output is a pure function of the inputs: cells are emitted in first-seen order
    and members keep input order.
    """
    o = options or ClusteringOptions()
    if zoom > o.maxZoom:
        return singleton_units(markers)

    cell_size = grid_cell_size(o.gridSize, zoom)

    cells: dict[str, list[Marker]] = {}
    for m in markers:
        if not bounds.contains(m.position):
            continue
        cells.setdefault(grid_key(m.position, cell_size), []).append(m)

    out: list[ClusterUnit] = []
    for key, members in cells.items():
        out.extend(
            units_for_group(f"cluster_{key}", members, minimum_size=o.minimumClusterSize)
        )
    return out
