from __future__ import annotations

import logging
from dataclasses import dataclass

from geo.bounds import Bounds, Position
from geo.projection import Projection
from lod.distance import cluster_by_distance
from lod.grid import cluster_grid
from lod.units import singleton_units
from markers.types import ClusterUnit, Marker
from settings.types import ClusteringOptions
from viewport.filter import filter_in_viewport
from viewport.priority import prioritize


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrawListStats:
    input_markers: int
    in_viewport: int
    visible: int
    units: int
    clusters: int
    clustered: bool


@dataclass(frozen=True)
class DrawList:
    units: list[ClusterUnit]
    stats: DrawListStats


def build_draw_list(
    markers: list[Marker],
    bounds: Bounds,
    zoom: float,
    center: Position,
    options: ClusteringOptions | None = None,
    *,
    projection: Projection | None = None,
) -> DrawList:
    """
    filter -> prioritize -> cluster, in that fixed order.

    Important: every marker that survives filtering and truncation lands in exactly
    one unit. The grid clusterer is therefore given the *buffered* viewport, otherwise
    markers kept by the buffer would be dropped again at clustering time.
    """
    o = options or ClusteringOptions()

    in_view = filter_in_viewport(markers, bounds, o.bufferRatio)
    visible = prioritize(in_view, center, zoom, o.maxVisible)

    clustered = o.clustering and zoom <= o.maxZoom
    if not o.clustering:
        units = singleton_units(visible)
    elif o.algorithm == "distance":
        units = cluster_by_distance(visible, zoom, projection, o)
    else:
        units = cluster_grid(visible, zoom, bounds.expanded(o.bufferRatio), o)

    stats = DrawListStats(
        input_markers=len(markers),
        in_viewport=len(in_view),
        visible=len(visible),
        units=len(units),
        clusters=sum(1 for u in units if u.count > 1),
        clustered=clustered,
    )
    logger.debug(
        "draw list zoom=%s algorithm=%s markers=%d in_view=%d visible=%d units=%d",
        zoom,
        o.algorithm,
        stats.input_markers,
        stats.in_viewport,
        stats.visible,
        stats.units,
    )
    return DrawList(units=units, stats=stats)


def compute_draw_list(
    markers: list[Marker],
    bounds: Bounds,
    zoom: float,
    center: Position,
    options: ClusteringOptions | None = None,
    *,
    projection: Projection | None = None,
) -> list[ClusterUnit]:
    return build_draw_list(
        markers, bounds, zoom, center, options, projection=projection
    ).units
