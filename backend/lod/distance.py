from __future__ import annotations

import math

from geo.projection import Projection
from lod.units import singleton_units, units_for_group
from markers.types import ClusterUnit, Marker
from settings.types import ClusteringOptions


def cluster_by_distance(
    markers: list[Marker],
    zoom: float,
    projection: Projection | None,
    options: ClusteringOptions | None = None,
) -> list[ClusterUnit]:
    """
    Greedy single-link grouping in screen pixels.

    Walk markers in input order; each unprocessed marker seeds a group and absorbs
    every later unprocessed marker within `minDistancePx` of the *seed*. Groups of at
    least `minimumClusterSize` become one cluster, smaller groups become singletons.

    Without a projection (widget not ready) every distance is infinite, so nothing
    clusters.
    """
    o = options or ClusteringOptions()
    if zoom > o.maxZoom or not markers:
        return singleton_units(markers)

    # Project once per marker; None means "cannot be placed on screen".
    pixels = [_to_pixel(projection, m, zoom) for m in markers]

    out: list[ClusterUnit] = []
    processed = [False] * len(markers)
    for i, seed in enumerate(markers):
        if processed[i]:
            continue
        processed[i] = True
        group = [seed]

        for j in range(len(markers)):
            if processed[j]:
                continue
            if _pixel_distance(pixels[i], pixels[j]) <= o.minDistancePx:
                group.append(markers[j])
                processed[j] = True

        out.extend(
            units_for_group(
                f"distance_cluster_{seed.id}", group, minimum_size=o.minimumClusterSize
            )
        )
    return out


def _to_pixel(
    projection: Projection | None, marker: Marker, zoom: float
) -> tuple[float, float] | None:
    if projection is None:
        return None
    return projection.to_pixel(marker.position, zoom)


def _pixel_distance(
    a: tuple[float, float] | None, b: tuple[float, float] | None
) -> float:
    if a is None or b is None:
        return math.inf
    return math.hypot(a[0] - b[0], a[1] - b[1])
