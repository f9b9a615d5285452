from __future__ import annotations

from shapely.geometry import MultiPoint

from geo.bounds import Bounds, Position
from markers.types import ClusterUnit, Marker


def singleton_unit(marker: Marker) -> ClusterUnit:
    return ClusterUnit(
        id=f"single_{marker.id}",
        position=marker.position,
        count=1,
        members=[marker],
        bounds=Bounds.around(marker.position),
    )


def singleton_units(markers: list[Marker]) -> list[ClusterUnit]:
    return [singleton_unit(m) for m in markers]


def cluster_unit(unit_id: str, members: list[Marker]) -> ClusterUnit:
    """
    Aggregate unit for a non-empty member list.

    Centroid is the flat mean of lat/lng, summed in member order.
    """
    n = len(members)
    sum_lat = 0.0
    sum_lng = 0.0
    for m in members:
        sum_lat += m.position.lat
        sum_lng += m.position.lng

    # Shapely bounds are (minx, miny, maxx, maxy) with x = lng.
    min_lng, min_lat, max_lng, max_lat = MultiPoint(
        [(m.position.lng, m.position.lat) for m in members]
    ).bounds

    return ClusterUnit(
        id=unit_id,
        position=Position(lat=sum_lat / n, lng=sum_lng / n),
        count=n,
        members=list(members),
        bounds=Bounds(
            north=float(max_lat),
            south=float(min_lat),
            east=float(max_lng),
            west=float(min_lng),
        ),
    )


def units_for_group(unit_id: str, members: list[Marker], *, minimum_size: int) -> list[ClusterUnit]:
    # Groups under the threshold fall back to one pin per member.
    if len(members) >= minimum_size:
        return [cluster_unit(unit_id, members)]
    return singleton_units(members)
