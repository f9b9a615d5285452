from __future__ import annotations

import math

from geo.bounds import Bounds, Position


EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.0


def to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180.0)


def to_degrees(radians: float) -> float:
    return radians * (180.0 / math.pi)


def distance_km(a: Position, b: Position) -> float:
    """
    Great-circle distance in kilometers (Haversine).

    Total function: NaN in, NaN out.
    """
    d_lat = to_radians(b.lat - a.lat)
    d_lng = to_radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2.0) ** 2
        + math.cos(to_radians(a.lat))
        * math.cos(to_radians(b.lat))
        * math.sin(d_lng / 2.0) ** 2
    )
    return EARTH_RADIUS_KM * 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))


def bounds_from_radius(center: Position, radius_km: float) -> Bounds:
    """
    Approximate square bounds around `center`.

    Degenerate near the poles (cos(lat) -> 0); callers avoid |lat| -> 90.
    """
    lat_offset = radius_km / KM_PER_DEGREE_LAT
    lng_offset = radius_km / (KM_PER_DEGREE_LAT * math.cos(to_radians(center.lat)))
    return Bounds(
        north=center.lat + lat_offset,
        south=center.lat - lat_offset,
        east=center.lng + lng_offset,
        west=center.lng - lng_offset,
    )
