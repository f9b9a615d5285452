from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from geo.bounds import Position
from markers.types import PRIORITY_RANK, Marker


def markers_from_records(records: Iterable[dict[str, Any]]) -> list[Marker]:
    """
    Build markers from listing records (search results).

    Accepted position shapes:
    - {"position": {"lat": ..., "lng": ...}}
    - {"lat": ..., "lng": ...} (or "lon")

    Records without a usable position are skipped.
    """
    out: list[Marker] = []
    for i, rec in enumerate(records):
        rec = rec or {}
        position = _position_of(rec)
        if position is None:
            continue
        out.append(
            Marker(
                id=str(rec.get("id") if rec.get("id") is not None else f"marker-{i}"),
                position=position,
                title=str(rec.get("title") or ""),
                price=_as_float(rec.get("price")),
                property_type=rec.get("propertyType"),
                bedrooms=_as_int(rec.get("bedrooms")),
                bathrooms=_as_int(rec.get("bathrooms")),
                image_url=rec.get("imageUrl"),
                priority=_priority_of(rec.get("priority")),
            )
        )
    return out


def load_geojson_markers(path: Path) -> list[Marker]:
    """
    Input: a GeoJSON FeatureCollection of Point features; listing fields live in `properties`.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    features = data.get("features") or []

    records: list[dict[str, Any]] = []
    for i, feature in enumerate(features):
        geom = (feature or {}).get("geometry") or {}
        props = dict((feature or {}).get("properties") or {})
        if geom.get("type") != "Point":
            continue
        coords = geom.get("coordinates") or []
        if len(coords) < 2:
            continue
        props.setdefault("id", (feature or {}).get("id") or f"marker-{i}")
        # GeoJSON is [lon, lat].
        props["position"] = {"lat": coords[1], "lng": coords[0]}
        records.append(props)
    return markers_from_records(records)


def _position_of(rec: dict[str, Any]) -> Position | None:
    pos = rec.get("position")
    if isinstance(pos, dict):
        lat = _as_float(pos.get("lat"))
        lng = _as_float(pos.get("lng", pos.get("lon")))
    else:
        lat = _as_float(rec.get("lat"))
        lng = _as_float(rec.get("lng", rec.get("lon")))
    if lat is None or lng is None:
        return None
    return Position(lat=lat, lng=lng)


def _priority_of(v: Any):
    if v is None:
        return None
    p = str(v).strip().lower()
    if p not in PRIORITY_RANK:
        raise ValueError(f"Unknown marker priority: {v!r}")
    return p


def _as_float(v: Any) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except Exception:
        return None


def _as_int(v: Any) -> int | None:
    try:
        if v is None:
            return None
        return int(v)
    except Exception:
        return None
