from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from geo.bounds import Bounds, Position


Priority = Literal["high", "medium", "low"]

PRIORITY_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}


@dataclass(frozen=True)
class Marker:
    """
    One listing pin. Owned by the caller; the engine only reads it.
    """

    id: str
    position: Position
    title: str
    price: float | None = None
    property_type: str | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    image_url: str | None = None
    priority: Priority | None = None

    @property
    def priority_rank(self) -> int:
        # Missing priority ranks as "low".
        return PRIORITY_RANK.get(self.priority or "low", PRIORITY_RANK["low"])


@dataclass(frozen=True)
class ClusterUnit:
    """
    A drawable unit: a single pin (count == 1) or an aggregate badge.

    position is the flat (unprojected) mean of member lat/lng;
    bounds is the tight box of member positions, or a small pad for singletons.
    """

    id: str
    position: Position
    count: int
    members: list[Marker]
    bounds: Bounds

    @property
    def is_singleton(self) -> bool:
        return self.count == 1
