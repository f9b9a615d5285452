from __future__ import annotations

from dataclasses import dataclass


SINGLE_MARKER_PAD_DEG = 0.001


@dataclass(frozen=True)
class Position:
    """
    WGS84 position in degrees.

    No range validation: callers keep lat within +-90 and lng within +-180.
    """

    lat: float
    lng: float


@dataclass(frozen=True)
class Bounds:
    """
    Lat/lng rectangle in degrees.

    Convention used throughout this repo:
    - north >= south
    - west/east are not normalized; antimeridian-crossing boxes are not handled.
    """

    north: float
    south: float
    east: float
    west: float

    def contains(self, position: Position) -> bool:
        # Inclusive on every edge.
        return (
            self.south <= position.lat <= self.north
            and self.west <= position.lng <= self.east
        )

    def expanded(self, ratio: float) -> "Bounds":
        """
        Grow the box by `ratio` of its height/width on each side.
        """
        lat_buffer = (self.north - self.south) * ratio
        lng_buffer = (self.east - self.west) * ratio
        return Bounds(
            north=self.north + lat_buffer,
            south=self.south - lat_buffer,
            east=self.east + lng_buffer,
            west=self.west - lng_buffer,
        )

    @property
    def center(self) -> Position:
        return Position(
            lat=(self.north + self.south) / 2.0, lng=(self.east + self.west) / 2.0
        )

    @classmethod
    def around(cls, position: Position, pad: float = SINGLE_MARKER_PAD_DEG) -> "Bounds":
        return cls(
            north=position.lat + pad,
            south=position.lat - pad,
            east=position.lng + pad,
            west=position.lng - pad,
        )

    @classmethod
    def of_positions(cls, positions: list[Position]) -> "Bounds":
        """
        Tight bounding box of a non-empty list of positions.
        """
        lats = [p.lat for p in positions]
        lngs = [p.lng for p in positions]
        return cls(north=max(lats), south=min(lats), east=max(lngs), west=min(lngs))

    def rounded_key(self, decimals: int = 4) -> tuple[float, float, float, float]:
        """
        A stable, hashable key for logging/telemetry of a viewport.

        decimals=4 is ~11m-ish in latitude.
        """
        return (
            round(self.north, decimals),
            round(self.south, decimals),
            round(self.east, decimals),
            round(self.west, decimals),
        )
