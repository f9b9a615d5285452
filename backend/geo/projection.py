from __future__ import annotations

import logging
import math
from typing import Literal, Protocol

from pyproj import Transformer

from geo.bounds import Position


logger = logging.getLogger(__name__)

TILE_SIZE_PX = 256.0
_MAX_MERCATOR_LAT = 85.05112878
# Half the EPSG:3857 world width in meters.
_ORIGIN_SHIFT_M = 20037508.342789244

LoaderState = Literal["idle", "loading", "loaded"]


class Projection(Protocol):
    """
    Lat/lng -> on-screen pixel mapping owned by the map widget.

    Returns None while the widget cannot project (e.g. not initialized yet).
    """

    def to_pixel(self, position: Position, zoom: float) -> tuple[float, float] | None: ...


class WebMercatorProjection:
    """
    Slippy-map pixel coordinates (256px tiles) via EPSG:3857.
    """

    def __init__(self, transformer: Transformer) -> None:
        self._transformer = transformer

    def to_pixel(self, position: Position, zoom: float) -> tuple[float, float] | None:
        # Clamp to WebMercator-supported latitudes.
        lat = max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, float(position.lat)))
        x_m, y_m = self._transformer.transform(float(position.lng), lat)
        if not (math.isfinite(x_m) and math.isfinite(y_m)):
            return None

        world_px = TILE_SIZE_PX * (2.0 ** float(zoom))
        x = (x_m + _ORIGIN_SHIFT_M) / (2.0 * _ORIGIN_SHIFT_M) * world_px
        y = (_ORIGIN_SHIFT_M - y_m) / (2.0 * _ORIGIN_SHIFT_M) * world_px
        return float(x), float(y)


class ProjectionLoader:
    """
    Caller-owned loader for the projection.

    One instance per map; pass it to whatever needs the projection instead of
    reaching for module-level state.
    """

    def __init__(self) -> None:
        self._state: LoaderState = "idle"
        self._projection: WebMercatorProjection | None = None

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def projection(self) -> WebMercatorProjection | None:
        return self._projection

    def is_loaded(self) -> bool:
        return self._state == "loaded"

    def load(self) -> WebMercatorProjection:
        if self._projection is not None:
            return self._projection
        self._state = "loading"
        try:
            transformer = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
        except Exception:
            self._state = "idle"
            raise
        self._projection = WebMercatorProjection(transformer)
        self._state = "loaded"
        logger.debug("web mercator projection loaded")
        return self._projection
