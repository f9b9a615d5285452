from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from engine.types import ViewportState
from geo.bounds import Position
from geo.projection import ProjectionLoader
from geo.view import fit_view_to_bounds
from lod.policy import build_draw_list
from markers.types import ClusterUnit, Marker
from render.pool import MarkerPool
from settings.types import ClusteringOptions
from telemetry.monitor import PerformanceMonitor
from telemetry.store import TelemetryStore


logger = logging.getLogger(__name__)

H = TypeVar("H")


class MapSession(Generic[H]):
    """
    Everything one map instance owns: pool, monitor, projection loader and the
    handles currently on screen.

    Single-threaded: call it from the UI thread only. Debouncing happens upstream
    (see `viewport.debounce.ViewportDebouncer`).
    """

    def __init__(
        self,
        options: ClusteringOptions | None = None,
        *,
        pool: MarkerPool[H] | None = None,
        monitor: PerformanceMonitor | None = None,
        loader: ProjectionLoader | None = None,
        store: TelemetryStore | None = None,
    ) -> None:
        self.options = options or ClusteringOptions()
        self.pool: MarkerPool[H] = pool if pool is not None else MarkerPool()
        self.monitor = monitor or PerformanceMonitor()
        self.loader = loader or ProjectionLoader()
        self.store = store
        self._drawn: dict[str, H] = {}

    @property
    def drawn(self) -> dict[str, H]:
        return dict(self._drawn)

    def on_viewport_changed(
        self, markers: list[Marker], state: ViewportState
    ) -> list[ClusterUnit]:
        self.monitor.record_viewport_update()
        stop = self.monitor.start_timer("clustering")
        result = build_draw_list(
            markers,
            state.bounds,
            state.zoom,
            state.center,
            self.options,
            projection=self.loader.projection,
        )
        stop()

        if self.store is not None:
            self.store.record(
                algorithm=self.options.algorithm if result.stats.clustered else "none",
                view_zoom=state.zoom,
                bounds=state.bounds,
                input_markers=result.stats.input_markers,
                visible_markers=result.stats.visible,
                units=result.stats.units,
                metrics=self.monitor.get_metrics().as_dict(),
            )
        return result.units

    def render(
        self,
        units: list[ClusterUnit],
        factory: Callable[[], H],
        *,
        bind: Callable[[H, ClusterUnit], None] | None = None,
    ) -> dict[str, H]:
        """
        Reconcile on-screen handles with `units`.

        - units no longer drawn hand their handle back to the pool
        - units still drawn keep their handle (no flicker)
        - new units take a pooled handle, or a fresh one from `factory()`

        `bind(handle, unit)` runs for every drawn unit so the caller can update
        position/label. Returns unit id -> handle.
        """
        stop = self.monitor.start_timer("markerRender")
        wanted = {u.id for u in units}

        for unit_id in [k for k in self._drawn if k not in wanted]:
            self.pool.release_handle(self._drawn.pop(unit_id))

        created = 0
        for unit in units:
            handle = self._drawn.get(unit.id)
            if handle is None:
                handle = self.pool.get_handle()
                if handle is None:
                    handle = factory()
                    created += 1
                self._drawn[unit.id] = handle
            if bind is not None:
                bind(handle, unit)

        stop()
        if created:
            logger.debug("created %d marker handles (pool free=%d)", created, self.pool.free_count())
        return dict(self._drawn)

    def teardown(self) -> None:
        # Handles fresh from the factory are not in the pool yet; releasing them
        # one by one registers them too.
        for handle in self._drawn.values():
            self.pool.release_handle(handle)
        self._drawn.clear()
        if self.store is not None:
            # Writes pending samples and ends the writer thread; the caller still
            # owns the connection and closes it with `store.close()`.
            self.store.stop()

    def fit_view_to_unit(
        self, unit: ClusterUnit, viewport: dict[str, int] | None = None
    ) -> tuple[Position, float]:
        """
        Center/zoom that reveals a clicked cluster's members.
        """
        return fit_view_to_bounds(unit.bounds, viewport=viewport)
