from __future__ import annotations

import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Literal


TimedOperation = Literal["markerRender", "clustering"]

_METRIC_FIELD: dict[str, str] = {
    "markerRender": "marker_render_ms",
    "clustering": "clustering_ms",
}


@dataclass(frozen=True)
class PerformanceMetrics:
    # Last-sample gauges, not histograms.
    marker_render_ms: float = 0.0
    clustering_ms: float = 0.0
    viewport_update_count: int = 0
    last_update_ms: int = 0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class PerformanceMonitor:
    """
    Timers/counters around render and clustering, for tuning only.

    Nothing in the pipeline reads these values.
    """

    def __init__(
        self,
        *,
        timer: Callable[[], float] = time.perf_counter,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self._timer = timer
        self._wall_clock = wall_clock
        self._metrics = PerformanceMetrics(last_update_ms=self._now_ms())

    def start_timer(self, operation: TimedOperation) -> Callable[[], float]:
        """
        Start timing `operation`; the returned callable stops the timer, stores the
        elapsed milliseconds (overwriting the previous sample) and returns them.
        """
        field_name = _METRIC_FIELD.get(operation)
        if field_name is None:
            raise ValueError(f"Unknown timed operation: {operation!r}")
        started = self._timer()

        def stop() -> float:
            elapsed_ms = (self._timer() - started) * 1000.0
            self._metrics = replace(self._metrics, **{field_name: elapsed_ms})
            return elapsed_ms

        return stop

    def record_viewport_update(self) -> None:
        self._metrics = replace(
            self._metrics,
            viewport_update_count=self._metrics.viewport_update_count + 1,
            last_update_ms=self._now_ms(),
        )

    def get_metrics(self) -> PerformanceMetrics:
        # Frozen dataclass: callers get a snapshot they cannot mutate.
        return self._metrics

    def reset(self) -> None:
        self._metrics = PerformanceMetrics(last_update_ms=self._now_ms())

    def _now_ms(self) -> int:
        return int(self._wall_clock() * 1000)
