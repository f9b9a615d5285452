from __future__ import annotations

import pytest

from telemetry.monitor import PerformanceMetrics, PerformanceMonitor


class FakeClock:
    def __init__(self, t: float = 0.0) -> None:
        self.t = t

    def __call__(self) -> float:
        return self.t


def test_timer_records_last_sample_per_operation():
    timer = FakeClock()
    mon = PerformanceMonitor(timer=timer, wall_clock=FakeClock(1_000.0))

    stop = mon.start_timer("clustering")
    timer.t = 0.25
    assert stop() == pytest.approx(250.0)

    stop = mon.start_timer("clustering")
    timer.t = 0.26
    stop()

    stop = mon.start_timer("markerRender")
    timer.t = 0.29
    stop()

    m = mon.get_metrics()
    # Gauge, not histogram: second clustering sample overwrote the first.
    assert m.clustering_ms == pytest.approx(10.0)
    assert m.marker_render_ms == pytest.approx(30.0)


def test_viewport_updates_count_and_timestamp():
    wall = FakeClock(1_000.0)
    mon = PerformanceMonitor(wall_clock=wall)

    wall.t = 1_002.5
    mon.record_viewport_update()
    mon.record_viewport_update()

    m = mon.get_metrics()
    assert m.viewport_update_count == 2
    assert m.last_update_ms == 1_002_500


def test_snapshot_is_not_affected_by_later_updates_and_reset_clears():
    mon = PerformanceMonitor(wall_clock=FakeClock(5.0))
    mon.record_viewport_update()
    snap = mon.get_metrics()
    mon.record_viewport_update()
    assert snap.viewport_update_count == 1

    mon.reset()
    assert mon.get_metrics() == PerformanceMetrics(last_update_ms=5_000)


def test_unknown_operation_is_rejected():
    with pytest.raises(ValueError):
        PerformanceMonitor().start_timer("geocoding")  # type: ignore[arg-type]
