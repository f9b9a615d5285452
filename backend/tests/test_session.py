from __future__ import annotations

import pytest

from engine.session import MapSession
from engine.types import ViewportState
from geo.bounds import Bounds, Position
from markers.types import Marker
from render.pool import MarkerPool
from settings.types import ClusteringOptions


class FakeHandle:
    def __init__(self, n: int) -> None:
        self.n = n
        self.on_map = True
        self.bound_to: str | None = None


class Factory:
    def __init__(self) -> None:
        self.created: list[FakeHandle] = []

    def __call__(self) -> FakeHandle:
        h = FakeHandle(len(self.created))
        self.created.append(h)
        return h


def _detach(h: FakeHandle) -> None:
    h.on_map = False


def _bind(h: FakeHandle, unit) -> None:
    h.on_map = True
    h.bound_to = unit.id


def _m(mid: str, lat: float, lng: float) -> Marker:
    return Marker(id=mid, position=Position(lat=lat, lng=lng), title=mid)


def _state(zoom: float) -> ViewportState:
    b = Bounds(north=1.0, south=-1.0, east=1.0, west=-1.0)
    return ViewportState(bounds=b, zoom=zoom, center=b.center)


def test_viewport_change_updates_monitor_and_returns_units():
    session: MapSession[FakeHandle] = MapSession()
    units = session.on_viewport_changed([_m("a", 0.0, 0.0), _m("b", 0.0, 0.0)], _state(10))

    assert [u.count for u in units] == [2]
    assert session.monitor.get_metrics().viewport_update_count == 1


def test_render_reuses_handles_and_recycles_dropped_ones():
    session: MapSession[FakeHandle] = MapSession(
        ClusteringOptions(maxZoom=15), pool=MarkerPool(detach=_detach)
    )
    factory = Factory()
    markers = [_m("a", 0.1, 0.1), _m("b", 0.5, 0.5), _m("c", -0.5, -0.5)]

    first = session.render(session.on_viewport_changed(markers, _state(16)), factory, bind=_bind)
    assert set(first) == {"single_a", "single_b", "single_c"}
    assert len(factory.created) == 3

    # Pan so that "c" leaves the viewport.
    fewer = session.on_viewport_changed(markers[:2], _state(16))
    second = session.render(fewer, factory, bind=_bind)

    assert set(second) == {"single_a", "single_b"}
    assert second["single_a"] is first["single_a"]
    assert first["single_c"].on_map is False
    assert session.pool.free_count() == 1

    # A new unit picks the recycled handle instead of creating one.
    third = session.render(
        session.on_viewport_changed(markers[:2] + [_m("d", 0.2, -0.2)], _state(16)),
        factory,
        bind=_bind,
    )
    assert third["single_d"] is first["single_c"]
    assert third["single_d"].bound_to == "single_d"
    assert len(factory.created) == 3
    assert session.monitor.get_metrics().marker_render_ms >= 0.0


def test_teardown_returns_every_handle_to_the_pool():
    session: MapSession[FakeHandle] = MapSession(pool=MarkerPool(detach=_detach))
    factory = Factory()
    units = session.on_viewport_changed([_m("a", 0.1, 0.1), _m("b", 0.9, -0.9)], _state(16))
    session.render(units, factory)

    session.teardown()

    assert session.drawn == {}
    assert session.pool.active_count() == 0
    assert session.pool.free_count() == 2
    assert all(h.on_map is False for h in factory.created)


def test_distance_session_clusters_only_once_projection_is_loaded():
    session: MapSession[FakeHandle] = MapSession(ClusteringOptions(algorithm="distance"))
    markers = [_m(f"m{i}", 0.0, i * 0.0001) for i in range(5)]

    before = session.on_viewport_changed(markers, _state(10))
    assert [u.count for u in before] == [1] * 5

    session.loader.load()
    after = session.on_viewport_changed(markers, _state(10))
    assert [u.count for u in after] == [5]


def test_fit_view_to_cluster_zooms_in():
    session: MapSession[FakeHandle] = MapSession()
    units = session.on_viewport_changed(
        [_m("a", -37.81, 144.96), _m("b", -37.82, 144.97)],
        ViewportState(
            bounds=Bounds(north=-37.0, south=-38.5, east=146.0, west=144.0),
            zoom=8,
            center=Position(lat=-37.8, lng=145.0),
        ),
    )
    cluster = next(u for u in units if u.count > 1)

    center, zoom = session.fit_view_to_unit(cluster, {"width": 800, "height": 600})

    assert center.lat == pytest.approx(-37.815)
    assert center.lng == pytest.approx(144.965)
    assert zoom > 8


def test_session_records_viewport_samples(tmp_path, monkeypatch):
    from telemetry.store import open_store

    monkeypatch.setenv("MARKERS_TELEMETRY", "1")
    store = open_store(tmp_path / "telemetry.duckdb")
    session: MapSession[FakeHandle] = MapSession(store=store)

    session.on_viewport_changed([_m("a", 0.0, 0.0), _m("b", 0.0, 0.0)], _state(10))
    session.on_viewport_changed([_m("a", 0.0, 0.0)], _state(18))
    store.flush(timeout_s=2.0)

    rows = store.query("select algorithm, units from viewport_events order by ts_ms, algorithm")
    assert sorted(rows) == [("grid", 1), ("none", 1)]
    store.reset()


def test_teardown_stops_telemetry_writer_without_losing_samples(tmp_path, monkeypatch):
    from telemetry.store import open_store

    monkeypatch.setenv("MARKERS_TELEMETRY", "1")
    db_path = tmp_path / "telemetry.duckdb"
    store = open_store(db_path)
    session: MapSession[FakeHandle] = MapSession(store=store)
    session.on_viewport_changed([_m("a", 0.0, 0.0)], _state(10))

    session.teardown()
    store.close()

    reopened = open_store(db_path)
    assert reopened.query("select count(*) from viewport_events") == [(1,)]
    reopened.reset()
