from __future__ import annotations

import json
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import duckdb

from geo.bounds import Bounds
from telemetry.config import WriterSettings, telemetry_enabled, telemetry_path
from telemetry.sql import (
    CREATE_EVENTS_TABLE_SQL,
    INSERT_EVENTS_SQL,
    SUMMARY_SQL_TEMPLATE,
)


logger = logging.getLogger(__name__)


def _safe_float(v) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except Exception:
        return None


@dataclass
class TelemetryStore:
    """
    DuckDB sink for viewport-update samples.

    Best-effort: `record` only enqueues; a single writer thread batches inserts.
    Failures drop telemetry and never reach the map pipeline.
    """

    path: Path
    conn: duckdb.DuckDBPyConnection
    writer: WriterSettings = field(default_factory=WriterSettings)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _q: "queue.Queue[tuple]" = field(default_factory=queue.Queue, repr=False)
    _stop: threading.Event = field(default_factory=threading.Event, repr=False)
    _worker: threading.Thread | None = field(default=None, repr=False)

    def ensure_schema(self) -> None:
        with self._lock:
            self.conn.execute(CREATE_EVENTS_TABLE_SQL)

    def start(self) -> None:
        if self._worker is not None:
            return
        self._stop.clear()
        self._worker = threading.Thread(
            target=self._run, name="telemetry-writer", daemon=True
        )
        self._worker.start()

    def stop(self, *, timeout_s: float = 2.0) -> None:
        self._stop.set()
        w = self._worker
        if w is not None and w.is_alive():
            w.join(timeout=timeout_s)
        self._worker = None

    def record(
        self,
        *,
        algorithm: str,
        view_zoom: float,
        bounds: Bounds,
        input_markers: int,
        visible_markers: int,
        units: int,
        metrics: dict[str, Any],
    ) -> None:
        self.start()
        try:
            self._q.put_nowait(
                (
                    int(time.time() * 1000),
                    str(algorithm),
                    float(view_zoom),
                    float(bounds.north),
                    float(bounds.south),
                    float(bounds.east),
                    float(bounds.west),
                    int(input_markers),
                    int(visible_markers),
                    int(units),
                    json.dumps(metrics, ensure_ascii=False),
                )
            )
        except queue.Full:
            # drop telemetry on overload
            logger.debug("telemetry queue full, dropping sample")

    def flush(self, *, timeout_s: float = 2.0) -> None:
        """
        Wait until queued events are written (used by tests).
        """
        if self._worker is None:
            return
        deadline = time.time() + timeout_s
        while time.time() < deadline:
            if self._q.unfinished_tasks == 0:
                return
            time.sleep(0.01)

    def query(self, sql: str, params: list[Any] | None = None) -> list[tuple]:
        with self._lock:
            if params:
                return self.conn.execute(sql, params).fetchall()
            return self.conn.execute(sql).fetchall()

    def summary(
        self, *, algorithm: str | None = None, since_ms: int | None = None
    ) -> list[dict[str, Any]]:
        where = []
        params: list[Any] = []
        if algorithm:
            where.append("algorithm = ?")
            params.append(algorithm)
        if since_ms is not None:
            where.append("ts_ms >= ?")
            params.append(int(since_ms))

        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        rows = self.query(SUMMARY_SQL_TEMPLATE.format(where_sql=where_sql), params)

        out: list[dict[str, Any]] = []
        for algo, n, avg_ms, p50, p95, avg_render, avg_units, avg_visible in rows:
            out.append(
                {
                    "algorithm": algo,
                    "n": int(n),
                    "avgClusteringMs": _safe_float(avg_ms),
                    "p50ClusteringMs": _safe_float(p50),
                    "p95ClusteringMs": _safe_float(p95),
                    "avgRenderMs": _safe_float(avg_render),
                    "avgUnits": _safe_float(avg_units),
                    "avgVisible": _safe_float(avg_visible),
                }
            )
        return out

    def close(self, *, timeout_s: float = 2.0) -> None:
        """
        Stop the writer (it drains queued samples first) and release the connection.

        The database file is kept; `open_store` on the same path sees the rows.
        """
        # Stop the writer first so it can't write to a closed connection.
        self.stop(timeout_s=timeout_s)
        with self._lock:
            try:
                self.conn.close()
            except duckdb.Error:
                logger.debug("telemetry connection already closed")

    def reset(self) -> None:
        self.close(timeout_s=2.0)
        self.path.unlink(missing_ok=True)

    def _run(self) -> None:
        batch: list[tuple] = []
        last_flush = time.time()

        def flush_batch() -> None:
            nonlocal batch
            if not batch:
                return
            try:
                with self._lock:
                    self.conn.executemany(INSERT_EVENTS_SQL, batch)
                    # Make results visible to readers immediately.
                    self.conn.execute("CHECKPOINT;")
            except duckdb.Error:
                logger.warning("dropping %d telemetry samples", len(batch), exc_info=True)
            finally:
                for _ in batch:
                    self._q.task_done()
                batch = []

        while not self._stop.is_set():
            try:
                batch.append(self._q.get(timeout=0.1))
            except queue.Empty:
                pass

            # Flush on size or time; an idle queue flushes right away.
            now = time.time()
            if len(batch) >= self.writer.batch_size or (
                batch
                and (self._q.empty() or (now - last_flush) >= self.writer.flush_interval_s)
            ):
                flush_batch()
                last_flush = now

        # Drain remaining
        while True:
            try:
                batch.append(self._q.get_nowait())
            except queue.Empty:
                break
        flush_batch()


def open_store(path: Path | None = None) -> TelemetryStore | None:
    """
    Open a telemetry store owned by the caller; None when telemetry is disabled.
    """
    if not telemetry_enabled():
        return None
    p = Path(path) if path is not None else telemetry_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    store = TelemetryStore(
        path=p, conn=duckdb.connect(str(p)), writer=WriterSettings.from_env()
    )
    store.ensure_schema()
    return store
