from __future__ import annotations

CREATE_EVENTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS viewport_events (
  ts_ms BIGINT,
  algorithm TEXT,
  view_zoom DOUBLE,
  north DOUBLE,
  south DOUBLE,
  east DOUBLE,
  west DOUBLE,
  input_markers BIGINT,
  visible_markers BIGINT,
  units BIGINT,
  metrics_json TEXT
);
"""

SUMMARY_SQL_TEMPLATE = """
SELECT
  algorithm,
  COUNT(*) AS n,
  AVG(try_cast(json_extract(metrics_json, '$.clustering_ms') AS DOUBLE)) AS avg_clustering_ms,
  quantile_cont(try_cast(json_extract(metrics_json, '$.clustering_ms') AS DOUBLE), 0.50) AS p50_clustering_ms,
  quantile_cont(try_cast(json_extract(metrics_json, '$.clustering_ms') AS DOUBLE), 0.95) AS p95_clustering_ms,
  AVG(try_cast(json_extract(metrics_json, '$.marker_render_ms') AS DOUBLE)) AS avg_render_ms,
  AVG(units) AS avg_units,
  AVG(visible_markers) AS avg_visible
FROM viewport_events
{where_sql}
GROUP BY algorithm
ORDER BY algorithm
"""

INSERT_EVENTS_SQL = """
INSERT INTO viewport_events
  (ts_ms, algorithm, view_zoom, north, south, east, west, input_markers, visible_markers, units, metrics_json)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""
