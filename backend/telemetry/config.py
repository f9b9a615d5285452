from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def telemetry_path() -> Path:
    # Local file under the repo; easy to query with the duckdb CLI.
    return Path(
        os.getenv("MARKERS_TELEMETRY_PATH")
        or (_repo_root() / "data" / "telemetry" / "markers.duckdb")
    )


def telemetry_enabled() -> bool:
    v = (os.getenv("MARKERS_TELEMETRY") or "1").strip().lower()
    return v not in {"0", "false", "no", "off"}


def _env_number(name: str, default: float, *, minimum: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return max(minimum, float(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class WriterSettings:
    """
    Batching knobs for the background telemetry writer.
    """

    batch_size: int = 250
    flush_interval_s: float = 0.5

    @classmethod
    def from_env(cls) -> "WriterSettings":
        return cls(
            batch_size=int(_env_number("MARKERS_TELEMETRY_BATCH", 250, minimum=1)),
            flush_interval_s=_env_number("MARKERS_TELEMETRY_FLUSH_MS", 500, minimum=0)
            / 1000.0,
        )
