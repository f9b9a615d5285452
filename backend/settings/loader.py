from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from settings.types import ClusteringOptions


CONFIG_PATH_ENV = "MARKERS_CLUSTERING_CONFIG"


def _load_yaml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid clustering config yaml root: {path}")
    return data


def load_options(path: Path) -> ClusteringOptions:
    """
    Read clustering options from YAML.

    Accepts either the options mapping at the root or nested under `options:`.
    """
    data = _load_yaml(Path(path))
    nested = data.get("options")
    if isinstance(nested, dict):
        data = nested
    return ClusteringOptions.model_validate(data)


def options_from_env() -> ClusteringOptions:
    raw = (os.getenv(CONFIG_PATH_ENV) or "").strip()
    if not raw:
        return ClusteringOptions()
    return load_options(Path(raw))
