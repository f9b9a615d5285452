from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


ClusterAlgorithm = Literal["grid", "distance"]


class ClusteringOptions(BaseModel):
    """
    Single options object for the draw-list pipeline.

    Field names mirror the YAML/JSON keys the map layer sends.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Base grid cell size; divided by 2^(zoom-1) and used directly in degree space.
    gridSize: float = Field(default=60.0, gt=0.0)
    # Above this zoom clustering is skipped entirely.
    maxZoom: float = Field(default=15.0, ge=0.0)
    minimumClusterSize: int = Field(default=2, ge=1)
    bufferRatio: float = Field(default=0.1, ge=0.0)
    maxVisible: int = Field(default=200, ge=0)
    minDistancePx: float = Field(default=100.0, ge=0.0)

    algorithm: ClusterAlgorithm = "grid"
    # When disabled, every visible marker is drawn as its own unit.
    clustering: bool = True
    # Recommended quiet period before a viewport change is processed.
    debounceMs: float = Field(default=300.0, ge=0.0)
