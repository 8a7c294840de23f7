"""Pydantic schema for engine configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EngineConfig(BaseModel):
    """Validated runtime configuration with defaults."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    decay: float = Field(default=0.95, gt=0.0, lt=1.0)
    capacity: int = Field(default=100, gt=0)

    top_k: int = Field(default=5, gt=0)
    threshold_rank: int = Field(default=10, gt=0)
    prune_combo_ratio: float = Field(default=0.98, ge=0.0, le=1.0)
    prune_value_ratio: float = Field(default=0.94, ge=0.0, le=1.0)
    workers: int = Field(default=1, ge=1)

    tolerance: float = Field(default=1e-3, gt=0.0)

    @model_validator(mode="after")
    def _threshold_covers_top_k(self) -> EngineConfig:
        if self.threshold_rank < self.top_k:
            raise ValueError("threshold_rank must be >= top_k.")
        return self
