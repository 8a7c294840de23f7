"""Caller-facing entry points of the analytics engine."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from nochoke.config import EngineConfig
from nochoke.engine.gap import GapResult, GapSolver, WhatIfResult
from nochoke.engine.reconstruct import ScoreReconstructor
from nochoke.engine.selector import PerformanceOracle, SelectedPlay, TopKSelector
from nochoke.models import BeatmapStats, Candidate, PlayRecord, SimulationTarget

DEFAULT_CONFIG = EngineConfig()


def gap_to_target(
    existing_values: Iterable[float],
    current_total: float,
    target_total: float,
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> GapResult:
    """Single new value (and its rank) needed to lift ``current_total`` to ``target_total``."""
    return GapSolver.from_config(config).solve(existing_values, current_total, target_total)


def what_if(
    existing_values: Iterable[float],
    current_total: float,
    new_value: float,
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> WhatIfResult:
    """Aggregate total after adding ``new_value`` to the list."""
    return GapSolver.from_config(config).what_if(existing_values, current_total, new_value)


def unchoke(play: PlayRecord, beatmap: BeatmapStats) -> PlayRecord:
    return ScoreReconstructor().unchoke(play, beatmap)


def simulate(play: PlayRecord, beatmap: BeatmapStats, target: SimulationTarget) -> PlayRecord:
    return ScoreReconstructor().simulate(play, beatmap, target)


def top_k(
    candidates: Iterable[Candidate],
    oracle: PerformanceOracle,
    k: int = 5,
    *,
    config: EngineConfig = DEFAULT_CONFIG,
    cancel_event: threading.Event | None = None,
) -> list[SelectedPlay]:
    """Best ``k`` candidates by unchoked value, descending, ties in batch order."""
    tuned = config.model_copy(update={"top_k": k, "threshold_rank": max(config.threshold_rank, k)})
    selector = TopKSelector.from_config(oracle, tuned)
    return selector.select(candidates, cancel_event=cancel_event).entries
