"""Performance-score analytics: gap solving and no-choke reconstruction."""

from .api import gap_to_target, simulate, top_k, unchoke, what_if
from .errors import (
    InsufficientData,
    ModeUnsupported,
    NochokeError,
    OracleFailure,
    ReconstructionError,
    SelectionCancelled,
)
from .models import BeatmapStats, Candidate, GameMode, Grade, HitCounts, PlayRecord, SimulationTarget

__all__ = [
    "BeatmapStats",
    "Candidate",
    "GameMode",
    "Grade",
    "HitCounts",
    "InsufficientData",
    "ModeUnsupported",
    "NochokeError",
    "OracleFailure",
    "PlayRecord",
    "ReconstructionError",
    "SelectionCancelled",
    "SimulationTarget",
    "gap_to_target",
    "simulate",
    "top_k",
    "unchoke",
    "what_if",
]
