"""Top-k selection of reconstructed plays."""

from .topk import PerformanceOracle, RunningRanking, SelectedPlay, SelectionReport, TopKSelector

__all__ = [
    "PerformanceOracle",
    "RunningRanking",
    "SelectedPlay",
    "SelectionReport",
    "TopKSelector",
]
