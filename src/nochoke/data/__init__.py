"""Score table loading and validation utilities."""

from .loader import DataValidationError, ScoreTableLoader

__all__ = ["DataValidationError", "ScoreTableLoader"]
