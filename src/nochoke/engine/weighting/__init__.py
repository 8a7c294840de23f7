"""Rank weighting and value ordering."""

from .ordering import PerformanceKey
from .weighted_list import DEFAULT_CAPACITY, DEFAULT_DECAY, WeightedList

__all__ = ["DEFAULT_CAPACITY", "DEFAULT_DECAY", "PerformanceKey", "WeightedList"]
