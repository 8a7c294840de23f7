"""Weighted-total gap solving."""

from .solver import GapResult, GapSolver, GapStatus, WhatIfResult

__all__ = ["GapResult", "GapSolver", "GapStatus", "WhatIfResult"]
