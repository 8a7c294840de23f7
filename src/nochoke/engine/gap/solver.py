"""Invert the weighted-sum formula for a single additional value."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import numpy as np

from nochoke.config import EngineConfig
from nochoke.engine.weighting import DEFAULT_CAPACITY, DEFAULT_DECAY, WeightedList
from nochoke.errors import InsufficientData

BRACKET_TOLERANCE = 1e-9

logger = logging.getLogger(__name__)


class GapStatus(str, Enum):
    """Outcome kind of a gap computation."""

    REQUIRED = "required"
    ALREADY_ACHIEVED = "already_achieved"
    NEGLIGIBLE = "negligible"


@dataclass(frozen=True)
class GapResult:
    """Value a single new entry needs to lift the total to the target."""

    status: GapStatus
    current_total: float
    target_total: float
    required_value: float = 0.0
    predicted_rank: int | None = None

    @property
    def missing(self) -> float:
        return max(0.0, self.target_total - self.current_total)

    @property
    def already_achieved(self) -> bool:
        return self.status is GapStatus.ALREADY_ACHIEVED


@dataclass(frozen=True)
class WhatIfResult:
    """Projected aggregate after adding one value."""

    current_total: float
    new_total: float
    predicted_rank: int | None
    counted: bool

    @property
    def change(self) -> float:
        return self.new_total - self.current_total


class GapSolver:
    """Find the smallest new value that brings an aggregate total to a target.

    Inserting ``x`` at 0-based rank ``k`` keeps the weights of the first ``k``
    entries, gives ``x`` the weight ``decay ** k`` and moves every later entry
    one weight step down. An entry pushed to rank ``capacity`` is dropped.
    For each rank the resulting total is linear in ``x``, so the solver
    computes the candidate ``x`` for every rank at once and keeps the first
    (highest) rank whose candidate fits between its neighbours.
    """

    def __init__(self, decay: float = DEFAULT_DECAY, capacity: int = DEFAULT_CAPACITY) -> None:
        if not (0.0 < decay < 1.0):
            raise ValueError("decay must be between 0 and 1.")
        if capacity <= 0:
            raise ValueError("capacity must be > 0.")
        self.decay = float(decay)
        self.capacity = int(capacity)

    @classmethod
    def from_config(cls, config: EngineConfig) -> GapSolver:
        return cls(decay=config.decay, capacity=config.capacity)

    def weighted(self, values: Iterable[float] | WeightedList) -> WeightedList:
        """Wrap raw values in a list using this solver's decay and capacity."""
        if isinstance(values, WeightedList):
            if values.decay == self.decay and values.capacity == self.capacity:
                return values
            values = values.values
        return WeightedList(values, decay=self.decay, capacity=self.capacity)

    def solve(
        self,
        values: Iterable[float] | WeightedList,
        current_total: float,
        target_total: float,
    ) -> GapResult:
        """Solve for the single value required to reach ``target_total``."""
        current = _finite(current_total, "current_total")
        target = _finite(target_total, "target_total")
        scores = self.weighted(values)

        if current >= target:
            return GapResult(GapStatus.ALREADY_ACHIEVED, current_total=current, target_total=target)
        if len(scores) == 0:
            raise InsufficientData("Cannot solve for a new value without existing values.")

        goal = target - scores.bonus_from(current)
        solution = self._solve_for_rank(scores, goal)
        if solution is None:
            logger.debug("No rank above the last of %d values reaches %.4f", len(scores), target)
            return GapResult(GapStatus.NEGLIGIBLE, current_total=current, target_total=target)

        rank, required = solution
        logger.debug("Target %.4f needs %.4f at rank %d", target, required, rank + 1)
        return GapResult(
            GapStatus.REQUIRED,
            current_total=current,
            target_total=target,
            required_value=required,
            predicted_rank=rank + 1,
        )

    def what_if(
        self,
        values: Iterable[float] | WeightedList,
        current_total: float,
        new_value: float,
    ) -> WhatIfResult:
        """Project the aggregate total after adding ``new_value``."""
        current = _finite(current_total, "current_total")
        value = _finite(new_value, "new_value")
        if value < 0:
            raise InsufficientData("new_value must be >= 0.")
        scores = self.weighted(values)

        if scores.is_full and value < scores.last:
            return WhatIfResult(current, current, predicted_rank=None, counted=False)

        bonus = scores.bonus_from(current)
        new_total = scores.inserted(value).total(bonus)
        return WhatIfResult(current, new_total, predicted_rank=scores.rank_of(value), counted=True)

    def _solve_for_rank(self, scores: WeightedList, goal: float) -> tuple[int, float] | None:
        values = np.array(scores.values, dtype=np.float64)
        size = len(values)
        weights = np.power(self.decay, np.arange(size + 1, dtype=np.float64))

        prefix = np.concatenate(([0.0], np.cumsum(values * weights[:size])))
        shifted = values * weights[1 : size + 1]
        # an entry moved to rank ``capacity`` no longer counts
        shifted[np.arange(size) + 1 >= self.capacity] = 0.0
        suffix = np.concatenate((np.cumsum(shifted[::-1])[::-1], [0.0]))

        ranks = np.arange(min(size, self.capacity - 1) + 1)
        required = (goal - prefix[ranks] - suffix[ranks]) / weights[ranks]
        upper = np.concatenate(([math.inf], values))[ranks]
        lower = np.concatenate((values, [0.0]))[ranks]
        slack = BRACKET_TOLERANCE * np.maximum(1.0, np.abs(required))

        fits = (required <= upper + slack) & (required >= lower - slack)
        matches = np.flatnonzero(fits)
        if matches.size == 0:
            return None
        rank = int(matches[0])
        return rank, float(required[rank])


def _finite(value: float, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise InsufficientData(f"{name} must be finite.")
    return number
