"""Descending list of performance values with geometric rank weights."""

from __future__ import annotations

import bisect
import logging
import math
from collections.abc import Iterable, Iterator

import numpy as np

from nochoke.errors import InsufficientData

DEFAULT_DECAY = 0.95
DEFAULT_CAPACITY = 100

logger = logging.getLogger(__name__)


class WeightedList:
    """Performance values sorted descending, weighted by ``decay ** rank``.

    Instances never change after construction; :meth:`inserted` returns a new
    list instead of mutating this one.
    """

    def __init__(
        self,
        values: Iterable[float],
        *,
        decay: float = DEFAULT_DECAY,
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        if not (0.0 < decay < 1.0):
            raise ValueError("decay must be between 0 and 1.")
        if capacity <= 0:
            raise ValueError("capacity must be > 0.")

        ordered = sorted((float(value) for value in values), reverse=True)
        for value in ordered:
            if not math.isfinite(value) or value < 0:
                raise InsufficientData(f"Performance values must be finite and >= 0, got {value!r}.")
        if len(ordered) > capacity:
            logger.warning("Dropping %d values beyond capacity %d", len(ordered) - capacity, capacity)
            ordered = ordered[:capacity]

        self.decay = float(decay)
        self.capacity = int(capacity)
        self._values = tuple(ordered)
        self._array = np.array(self._values, dtype=np.float64)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"WeightedList(n={len(self)}, total={self.weighted_sum():.4f})"

    @property
    def values(self) -> tuple[float, ...]:
        return self._values

    @property
    def is_full(self) -> bool:
        return len(self._values) >= self.capacity

    @property
    def last(self) -> float | None:
        return self._values[-1] if self._values else None

    def weights(self, count: int | None = None) -> np.ndarray:
        """Return ``decay ** i`` for the first ``count`` ranks (default: list size)."""
        size = len(self._values) if count is None else count
        return np.power(self.decay, np.arange(size, dtype=np.float64))

    def weighted_sum(self) -> float:
        """Sum of ``value[i] * decay ** i``."""
        if not self._values:
            return 0.0
        return float(np.dot(self._array, self.weights()))

    def total(self, bonus: float = 0.0) -> float:
        """Weighted sum plus a flat bonus."""
        return self.weighted_sum() + float(bonus)

    def bonus_from(self, current_total: float) -> float:
        """Portion of an aggregate total not explained by the weighted values."""
        return float(current_total) - self.weighted_sum()

    def rank_of(self, value: float) -> int:
        """1-based rank a new value would take; ties place it above equal values."""
        # values are descending, so bisect on the negated sequence
        return bisect.bisect_left([-item for item in self._values], -float(value)) + 1

    def inserted(self, value: float) -> WeightedList:
        """Return a new list with ``value`` added and the overflow entry dropped."""
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise InsufficientData(f"Performance values must be finite and >= 0, got {value!r}.")
        position = self.rank_of(value) - 1
        merged = (*self._values[:position], value, *self._values[position:])
        return self._from_sorted(merged[: self.capacity], decay=self.decay, capacity=self.capacity)

    @classmethod
    def _from_sorted(cls, ordered: tuple[float, ...], *, decay: float, capacity: int) -> WeightedList:
        instance = cls.__new__(cls)
        instance.decay = decay
        instance.capacity = capacity
        instance._values = ordered
        instance._array = np.array(ordered, dtype=np.float64)
        return instance
