"""Fixed-point ordering key for performance values."""

from __future__ import annotations

import math
from dataclasses import dataclass

FRACTION_DIGITS = 4
FRACTION_SCALE = 10**FRACTION_DIGITS


@dataclass(frozen=True, order=True)
class PerformanceKey:
    """Total order over performance values at 1/10 000 precision."""

    integral: int
    fractional: int

    @classmethod
    def from_value(cls, value: float) -> PerformanceKey:
        """Round a value to four decimal digits and split it into parts."""
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Cannot order non-finite performance value {value!r}.")
        integral, fractional = divmod(round(value * FRACTION_SCALE), FRACTION_SCALE)
        return cls(integral=int(integral), fractional=int(fractional))

    @property
    def value(self) -> float:
        return self.integral + self.fractional / FRACTION_SCALE
