"""Error taxonomy for the analytics engine."""

from __future__ import annotations


class NochokeError(Exception):
    """Base class for engine errors."""


class InsufficientData(NochokeError, ValueError):
    """Raised when a score list is empty or malformed and cannot be solved."""


class ModeUnsupported(NochokeError):
    """Raised when a reconstruction is requested for a mode that cannot be targeted."""

    def __init__(self, mode: object) -> None:
        super().__init__(f"Targeted simulation is not supported for mode {mode}.")
        self.mode = mode


class OracleFailure(NochokeError):
    """Raised by a performance oracle that could not evaluate a play."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ReconstructionError(NochokeError, ValueError):
    """Raised when a play record or simulation target is inconsistent."""


class SelectionCancelled(NochokeError):
    """Raised when a top-k batch is cancelled before completion."""
