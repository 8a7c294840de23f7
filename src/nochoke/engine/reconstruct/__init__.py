"""Play reconstruction: unchoke and targeted simulation."""

from .modes import (
    CatchRules,
    ManiaRules,
    ModeRules,
    StandardRules,
    TaikoRules,
    play_accuracy,
    play_grade,
    rules_for,
)
from .reconstructor import ScoreReconstructor

__all__ = [
    "CatchRules",
    "ManiaRules",
    "ModeRules",
    "ScoreReconstructor",
    "StandardRules",
    "TaikoRules",
    "play_accuracy",
    "play_grade",
    "rules_for",
]
