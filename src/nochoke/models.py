"""Plain records consumed and produced by the engine."""

from __future__ import annotations

import math
from collections.abc import Hashable
from dataclasses import dataclass, fields, replace
from enum import Enum

from nochoke.errors import ReconstructionError


class GameMode(str, Enum):
    """Closed set of ruleset variants."""

    STANDARD = "standard"
    TAIKO = "taiko"
    CATCH = "catch"
    MANIA = "mania"

    @classmethod
    def parse(cls, value: str | GameMode) -> GameMode:
        """Resolve a mode from its name or common aliases."""
        if isinstance(value, GameMode):
            return value
        key = str(value).strip().lower()
        alias = MODE_ALIASES.get(key, key)
        try:
            return cls(alias)
        except ValueError as exc:
            raise ValueError(f"Unknown game mode: {value!r}") from exc


MODE_ALIASES = {
    "osu": "standard",
    "std": "standard",
    "0": "standard",
    "tko": "taiko",
    "1": "taiko",
    "ctb": "catch",
    "fruits": "catch",
    "2": "catch",
    "mna": "mania",
    "3": "mania",
}


class Grade(str, Enum):
    """Letter grade of a play."""

    XH = "XH"
    X = "X"
    SH = "SH"
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


@dataclass(frozen=True)
class HitCounts:
    """Judgement breakdown of a play.

    Which categories count towards the object total depends on the mode:
    catch stores missed tiny droplets in ``n_katu`` and mania stores MAX
    judgements in ``n_geki`` and 200s in ``n_katu``.
    """

    n300: int = 0
    n100: int = 0
    n50: int = 0
    n_miss: int = 0
    n_geki: int = 0
    n_katu: int = 0

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            if int(value) != value or value < 0:
                raise ValueError(f"{field.name} must be a non-negative integer.")

    def with_counts(self, **counts: int) -> HitCounts:
        """Return a copy with the given categories replaced."""
        return replace(self, **counts)

    def as_dict(self) -> dict[str, int]:
        """Convert counts to dictionary."""
        return {field.name: getattr(self, field.name) for field in fields(self)}


@dataclass(frozen=True)
class BeatmapStats:
    """Read-only beatmap figures needed for reconstruction."""

    max_combo: int
    object_count: int
    mode: GameMode = GameMode.STANDARD

    def __post_init__(self) -> None:
        if self.max_combo < 0:
            raise ValueError("max_combo must be >= 0.")
        if self.object_count <= 0:
            raise ValueError("object_count must be > 0.")
        object.__setattr__(self, "mode", GameMode.parse(self.mode))


@dataclass(frozen=True)
class PlayRecord:
    """Immutable snapshot of a single play."""

    hits: HitCounts
    combo: int
    mode: GameMode = GameMode.STANDARD
    mods: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.combo < 0:
            raise ValueError("combo must be >= 0.")
        object.__setattr__(self, "mode", GameMode.parse(self.mode))
        object.__setattr__(self, "mods", tuple(str(mod).upper() for mod in self.mods))

    @property
    def misses(self) -> int:
        return self.hits.n_miss

    def has_mod(self, acronym: str) -> bool:
        return acronym.upper() in self.mods

    def with_hits(self, hits: HitCounts, combo: int | None = None) -> PlayRecord:
        """Return a copy with new hit counts and optionally a new combo."""
        return replace(self, hits=hits, combo=self.combo if combo is None else combo)


@dataclass(frozen=True)
class SimulationTarget:
    """Caller overrides steering a simulated reconstruction."""

    accuracy: float | None = None
    combo: int | None = None
    misses: int | None = None

    def __post_init__(self) -> None:
        if self.accuracy is not None:
            if not math.isfinite(self.accuracy) or not (0.0 <= self.accuracy <= 100.0):
                raise ReconstructionError("accuracy must be between 0 and 100.")
        if self.combo is not None and self.combo < 0:
            raise ValueError("combo must be >= 0.")
        if self.misses is not None and self.misses < 0:
            raise ValueError("misses must be >= 0.")

    @property
    def is_empty(self) -> bool:
        return self.accuracy is None and self.combo is None and self.misses is None


@dataclass(frozen=True)
class Candidate:
    """One play of a top-k batch together with its original performance value."""

    identifier: Hashable
    play: PlayRecord
    beatmap: BeatmapStats
    performance: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.performance) or self.performance < 0:
            raise ValueError("performance must be finite and >= 0.")

    @property
    def combo_ratio(self) -> float:
        if self.beatmap.max_combo == 0:
            return 1.0
        return self.play.combo / self.beatmap.max_combo
