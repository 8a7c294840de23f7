"""Per-mode judgement rules: accuracy, grades and accuracy-targeted hit splits."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from nochoke.models import GameMode, Grade, HitCounts, PlayRecord

HIDDEN_MODS = frozenset({"HD", "FL", "FI"})


class ModeRules(ABC):
    """Judgement rules of one game mode.

    ``categories`` lists the hit categories that count towards the object
    total. Accuracy is expressed in integer "units": a perfect hit is worth
    ``perfect_units`` and ``penalty_categories`` maps each lesser judgement to
    the units it loses, ordered from the mildest to the harshest.
    """

    mode: GameMode
    categories: tuple[str, ...]
    best_category: str
    perfect_units: int = 1
    penalty_categories: tuple[tuple[str, int], ...] = ()
    supports_simulation: bool = True

    def judged_total(self, hits: HitCounts) -> int:
        return sum(getattr(hits, name) for name in self.categories)

    @abstractmethod
    def accuracy(self, hits: HitCounts) -> float:
        """Accuracy in percent (0..100)."""

    @abstractmethod
    def grade(self, hits: HitCounts, mods: Sequence[str] = ()) -> Grade:
        """Letter grade for the given judgements."""

    def distribute(self, hits_left: int, object_count: int, accuracy: float) -> dict[str, int]:
        """Split ``hits_left`` non-miss judgements to approach ``accuracy``.

        Returns counts for the penalty categories only; the best category
        takes whatever is left. Among equally close splits the one with the
        fewest harshest judgements wins.
        """
        counts = {name: 0 for name, _ in self.penalty_categories}
        if not self.penalty_categories or hits_left <= 0:
            return counts

        target_units = accuracy / 100.0 * self.perfect_units * object_count
        deficit = self.perfect_units * hits_left - target_units
        if deficit <= 0:
            return counts

        *lighter, (harshest, harshest_loss) = self.penalty_categories
        best_error: float | None = None
        for harsh_count in range(hits_left + 1):
            remaining = deficit - harsh_count * harshest_loss
            if remaining < -harshest_loss:
                break
            available = hits_left - harsh_count
            trial = {harshest: harsh_count}
            for position, (name, loss) in enumerate(reversed(lighter)):
                if position == len(lighter) - 1:
                    amount = round(max(remaining, 0.0) / loss)
                else:
                    amount = int(max(remaining, 0.0) // loss)
                amount = min(available, amount)
                trial[name] = amount
                available -= amount
                remaining -= amount * loss

            error = abs(remaining)
            if best_error is None or error < best_error - 1e-12:
                best_error = error
                counts = trial
        return counts

    def clean_hits(self, hits: HitCounts, object_count: int, misses: int = 0) -> HitCounts:
        """Move removed misses and unplayed objects into the best category."""
        freed = hits.n_miss - misses + object_count - self.judged_total(hits)
        return hits.with_counts(
            n_miss=misses,
            **{self.best_category: getattr(hits, self.best_category) + freed},
        )

    def targeted_hits(
        self,
        hits: HitCounts,
        object_count: int,
        misses: int,
        accuracy: float,
    ) -> HitCounts:
        """Judgements with ``misses`` misses whose accuracy is closest to ``accuracy``."""
        hits_left = object_count - misses
        counts = self.distribute(hits_left, object_count, accuracy)
        cleared = {name: 0 for name in self.categories}
        cleared.update(counts)
        cleared["n_miss"] = misses
        cleared[self.best_category] = hits_left - sum(counts.values())
        return hits.with_counts(**cleared)

    @staticmethod
    def _ratio_grade(perfect: int, meh: int, misses: int, total: int) -> Grade:
        if total == 0:
            return Grade.D
        ratio = perfect / total
        if perfect == total:
            return Grade.X
        if ratio > 0.9 and meh / total < 0.01 and misses == 0:
            return Grade.S
        if (ratio > 0.8 and misses == 0) or ratio > 0.9:
            return Grade.A
        if (ratio > 0.7 and misses == 0) or ratio > 0.8:
            return Grade.B
        if ratio > 0.6:
            return Grade.C
        return Grade.D

    @staticmethod
    def _accuracy_grade(accuracy: float, thresholds: tuple[float, float, float, float]) -> Grade:
        if accuracy >= 100.0:
            return Grade.X
        for grade, threshold in zip((Grade.S, Grade.A, Grade.B, Grade.C), thresholds):
            if accuracy > threshold:
                return grade
        return Grade.D

    @staticmethod
    def _apply_hidden(grade: Grade, mods: Sequence[str]) -> Grade:
        if not HIDDEN_MODS.intersection(mod.upper() for mod in mods):
            return grade
        if grade is Grade.X:
            return Grade.XH
        if grade is Grade.S:
            return Grade.SH
        return grade


class StandardRules(ModeRules):
    mode = GameMode.STANDARD
    categories = ("n300", "n100", "n50", "n_miss")
    best_category = "n300"
    perfect_units = 6
    penalty_categories = (("n100", 4), ("n50", 5))

    def accuracy(self, hits: HitCounts) -> float:
        total = self.judged_total(hits)
        if total == 0:
            return 0.0
        points = 300 * hits.n300 + 100 * hits.n100 + 50 * hits.n50
        return 100.0 * points / (300 * total)

    def grade(self, hits: HitCounts, mods: Sequence[str] = ()) -> Grade:
        grade = self._ratio_grade(hits.n300, hits.n50, hits.n_miss, self.judged_total(hits))
        return self._apply_hidden(grade, mods)


class TaikoRules(ModeRules):
    mode = GameMode.TAIKO
    categories = ("n300", "n100", "n_miss")
    best_category = "n300"
    perfect_units = 2
    penalty_categories = (("n100", 1),)

    def accuracy(self, hits: HitCounts) -> float:
        total = self.judged_total(hits)
        if total == 0:
            return 0.0
        return 100.0 * (hits.n300 + 0.5 * hits.n100) / total

    def grade(self, hits: HitCounts, mods: Sequence[str] = ()) -> Grade:
        grade = self._ratio_grade(hits.n300, 0, hits.n_miss, self.judged_total(hits))
        return self._apply_hidden(grade, mods)


class CatchRules(ModeRules):
    """Catch: fruits in ``n300``, droplets in ``n100``, tiny droplets in ``n50``."""

    mode = GameMode.CATCH
    categories = ("n300", "n100", "n50", "n_katu", "n_miss")
    best_category = "n300"
    supports_simulation = False

    def accuracy(self, hits: HitCounts) -> float:
        total = self.judged_total(hits)
        if total == 0:
            return 0.0
        return 100.0 * (hits.n300 + hits.n100 + hits.n50) / total

    def grade(self, hits: HitCounts, mods: Sequence[str] = ()) -> Grade:
        grade = self._accuracy_grade(self.accuracy(hits), (98.0, 94.0, 90.0, 85.0))
        return self._apply_hidden(grade, mods)


class ManiaRules(ModeRules):
    mode = GameMode.MANIA
    categories = ("n_geki", "n300", "n_katu", "n100", "n50", "n_miss")
    best_category = "n_geki"
    perfect_units = 6
    penalty_categories = (("n_katu", 2), ("n100", 4), ("n50", 5))

    def accuracy(self, hits: HitCounts) -> float:
        total = self.judged_total(hits)
        if total == 0:
            return 0.0
        points = (
            300 * (hits.n_geki + hits.n300)
            + 200 * hits.n_katu
            + 100 * hits.n100
            + 50 * hits.n50
        )
        return 100.0 * points / (300 * total)

    def grade(self, hits: HitCounts, mods: Sequence[str] = ()) -> Grade:
        grade = self._accuracy_grade(self.accuracy(hits), (95.0, 90.0, 80.0, 70.0))
        return self._apply_hidden(grade, mods)


_RULES: dict[GameMode, ModeRules] = {
    rules.mode: rules for rules in (StandardRules(), TaikoRules(), CatchRules(), ManiaRules())
}


def rules_for(mode: GameMode | str) -> ModeRules:
    """Return the judgement rules of ``mode``."""
    return _RULES[GameMode.parse(mode)]


def play_accuracy(play: PlayRecord) -> float:
    return rules_for(play.mode).accuracy(play.hits)


def play_grade(play: PlayRecord) -> Grade:
    return rules_for(play.mode).grade(play.hits, play.mods)
