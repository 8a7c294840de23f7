"""Rebuild imperfect plays as full-combo or caller-targeted hypotheticals."""

from __future__ import annotations

import logging

from nochoke.errors import ModeUnsupported, ReconstructionError
from nochoke.models import BeatmapStats, GameMode, PlayRecord, SimulationTarget

from .modes import ModeRules, rules_for

logger = logging.getLogger(__name__)


class ScoreReconstructor:
    """Produce hypothetical hit records; never evaluates performance itself.

    Every result keeps the judged total equal to the beatmap's object count,
    never has more misses than the original, and never exceeds the
    beatmap's maximum combo.
    """

    def unchoke(self, play: PlayRecord, beatmap: BeatmapStats) -> PlayRecord:
        """Return the play as a clean full combo; identity for full-combo plays."""
        rules = rules_for(play.mode)
        self._validate(play, beatmap, rules)

        if self.is_full_combo(play, beatmap):
            return play

        hits = rules.clean_hits(play.hits, beatmap.object_count)
        return play.with_hits(hits, combo=beatmap.max_combo)

    def simulate(
        self,
        play: PlayRecord,
        beatmap: BeatmapStats,
        target: SimulationTarget,
    ) -> PlayRecord:
        """Return the play rebuilt to match the requested accuracy, combo and misses."""
        rules = rules_for(play.mode)
        if not rules.supports_simulation:
            raise ModeUnsupported(play.mode)
        self._validate(play, beatmap, rules)

        misses = 0 if target.misses is None else target.misses
        if misses > play.misses:
            raise ReconstructionError(
                f"Target asks for {misses} misses but the play only has {play.misses}."
            )

        if target.accuracy is None:
            hits = rules.clean_hits(play.hits, beatmap.object_count, misses=misses)
        else:
            hits = rules.targeted_hits(play.hits, beatmap.object_count, misses, target.accuracy)
            logger.debug(
                "Targeted %.4f%% accuracy, reached %.4f%%",
                target.accuracy,
                rules.accuracy(hits),
            )

        return play.with_hits(hits, combo=self._target_combo(play, beatmap, target, misses))

    def is_full_combo(self, play: PlayRecord, beatmap: BeatmapStats) -> bool:
        """Whether unchoking ``play`` would change nothing."""
        rules = rules_for(play.mode)
        return (
            play.combo == beatmap.max_combo
            and play.misses == 0
            and rules.judged_total(play.hits) == beatmap.object_count
        )

    @staticmethod
    def _target_combo(
        play: PlayRecord,
        beatmap: BeatmapStats,
        target: SimulationTarget,
        misses: int,
    ) -> int:
        if target.combo is not None:
            if target.combo > beatmap.max_combo:
                raise ReconstructionError(
                    f"Target combo {target.combo} exceeds the map maximum {beatmap.max_combo}."
                )
            return target.combo
        if misses == 0:
            return beatmap.max_combo
        return min(play.combo, beatmap.max_combo)

    @staticmethod
    def _validate(play: PlayRecord, beatmap: BeatmapStats, rules: ModeRules) -> None:
        if beatmap.mode is not play.mode and beatmap.mode is not GameMode.STANDARD:
            raise ReconstructionError(
                f"A {play.mode.value} play cannot be set on a {beatmap.mode.value} beatmap."
            )
        judged = rules.judged_total(play.hits)
        if judged > beatmap.object_count:
            raise ReconstructionError(
                f"Play has {judged} judgements but the map only has {beatmap.object_count} objects."
            )
        if play.combo > beatmap.max_combo:
            raise ReconstructionError(
                f"Play combo {play.combo} exceeds the map maximum {beatmap.max_combo}."
            )
