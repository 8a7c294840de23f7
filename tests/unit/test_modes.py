from __future__ import annotations

import pytest

from nochoke.engine.reconstruct import play_accuracy, play_grade, rules_for
from nochoke.models import GameMode, Grade, HitCounts, PlayRecord


def test_accuracy_depends_on_mode():
    hits = HitCounts(n300=90, n100=10)

    assert rules_for(GameMode.STANDARD).accuracy(hits) == pytest.approx(28000 / 30000 * 100)
    assert rules_for(GameMode.TAIKO).accuracy(hits) == pytest.approx(95.0)


def test_catch_accuracy_counts_caught_objects():
    hits = HitCounts(n300=50, n100=20, n50=25, n_katu=5)

    assert rules_for("ctb").accuracy(hits) == pytest.approx(95.0)


def test_mania_accuracy_uses_all_six_judgements():
    hits = HitCounts(n_geki=50, n300=30, n_katu=10, n100=5, n50=5)

    assert rules_for(GameMode.MANIA).accuracy(hits) == pytest.approx(26750 / 30000 * 100)


def test_empty_hits_have_zero_accuracy():
    assert rules_for(GameMode.STANDARD).accuracy(HitCounts()) == 0.0


def test_standard_grades_follow_judgement_ratios():
    rules = rules_for(GameMode.STANDARD)

    assert rules.grade(HitCounts(n300=100)) is Grade.X
    assert rules.grade(HitCounts(n300=100), mods=("HD",)) is Grade.XH
    assert rules.grade(HitCounts(n300=95, n100=5)) is Grade.S
    assert rules.grade(HitCounts(n300=95, n100=5), mods=("FL",)) is Grade.SH
    assert rules.grade(HitCounts(n300=95, n100=4, n_miss=1)) is Grade.A
    assert rules.grade(HitCounts(n300=50, n100=50)) is Grade.D


def test_accuracy_based_grades():
    mania = PlayRecord(HitCounts(n_geki=88, n_katu=12), combo=100, mode="mania")
    catch = PlayRecord(HitCounts(n300=95, n_miss=5), combo=50, mode="catch")

    assert play_accuracy(mania) == pytest.approx(96.0)
    assert play_grade(mania) is Grade.S
    assert play_grade(catch) is Grade.A


def test_distribute_hits_exact_standard_accuracy():
    counts = rules_for(GameMode.STANDARD).distribute(500, 500, 98.0)

    assert counts == {"n100": 15, "n50": 0}


def test_distribute_prefers_lighter_judgements_for_mania():
    counts = rules_for(GameMode.MANIA).distribute(100, 100, 90.0)

    assert counts == {"n_katu": 0, "n100": 15, "n50": 0}


def test_distribute_above_reachable_accuracy_returns_no_penalties():
    counts = rules_for(GameMode.TAIKO).distribute(90, 100, 95.0)

    assert counts == {"n100": 0}


def test_catch_cannot_be_simulated():
    assert not rules_for("fruits").supports_simulation
    assert rules_for("osu").supports_simulation


def test_unknown_mode_raises():
    with pytest.raises(ValueError, match="Unknown game mode"):
        rules_for("drums")
