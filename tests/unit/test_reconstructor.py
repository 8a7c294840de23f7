from __future__ import annotations

import numpy as np
import pytest

from nochoke.engine.reconstruct import ScoreReconstructor, play_accuracy, rules_for
from nochoke.errors import ModeUnsupported, ReconstructionError
from nochoke.models import BeatmapStats, GameMode, HitCounts, PlayRecord, SimulationTarget


def _choked_standard_play() -> tuple[PlayRecord, BeatmapStats]:
    play = PlayRecord(HitCounts(n300=480, n100=15, n50=2, n_miss=3), combo=450)
    return play, BeatmapStats(max_combo=500, object_count=500)


def test_unchoke_moves_misses_to_best_category():
    play, beatmap = _choked_standard_play()

    result = ScoreReconstructor().unchoke(play, beatmap)

    assert result.hits == HitCounts(n300=483, n100=15, n50=2, n_miss=0)
    assert result.combo == 500
    assert play.misses == 3


def test_unchoke_is_identity_for_full_combo():
    play = PlayRecord(HitCounts(n300=495, n100=5), combo=500, mods=("HD",))
    beatmap = BeatmapStats(max_combo=500, object_count=500)
    reconstructor = ScoreReconstructor()

    result = reconstructor.unchoke(play, beatmap)

    assert result is play
    assert reconstructor.unchoke(result, beatmap) == result


def test_unchoke_fills_unfinished_play():
    play = PlayRecord(HitCounts(n300=380, n100=18, n_miss=2), combo=150)
    beatmap = BeatmapStats(max_combo=520, object_count=500)

    result = ScoreReconstructor().unchoke(play, beatmap)

    assert result.hits.n300 == 482
    assert rules_for(GameMode.STANDARD).judged_total(result.hits) == 500
    assert result.combo == 520


def test_unchoke_catch_play():
    play = PlayRecord(HitCounts(n300=300, n100=50, n50=100, n_katu=10, n_miss=2), combo=200, mode="catch")
    beatmap = BeatmapStats(max_combo=352, object_count=462, mode="catch")

    result = ScoreReconstructor().unchoke(play, beatmap)

    assert result.hits.n300 == 302
    assert result.misses == 0
    assert result.combo == 352


def test_inconsistent_play_raises():
    reconstructor = ScoreReconstructor()
    beatmap = BeatmapStats(max_combo=500, object_count=500)

    with pytest.raises(ReconstructionError, match="exceeds the map maximum"):
        reconstructor.unchoke(PlayRecord(HitCounts(n300=500), combo=501), beatmap)
    with pytest.raises(ReconstructionError, match="judgements"):
        reconstructor.unchoke(PlayRecord(HitCounts(n300=501), combo=10), beatmap)
    with pytest.raises(ReconstructionError, match="cannot be set"):
        reconstructor.unchoke(
            PlayRecord(HitCounts(n300=10), combo=10, mode="taiko"),
            BeatmapStats(max_combo=10, object_count=10, mode="mania"),
        )


def test_simulate_without_target_matches_unchoke():
    play, beatmap = _choked_standard_play()
    reconstructor = ScoreReconstructor()

    assert reconstructor.simulate(play, beatmap, SimulationTarget()) == reconstructor.unchoke(play, beatmap)


def test_simulate_standard_accuracy_target():
    play, beatmap = _choked_standard_play()

    result = ScoreReconstructor().simulate(play, beatmap, SimulationTarget(accuracy=98.0))

    assert result.hits == HitCounts(n300=485, n100=15, n50=0, n_miss=0)
    assert result.combo == 500
    assert play_accuracy(result) == pytest.approx(98.0)


def test_simulate_keeps_requested_misses_and_combo():
    play, beatmap = _choked_standard_play()

    result = ScoreReconstructor().simulate(play, beatmap, SimulationTarget(accuracy=97.0, misses=1))

    assert result.hits == HitCounts(n300=478, n100=21, n50=0, n_miss=1)
    assert result.combo == 450
    assert play_accuracy(result) == pytest.approx(97.0)


def test_simulate_explicit_combo():
    play, beatmap = _choked_standard_play()
    reconstructor = ScoreReconstructor()

    assert reconstructor.simulate(play, beatmap, SimulationTarget(misses=2, combo=320)).combo == 320
    with pytest.raises(ReconstructionError, match="Target combo"):
        reconstructor.simulate(play, beatmap, SimulationTarget(combo=501))


def test_simulate_taiko_and_mania_accuracy():
    reconstructor = ScoreReconstructor()
    taiko = PlayRecord(HitCounts(n300=180, n100=15, n_miss=5), combo=100, mode="taiko")
    mania = PlayRecord(HitCounts(n_geki=60, n300=20, n_katu=10, n100=5, n50=3, n_miss=2), combo=80, mode="mania")

    taiko_result = reconstructor.simulate(
        taiko, BeatmapStats(max_combo=200, object_count=200, mode="taiko"), SimulationTarget(accuracy=95.0)
    )
    mania_result = reconstructor.simulate(
        mania, BeatmapStats(max_combo=120, object_count=100, mode="mania"), SimulationTarget(accuracy=90.0)
    )

    assert taiko_result.hits == HitCounts(n300=180, n100=20)
    assert mania_result.hits == HitCounts(n_geki=85, n100=15)
    assert play_accuracy(mania_result) == pytest.approx(90.0)


def test_simulate_more_misses_than_original_raises():
    play, beatmap = _choked_standard_play()

    with pytest.raises(ReconstructionError, match="misses"):
        ScoreReconstructor().simulate(play, beatmap, SimulationTarget(misses=4))


def test_simulate_catch_raises_mode_unsupported():
    play = PlayRecord(HitCounts(n300=100, n_miss=1), combo=50, mode="catch")
    beatmap = BeatmapStats(max_combo=101, object_count=101)

    with pytest.raises(ModeUnsupported) as excinfo:
        ScoreReconstructor().simulate(play, beatmap, SimulationTarget(accuracy=99.0))
    assert excinfo.value.mode is GameMode.CATCH


def test_invalid_simulation_target_raises():
    with pytest.raises(ReconstructionError, match="accuracy"):
        SimulationTarget(accuracy=101.0)


def _random_play(rng: np.random.Generator, mode: GameMode) -> tuple[PlayRecord, BeatmapStats]:
    rules = rules_for(mode)
    counts = {name: int(rng.integers(0, 60)) for name in rules.categories}
    hits = HitCounts(**counts)
    object_count = max(1, rules.judged_total(hits) + int(rng.integers(0, 5)))
    max_combo = object_count + int(rng.integers(0, 50))
    play = PlayRecord(hits, combo=int(rng.integers(0, max_combo + 1)), mode=mode)
    return play, BeatmapStats(max_combo=max_combo, object_count=object_count, mode=mode)


@pytest.mark.parametrize("mode", list(GameMode))
def test_reconstructions_keep_object_count_and_limits(mode):
    rng = np.random.default_rng(11)
    reconstructor = ScoreReconstructor()
    rules = rules_for(mode)

    for _ in range(40):
        play, beatmap = _random_play(rng, mode)
        results = [reconstructor.unchoke(play, beatmap)]
        if rules.supports_simulation:
            target = SimulationTarget(
                accuracy=float(rng.uniform(60.0, 100.0)),
                misses=int(rng.integers(0, play.misses + 1)),
            )
            results.append(reconstructor.simulate(play, beatmap, target))

        for result in results:
            assert rules.judged_total(result.hits) == beatmap.object_count
            assert result.misses <= play.misses
            assert result.combo <= beatmap.max_combo
            assert all(count >= 0 for count in result.hits.as_dict().values())
