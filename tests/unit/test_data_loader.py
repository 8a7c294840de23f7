from __future__ import annotations

import pytest

from nochoke.data import DataValidationError, ScoreTableLoader
from nochoke.models import GameMode, HitCounts


def test_load_values_in_file_order(tmp_path):
    csv_path = tmp_path / "scores.csv"
    csv_path.write_text("id,PP\n1,250.5\n2,300\n3,120.25\n", encoding="utf-8")

    values = ScoreTableLoader().load_values(csv_path)

    assert values == [250.5, 300.0, 120.25]


def test_load_values_rejects_negative_or_missing(tmp_path):
    csv_path = tmp_path / "scores.csv"
    csv_path.write_text("id,pp\n1,250\n2,\n3,-1\n", encoding="utf-8")

    with pytest.raises(DataValidationError, match=r"rows: \[1, 2\]"):
        ScoreTableLoader().load_values(csv_path)


def test_load_values_rejects_text(tmp_path):
    csv_path = tmp_path / "scores.csv"
    csv_path.write_text("pp\n250\nlots\n", encoding="utf-8")

    with pytest.raises(DataValidationError, match="must be numeric"):
        ScoreTableLoader().load_values(csv_path)


def test_load_values_missing_column_raises(tmp_path):
    csv_path = tmp_path / "scores.csv"
    csv_path.write_text("score\n250\n", encoding="utf-8")

    with pytest.raises(DataValidationError, match="Missing required columns"):
        ScoreTableLoader().load_values(csv_path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ScoreTableLoader().load_values(tmp_path / "missing.csv")


def test_load_candidates_with_aliases_and_mods(tmp_path):
    csv_path = tmp_path / "candidates.csv"
    csv_path.write_text(
        "score_id,mode,count300,count100,count50,countmiss,combo,max_combo,objects,pp,mods\n"
        "11,osu,480,15,2,3,450,500,500,210.5,HDDT\n"
        "12,mania,20,5,0,1,80,120,100,150,NM\n",
        encoding="utf-8",
    )

    candidates = ScoreTableLoader().load_candidates(csv_path)

    first, second = candidates
    assert first.identifier == 11
    assert first.play.mode is GameMode.STANDARD
    assert first.play.hits == HitCounts(n300=480, n100=15, n50=2, n_miss=3)
    assert first.play.mods == ("HD", "DT")
    assert first.beatmap.max_combo == 500
    assert first.performance == 210.5
    assert second.play.mode is GameMode.MANIA
    assert second.play.mods == ()


def test_candidate_missing_column_raises(tmp_path):
    csv_path = tmp_path / "candidates.csv"
    csv_path.write_text("id,mode,n300\n1,osu,300\n", encoding="utf-8")

    loader = ScoreTableLoader()
    dataframe = loader.load_csv(csv_path)
    with pytest.raises(DataValidationError, match="Missing required columns"):
        loader.validate_candidates(dataframe)


def test_candidate_negative_count_raises(tmp_path):
    csv_path = tmp_path / "candidates.csv"
    csv_path.write_text(
        "id,mode,n300,n100,n50,n_miss,combo,max_combo,object_count,pp\n"
        "7,osu,300,-1,0,0,300,300,300,100\n",
        encoding="utf-8",
    )

    with pytest.raises(DataValidationError, match=r"negative values for ids: \[7\]"):
        ScoreTableLoader().load_candidates(csv_path)


def test_candidate_unknown_mode_raises(tmp_path):
    csv_path = tmp_path / "candidates.csv"
    csv_path.write_text(
        "id,mode,n300,n100,n50,n_miss,combo,max_combo,object_count,pp\n"
        "7,drums,300,0,0,0,300,300,300,100\n",
        encoding="utf-8",
    )

    with pytest.raises(DataValidationError, match="Unknown game mode"):
        ScoreTableLoader().load_candidates(csv_path)
