"""CSV loaders for score lists and top-k candidate batches."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from nochoke.models import BeatmapStats, Candidate, GameMode, HitCounts, PlayRecord

CANDIDATE_COLUMNS = [
    "id",
    "mode",
    "n300",
    "n100",
    "n50",
    "n_miss",
    "combo",
    "max_combo",
    "object_count",
    "pp",
]
OPTIONAL_COUNT_COLUMNS = ["n_geki", "n_katu"]
COUNT_COLUMNS = ["n300", "n100", "n50", "n_miss", *OPTIONAL_COUNT_COLUMNS, "combo", "max_combo", "object_count"]
COLUMN_ALIASES = {
    "count300": "n300",
    "count100": "n100",
    "count50": "n50",
    "countmiss": "n_miss",
    "misses": "n_miss",
    "countgeki": "n_geki",
    "countkatu": "n_katu",
    "max_combo_map": "max_combo",
    "objects": "object_count",
    "score_id": "id",
}


class DataValidationError(ValueError):
    """Raised when score data fails validation."""


class ScoreTableLoader:
    """Load and validate score tables exported as CSV."""

    def load_csv(self, path: str | Path, encoding: str = "utf-8") -> pd.DataFrame:
        """Load CSV and normalize column names."""
        csv_path = Path(path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_path}")

        dataframe = pd.read_csv(csv_path, encoding=encoding)
        return self._normalize_columns(dataframe)

    def load_values(self, path: str | Path, column: str = "pp", encoding: str = "utf-8") -> list[float]:
        """Load one column of performance values."""
        dataframe = self.load_csv(path, encoding=encoding)
        column = column.strip().lower()
        if column not in dataframe.columns:
            raise DataValidationError(f"Missing required columns: {[column]}")

        try:
            values = pd.to_numeric(dataframe[column], errors="raise").astype(np.float64)
        except (TypeError, ValueError) as exc:
            raise DataValidationError(f"Column '{column}' must be numeric.") from exc

        invalid = ~np.isfinite(values) | (values < 0)
        if invalid.any():
            rows = dataframe.index[invalid.to_numpy()].tolist()
            raise DataValidationError(f"Column '{column}' has negative or missing values at rows: {rows}")
        return values.tolist()

    def validate_candidates(self, dataframe: pd.DataFrame) -> None:
        """Validate schema and count ranges of a candidate table."""
        missing = [column for column in CANDIDATE_COLUMNS if column not in dataframe.columns]
        if missing:
            raise DataValidationError(f"Missing required columns: {missing}")

        for column in [*CANDIDATE_COLUMNS[2:], *(c for c in OPTIONAL_COUNT_COLUMNS if c in dataframe.columns)]:
            try:
                numeric = pd.to_numeric(dataframe[column], errors="raise")
            except (TypeError, ValueError) as exc:
                raise DataValidationError(f"Column '{column}' must be numeric.") from exc
            if column in CANDIDATE_COLUMNS and numeric.isna().any():
                ids = dataframe.loc[numeric.isna(), "id"].tolist()
                raise DataValidationError(f"Column '{column}' has missing values for ids: {ids}")
            negative = numeric < 0
            if negative.any():
                ids = dataframe.loc[negative, "id"].tolist()
                raise DataValidationError(f"Column '{column}' has negative values for ids: {ids}")

        for raw_mode in dataframe["mode"].astype(str).unique():
            try:
                GameMode.parse(raw_mode)
            except ValueError as exc:
                raise DataValidationError(str(exc)) from exc

    def load_candidates(self, path: str | Path, encoding: str = "utf-8") -> list[Candidate]:
        """Load a candidate batch in file order."""
        dataframe = self.load_csv(path, encoding=encoding)
        self.validate_candidates(dataframe)

        working = dataframe.copy()
        for column in OPTIONAL_COUNT_COLUMNS:
            if column not in working.columns:
                working[column] = 0
        if "mods" not in working.columns:
            working["mods"] = ""
        working[COUNT_COLUMNS] = working[COUNT_COLUMNS].fillna(0).astype(int)
        working["mods"] = working["mods"].fillna("").astype(str)

        candidates: list[Candidate] = []
        for row in working.itertuples(index=False):
            mode = GameMode.parse(str(row.mode))
            hits = HitCounts(
                n300=int(row.n300),
                n100=int(row.n100),
                n50=int(row.n50),
                n_miss=int(row.n_miss),
                n_geki=int(row.n_geki),
                n_katu=int(row.n_katu),
            )
            candidates.append(
                Candidate(
                    identifier=row.id,
                    play=PlayRecord(hits=hits, combo=int(row.combo), mode=mode, mods=_parse_mods(row.mods)),
                    beatmap=BeatmapStats(max_combo=int(row.max_combo), object_count=int(row.object_count), mode=mode),
                    performance=float(row.pp),
                )
            )
        return candidates

    @staticmethod
    def _normalize_columns(dataframe: pd.DataFrame) -> pd.DataFrame:
        normalized = {}
        for column in dataframe.columns:
            new_name = str(column).strip().lower()
            normalized[column] = COLUMN_ALIASES.get(new_name, new_name)
        return dataframe.rename(columns=normalized)


def _parse_mods(raw: str) -> tuple[str, ...]:
    """Split ``"HDDT"`` or ``"HD,DT"`` into two-letter acronyms."""
    compact = "".join(ch for ch in raw.upper() if ch.isalnum())
    if compact in {"", "NM", "NOMOD"}:
        return ()
    return tuple(compact[index : index + 2] for index in range(0, len(compact), 2))
