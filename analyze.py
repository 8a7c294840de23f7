#!/usr/bin/env python3
"""nochoke - score gap and no-choke analysis from CSV exports"""

import argparse
import logging
import sys

from nochoke import InsufficientData, ReconstructionError, gap_to_target, unchoke, what_if
from nochoke.config import EngineConfig, load_config
from nochoke.data import DataValidationError, ScoreTableLoader
from nochoke.engine.gap import GapStatus
from nochoke.engine.reconstruct import play_accuracy, play_grade


def _load_values(csv_path: str, column: str) -> list[float]:
    loader = ScoreTableLoader()
    try:
        return loader.load_values(csv_path, column=column)
    except FileNotFoundError:
        print(f"❌ File not found: {csv_path}")
        sys.exit(1)
    except DataValidationError as exc:
        print(f"❌ Invalid score table: {exc}")
        sys.exit(1)


def run_gap(csv_path: str, column: str, current: float, target: float, config: EngineConfig) -> None:
    """Print the single score needed to reach a target total."""
    values = _load_values(csv_path, column)

    print("=" * 60)
    print(f"🎯 What score is missing to reach {target:,.2f}?")
    print("=" * 60)
    try:
        result = gap_to_target(values, current, target, config=config)
    except InsufficientData as exc:
        print(f"❌ {exc}")
        sys.exit(1)

    if result.status is GapStatus.ALREADY_ACHIEVED:
        print(f"Already at {current:,.2f}, which is not below {target:,.2f}.")
        print("No more scores are required.")
    elif result.status is GapStatus.NEGLIGIBLE:
        print("A new score would fall out of the counted list and change nothing.")
    else:
        print(f"Missing {result.missing:,.2f} in total.")
        print(
            f"Reachable with one new score worth {result.required_value:,.2f}, "
            f"which would be the #{result.predicted_rank} best."
        )


def run_what_if(csv_path: str, column: str, current: float, value: float, config: EngineConfig) -> None:
    """Print the total after adding one score."""
    values = _load_values(csv_path, column)

    print("=" * 60)
    print(f"🤔 What if a new {value:,.2f} score were set?")
    print("=" * 60)
    result = what_if(values, current, value, config=config)
    if not result.counted:
        print(f"A {value:,.2f} score would not be counted; the total stays the same.")
        return
    print(f"It would be the #{result.predicted_rank} best score.")
    print(f"The total would change by +{result.change:,.2f} to {result.new_total:,.2f}.")


def _format_hits(play) -> str:
    hits = play.hits
    return f"{hits.n300}/{hits.n100}/{hits.n50}/{hits.n_miss}"


def run_unchoke(csv_path: str) -> None:
    """Print every candidate before and after unchoking."""
    loader = ScoreTableLoader()
    try:
        candidates = loader.load_candidates(csv_path)
    except FileNotFoundError:
        print(f"❌ File not found: {csv_path}")
        sys.exit(1)
    except DataValidationError as exc:
        print(f"❌ Invalid candidate table: {exc}")
        sys.exit(1)

    print("=" * 60)
    print(f"🔧 Unchoking {len(candidates)} plays")
    print("=" * 60)
    for candidate in candidates:
        before = candidate.play
        try:
            after = unchoke(before, candidate.beatmap)
        except ReconstructionError as exc:
            print(f"{candidate.identifier}: skipped ({exc})")
            continue
        removed = before.misses - after.misses
        print(
            f"{candidate.identifier}: {play_grade(before).value} → {play_grade(after).value} "
            f"({play_accuracy(before):.2f}% → {play_accuracy(after):.2f}%) "
            f"[ {before.combo} → {after.combo}x / {candidate.beatmap.max_combo}x ] "
            f"{_format_hits(before)} → {_format_hits(after)} "
            f"removed {removed} miss{'es' if removed != 1 else ''}"
        )


def main():
    parser = argparse.ArgumentParser(description="nochoke score analysis")
    parser.add_argument("--config", default=None, help="YAML/JSON engine config")
    parser.add_argument("--decay", type=float, default=None, help="Per-rank weight decay")
    parser.add_argument("--capacity", type=int, default=None, help="Number of counted values")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    gap = commands.add_parser("gap", help="Score needed to reach a target total")
    gap.add_argument("--csv", required=True, help="CSV with one performance value per row")
    gap.add_argument("--column", default="pp", help="Value column name")
    gap.add_argument("--current", type=float, required=True, help="Current aggregate total")
    gap.add_argument("--target", type=float, required=True, help="Target aggregate total")

    whatif = commands.add_parser("whatif", help="Total after one additional score")
    whatif.add_argument("--csv", required=True, help="CSV with one performance value per row")
    whatif.add_argument("--column", default="pp", help="Value column name")
    whatif.add_argument("--current", type=float, required=True, help="Current aggregate total")
    whatif.add_argument("--value", type=float, required=True, help="Value of the new score")

    unchoke_cmd = commands.add_parser("unchoke", help="Full-combo reconstruction of each play")
    unchoke_cmd.add_argument("--csv", required=True, help="Candidate CSV")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(args.config, overrides={"decay": args.decay, "capacity": args.capacity})
    except FileNotFoundError as exc:
        print(f"❌ {exc}")
        sys.exit(1)
    except ValueError as exc:
        print(f"❌ Invalid config: {exc}")
        sys.exit(1)

    if args.command == "gap":
        run_gap(args.csv, args.column, args.current, args.target, config)
    elif args.command == "whatif":
        run_what_if(args.csv, args.column, args.current, args.value, config)
    else:
        run_unchoke(args.csv)


if __name__ == "__main__":
    main()
