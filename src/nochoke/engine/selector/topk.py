"""Best-k selection of reconstructed plays with threshold pruning."""

from __future__ import annotations

import bisect
import logging
import math
import threading
from collections.abc import Callable, Hashable, Iterable, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from nochoke.config import EngineConfig
from nochoke.engine.reconstruct import ScoreReconstructor
from nochoke.engine.weighting import PerformanceKey
from nochoke.errors import OracleFailure, ReconstructionError, SelectionCancelled
from nochoke.models import BeatmapStats, Candidate, GameMode, HitCounts, PlayRecord

PerformanceOracle = Callable[[HitCounts, int, GameMode, tuple[str, ...], BeatmapStats], float]

CANCEL_POLL_SECONDS = 0.05

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedPlay:
    """A candidate paired with its reconstruction and reconstructed value."""

    candidate: Candidate
    reconstructed: PlayRecord
    value: float

    @property
    def original(self) -> PlayRecord:
        return self.candidate.play

    @property
    def removed_misses(self) -> int:
        return self.original.misses - self.reconstructed.misses

    @property
    def gain(self) -> float:
        return self.value - self.candidate.performance


@dataclass(frozen=True)
class SelectionReport:
    """Outcome of one top-k batch."""

    entries: list[SelectedPlay]
    failures: list[tuple[Hashable, str]] = field(default_factory=list)
    pruned: list[Hashable] = field(default_factory=list)
    evaluated: int = 0


class RunningRanking:
    """Evaluated plays ordered by fixed-point value, ties by batch position."""

    def __init__(self) -> None:
        # ascending by (key, -position): the tail holds the best plays
        self._order: list[tuple[PerformanceKey, int]] = []
        self._plays: dict[int, SelectedPlay] = {}

    def __len__(self) -> int:
        return len(self._order)

    def add(self, position: int, play: SelectedPlay) -> None:
        bisect.insort(self._order, (PerformanceKey.from_value(play.value), -position))
        self._plays[position] = play

    def value_at(self, rank: int) -> float:
        """Value of the ``rank``-th best play, 0 while fewer plays are ranked."""
        if len(self._order) < rank:
            return 0.0
        return self._order[-rank][0].value

    def top(self, count: int) -> list[SelectedPlay]:
        best = self._order[-count:] if count < len(self._order) else self._order
        return [self._plays[-negated] for _, negated in reversed(best)]


class TopKSelector:
    """Pick the ``k`` best plays by unchoked performance value.

    A near full combo whose original value is already well below the
    current ``threshold_rank``-th best reconstructed value is skipped
    without calling the oracle. With ``workers > 1`` the oracle runs on a
    thread pool in windows of ``workers`` candidates; pruning uses the
    threshold as of the start of each window and results are folded in
    batch order, so the outcome never depends on completion order.
    """

    def __init__(
        self,
        oracle: PerformanceOracle,
        *,
        k: int = 5,
        threshold_rank: int = 10,
        prune_combo_ratio: float = 0.98,
        prune_value_ratio: float = 0.94,
        workers: int = 1,
        reconstructor: ScoreReconstructor | None = None,
    ) -> None:
        if k <= 0:
            raise ValueError("k must be > 0.")
        if threshold_rank < k:
            raise ValueError("threshold_rank must be >= k.")
        if not (0.0 <= prune_combo_ratio <= 1.0):
            raise ValueError("prune_combo_ratio must be within 0~1.")
        if not (0.0 <= prune_value_ratio <= 1.0):
            raise ValueError("prune_value_ratio must be within 0~1.")
        if workers <= 0:
            raise ValueError("workers must be > 0.")

        self.oracle = oracle
        self.k = k
        self.threshold_rank = threshold_rank
        self.prune_combo_ratio = prune_combo_ratio
        self.prune_value_ratio = prune_value_ratio
        self.workers = workers
        self.reconstructor = reconstructor or ScoreReconstructor()

    @classmethod
    def from_config(
        cls,
        oracle: PerformanceOracle,
        config: EngineConfig,
        reconstructor: ScoreReconstructor | None = None,
    ) -> TopKSelector:
        return cls(
            oracle,
            k=config.top_k,
            threshold_rank=config.threshold_rank,
            prune_combo_ratio=config.prune_combo_ratio,
            prune_value_ratio=config.prune_value_ratio,
            workers=config.workers,
            reconstructor=reconstructor,
        )

    def select(
        self,
        candidates: Iterable[Candidate],
        *,
        cancel_event: threading.Event | None = None,
    ) -> SelectionReport:
        """Reconstruct, evaluate and rank a batch of candidates."""
        items = list(candidates)
        ranking = RunningRanking()
        failures: list[tuple[Hashable, str]] = []
        pruned: list[Hashable] = []

        executor = ThreadPoolExecutor(max_workers=self.workers) if self.workers > 1 else None
        try:
            for start in range(0, len(items), self.workers):
                _raise_if_cancelled(cancel_event)
                threshold = ranking.value_at(self.threshold_rank)

                window: list[tuple[int, Candidate]] = []
                for position in range(start, min(start + self.workers, len(items))):
                    candidate = items[position]
                    if self.should_prune(candidate, threshold):
                        logger.debug("Pruned %s (%.4f < %.4f)", candidate.identifier, candidate.performance, threshold)
                        pruned.append(candidate.identifier)
                        continue
                    window.append((position, candidate))

                outcomes = self._evaluate_window(window, executor, cancel_event)
                for (position, candidate), (selected, reason) in zip(window, outcomes):
                    if selected is None:
                        logger.warning("Skipping %s: %s", candidate.identifier, reason)
                        failures.append((candidate.identifier, reason or "unknown failure"))
                        continue
                    ranking.add(position, selected)
        finally:
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)

        logger.info(
            "Selected top %d of %d candidates (evaluated=%d, pruned=%d, failed=%d)",
            self.k,
            len(items),
            len(ranking),
            len(pruned),
            len(failures),
        )
        return SelectionReport(
            entries=ranking.top(self.k),
            failures=failures,
            pruned=pruned,
            evaluated=len(ranking),
        )

    def should_prune(self, candidate: Candidate, threshold: float) -> bool:
        """Whether ``candidate`` cannot plausibly reach the threshold rank."""
        return (
            candidate.combo_ratio > self.prune_combo_ratio
            and candidate.performance < self.prune_value_ratio * threshold
        )

    def evaluate(self, candidate: Candidate) -> tuple[SelectedPlay | None, str | None]:
        """Unchoke one candidate and ask the oracle for its value."""
        play, beatmap = candidate.play, candidate.beatmap
        if self.reconstructor.is_full_combo(play, beatmap):
            return SelectedPlay(candidate, play, candidate.performance), None

        try:
            reconstructed = self.reconstructor.unchoke(play, beatmap)
            value = float(
                self.oracle(
                    reconstructed.hits,
                    reconstructed.combo,
                    reconstructed.mode,
                    reconstructed.mods,
                    beatmap,
                )
            )
        except OracleFailure as exc:
            return None, exc.reason
        except ReconstructionError as exc:
            return None, str(exc)

        if not math.isfinite(value):
            return None, f"oracle returned non-finite value {value!r}"
        return SelectedPlay(candidate, reconstructed, value), None

    def _evaluate_window(
        self,
        window: Sequence[tuple[int, Candidate]],
        executor: ThreadPoolExecutor | None,
        cancel_event: threading.Event | None,
    ) -> list[tuple[SelectedPlay | None, str | None]]:
        if executor is None:
            return [self.evaluate(candidate) for _, candidate in window]

        futures: list[Future] = [executor.submit(self.evaluate, candidate) for _, candidate in window]
        pending = set(futures)
        while pending:
            if cancel_event is not None and cancel_event.is_set():
                for future in pending:
                    future.cancel()
                raise SelectionCancelled("Top-k selection was cancelled.")
            _, pending = wait(pending, timeout=CANCEL_POLL_SECONDS, return_when=FIRST_COMPLETED)
        return [future.result() for future in futures]


def _raise_if_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SelectionCancelled("Top-k selection was cancelled.")
