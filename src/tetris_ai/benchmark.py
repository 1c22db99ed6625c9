"""Self-play benchmarking: play seeded games under a mode and summarise them."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence

import numpy as np

from .game import Game
from .mode import ModeConfig, select_placement
from .perf import PerformanceTracker

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SummaryStats:
    count: int = 0
    mean: float = 0.0
    median: float = 0.0
    p10: float = 0.0
    p90: float = 0.0
    stddev: float = 0.0
    min: float = 0.0
    max: float = 0.0


@dataclass(frozen=True)
class BenchmarkResult:
    lines: SummaryStats
    pieces: SummaryStats
    decision_ms: SummaryStats
    total_ms: float
    games: int


def compute_stats(values: Sequence[float]) -> SummaryStats:
    """Summarise ``values``; an empty sequence gives all zeros.

    Percentiles are nearest-rank on the sorted values: ``p10`` is the element
    at index ``floor(n * 0.1)`` and ``p90`` the one at ``floor(n * 0.9)``.
    The standard deviation is the population one.
    """

    data = np.sort(np.asarray(values, dtype=np.float64))
    n = int(data.size)
    if n == 0:
        return SummaryStats()
    return SummaryStats(
        count=n,
        mean=float(data.mean()),
        median=float(np.median(data)),
        p10=float(data[n // 10]),
        p90=float(data[min(n - 1, 9 * n // 10)]),
        stddev=float(data.std()),
        min=float(data[0]),
        max=float(data[-1]),
    )


def play_game(
    mode: ModeConfig,
    pieces: int,
    seed: int,
    tracker: Optional[PerformanceTracker] = None,
    *,
    decision_ms: Optional[List[float]] = None,
    clock: Callable[[], float] = time.perf_counter,
) -> Game:
    """Play one game until it tops out or ``pieces`` pieces have locked.

    When ``decision_ms`` is given, each planner call's wall time in
    milliseconds is appended to it.
    """

    game = Game(replace(mode.game_config, seed=seed))
    while not game.game_over and game.pieces_placed < pieces:
        start = clock()
        placement = select_placement(
            mode.planner,
            game.snapshot(),
            mode.weights,
            mode.planner_config,
            profiler=tracker,
        )
        if decision_ms is not None:
            decision_ms.append((clock() - start) * 1000.0)
        if placement is None:
            break
        game.apply_placement(placement)
    return game


def run_benchmark(
    mode: ModeConfig,
    games: int,
    max_pieces: int,
    *,
    seed: int = 0,
    profiler: Optional[PerformanceTracker] = None,
    clock: Callable[[], float] = time.perf_counter,
) -> BenchmarkResult:
    """Play ``games`` games seeded ``seed``, ``seed + 1``, ... and summarise them."""

    if games < 0:
        raise ValueError(f"games must be non-negative, got {games}")
    lines: List[int] = []
    pieces: List[int] = []
    decision_ms: List[float] = []
    start = clock()
    for index in range(games):
        game = play_game(
            mode,
            max_pieces,
            seed + index,
            profiler,
            decision_ms=decision_ms,
            clock=clock,
        )
        lines.append(game.lines_cleared)
        pieces.append(game.pieces_placed)
        LOGGER.debug(
            "Benchmark game %d/%d (%s): %d pieces, %d lines",
            index + 1,
            games,
            mode.name,
            game.pieces_placed,
            game.lines_cleared,
        )
    result = BenchmarkResult(
        lines=compute_stats(lines),
        pieces=compute_stats(pieces),
        decision_ms=compute_stats(decision_ms),
        total_ms=(clock() - start) * 1000.0,
        games=games,
    )
    LOGGER.info(
        "Benchmark %s: %d games, mean %.1f lines, mean %.1f pieces",
        mode.name,
        games,
        result.lines.mean,
        result.pieces.mean,
    )
    return result


__all__ = ["BenchmarkResult", "SummaryStats", "compute_stats", "play_game", "run_benchmark"]
