"""Benchmark and profile planner self-play using :mod:`tetris_ai.benchmark`.

Run with::

    PYTHONPATH=src python examples/profile_planners.py --mode classic

Each simulation plays one game with the mode's planner until it tops out or
reaches ``--pieces``.  Pass ``--help`` for the remaining options.
"""

from __future__ import annotations

import argparse
import logging

from tetris_ai import PerformanceTracker, classic_mode, modern_mode
from tetris_ai.benchmark import BenchmarkResult, SummaryStats, run_benchmark


LOGGER = logging.getLogger(__name__)

MODES = {"classic": classic_mode, "modern": modern_mode}


def _format_summary(summary: list[dict[str, float | int]], limit: int = 10) -> str:
    if not summary:
        return "No timings recorded."
    parts: list[str] = []
    for row in summary[:limit]:
        total_ms = row["total"] * 1000.0
        avg_ms = row["average"] * 1000.0
        parts.append(
            f"{row['name']}: total={total_ms:.3f}ms, count={int(row['count'])}, avg={avg_ms:.3f}ms"
        )
    return "; ".join(parts)


def print_summary(tracker: PerformanceTracker, limit: int = 10) -> None:
    summary = tracker.summary(sort_by="total")
    if not summary:
        print("No timings recorded.")
        return
    width = max(len(row["name"]) for row in summary[:limit])
    header = f"{'Section':<{width}}  Total (ms)  Self (ms)  Count  Avg (ms)"
    print(header)
    print("-" * len(header))
    for row in summary[:limit]:
        print(
            f"{row['name']:<{width}}  {row['total'] * 1000.0:10.3f}  {row['self'] * 1000.0:8.3f}"
            f"  {int(row['count']):5d}  {row['average'] * 1000.0:8.3f}"
        )
    for name, value in sorted(tracker.counters().items()):
        print(f"{name}: {value}")


def _stats_row(label: str, stats: SummaryStats) -> str:
    return (
        f"{label:<12}  {stats.mean:9.2f}  {stats.median:9.2f}  {stats.p10:9.2f}"
        f"  {stats.p90:9.2f}  {stats.stddev:9.2f}  {stats.min:9.2f}  {stats.max:9.2f}"
    )


def print_benchmark(result: BenchmarkResult) -> None:
    columns = ("Mean", "Median", "P10", "P90", "Stddev", "Min", "Max")
    header = f"{'Metric':<12}" + "".join(f"  {name:>9}" for name in columns)
    print(f"{result.games} games in {result.total_ms / 1000.0:.2f}s")
    print(header)
    print("-" * len(header))
    print(_stats_row("lines", result.lines))
    print(_stats_row("pieces", result.pieces))
    print(_stats_row("decision ms", result.decision_ms))


def log_summary(tracker: PerformanceTracker, *, limit: int, games: int) -> list[dict[str, float | int]]:
    summary = tracker.summary(sort_by="total")
    limit = max(0, limit)
    limited_summary = summary[:limit] if limit else []
    LOGGER.info("Performance over %d games: %s", games, _format_summary(limited_summary, limit=limit))
    return limited_summary


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--mode", choices=sorted(MODES), default="classic")
    parser.add_argument("--pieces", type=int, default=100, help="Piece limit per game.")
    parser.add_argument("--simulations", type=int, default=1, help="How many games to play.")
    parser.add_argument("--seed", type=int, default=0, help="Seed of the first game.")
    parser.add_argument(
        "--summary-limit",
        type=int,
        default=10,
        help="Maximum number of sections to include in summaries.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (e.g. DEBUG, INFO).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s")

    mode = MODES[args.mode]()
    tracker = PerformanceTracker()
    result = run_benchmark(mode, args.simulations, args.pieces, seed=args.seed, profiler=tracker)
    log_summary(tracker, limit=args.summary_limit, games=result.games)

    print_benchmark(result)
    print()
    print_summary(tracker, limit=args.summary_limit)


if __name__ == "__main__":
    main()
