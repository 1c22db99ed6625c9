import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from examples.profile_planners import log_summary
from tetris_ai import PerformanceTracker, classic_mode
from tetris_ai.benchmark import play_game
from tetris_ai.mode import ModeConfig
from tetris_ai.search import PlannerConfig


class FakeClock:
    def __init__(self) -> None:
        self.current = 0.0

    def advance(self, delta: float) -> None:
        self.current += delta

    def __call__(self) -> float:
        return self.current


def test_log_summary_limits_rows_and_output(caplog):
    clock = FakeClock()
    tracker = PerformanceTracker(clock=clock)
    with tracker.section("slow"):
        clock.advance(0.5)
    with tracker.section("fast"):
        clock.advance(0.1)

    with caplog.at_level(logging.INFO, logger="examples.profile_planners"):
        summary = log_summary(tracker, limit=1, games=7)

    assert len(summary) == 1
    assert summary[0]["name"] == "slow"
    message = "".join(caplog.messages)
    assert "7 games" in message
    assert "slow" in message
    assert "fast" not in message


def test_play_game_records_planner_sections():
    base = classic_mode()
    mode = ModeConfig(
        name="classic-greedy",
        game_config=base.game_config,
        planner="greedy",
        planner_config=PlannerConfig(depth=1),
    )
    tracker = PerformanceTracker()
    game = play_game(mode, pieces=5, seed=3, tracker=tracker)

    assert game.pieces_placed == 5
    names = {row["name"] for row in tracker.summary()}
    assert {"greedy", "enumerate", "evaluate"} <= names
    assert next(row for row in tracker.summary() if row["name"] == "greedy")["count"] == 5
