"""Rule-set presets pairing a rotation system with weights and a planner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from .beam import beam_search_select
from .evaluator import BCTS_WEIGHTS, Weights
from .expectimax import expectimax_select
from .game import GameConfig, Placement, Snapshot
from .greedy import greedy_select
from .perf import PerformanceTracker
from .rotation import RotationSystem
from .search import PlannerConfig

Planner = Callable[..., Optional[Placement]]

PLANNERS: Dict[str, Planner] = {
    "greedy": greedy_select,
    "expectimax": expectimax_select,
    "beam": beam_search_select,
}


@dataclass(frozen=True)
class ModeConfig:
    name: str
    game_config: GameConfig
    planner: str
    planner_config: PlannerConfig
    weights: Tuple[float, ...] = field(default=BCTS_WEIGHTS)


def classic_mode() -> ModeConfig:
    """NES-style rules: no kicks, one preview, no hold, overflow truncated."""

    return ModeConfig(
        name="classic",
        game_config=GameConfig(
            buffer_rows=2,
            preview_count=1,
            allow_hold=False,
            rotation_system="nrs",
            initial_drop=False,
            truncate_lock=True,
        ),
        planner="expectimax",
        planner_config=PlannerConfig(depth=2),
    )


def modern_mode() -> ModeConfig:
    """Guideline rules: SRS kicks, five previews, hold, 20 buffer rows."""

    return ModeConfig(
        name="modern",
        game_config=GameConfig(
            buffer_rows=20,
            preview_count=5,
            allow_hold=True,
            rotation_system="srs",
            initial_drop=True,
            truncate_lock=False,
        ),
        planner="beam",
        planner_config=PlannerConfig(depth=5, beam_width=100),
    )


def select_placement(
    kind: str,
    snapshot: Snapshot,
    weights: Weights,
    config: Optional[PlannerConfig] = None,
    rotation_system: Optional[RotationSystem] = None,
    *,
    profiler: Optional[PerformanceTracker] = None,
) -> Optional[Placement]:
    """Run the planner registered as ``kind``."""

    try:
        planner = PLANNERS[kind]
    except KeyError:
        raise ValueError(f"Unknown planner {kind!r}; expected one of {sorted(PLANNERS)}") from None
    return planner(snapshot, weights, config, rotation_system, profiler=profiler)


__all__ = ["ModeConfig", "PLANNERS", "classic_mode", "modern_mode", "select_placement"]
