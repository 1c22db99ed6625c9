"""One-ply greedy planner."""

from __future__ import annotations

import logging
from typing import Optional

from .evaluator import Weights
from .game import Placement, Snapshot
from .perf import PerformanceTracker, maybe_section
from .rotation import RotationSystem
from .search import PlannerConfig, SearchContext, pick_best, root_afterstates

LOGGER = logging.getLogger(__name__)


def greedy_select(
    snapshot: Snapshot,
    weights: Weights,
    config: Optional[PlannerConfig] = None,
    rotation_system: Optional[RotationSystem] = None,
    *,
    profiler: Optional[PerformanceTracker] = None,
) -> Optional[Placement]:
    """Return the best immediate placement for the current or hold piece.

    ``config`` is accepted for a uniform planner signature and ignored.
    Returns ``None`` when no placement exists.
    """

    ctx = SearchContext.from_snapshot(snapshot, weights, rotation_system, profiler)
    with maybe_section(profiler, "greedy"):
        candidates = root_afterstates(snapshot, ctx)
        best = pick_best(candidates)
    if best is None:
        LOGGER.debug("No placement for %s", snapshot.current_piece.value)
        return None
    LOGGER.debug(
        "Greedy chose %s from %d candidates (score %.2f)",
        best.placement,
        len(candidates),
        best.score,
    )
    return best.placement


__all__ = ["greedy_select"]
