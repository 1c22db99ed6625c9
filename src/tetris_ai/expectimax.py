"""Multi-ply expectimax planner with pessimistic chance nodes.

MAX nodes place a known piece; CHANCE nodes range over the seven identities
of the piece that is not yet known.  The chance aggregation is either the
plain mean (a neutral random source) or CVaR at tail fraction ``alpha``: the
mean of only the worst ``alpha`` share of the seven outcomes, which models a
piece source that picks against the player.

Values of MAX nodes are memoised on ``(board hash, piece, next piece,
depth)``.  The board hash is not collision-free; a collision returns the
value of a different board.  That is an accepted trade for speed.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .board import Board
from .evaluator import Weights
from .game import Placement, Snapshot
from .perf import PerformanceTracker, maybe_section
from .rotation import RotationSystem
from .search import (
    LOSS_SCORE,
    Afterstate,
    PlannerConfig,
    SearchContext,
    expand_afterstates,
    pick_best,
    root_afterstates,
)
from .tetromino import ALL_PIECES, TetrominoType

LOGGER = logging.getLogger(__name__)

MemoKey = Tuple[int, TetrominoType, Optional[TetrominoType], int]


def cvar(values: Sequence[float], alpha: float) -> float:
    """Average the worst ``alpha`` fraction of ``values``.

    When ``alpha * len(values)`` is not an integer the boundary value is
    included with its fractional weight.
    """

    ordered = sorted(values)
    k = alpha * len(ordered)
    whole = math.floor(k)
    fraction = k - whole
    total = sum(ordered[:whole])
    if fraction > 0 and whole < len(ordered):
        total += fraction * ordered[whole]
    return total / k


def aggregate(values: Sequence[float], alpha: Optional[float]) -> float:
    if alpha is None:
        return sum(values) / len(values)
    return cvar(values, alpha)


def dominance_prune(candidates: List[Afterstate]) -> List[Afterstate]:
    """Drop candidates no better than another on score, holes and max height."""

    ordered = sorted(candidates, key=lambda c: c.score, reverse=True)
    kept: List[Afterstate] = []
    for c in ordered:
        dominated = any(
            k.score >= c.score and k.holes <= c.holes and k.max_height <= c.max_height
            for k in kept
        )
        if not dominated:
            kept.append(c)
    return kept


def next_known_piece(snapshot: Snapshot, held: bool) -> Optional[TetrominoType]:
    """Return the piece known to follow a root decision, if the preview shows it."""

    preview = snapshot.preview
    # Holding into an empty slot plays preview[0], so the follower shifts by one.
    offset = 1 if held and snapshot.hold_piece is None else 0
    return preview[offset] if len(preview) > offset else None


class _Expectimax:
    def __init__(self, ctx: SearchContext, alpha: Optional[float]) -> None:
        self.ctx = ctx
        self.alpha = alpha
        self.memo: Dict[MemoKey, float] = {}

    def max_node(
        self,
        board: Board,
        piece: TetrominoType,
        next_piece: Optional[TetrominoType],
        depth: int,
    ) -> float:
        leaf = depth <= 1
        # Leaves never look at the follower, so they share one entry.
        key = (board.structural_hash(), piece, None if leaf else next_piece, depth)
        cached = self.memo.get(key)
        if cached is not None:
            if self.ctx.profiler is not None:
                self.ctx.profiler.count("memo_hits")
            return cached

        afterstates = expand_afterstates(board, piece, self.ctx, score=leaf)
        if not afterstates:
            best = LOSS_SCORE
        elif leaf:
            best = max(a.score for a in afterstates)
        else:
            best = max(self.chance_node(a.board, next_piece, depth - 1) for a in afterstates)

        self.memo[key] = best
        return best

    def chance_node(
        self, board: Board, known: Optional[TetrominoType], depth: int
    ) -> float:
        """Aggregate over the identity of the first unknown piece."""

        if known is not None:
            values = [self.max_node(board, known, p, depth) for p in ALL_PIECES]
        else:
            values = [self.max_node(board, p, None, depth) for p in ALL_PIECES]
        return aggregate(values, self.alpha)


def expectimax_select(
    snapshot: Snapshot,
    weights: Weights,
    config: Optional[PlannerConfig] = None,
    rotation_system: Optional[RotationSystem] = None,
    *,
    profiler: Optional[PerformanceTracker] = None,
) -> Optional[Placement]:
    """Plan ``config.depth`` placements ahead and return the first one.

    Depth 1 is exactly the greedy planner.  Returns ``None`` when no placement
    exists.
    """

    config = (config or PlannerConfig()).normalized()
    ctx = SearchContext.from_snapshot(snapshot, weights, rotation_system, profiler)

    with maybe_section(profiler, "expectimax"):
        candidates = root_afterstates(snapshot, ctx)
        if not candidates:
            LOGGER.debug("No placement for %s", snapshot.current_piece.value)
            return None
        if config.depth == 1:
            best = pick_best(candidates)
            if best is None:
                return None
            return best.placement

        if config.prune:
            total = len(candidates)
            candidates = dominance_prune(candidates)
            LOGGER.debug("Dominance pruning kept %d of %d candidates", len(candidates), total)

        search = _Expectimax(ctx, config.cvar_alpha)
        best_value = -math.inf
        best_placement: Optional[Placement] = None
        for c in candidates:
            follower = next_known_piece(snapshot, c.placement.held)
            value = search.chance_node(c.board, follower, config.depth - 1)
            if value > best_value:
                best_value = value
                best_placement = c.placement

    LOGGER.debug(
        "Expectimax depth %d chose %s (value %.2f, %d memo entries)",
        config.depth,
        best_placement,
        best_value,
        len(search.memo),
    )
    return best_placement


__all__ = ["aggregate", "cvar", "dominance_prune", "expectimax_select", "next_known_piece"]
