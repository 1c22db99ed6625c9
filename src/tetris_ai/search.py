"""Plumbing shared by the planners.

Every planner turns a board and a piece into a list of scored afterstates
the same way: find the spawn, enumerate reachable placements, simulate each
lock and evaluate the result.  Keeping that in one place is what makes the
depth-1 expectimax and width-1/depth-1 beam search return exactly what the
greedy planner returns.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .board import Board
from .evaluator import Weights, check_weights, evaluate
from .features import extract_features
from .game import Placement, Snapshot, simulate
from .perf import PerformanceTracker, maybe_section
from .placement import generate_placements
from .rotation import RotationSystem, get_rotation_system
from .tetromino import PIECE_COUNT, TetrominoType

# Value of a branch in which the next piece cannot spawn.
LOSS_SCORE = -1e9


@dataclass(frozen=True)
class PlannerConfig:
    """Search knobs shared by all planners.

    ``cvar_alpha`` selects pessimistic aggregation at expectimax chance nodes;
    ``None`` means the plain mean over the seven pieces.
    """

    depth: int = 2
    beam_width: int = 100
    cvar_alpha: Optional[float] = 0.30
    prune: bool = True

    def normalized(self) -> "PlannerConfig":
        """Return a copy with every knob clamped to its smallest valid value."""

        alpha = self.cvar_alpha
        if alpha is not None:
            alpha = min(1.0, max(1.0 / PIECE_COUNT, float(alpha)))
        return replace(
            self,
            depth=max(1, int(self.depth)),
            beam_width=max(1, int(self.beam_width)),
            cvar_alpha=alpha,
        )


@dataclass(frozen=True)
class SearchContext:
    """Everything needed to expand a board, fixed for one planner call."""

    weights: Tuple[float, ...]
    rotation_system: RotationSystem
    width: int
    visible_height: int
    initial_drop: bool = False
    truncate_above: Optional[int] = None
    profiler: Optional[PerformanceTracker] = None

    @classmethod
    def from_snapshot(
        cls,
        snapshot: Snapshot,
        weights: Weights,
        rotation_system: Optional[RotationSystem] = None,
        profiler: Optional[PerformanceTracker] = None,
    ) -> "SearchContext":
        if rotation_system is None:
            rotation_system = get_rotation_system(snapshot.rotation_system)
        return cls(
            weights=check_weights(weights),
            rotation_system=rotation_system,
            width=snapshot.board.width,
            visible_height=snapshot.visible_height,
            initial_drop=snapshot.initial_drop,
            truncate_above=snapshot.visible_height if snapshot.truncate_lock else None,
            profiler=profiler,
        )


@dataclass
class Afterstate:
    """A simulated lock and its evaluation."""

    placement: Placement
    board: Board
    score: float
    holes: int
    max_height: int
    lines_cleared: int


def spawn_state(
    board: Board, piece: TetrominoType, ctx: SearchContext
) -> Optional[Tuple[int, int, int]]:
    """Return ``(x, y, rotation)`` the search starts from, or ``None`` on top-out."""

    rotation = ctx.rotation_system.spawn_rotation(piece)
    x, y = ctx.rotation_system.spawn_position(piece, ctx.width, ctx.visible_height)
    if board.collides(piece, rotation, x, y):
        return None
    if ctx.initial_drop and not board.collides(piece, rotation, x, y - 1):
        y -= 1
    return x, y, rotation


def expand_afterstates(
    board: Board,
    piece: TetrominoType,
    ctx: SearchContext,
    *,
    held: bool = False,
    score: bool = True,
) -> List[Afterstate]:
    """Simulate every reachable placement of ``piece`` on ``board``.

    With ``score=False`` the feature extraction is skipped and every
    afterstate scores ``0.0``; interior expectimax nodes only need the boards.
    """

    start = spawn_state(board, piece, ctx)
    if start is None:
        return []
    x, y, rotation = start
    with maybe_section(ctx.profiler, "enumerate"):
        placements = generate_placements(board, piece, x, y, ctx.rotation_system, rotation)

    results: List[Afterstate] = []
    with maybe_section(ctx.profiler, "evaluate"):
        for p in placements:
            sim = simulate(board, piece, p.rotation, p.x, p.y, ctx.truncate_above)
            if sim is None:
                continue
            value = 0.0
            holes = 0
            if score:
                features = extract_features(
                    sim.board,
                    [cy for _, cy in sim.landing_cells],
                    sim.lines_cleared,
                    sim.piece_cells_cleared,
                )
                value = evaluate(features, ctx.weights)
                holes = features.holes
            results.append(
                Afterstate(
                    placement=Placement(piece, p.rotation, p.x, p.y, held),
                    board=sim.board,
                    score=value,
                    holes=holes,
                    max_height=sim.board.max_height(),
                    lines_cleared=sim.lines_cleared,
                )
            )
    return results


def hold_target(snapshot: Snapshot) -> Optional[TetrominoType]:
    """Return the piece played if the hold slot is used now, if that is allowed."""

    if not snapshot.allow_hold or snapshot.hold_used:
        return None
    if snapshot.hold_piece is not None:
        return snapshot.hold_piece
    return snapshot.preview[0] if snapshot.preview else None


def root_afterstates(snapshot: Snapshot, ctx: SearchContext) -> List[Afterstate]:
    """Afterstates for the current piece followed by those of the hold branch."""

    board = snapshot.board
    results = expand_afterstates(board, snapshot.current_piece, ctx)
    alternative = hold_target(snapshot)
    if alternative is not None:
        results.extend(expand_afterstates(board, alternative, ctx, held=True))
    return results


def pick_best(afterstates: List[Afterstate]) -> Optional[Afterstate]:
    """Return the highest-scoring afterstate; the first one wins ties."""

    best: Optional[Afterstate] = None
    for candidate in afterstates:
        if best is None or candidate.score > best.score:
            best = candidate
    return best


__all__ = [
    "Afterstate",
    "LOSS_SCORE",
    "PlannerConfig",
    "SearchContext",
    "expand_afterstates",
    "hold_target",
    "pick_best",
    "root_afterstates",
    "spawn_state",
]
