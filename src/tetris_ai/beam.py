"""Beam search planner over a known piece preview.

With a deterministic preview there are no chance nodes: each level expands
every surviving candidate with the next known piece (and, in parallel, with
the piece the hold slot would give instead), scores the afterstates and keeps
the best ``beam_width``.  The answer is the first-ply action of the best
candidate left after the last level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .board import Board
from .evaluator import Weights
from .game import Placement, Snapshot
from .perf import PerformanceTracker, maybe_section
from .rotation import RotationSystem
from .search import PlannerConfig, SearchContext, expand_afterstates
from .tetromino import TetrominoType

LOGGER = logging.getLogger(__name__)


@dataclass
class BeamCandidate:
    board: Board
    score: float
    first_action: Placement
    hold_piece: Optional[TetrominoType]
    next_index: int  # index into the preview of the next piece to play


def _expand(
    out: List[BeamCandidate],
    board: Board,
    piece: TetrominoType,
    ctx: SearchContext,
    *,
    first_action: Optional[Placement],
    hold_piece: Optional[TetrominoType],
    next_index: int,
    held: bool,
) -> None:
    for a in expand_afterstates(board, piece, ctx, held=held):
        out.append(
            BeamCandidate(
                board=a.board,
                score=a.score,
                first_action=first_action if first_action is not None else a.placement,
                hold_piece=hold_piece,
                next_index=next_index,
            )
        )


def prune_beam(candidates: List[BeamCandidate], beam_width: int) -> List[BeamCandidate]:
    """Keep the ``beam_width`` best candidates, earlier ones first on ties."""

    return sorted(candidates, key=lambda c: c.score, reverse=True)[:beam_width]


def _root_level(snapshot: Snapshot, ctx: SearchContext) -> List[BeamCandidate]:
    board = snapshot.board
    preview = snapshot.preview
    candidates: List[BeamCandidate] = []
    _expand(
        candidates,
        board,
        snapshot.current_piece,
        ctx,
        first_action=None,
        hold_piece=snapshot.hold_piece,
        next_index=0,
        held=False,
    )
    if snapshot.allow_hold and not snapshot.hold_used:
        if snapshot.hold_piece is not None:
            _expand(
                candidates,
                board,
                snapshot.hold_piece,
                ctx,
                first_action=None,
                hold_piece=snapshot.current_piece,
                next_index=0,
                held=True,
            )
        elif preview:
            _expand(
                candidates,
                board,
                preview[0],
                ctx,
                first_action=None,
                hold_piece=snapshot.current_piece,
                next_index=1,
                held=True,
            )
    return candidates


def _next_level(
    beam: List[BeamCandidate],
    preview: Sequence[TetrominoType],
    allow_hold: bool,
    ctx: SearchContext,
) -> List[BeamCandidate]:
    candidates: List[BeamCandidate] = []
    for c in beam:
        index = c.next_index
        if index >= len(preview):
            continue
        piece = preview[index]
        _expand(
            candidates,
            c.board,
            piece,
            ctx,
            first_action=c.first_action,
            hold_piece=c.hold_piece,
            next_index=index + 1,
            held=False,
        )
        if not allow_hold:
            continue
        if c.hold_piece is not None:
            _expand(
                candidates,
                c.board,
                c.hold_piece,
                ctx,
                first_action=c.first_action,
                hold_piece=piece,
                next_index=index + 1,
                held=True,
            )
        elif index + 1 < len(preview):
            _expand(
                candidates,
                c.board,
                preview[index + 1],
                ctx,
                first_action=c.first_action,
                hold_piece=piece,
                next_index=index + 2,
                held=True,
            )
    return candidates


def beam_search_select(
    snapshot: Snapshot,
    weights: Weights,
    config: Optional[PlannerConfig] = None,
    rotation_system: Optional[RotationSystem] = None,
    *,
    profiler: Optional[PerformanceTracker] = None,
) -> Optional[Placement]:
    """Return the first action of the best line found within the preview.

    The search depth is ``min(config.depth, len(preview) + 1)``.  With
    ``beam_width=1`` and ``depth=1`` this is exactly the greedy planner.
    """

    config = (config or PlannerConfig(depth=5)).normalized()
    ctx = SearchContext.from_snapshot(snapshot, weights, rotation_system, profiler)
    preview = snapshot.preview
    depth = min(config.depth, len(preview) + 1)

    with maybe_section(profiler, "beam"):
        beam = _root_level(snapshot, ctx)
        if not beam:
            LOGGER.debug("No placement for %s", snapshot.current_piece.value)
            return None
        beam = prune_beam(beam, config.beam_width)

        for level in range(1, depth):
            expanded = _next_level(beam, preview, snapshot.allow_hold, ctx)
            if not expanded:
                LOGGER.debug("Beam exhausted at level %d", level)
                break
            beam = prune_beam(expanded, config.beam_width)

    best = beam[0]
    LOGGER.debug(
        "Beam search depth %d width %d chose %s (score %.2f)",
        depth,
        config.beam_width,
        best.first_action,
        best.score,
    )
    return best.first_action


__all__ = ["BeamCandidate", "beam_search_select", "prune_beam"]
