from __future__ import annotations

import pytest

from tetris_ai.board import Board
from tetris_ai.evaluator import BCTS_WEIGHTS
from tetris_ai.expectimax import (
    aggregate,
    cvar,
    dominance_prune,
    expectimax_select,
    next_known_piece,
)
from tetris_ai.game import Placement, Snapshot, simulate
from tetris_ai.greedy import greedy_select
from tetris_ai.perf import PerformanceTracker
from tetris_ai.search import Afterstate, PlannerConfig
from tetris_ai.tetromino import Rotation, TetrominoType, absolute_cells

from helpers import blocked_board, played_snapshots


def _afterstate(score: float, holes: int, max_height: int) -> Afterstate:
    return Afterstate(
        placement=Placement(TetrominoType.T, Rotation.R0, 0, 0),
        board=Board(),
        score=score,
        holes=holes,
        max_height=max_height,
        lines_cleared=0,
    )


def test_cvar_weights_the_boundary_value() -> None:
    values = [7.0, 3.0, 1.0, 5.0, 2.0, 6.0, 4.0]
    # alpha * 7 = 2.1: the two worst plus a tenth of the third.
    assert cvar(values, 0.3) == pytest.approx((1.0 + 2.0 + 0.1 * 3.0) / 2.1)
    assert cvar(values, 1.0) == pytest.approx(4.0)
    assert cvar(values, 1.0 / 7.0) == pytest.approx(1.0)


def test_aggregate_defaults_to_mean() -> None:
    values = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0]
    assert aggregate(values, None) == pytest.approx(4.0)
    assert aggregate(values, 0.3) < aggregate(values, None)


def test_dominance_prune_keeps_pareto_front() -> None:
    best = _afterstate(10.0, 0, 4)
    dominated = _afterstate(5.0, 1, 5)
    lower_but_flatter = _afterstate(8.0, 0, 2)
    taller = _afterstate(3.0, 0, 6)
    kept = dominance_prune([dominated, lower_but_flatter, best, taller])
    assert kept == [best, lower_but_flatter]


def test_dominance_prune_drops_exact_duplicates() -> None:
    a = _afterstate(1.0, 0, 2)
    b = _afterstate(1.0, 0, 2)
    assert dominance_prune([a, b]) == [a]


def test_next_known_piece_accounts_for_hold() -> None:
    snapshot = Snapshot(
        board=Board(),
        current_piece=TetrominoType.T,
        preview=(TetrominoType.I, TetrominoType.O),
    )
    assert next_known_piece(snapshot, held=False) is TetrominoType.I
    assert next_known_piece(snapshot, held=True) is TetrominoType.O

    swapped = Snapshot(
        board=Board(),
        current_piece=TetrominoType.T,
        hold_piece=TetrominoType.S,
        preview=(TetrominoType.I,),
    )
    assert next_known_piece(swapped, held=True) is TetrominoType.I
    assert next_known_piece(Snapshot(board=Board(), current_piece=TetrominoType.T), False) is None


def test_depth_one_matches_greedy() -> None:
    config = PlannerConfig(depth=1)
    for snapshot in played_snapshots():
        assert expectimax_select(snapshot, BCTS_WEIGHTS, config) == greedy_select(
            snapshot, BCTS_WEIGHTS
        )


def test_depth_zero_is_clamped_to_one() -> None:
    snapshot = played_snapshots(seeds=(7,))[0]
    assert expectimax_select(snapshot, BCTS_WEIGHTS, PlannerConfig(depth=0)) == greedy_select(
        snapshot, BCTS_WEIGHTS
    )


@pytest.mark.parametrize("depth", [1, 2])
def test_returns_none_when_spawn_is_blocked(depth) -> None:
    snapshot = Snapshot(board=blocked_board(), current_piece=TetrominoType.L, allow_hold=False)
    assert expectimax_select(snapshot, BCTS_WEIGHTS, PlannerConfig(depth=depth)) is None


def test_depth_two_is_deterministic_and_legal() -> None:
    snapshot = played_snapshots(
        seeds=(3,), preview_count=1, allow_hold=False, rotation_system="nrs", buffer_rows=2
    )[0]
    config = PlannerConfig(depth=2)
    first = expectimax_select(snapshot, BCTS_WEIGHTS, config)
    second = expectimax_select(snapshot, BCTS_WEIGHTS, config)

    assert first == second
    assert first.piece is snapshot.current_piece
    assert not first.held
    assert not snapshot.board.collides(first.piece, first.rotation, first.x, first.y)
    assert snapshot.board.collides(first.piece, first.rotation, first.x, first.y - 1)


def test_unknown_next_piece_uses_chance_node(i_gap_board) -> None:
    snapshot = Snapshot(board=i_gap_board, current_piece=TetrominoType.I, allow_hold=False)
    for alpha in (None, 0.3):
        placement = expectimax_select(
            snapshot, BCTS_WEIGHTS, PlannerConfig(depth=2, cvar_alpha=alpha)
        )
        assert placement is not None
        assert placement.piece is TetrominoType.I


def test_memo_is_hit_for_identical_afterstates() -> None:
    # Every O rotation locks the same cells, so sibling subtrees coincide.
    snapshot = Snapshot(
        board=Board(10, 24),
        current_piece=TetrominoType.O,
        preview=(TetrominoType.T,),
        allow_hold=False,
    )
    tracker = PerformanceTracker()
    placement = expectimax_select(
        snapshot, BCTS_WEIGHTS, PlannerConfig(depth=2, prune=False), profiler=tracker
    )
    assert placement is not None
    assert tracker.counters()["memo_hits"] > 0
    assert {"expectimax", "enumerate", "evaluate"} <= {row["name"] for row in tracker.summary()}


def test_leaves_share_memo_entries_across_followers() -> None:
    snapshot = Snapshot(
        board=Board(),
        current_piece=TetrominoType.T,
        preview=(TetrominoType.O,),
        allow_hold=False,
    )
    tracker = PerformanceTracker()
    expectimax_select(snapshot, BCTS_WEIGHTS, PlannerConfig(depth=2), profiler=tracker)
    enumerations = {row["name"]: row for row in tracker.summary()}["enumerate"]["count"]
    # One root expansion, then one O expansion per root candidate; the
    # other six followers of each candidate come from the memo.
    assert tracker.counters()["memo_hits"] == 6 * (enumerations - 1)
    assert enumerations > 1


# Only landing height and eroded cells count, so a line clear dominates.
CLEAR_WEIGHTS = (-1.0, 10.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


def test_depth_two_keeps_the_gap_for_the_next_i(i_gap_board) -> None:
    snapshot = Snapshot(
        board=i_gap_board,
        current_piece=TetrominoType.O,
        preview=(TetrominoType.I,),
        allow_hold=False,
    )
    greedy = greedy_select(snapshot, CLEAR_WEIGHTS)
    greedy_cells = absolute_cells(greedy.piece, greedy.rotation, greedy.x, greedy.y)
    assert min(y for _, y in greedy_cells) == 0

    deep = expectimax_select(snapshot, CLEAR_WEIGHTS, PlannerConfig(depth=2, prune=False))
    deep_cells = absolute_cells(deep.piece, deep.rotation, deep.x, deep.y)
    assert min(y for _, y in deep_cells) >= 1

    after = simulate(i_gap_board, deep.piece, deep.rotation, deep.x, deep.y).board
    follow_up = greedy_select(
        Snapshot(board=after, current_piece=TetrominoType.I, allow_hold=False), CLEAR_WEIGHTS
    )
    cleared = simulate(after, follow_up.piece, follow_up.rotation, follow_up.x, follow_up.y)
    assert cleared.lines_cleared == 1


def test_cvar_prefers_the_safer_first_move() -> None:
    # A two-wide well: filling one column bets on an I, leaving both open
    # gives every piece a modest clear.
    board = Board.from_strings(["..########"] * 4)
    snapshot = Snapshot(board=board, current_piece=TetrominoType.I, allow_hold=False)
    eroded_only = (0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    mean = expectimax_select(
        snapshot, eroded_only, PlannerConfig(depth=2, cvar_alpha=None, prune=False)
    )
    mean_cells = absolute_cells(mean.piece, mean.rotation, mean.x, mean.y)
    assert len({x for x, _ in mean_cells}) == 1
    assert mean_cells[0][0] in (0, 1)

    safe = expectimax_select(
        snapshot, eroded_only, PlannerConfig(depth=2, cvar_alpha=0.3, prune=False)
    )
    safe_cells = absolute_cells(safe.piece, safe.rotation, safe.x, safe.y)
    assert all(x >= 2 for x, _ in safe_cells)
    assert safe != mean
