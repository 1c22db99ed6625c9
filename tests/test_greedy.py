from __future__ import annotations

from tetris_ai.evaluator import BCTS_WEIGHTS
from tetris_ai.game import Snapshot, simulate
from tetris_ai.greedy import greedy_select
from tetris_ai.perf import PerformanceTracker
from tetris_ai.tetromino import TetrominoType

from helpers import blocked_board, played_snapshots


def test_greedy_completes_the_obvious_line(i_gap_board) -> None:
    snapshot = Snapshot(board=i_gap_board, current_piece=TetrominoType.I, allow_hold=False)
    placement = greedy_select(snapshot, BCTS_WEIGHTS)

    assert placement is not None
    assert placement.piece is TetrominoType.I
    assert not placement.held
    result = simulate(i_gap_board, placement.piece, placement.rotation, placement.x, placement.y)
    assert result.lines_cleared == 1
    assert result.board.max_height() == 0


def test_greedy_uses_hold_when_it_is_better(i_gap_board) -> None:
    snapshot = Snapshot(
        board=i_gap_board,
        current_piece=TetrominoType.S,
        hold_piece=TetrominoType.I,
        preview=(TetrominoType.Z,),
    )
    placement = greedy_select(snapshot, BCTS_WEIGHTS)
    assert placement.held
    assert placement.piece is TetrominoType.I


def test_greedy_ignores_hold_after_it_was_used(i_gap_board) -> None:
    snapshot = Snapshot(
        board=i_gap_board,
        current_piece=TetrominoType.S,
        hold_piece=TetrominoType.I,
        hold_used=True,
    )
    placement = greedy_select(snapshot, BCTS_WEIGHTS)
    assert not placement.held
    assert placement.piece is TetrominoType.S


def test_empty_hold_slot_plays_the_first_preview_piece(i_gap_board) -> None:
    snapshot = Snapshot(
        board=i_gap_board,
        current_piece=TetrominoType.Z,
        preview=(TetrominoType.I, TetrominoType.O),
    )
    placement = greedy_select(snapshot, BCTS_WEIGHTS)
    assert placement.held
    assert placement.piece is TetrominoType.I


def test_greedy_is_deterministic() -> None:
    for snapshot in played_snapshots():
        assert greedy_select(snapshot, BCTS_WEIGHTS) == greedy_select(snapshot, BCTS_WEIGHTS)


def test_greedy_returns_none_when_spawn_is_blocked() -> None:
    snapshot = Snapshot(board=blocked_board(), current_piece=TetrominoType.T, allow_hold=False)
    assert greedy_select(snapshot, BCTS_WEIGHTS) is None


def test_greedy_does_not_modify_snapshot_board() -> None:
    snapshot = played_snapshots(seeds=(4,))[0]
    before = snapshot.board.clone()
    greedy_select(snapshot, BCTS_WEIGHTS)
    assert snapshot.board == before


def test_greedy_reports_profile_sections() -> None:
    tracker = PerformanceTracker()
    snapshot = played_snapshots(seeds=(5,), moves=1)[0]
    greedy_select(snapshot, BCTS_WEIGHTS, profiler=tracker)
    names = {row["name"] for row in tracker.summary()}
    assert names == {"greedy", "enumerate", "evaluate"}
