from __future__ import annotations

import numpy as np
import pytest

from tetris_ai.board import Board, InvariantViolation
from tetris_ai.tetromino import Rotation, TetrominoType


@pytest.fixture(autouse=True)
def debug_checks(monkeypatch):
    monkeypatch.setattr(Board, "debug_checks", True)


def test_clone_is_equal_and_independent() -> None:
    board = Board.from_strings(["#..#......", "####.#####"], total_height=24)
    copy = board.clone()
    assert copy == board
    for y in range(board.total_height):
        for x in range(board.width):
            assert copy.get(x, y) == board.get(x, y)

    copy.set(4, 0, True)
    copy.set(0, 1, False)
    assert not board.get(4, 0)
    assert board.get(0, 1)
    assert board.column_height(0) == 2
    assert copy.column_height(0) == 1


def test_column_heights_track_set_and_unset() -> None:
    board = Board(10, 20)
    board.set(3, 0, True)
    board.set(3, 5, True)
    assert board.column_height(3) == 6
    assert board.max_height() == 6
    board.set(3, 5, False)
    assert board.column_height(3) == 1
    board.set(3, 0, False)
    assert board.column_height(3) == 0


def test_out_of_bounds_reads_empty_and_writes_raise() -> None:
    board = Board(10, 20)
    assert board.get(-1, 0) is False
    assert board.get(0, 20) is False
    with pytest.raises(IndexError):
        board.set(10, 0, True)


def test_clear_lines_compacts_rows() -> None:
    board = Board.from_strings(
        [
            "#.........",
            "##########",
            "#.########",
        ]
    )
    result = board.clear_lines()
    assert result.count == 1
    assert result.rows == (1,)
    assert board.is_row_full(0) is False
    assert [board.get(x, 0) for x in range(10)] == [True, False] + [True] * 8
    assert [board.get(x, 1) for x in range(10)] == [True] + [False] * 9
    assert board.column_heights() == [2, 0] + [1] * 8


def test_clear_lines_non_adjacent_rows() -> None:
    board = Board.from_strings(
        [
            "##########",
            "#.........",
            "##########",
            "..#.......",
        ]
    )
    result = board.clear_lines()
    assert result.count == 2
    assert result.rows == (1, 3)
    assert board.column_heights() == [2, 0, 1] + [0] * 7
    assert board.max_height() == 2


def test_collides_with_walls_floor_and_cells() -> None:
    board = Board(10, 20)
    # T spawn state occupies rows y+1 and y+2 of its box.
    assert not board.collides(TetrominoType.T, Rotation.R0, 0, -1)
    assert board.collides(TetrominoType.T, Rotation.R0, 0, -2)
    assert board.collides(TetrominoType.T, Rotation.R0, -1, 0)
    assert board.collides(TetrominoType.T, Rotation.R0, 8, 0)
    assert board.collides(TetrominoType.T, Rotation.R0, 0, 18)
    board.set(1, 1, True)
    assert board.collides(TetrominoType.T, Rotation.R0, 0, 0)
    assert not board.collides(TetrominoType.T, Rotation.R0, 2, 0)


def test_collides_with_negative_origin() -> None:
    board = Board(10, 20)
    # Vertical I in R1 uses box column 2, so origin -2 puts it in column 0.
    assert not board.collides(TetrominoType.I, Rotation.R1, -2, 0)
    board.set(0, 3, True)
    assert board.collides(TetrominoType.I, Rotation.R1, -2, 0)
    assert board.collides(TetrominoType.I, Rotation.R1, -3, 5)


def test_place_piece_returns_cells_and_truncates() -> None:
    board = Board(10, 20)
    cells = board.place_piece(TetrominoType.O, Rotation.R0, 3, -1)
    assert sorted(cells) == [(4, 0), (4, 1), (5, 0), (5, 1)]
    assert board.column_heights()[4:6] == [2, 2]

    truncated = Board(10, 20)
    cells = truncated.place_piece(TetrominoType.O, Rotation.R0, 3, 17, truncate_above=19)
    assert sorted(cells) == [(4, 18), (5, 18)]
    assert truncated.max_height() == 19


def test_structural_hash_follows_contents() -> None:
    a = Board(10, 20)
    b = Board(10, 20)
    assert a.structural_hash() == b.structural_hash()
    b.set(0, 0, True)
    assert a.structural_hash() != b.structural_hash()
    a.set(0, 0, True)
    assert a.structural_hash() == b.structural_hash()


def test_to_array_puts_row_zero_first() -> None:
    board = Board.from_strings(["#.........", ".........#"])
    grid = board.to_array()
    assert grid.shape == (40, 10)
    assert grid.dtype == np.uint8
    assert grid[0, 9] == 1 and grid[1, 0] == 1
    assert int(grid.sum()) == 2


def test_corrupted_height_cache_is_reported() -> None:
    board = Board(10, 20)
    board.set(2, 2, True)
    board._heights[2] = 1
    with pytest.raises(InvariantViolation):
        board.check_invariants()
    with pytest.raises(InvariantViolation):
        board.set(5, 0, True)
