from __future__ import annotations

from tetris_ai.tetromino import BOX_SIZE, PIECE_CELLS, Rotation, TetrominoType, shape_cells


def test_every_state_has_four_cells_inside_its_box() -> None:
    for piece, states in PIECE_CELLS.items():
        assert len(states) == 4
        size = BOX_SIZE[piece]
        for cells in states:
            assert len(set(cells)) == 4
            assert all(0 <= x < size and 0 <= y < size for x, y in cells)


def test_o_piece_is_identical_in_every_state() -> None:
    states = PIECE_CELLS[TetrominoType.O]
    assert all(state == states[0] for state in states)


def test_clockwise_states_follow_srs_layout() -> None:
    assert set(shape_cells(TetrominoType.T, Rotation.R1)) == {(1, 2), (1, 1), (2, 1), (1, 0)}
    assert set(shape_cells(TetrominoType.I, Rotation.R1)) == {(2, 0), (2, 1), (2, 2), (2, 3)}
    assert set(shape_cells(TetrominoType.I, Rotation.R2)) == {(0, 1), (1, 1), (2, 1), (3, 1)}
    assert set(shape_cells(TetrominoType.S, Rotation.R2)) == {(0, 0), (1, 0), (1, 1), (2, 1)}
    assert shape_cells(TetrominoType.L, 4) == shape_cells(TetrominoType.L, 0)
