"""Tetromino identities and their rotation shape tables.

Every piece lives inside a square bounding box (4×4 for ``I``, 3×3 for the
rest).  Cell offsets are ``(x, y)`` pairs relative to the bottom-left corner of
that box with ``y`` pointing up, so a piece at board origin ``(x, y)`` occupies
``(x + dx, y + dy)`` for every offset.  The clockwise states are derived from
the spawn shape by rotating inside the box, which reproduces the Super Rotation
System layouts; the ``O`` piece keeps the same cells in all four states.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict, Tuple

Cell = Tuple[int, int]
RotationState = Tuple[Cell, ...]


class TetrominoType(str, Enum):
    """Enumeration of the seven standard tetromino shapes."""

    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


class Rotation(IntEnum):
    """Rotation states, clockwise from the spawn orientation."""

    R0 = 0
    R1 = 1
    R2 = 2
    R3 = 3


PIECE_COUNT = len(TetrominoType)
ALL_PIECES: Tuple[TetrominoType, ...] = tuple(TetrominoType)

BOX_SIZE: Dict[TetrominoType, int] = {
    t: 4 if t is TetrominoType.I else 3 for t in TetrominoType
}


def _rotate(state: RotationState, size: int) -> RotationState:
    """Return ``state`` rotated 90 degrees clockwise inside a ``size`` box."""

    return tuple(sorted((y, size - 1 - x) for x, y in state))


def _generate_rotations(state: RotationState, size: int) -> Tuple[RotationState, ...]:
    """Generate the four rotation states for a piece starting from ``state``."""

    rotations = [tuple(sorted(state))]
    for _ in range(3):
        rotations.append(_rotate(rotations[-1], size))
    return tuple(rotations)


# Spawn (R0) shapes.  Remaining states come from ``_generate_rotations``.
#
#   I: . . . .    T: . # .    S: . # #    Z: # # .    J: # . .    L: . . #
#      # # # #       # # #       # # .       . # #       # # #       # # #
#      . . . .       . . .       . . .       . . .       . . .       . . .
#      . . . .
_BASE_SHAPES: Dict[TetrominoType, RotationState] = {
    TetrominoType.I: ((0, 2), (1, 2), (2, 2), (3, 2)),
    TetrominoType.O: ((1, 1), (2, 1), (1, 2), (2, 2)),
    TetrominoType.T: ((1, 2), (0, 1), (1, 1), (2, 1)),
    TetrominoType.S: ((1, 2), (2, 2), (0, 1), (1, 1)),
    TetrominoType.Z: ((0, 2), (1, 2), (1, 1), (2, 1)),
    TetrominoType.J: ((0, 2), (0, 1), (1, 1), (2, 1)),
    TetrominoType.L: ((2, 2), (0, 1), (1, 1), (2, 1)),
}


def _build_piece_cells() -> Dict[TetrominoType, Tuple[RotationState, ...]]:
    table: Dict[TetrominoType, Tuple[RotationState, ...]] = {}
    for piece, shape in _BASE_SHAPES.items():
        if piece is TetrominoType.O:
            table[piece] = (tuple(sorted(shape)),) * 4
        else:
            table[piece] = _generate_rotations(shape, BOX_SIZE[piece])
    return table


PIECE_CELLS: Dict[TetrominoType, Tuple[RotationState, ...]] = _build_piece_cells()


def shape_cells(piece: TetrominoType, rotation: int) -> RotationState:
    """Return the cell offsets for ``piece`` at ``rotation``.

    Rotation values are wrapped so any integer is accepted.
    """

    return PIECE_CELLS[piece][rotation % 4]


def absolute_cells(piece: TetrominoType, rotation: int, x: int, y: int) -> list[Cell]:
    """Return the board cells covered by ``piece`` with its box origin at ``(x, y)``."""

    return [(x + dx, y + dy) for dx, dy in shape_cells(piece, rotation)]


__all__ = [
    "ALL_PIECES",
    "BOX_SIZE",
    "PIECE_CELLS",
    "PIECE_COUNT",
    "Rotation",
    "TetrominoType",
    "absolute_cells",
    "shape_cells",
]
