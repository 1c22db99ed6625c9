"""Rotation systems: how pieces spawn and how they turn.

Two incompatible rule sets are provided behind the same small interface:

``SuperRotationSystem``
    Modern guideline rules.  Every piece has four states and a blocked
    rotation tries an ordered list of wall-kick offsets.  Pieces spawn
    centred with their top cells at or above the visible skyline.

``ClassicRotationSystem``
    NES rules.  No kicks at all; ``S``/``Z``/``I`` toggle between two states,
    ``O`` never turns, and pieces spawn inside the visible playfield.

The placement enumerator and the planners only ever call ``spawn_rotation``,
``spawn_position`` and ``try_rotate``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .board import Board
from .tetromino import BOX_SIZE, Rotation, TetrominoType

Kick = Tuple[int, int]
KickTable = Dict[Tuple[int, int], Tuple[Kick, ...]]


# SRS wall kicks as (dx, dy) with y up, tried in order.
JLSTZ_KICKS: KickTable = {
    (0, 1): ((0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (1, 0): ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),
    (1, 2): ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),
    (2, 1): ((0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (2, 3): ((0, 0), (1, 0), (1, 1), (0, -2), (1, -2)),
    (3, 2): ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (3, 0): ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (0, 3): ((0, 0), (1, 0), (1, 1), (0, -2), (1, -2)),
}

# The I piece turns about a grid point rather than a cell, so its first trial
# is not always (0, 0).
I_KICKS: KickTable = {
    (0, 1): ((1, 0), (-1, 0), (2, 0), (-1, 1), (2, -2)),
    (1, 0): ((-1, 0), (1, 0), (-2, 0), (1, -1), (-2, 2)),
    (1, 2): ((0, 1), (-1, 1), (2, 1), (-1, -1), (2, 2)),
    (2, 1): ((0, -1), (1, -1), (-2, -1), (1, 1), (-2, -2)),
    (2, 3): ((-1, 0), (1, 0), (-2, 0), (1, -1), (-2, 2)),
    (3, 2): ((1, 0), (-1, 0), (2, 0), (-1, 1), (2, -2)),
    (3, 0): ((0, -1), (1, -1), (-2, -1), (1, 1), (-2, -2)),
    (0, 3): ((0, 1), (-1, 1), (2, 1), (-1, -1), (2, 2)),
}


@dataclass(frozen=True)
class RotateResult:
    """Position and state of a piece after a successful rotation."""

    x: int
    y: int
    rotation: Rotation


class RotationSystem(ABC):
    """Spawn and rotation rules consumed by the enumerator and planners."""

    tag: str = ""

    @abstractmethod
    def spawn_rotation(self, piece: TetrominoType) -> Rotation:
        """Return the state a freshly spawned ``piece`` starts in."""

    @abstractmethod
    def spawn_position(
        self, piece: TetrominoType, width: int, visible_height: int
    ) -> Tuple[int, int]:
        """Return the bounding-box origin ``(x, y)`` of a freshly spawned ``piece``."""

    @abstractmethod
    def try_rotate(
        self,
        board: Board,
        piece: TetrominoType,
        from_rotation: int,
        direction: int,
        x: int,
        y: int,
    ) -> Optional[RotateResult]:
        """Attempt a rotation; ``direction`` > 0 is clockwise.

        Returns the new position and state, or ``None`` if the rotation is
        blocked.  A failed rotation never changes anything.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SuperRotationSystem(RotationSystem):
    """Guideline rotation with wall kicks."""

    tag = "srs"

    def spawn_rotation(self, piece: TetrominoType) -> Rotation:
        return Rotation.R0

    def spawn_position(
        self, piece: TetrominoType, width: int, visible_height: int
    ) -> Tuple[int, int]:
        x = (width - BOX_SIZE[piece]) // 2
        # Top cells land on the first hidden row (I) or one above it.
        y = visible_height - 2 if piece is TetrominoType.I else visible_height - 1
        return x, y

    def try_rotate(
        self,
        board: Board,
        piece: TetrominoType,
        from_rotation: int,
        direction: int,
        x: int,
        y: int,
    ) -> Optional[RotateResult]:
        to_rotation = Rotation((from_rotation + (1 if direction > 0 else -1)) % 4)

        if piece is TetrominoType.O:
            if board.collides(piece, to_rotation, x, y):
                return None
            return RotateResult(x, y, to_rotation)

        table = I_KICKS if piece is TetrominoType.I else JLSTZ_KICKS
        for dx, dy in table[(int(from_rotation), int(to_rotation))]:
            nx = x + dx
            ny = y + dy
            if not board.collides(piece, to_rotation, nx, ny):
                return RotateResult(nx, ny, to_rotation)
        return None


# Spawn states used by the NES: flat side down for T/J/L/S/Z.
NRS_SPAWN_ROTATION: Dict[TetrominoType, Rotation] = {
    TetrominoType.I: Rotation.R0,
    TetrominoType.O: Rotation.R0,
    TetrominoType.T: Rotation.R2,
    TetrominoType.S: Rotation.R2,
    TetrominoType.Z: Rotation.R2,
    TetrominoType.J: Rotation.R2,
    TetrominoType.L: Rotation.R2,
}


class ClassicRotationSystem(RotationSystem):
    """NES rotation: no kicks, two-state toggles for S, Z and I."""

    tag = "nrs"

    def spawn_rotation(self, piece: TetrominoType) -> Rotation:
        return NRS_SPAWN_ROTATION[piece]

    def spawn_position(
        self, piece: TetrominoType, width: int, visible_height: int
    ) -> Tuple[int, int]:
        size = BOX_SIZE[piece]
        return (width - size) // 2, visible_height - size

    @staticmethod
    def next_rotation(
        piece: TetrominoType, from_rotation: int, direction: int
    ) -> Optional[Rotation]:
        """Return the target state, or ``None`` for pieces that never turn."""

        if piece is TetrominoType.O:
            return None
        if piece is TetrominoType.S or piece is TetrominoType.Z:
            return Rotation.R2 if from_rotation == Rotation.R1 else Rotation.R1
        if piece is TetrominoType.I:
            return Rotation.R1 if from_rotation == Rotation.R0 else Rotation.R0
        return Rotation((from_rotation + (1 if direction > 0 else -1)) % 4)

    def try_rotate(
        self,
        board: Board,
        piece: TetrominoType,
        from_rotation: int,
        direction: int,
        x: int,
        y: int,
    ) -> Optional[RotateResult]:
        to_rotation = self.next_rotation(piece, from_rotation, direction)
        if to_rotation is None or board.collides(piece, to_rotation, x, y):
            return None
        return RotateResult(x, y, to_rotation)


ROTATION_SYSTEMS: Dict[str, RotationSystem] = {
    SuperRotationSystem.tag: SuperRotationSystem(),
    ClassicRotationSystem.tag: ClassicRotationSystem(),
}


def get_rotation_system(tag: str) -> RotationSystem:
    """Return the shared rotation system registered under ``tag``."""

    try:
        return ROTATION_SYSTEMS[tag]
    except KeyError:
        raise ValueError(
            f"Unknown rotation system {tag!r}; expected one of {sorted(ROTATION_SYSTEMS)}"
        ) from None


__all__ = [
    "ClassicRotationSystem",
    "I_KICKS",
    "JLSTZ_KICKS",
    "NRS_SPAWN_ROTATION",
    "ROTATION_SYSTEMS",
    "RotateResult",
    "RotationSystem",
    "SuperRotationSystem",
    "get_rotation_system",
]
