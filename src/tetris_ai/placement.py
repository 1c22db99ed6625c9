"""Reachable placement enumeration.

``generate_placements`` runs a breadth-first search over every ``(x, y,
rotation)`` state the active piece can reach from its spawn using the five
single-step actions a player has: move left, move right, soft drop, rotate
clockwise and rotate counter-clockwise.  A state is *grounded* when one more
soft drop would collide; those are the positions the piece can lock in.

Exploring the airborne states as well as the grounded ones is what finds
tucks and spins underneath overhangs, which a straight per-column drop
(:func:`drop_placements`) misses.  Rotation edges go through whatever
:class:`~tetris_ai.rotation.RotationSystem` is supplied, so kick-less rules
simply produce a sparser graph.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Set, Tuple

from .board import ROTATION_PROFILES, Board
from .rotation import RotationSystem
from .tetromino import PIECE_CELLS, Rotation, TetrominoType

# Kicks can push a piece a few cells past the nominal board bounds before a
# later move brings it back; the visited index reserves that margin.
PADDING = 4


@dataclass(frozen=True)
class ReachablePlacement:
    """Grounded lock position reachable from spawn."""

    piece: TetrominoType
    rotation: Rotation
    x: int
    y: int


def _encode(x: int, y: int, rotation: int, stride: int) -> int:
    return ((y + PADDING) * stride + (x + PADDING)) * 4 + rotation


def generate_placements(
    board: Board,
    piece: TetrominoType,
    spawn_x: int,
    spawn_y: int,
    rotation_system: RotationSystem,
    spawn_rotation: Optional[int] = None,
) -> List[ReachablePlacement]:
    """Return every distinct grounded placement reachable from the spawn state.

    Placements are reported in discovery order.  An empty list means the
    spawn position itself collides, i.e. the game is lost.
    """

    if spawn_rotation is None:
        spawn_rotation = rotation_system.spawn_rotation(piece)
    start_rotation = int(spawn_rotation)
    if board.collides(piece, start_rotation, spawn_x, spawn_y):
        return []

    stride = board.width + 2 * PADDING
    size = (board.total_height + 2 * PADDING) * stride * 4
    visited = bytearray(size)

    grounded: Set[Tuple[int, int, int]] = set()
    placements: List[ReachablePlacement] = []

    queue: Deque[Tuple[int, int, int]] = deque()

    def push(x: int, y: int, rotation: int) -> None:
        idx = _encode(x, y, rotation, stride)
        if 0 <= idx < size and not visited[idx]:
            visited[idx] = 1
            queue.append((x, y, rotation))

    push(spawn_x, spawn_y, start_rotation)

    collides = board.collides
    try_rotate = rotation_system.try_rotate
    while queue:
        x, y, rotation = queue.popleft()

        if collides(piece, rotation, x, y - 1):
            key = (rotation, x, y)
            if key not in grounded:
                grounded.add(key)
                placements.append(ReachablePlacement(piece, Rotation(rotation), x, y))
        else:
            push(x, y - 1, rotation)

        for dx in (-1, 1):
            if not collides(piece, rotation, x + dx, y):
                push(x + dx, y, rotation)

        for direction in (1, -1):
            result = try_rotate(board, piece, rotation, direction, x, y)
            if result is not None:
                push(result.x, result.y, int(result.rotation))

    return placements


def hard_drop_y(board: Board, piece: TetrominoType, rotation: int, x: int, y: int) -> int:
    """Return the lowest row reachable by dropping straight down from ``y``."""

    while not board.collides(piece, rotation, x, y - 1):
        y -= 1
    return y


def drop_placements(board: Board, piece: TetrominoType) -> List[ReachablePlacement]:
    """Enumerate placements by hard-dropping every rotation in every column.

    This ignores how the piece would get there: each distinct rotation shape is
    lowered from the top of the board in each column.  It is cheap but blind to
    tucks and spins, and may report positions the BFS cannot reach.
    """

    placements: List[ReachablePlacement] = []
    seen_shapes: Set[Tuple[Tuple[int, int], ...]] = set()
    for rotation, cells in enumerate(PIECE_CELLS[piece]):
        if cells in seen_shapes:
            continue
        seen_shapes.add(cells)
        profile = ROTATION_PROFILES[piece][rotation]
        top = board.total_height - 1 - profile.max_y
        for x in range(-profile.min_x, board.width - profile.max_x):
            if board.collides(piece, rotation, x, top):
                continue
            y = hard_drop_y(board, piece, rotation, x, top)
            placements.append(ReachablePlacement(piece, Rotation(rotation), x, y))
    return placements


__all__ = ["ReachablePlacement", "drop_placements", "generate_placements", "hard_drop_y"]
