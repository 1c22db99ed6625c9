"""Game state owner: spawns pieces, applies placements and hands out snapshots.

:class:`Game` is the single place a board is mutated during play.  Planners
never see it directly; they receive a :class:`Snapshot` holding a private
copy of the board and return a :class:`Placement`, which the game applies by
optionally swapping the hold slot, teleporting the active piece, re-checking
that it fits and locking it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .board import BUFFER_ROWS, HEIGHT, WIDTH, Board, InvariantViolation
from .randomizer import Randomizer, create_randomizer
from .rotation import RotationSystem, get_rotation_system
from .tetromino import Cell, Rotation, TetrominoType, absolute_cells

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """A lock decision for one piece."""

    piece: TetrominoType
    rotation: Rotation
    x: int
    y: int
    held: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of a decision point handed to planners."""

    board: Board
    current_piece: TetrominoType
    hold_piece: Optional[TetrominoType] = None
    hold_used: bool = False
    allow_hold: bool = True
    preview: Tuple[TetrominoType, ...] = ()
    visible_height: int = HEIGHT
    rotation_system: str = "srs"
    initial_drop: bool = False
    truncate_lock: bool = False


@dataclass(frozen=True)
class LockResult:
    lines_cleared: int
    piece_cells_cleared: int
    game_over: bool


@dataclass(frozen=True)
class SimulationResult:
    """Afterstate of a simulated lock."""

    board: Board
    lines_cleared: int
    piece_cells_cleared: int
    landing_cells: Tuple[Cell, ...]


@dataclass
class GameConfig:
    """Rules and sizes for a game session."""

    width: int = WIDTH
    height: int = HEIGHT
    buffer_rows: int = BUFFER_ROWS
    preview_count: int = 5
    randomizer: str = "bag7"
    allow_hold: bool = True
    seed: int = 0
    rotation_system: str = "srs"
    initial_drop: bool = True
    truncate_lock: bool = False

    @property
    def total_height(self) -> int:
        return self.height + self.buffer_rows


def simulate(
    board: Board,
    piece: TetrominoType,
    rotation: int,
    x: int,
    y: int,
    truncate_above: Optional[int] = None,
) -> Optional[SimulationResult]:
    """Lock ``piece`` on a copy of ``board`` and clear lines.

    Returns ``None`` if the piece collides at ``(x, y)``.  ``board`` is never
    modified.
    """

    if board.collides(piece, rotation, x, y):
        return None
    after = board.clone()
    placed = after.place_piece(piece, rotation, x, y, truncate_above)
    clear = after.clear_lines()
    own_cleared = 0
    if clear.count:
        rows = set(clear.rows)
        own_cleared = sum(1 for _, cy in placed if cy in rows)
    return SimulationResult(
        board=after,
        lines_cleared=clear.count,
        piece_cells_cleared=own_cleared,
        landing_cells=tuple(absolute_cells(piece, rotation, x, y)),
    )


class Game:
    """Mutable state for one game session."""

    def __init__(self, config: Optional[GameConfig] = None, **overrides) -> None:
        base = config if config is not None else GameConfig()
        self.config = GameConfig(**{**base.__dict__, **overrides})
        self.rotation_system: RotationSystem = get_rotation_system(self.config.rotation_system)
        self.reset()

    def reset(self) -> None:
        """Reset the entire game state for a new game."""

        cfg = self.config
        self.board = Board(cfg.width, cfg.total_height)
        self.randomizer: Randomizer = create_randomizer(cfg.randomizer, cfg.seed)
        self.hold_piece: Optional[TetrominoType] = None
        self.hold_used = False
        self.lines_cleared = 0
        self.pieces_placed = 0
        self.game_over = False
        self.spawn()

    # ------------------------------------------------------------------
    # Spawning and hold
    # ------------------------------------------------------------------
    def spawn(self) -> bool:
        """Make the next randomizer piece active.  Returns ``False`` on top-out."""

        return self._enter(self.randomizer.next())

    def _enter(self, piece: TetrominoType) -> bool:
        cfg = self.config
        self.current_piece = piece
        self.current_rotation = self.rotation_system.spawn_rotation(piece)
        self.current_x, self.current_y = self.rotation_system.spawn_position(
            piece, cfg.width, cfg.height
        )
        if self.board.collides(piece, self.current_rotation, self.current_x, self.current_y):
            self.game_over = True
            LOGGER.info(
                "Game over: %s blocked at spawn after %d pieces, %d lines",
                piece.value,
                self.pieces_placed,
                self.lines_cleared,
            )
            return False
        if cfg.initial_drop and not self.board.collides(
            piece, self.current_rotation, self.current_x, self.current_y - 1
        ):
            self.current_y -= 1
        return True

    def hold(self) -> bool:
        """Swap the active piece with the held one.

        Allowed once per spawned piece.  With an empty hold slot the active
        piece is stored and the next piece is spawned instead.
        """

        if self.game_over or self.hold_used or not self.config.allow_hold:
            return False
        self.hold_used = True
        current = self.current_piece
        if self.hold_piece is None:
            self.hold_piece = current
            return self.spawn()
        swapped = self.hold_piece
        self.hold_piece = current
        return self._enter(swapped)

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------
    def _shift(self, dx: int, dy: int) -> bool:
        if self.game_over:
            return False
        x = self.current_x + dx
        y = self.current_y + dy
        if self.board.collides(self.current_piece, self.current_rotation, x, y):
            return False
        self.current_x, self.current_y = x, y
        return True

    def move_left(self) -> bool:
        return self._shift(-1, 0)

    def move_right(self) -> bool:
        return self._shift(1, 0)

    def move_down(self) -> bool:
        return self._shift(0, -1)

    def rotate(self, direction: int) -> bool:
        if self.game_over:
            return False
        result = self.rotation_system.try_rotate(
            self.board,
            self.current_piece,
            self.current_rotation,
            direction,
            self.current_x,
            self.current_y,
        )
        if result is None:
            return False
        self.current_x, self.current_y, self.current_rotation = result.x, result.y, result.rotation
        return True

    def hard_drop(self) -> LockResult:
        if self.game_over:
            return LockResult(0, 0, True)
        while self.move_down():
            pass
        return self._lock()

    # ------------------------------------------------------------------
    # Planner interface
    # ------------------------------------------------------------------
    def preview(self) -> Tuple[TetrominoType, ...]:
        return tuple(self.randomizer.peek(self.config.preview_count))

    def snapshot(self) -> Snapshot:
        cfg = self.config
        return Snapshot(
            board=self.board.clone(),
            current_piece=self.current_piece,
            hold_piece=self.hold_piece,
            hold_used=self.hold_used,
            allow_hold=cfg.allow_hold,
            preview=self.preview(),
            visible_height=cfg.height,
            rotation_system=cfg.rotation_system,
            initial_drop=cfg.initial_drop,
            truncate_lock=cfg.truncate_lock,
        )

    def apply_placement(self, placement: Placement) -> LockResult:
        """Apply a planner decision and lock the piece."""

        if self.game_over:
            return LockResult(0, 0, True)
        if placement.held and not self.hold():
            return LockResult(0, 0, self.game_over)
        if placement.piece is not self.current_piece:
            raise ValueError(
                f"Placement is for {placement.piece.value} but the active piece is "
                f"{self.current_piece.value}"
            )

        if self.board.collides(placement.piece, placement.rotation, placement.x, placement.y):
            LOGGER.error("Rejected colliding placement %s", placement)
            if Board.debug_checks:
                raise InvariantViolation(f"Approved placement collides: {placement}")
            self.game_over = True
            return LockResult(0, 0, True)

        self.current_rotation = placement.rotation
        self.current_x = placement.x
        self.current_y = placement.y
        return self._lock()

    def _lock(self) -> LockResult:
        truncate = self.config.height if self.config.truncate_lock else None
        placed = self.board.place_piece(
            self.current_piece, self.current_rotation, self.current_x, self.current_y, truncate
        )
        clear = self.board.clear_lines()
        own_cleared = 0
        if clear.count:
            rows = set(clear.rows)
            own_cleared = sum(1 for _, cy in placed if cy in rows)

        self.lines_cleared += clear.count
        self.pieces_placed += 1
        self.hold_used = False
        self.spawn()
        return LockResult(clear.count, own_cleared, self.game_over)


__all__ = [
    "Game",
    "GameConfig",
    "LockResult",
    "Placement",
    "SimulationResult",
    "Snapshot",
    "simulate",
]
