"""Board representation for the Tetris playfield.

The board stores one integer bitmask per row (bit ``x`` set means column ``x``
is filled) with row ``0`` at the bottom, plus a cache of column heights.  The
planners clone and mutate boards hundreds of thousands of times per decision,
so collision tests run on the row masks directly using per-rotation masks
computed once at import time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .tetromino import PIECE_CELLS, Cell, TetrominoType


# Dimensions of the standard playfield.  Pieces spawn in the hidden buffer
# rows above the visible ``HEIGHT``, so a default board includes them.
WIDTH = 10
HEIGHT = 20
BUFFER_ROWS = 20
TOTAL_HEIGHT = HEIGHT + BUFFER_ROWS

Grid = NDArray[np.uint8]


class InvariantViolation(AssertionError):
    """Raised when internal bookkeeping disagrees with the board contents."""


@dataclass(frozen=True)
class LineClear:
    """Result of :meth:`Board.clear_lines`."""

    count: int
    rows: Tuple[int, ...]


@dataclass(frozen=True)
class RotationProfile:
    """Static collision data for one piece rotation."""

    min_x: int
    max_x: int
    min_y: int
    max_y: int
    row_masks: Tuple[Tuple[int, int], ...]  # (dy, mask) for every occupied row


def _build_rotation_profiles() -> Dict[TetrominoType, Tuple[RotationProfile, ...]]:
    """Pre-compute rotation metadata for every tetromino shape."""

    profiles: Dict[TetrominoType, Tuple[RotationProfile, ...]] = {}
    for piece, states in PIECE_CELLS.items():
        shape_profiles: List[RotationProfile] = []
        for cells in states:
            masks: Dict[int, int] = {}
            for dx, dy in cells:
                masks[dy] = masks.get(dy, 0) | (1 << dx)
            shape_profiles.append(
                RotationProfile(
                    min_x=min(dx for dx, _ in cells),
                    max_x=max(dx for dx, _ in cells),
                    min_y=min(dy for _, dy in cells),
                    max_y=max(dy for _, dy in cells),
                    row_masks=tuple(sorted(masks.items())),
                )
            )
        profiles[piece] = tuple(shape_profiles)
    return profiles


ROTATION_PROFILES = _build_rotation_profiles()


class Board:
    """Occupancy grid with a cached height per column."""

    # When enabled every mutation re-verifies the column height cache.
    debug_checks: ClassVar[bool] = False

    def __init__(self, width: int = WIDTH, total_height: int = TOTAL_HEIGHT) -> None:
        self.width = width
        self.total_height = total_height
        self.full_row = (1 << width) - 1
        self._rows: List[int] = [0] * total_height
        self._heights: List[int] = [0] * width

    @classmethod
    def from_strings(
        cls, lines: Sequence[str], *, width: Optional[int] = None, total_height: int = TOTAL_HEIGHT
    ) -> "Board":
        """Build a board from text rows, top row first.

        ``#`` marks a filled cell, anything else is empty.  The last line is
        row ``0``.  This exists mostly so tests can draw boards legibly.
        """

        width = width if width is not None else max(len(line) for line in lines)
        board = cls(width, total_height)
        for y, line in enumerate(reversed(lines)):
            for x, char in enumerate(line):
                if char == "#":
                    board.set(x, y, True)
        return board

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------
    def get(self, x: int, y: int) -> bool:
        """Return ``True`` if ``(x, y)`` is filled.  Off-board cells read empty."""

        if 0 <= x < self.width and 0 <= y < self.total_height:
            return bool(self._rows[y] >> x & 1)
        return False

    def set(self, x: int, y: int, filled: bool) -> None:
        """Fill or clear the cell at ``(x, y)``.

        Raises:
            IndexError: If the coordinates are outside the board.
        """

        if not (0 <= x < self.width and 0 <= y < self.total_height):
            raise IndexError("Cell out of bounds")
        bit = 1 << x
        if filled:
            self._rows[y] |= bit
            if y + 1 > self._heights[x]:
                self._heights[x] = y + 1
        else:
            self._rows[y] &= ~bit
            if y + 1 == self._heights[x]:
                h = y
                while h > 0 and not self._rows[h - 1] & bit:
                    h -= 1
                self._heights[x] = h
        if self.debug_checks:
            self.check_invariants()

    def column_height(self, col: int) -> int:
        return self._heights[col]

    def column_heights(self) -> List[int]:
        return list(self._heights)

    def max_height(self) -> int:
        return max(self._heights)

    def is_row_full(self, row: int) -> bool:
        return self._rows[row] == self.full_row

    def row_mask(self, row: int) -> int:
        return self._rows[row]

    # ------------------------------------------------------------------
    # Piece operations
    # ------------------------------------------------------------------
    def collides(self, piece: TetrominoType, rotation: int, x: int, y: int) -> bool:
        """Return ``True`` if the piece overlaps a filled cell or leaves the board."""

        profile = ROTATION_PROFILES[piece][rotation]
        if (
            x + profile.min_x < 0
            or x + profile.max_x >= self.width
            or y + profile.min_y < 0
            or y + profile.max_y >= self.total_height
        ):
            return True
        rows = self._rows
        if x >= 0:
            for dy, mask in profile.row_masks:
                if rows[y + dy] & (mask << x):
                    return True
        else:
            shift = -x
            for dy, mask in profile.row_masks:
                if rows[y + dy] & (mask >> shift):
                    return True
        return False

    def place_piece(
        self,
        piece: TetrominoType,
        rotation: int,
        x: int,
        y: int,
        truncate_above: Optional[int] = None,
    ) -> List[Cell]:
        """Write the piece's cells and return the absolute cells written.

        Cells at ``y >= truncate_above`` are silently dropped, matching rule
        sets that discard overflow above the visible playfield.
        """

        placed: List[Cell] = []
        for dx, dy in PIECE_CELLS[piece][rotation]:
            bx = x + dx
            by = y + dy
            if truncate_above is not None and by >= truncate_above:
                continue
            self.set(bx, by, True)
            placed.append((bx, by))
        return placed

    def clear_lines(self) -> LineClear:
        """Remove full rows, shift the rest down and return what was cleared."""

        full = self.full_row
        cleared = tuple(row for row, mask in enumerate(self._rows) if mask == full)
        if cleared:
            remaining = [mask for mask in self._rows if mask != full]
            self._rows = remaining + [0] * len(cleared)
            self._rebuild_heights()
            if self.debug_checks:
                self.check_invariants()
        return LineClear(count=len(cleared), rows=cleared)

    # ------------------------------------------------------------------
    # Copies, hashing and diagnostics
    # ------------------------------------------------------------------
    def clone(self) -> "Board":
        """Return an independent deep copy."""

        board = Board.__new__(Board)
        board.width = self.width
        board.total_height = self.total_height
        board.full_row = self.full_row
        board._rows = self._rows[:]
        board._heights = self._heights[:]
        return board

    def structural_hash(self) -> int:
        """Fast hash of the occupancy, for memo keys only.

        Distinct boards may share a hash; callers accept that risk.
        """

        return hash(tuple(self._rows))

    def to_array(self) -> Grid:
        """Return a ``(total_height, width)`` 0/1 grid, row 0 at index 0."""

        rows = np.asarray(self._rows, dtype=np.int64)
        bits = np.arange(self.width, dtype=np.int64)
        return ((rows[:, None] >> bits) & 1).astype(np.uint8)

    def check_invariants(self) -> None:
        """Verify the cached column heights against the grid."""

        expected = self._scan_heights()
        if expected != self._heights:
            raise InvariantViolation(
                f"Column height cache {self._heights} does not match grid {expected}"
            )

    def _scan_heights(self) -> List[int]:
        heights = [0] * self.width
        pending = self.full_row
        for y in range(self.total_height - 1, -1, -1):
            hit = self._rows[y] & pending
            if not hit:
                continue
            for x in range(self.width):
                if hit >> x & 1:
                    heights[x] = y + 1
            pending &= ~hit
            if not pending:
                break
        return heights

    def _rebuild_heights(self) -> None:
        self._heights = self._scan_heights()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self.width == other.width
            and self.total_height == other.total_height
            and self._rows == other._rows
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        lines = []
        for y in range(self.max_height() - 1, -1, -1):
            lines.append("".join("#" if self._rows[y] >> x & 1 else "." for x in range(self.width)))
        return "\n".join(lines)


__all__ = [
    "BUFFER_ROWS",
    "Board",
    "HEIGHT",
    "InvariantViolation",
    "LineClear",
    "ROTATION_PROFILES",
    "TOTAL_HEIGHT",
    "WIDTH",
]
