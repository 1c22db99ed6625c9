"""Board-quality features for the linear evaluator.

The eight features are the Dellacherie / BCTS set.  They are computed on the
afterstate, i.e. the board after the piece has locked and full rows have been
removed, plus two pieces of metadata about the placement itself.

Wall convention: for row transitions the side walls count as filled cells;
for wells a missing neighbour at the board edge counts as an infinitely tall
column.  Weight vectors are tuned against one convention and are not portable
to the other, so :data:`~tetris_ai.evaluator.BCTS_WEIGHTS` is paired with this
exact definition.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterator, Sequence

import numpy as np

from .board import Board


@dataclass(frozen=True)
class FeatureVector:
    """Feature values in the fixed order shared with the weight vector."""

    landing_height: float
    eroded_piece_cells: float
    row_transitions: int
    col_transitions: int
    holes: int
    cumulative_wells: int
    hole_depth: int
    rows_with_holes: int

    def __iter__(self) -> Iterator[float]:
        return iter(
            (
                self.landing_height,
                self.eroded_piece_cells,
                self.row_transitions,
                self.col_transitions,
                self.holes,
                self.cumulative_wells,
                self.hole_depth,
                self.rows_with_holes,
            )
        )

    def __len__(self) -> int:
        return FEAT_DIM


FEATURE_NAMES = [f.name for f in fields(FeatureVector)]
FEAT_DIM = len(FEATURE_NAMES)


def row_transitions(filled: np.ndarray) -> int:
    """Count filled/empty flips along each row, walls counted as filled."""

    if filled.shape[0] == 0:
        return 0
    padded = np.pad(filled, ((0, 0), (1, 1)), constant_values=True)
    return int(np.count_nonzero(padded[:, 1:] != padded[:, :-1]))


def col_transitions(filled: np.ndarray, heights: np.ndarray, total_height: int) -> int:
    """Count flips bottom-to-top in each column up to its height.

    The floor counts as filled, and a column whose top cell has open space
    above it contributes one more flip.
    """

    top = filled.shape[0]
    if top == 0:
        return 0
    floor = np.ones((1, filled.shape[1]), dtype=bool)
    stacked = np.vstack((floor, filled))
    flips = stacked[1:] != stacked[:-1]
    below_top = np.arange(top)[:, None] < heights[None, :]
    capped = np.count_nonzero((heights > 0) & (heights < total_height))
    return int(np.count_nonzero(flips & below_top)) + int(capped)


def cumulative_wells(heights: np.ndarray) -> int:
    """Sum ``depth * (depth + 1) / 2`` over every column's well depth."""

    walled = np.concatenate(([np.inf], heights.astype(float), [np.inf]))
    neighbour = np.minimum(walled[:-2], walled[2:])
    depth = np.maximum(neighbour - heights, 0.0)
    depth = depth[np.isfinite(depth)].astype(np.int64)
    return int(np.sum(depth * (depth + 1) // 2))


def extract_features(
    board: Board,
    landing_rows: Sequence[int],
    lines_cleared: int,
    piece_cells_cleared: int,
) -> FeatureVector:
    """Return the feature vector for an afterstate.

    Parameters
    ----------
    board:
        Board after the piece locked and full rows were cleared.
    landing_rows:
        Rows the piece's cells occupied *before* the clear.
    lines_cleared:
        Number of rows the placement completed.
    piece_cells_cleared:
        How many of the piece's own cells were in those rows.
    """

    landing_height = (min(landing_rows) + max(landing_rows)) / 2.0 if landing_rows else 0.0
    eroded = lines_cleared * piece_cells_cleared

    heights = np.asarray(board.column_heights(), dtype=np.int64)
    top = int(heights.max()) if heights.size else 0
    filled = board.to_array()[:top].astype(bool)

    below_top = np.arange(top)[:, None] < heights[None, :]
    hole_mask = below_top & ~filled
    counts = filled.astype(np.int64)
    # Filled cells strictly above each cell in its column.
    above = np.flip(np.cumsum(np.flip(counts, axis=0), axis=0), axis=0) - counts

    return FeatureVector(
        landing_height=landing_height,
        eroded_piece_cells=eroded,
        row_transitions=row_transitions(filled),
        col_transitions=col_transitions(filled, heights, board.total_height),
        holes=int(np.count_nonzero(hole_mask)),
        cumulative_wells=cumulative_wells(heights),
        hole_depth=int(above[hole_mask].sum()),
        rows_with_holes=int(np.count_nonzero(hole_mask.any(axis=1))),
    )


__all__ = [
    "FEATURE_NAMES",
    "FEAT_DIM",
    "FeatureVector",
    "col_transitions",
    "cumulative_wells",
    "extract_features",
    "row_transitions",
]
