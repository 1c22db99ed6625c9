"""Linear evaluation of afterstate features."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from .features import FEAT_DIM, FEATURE_NAMES

Weights = Sequence[float]

# BCTS weights (Thiery & Scherrer, 2009), tuned against the wall convention
# documented in :mod:`tetris_ai.features`.  Order follows ``FEATURE_NAMES``.
BCTS_WEIGHTS: Tuple[float, ...] = (
    -12.63,  # landing_height
    6.60,  # eroded_piece_cells
    -9.22,  # row_transitions
    -19.77,  # col_transitions
    -13.08,  # holes
    -10.49,  # cumulative_wells
    -1.61,  # hole_depth
    -24.04,  # rows_with_holes
)


def check_weights(weights: Weights) -> Tuple[float, ...]:
    """Return ``weights`` as a tuple of floats, validating its length."""

    values = tuple(float(w) for w in weights)
    if len(values) != FEAT_DIM:
        raise ValueError(
            f"Expected {FEAT_DIM} weights ({', '.join(FEATURE_NAMES)}), got {len(values)}"
        )
    return values


def evaluate(features: Iterable[float], weights: Weights) -> float:
    """Return ``sum(weights[i] * features[i])``.

    ``features`` is usually a :class:`~tetris_ai.features.FeatureVector`, which
    iterates its fields in ``FEATURE_NAMES`` order.
    """

    if len(weights) != FEAT_DIM:
        raise ValueError(f"Expected {FEAT_DIM} weights, got {len(weights)}")
    return float(sum(w * f for w, f in zip(weights, features)))


__all__ = ["BCTS_WEIGHTS", "Weights", "check_weights", "evaluate"]
