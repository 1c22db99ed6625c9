"""Load and save flat weight vectors as JSON arrays."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Tuple, Union

from .evaluator import Weights, check_weights

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_weights(path: PathLike) -> Tuple[float, ...]:
    """Read a weight vector written by :func:`save_weights`.

    Raises:
        ValueError: If the file is not a JSON array of the expected length.
    """

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list) or not all(
        isinstance(v, (int, float)) and not isinstance(v, bool) for v in raw
    ):
        raise ValueError(f"Invalid weights file {path}: expected a JSON array of numbers")
    weights = check_weights(raw)
    LOGGER.info("Loaded %d weights from %s", len(weights), path)
    return weights


def save_weights(path: PathLike, weights: Weights) -> None:
    """Write ``weights`` to ``path``, creating parent directories as needed."""

    values = check_weights(weights)
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(list(values), indent=2) + "\n", encoding="utf-8")
    LOGGER.info("Saved %d weights to %s", len(values), target)


__all__ = ["load_weights", "save_weights"]
