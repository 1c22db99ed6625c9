"""Piece sources with look-ahead and cloning."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import List

from .tetromino import ALL_PIECES, TetrominoType


class Randomizer(ABC):
    """Seeded stream of tetromino types.

    ``peek`` never consumes, and ``clone`` returns an independent source that
    continues with exactly the same sequence.
    """

    def __init__(self, seed: int = 0) -> None:
        self.seed = seed
        self._rng = random.Random(seed)
        self._buffer: List[TetrominoType] = []

    @abstractmethod
    def _refill(self) -> List[TetrominoType]:
        """Return the next batch of pieces to append to the buffer."""

    def _ensure(self, count: int) -> None:
        while len(self._buffer) < count:
            self._buffer.extend(self._refill())

    def next(self) -> TetrominoType:
        self._ensure(1)
        return self._buffer.pop(0)

    def peek(self, count: int) -> List[TetrominoType]:
        self._ensure(count)
        return self._buffer[:count]

    def clone(self) -> "Randomizer":
        other = type(self)(self.seed)
        other._rng.setstate(self._rng.getstate())
        other._buffer = list(self._buffer)
        return other


class UniformRandomizer(Randomizer):
    """Every draw is independent and uniform over the seven types."""

    def _refill(self) -> List[TetrominoType]:
        return [self._rng.choice(ALL_PIECES)]


class BagRandomizer(Randomizer):
    """7-bag: each group of seven consecutive draws contains every type once."""

    def _refill(self) -> List[TetrominoType]:
        bag = list(ALL_PIECES)
        self._rng.shuffle(bag)
        return bag


RANDOMIZERS = {"uniform": UniformRandomizer, "bag7": BagRandomizer}


def create_randomizer(kind: str, seed: int = 0) -> Randomizer:
    """Return a new randomizer of ``kind`` (``"uniform"`` or ``"bag7"``)."""

    try:
        factory = RANDOMIZERS[kind]
    except KeyError:
        raise ValueError(f"Unknown randomizer {kind!r}") from None
    return factory(seed)


__all__ = ["BagRandomizer", "Randomizer", "UniformRandomizer", "create_randomizer"]
