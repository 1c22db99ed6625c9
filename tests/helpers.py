from __future__ import annotations

from typing import List

from tetris_ai.board import Board
from tetris_ai.evaluator import BCTS_WEIGHTS
from tetris_ai.game import Game, Snapshot
from tetris_ai.greedy import greedy_select


def played_snapshots(seeds=(0, 1, 2), moves: int = 6, **config) -> List[Snapshot]:
    """Snapshots taken after a few greedy moves, so boards are not empty."""

    snapshots = []
    for seed in seeds:
        game = Game(seed=seed, **config)
        for _ in range(moves):
            game.apply_placement(greedy_select(game.snapshot(), BCTS_WEIGHTS))
        snapshots.append(game.snapshot())
    return snapshots


def blocked_board(width: int = 10, total_height: int = 40) -> Board:
    board = Board(width, total_height)
    for y in range(10, total_height):
        for x in range(1, width):
            board.set(x, y, True)
    return board
