from __future__ import annotations

import pytest

from tetris_ai.board import Board


@pytest.fixture
def i_gap_board() -> Board:
    """Bottom row missing exactly the four left cells."""

    return Board.from_strings(["....######"])
