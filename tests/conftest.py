"""Shared pytest fixtures and configuration for all tests."""

import logging
import pytest
import random
import sys
import os
import numpy as np

# Add parent directory to path so we can import modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from board_state import EMPTY, BoardSnapshot
from liberty_oracle import LibertyOracle


class StubOracle(LibertyOracle):
    """Oracle with fixed answers; fails loudly on empty cells or unknown points."""

    def __init__(self, board, liberties, default=None):
        self.board = board
        self.liberties = dict(liberties)
        self.default = default
        self.queries = []

    def get_liberties(self, x, y):
        assert self.board[x, y] != EMPTY, f"oracle queried on empty cell ({x}, {y})"
        self.queries.append((x, y))
        if (x, y) in self.liberties:
            return self.liberties[(x, y)]
        assert self.default is not None, f"unexpected oracle query at ({x}, {y})"
        return self.default


def open_mask(board):
    """Mask that is true on every empty point."""
    return board.cells == EMPTY


@pytest.fixture
def empty_board_5x5():
    """Fixture for empty 5x5 board."""
    return BoardSnapshot.empty(5)


@pytest.fixture
def capture_position():
    """Own stone at (2,2), opponent stone at (1,2) reported to be in atari."""
    board = BoardSnapshot.from_rows([
        ".....",
        "..O..",
        "..X..",
        ".....",
        ".....",
    ])
    return board, open_mask(board), StubOracle(board, {(1, 2): 1}, default=3)


@pytest.fixture
def surrounded_opponent_position():
    """Opponent stone at (2,1) whose only liberty is (2,0)."""
    return BoardSnapshot.from_rows([
        ".....",
        ".X...",
        ".OX..",
        ".X...",
        ".....",
    ])


@pytest.fixture
def own_stone_in_atari():
    """Own stone at (1,0) with its last liberty at (0,0)."""
    return BoardSnapshot.from_rows([
        ".....",
        "XO...",
        "O....",
        ".....",
        ".....",
    ])


@pytest.fixture
def rng():
    """Seeded random generator for reproducible selection."""
    return random.Random(42)


@pytest.fixture
def random_seed():
    """Fixture to set random seeds for reproducibility."""
    seed = 42
    np.random.seed(seed)
    random.seed(seed)
    return seed


@pytest.fixture
def small_board_size():
    """Board size used by the game."""
    return 5


@pytest.fixture
def restore_logging():
    """Undo the root logger changes made by the CLI's setup_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
