"""
Tests for liberty counting and the per-ply cache.
"""

import pytest
import numpy as np
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from board_state import BoardSnapshot
from liberty_oracle import (BoardLibertyOracle, CachedLibertyOracle, LibertyOracle, OracleQueryOnEmptyCell,
                            count_liberties, find_group)
from local_game import LocalGoGame


class CountingOracle(LibertyOracle):
    def __init__(self):
        self.calls = 0

    def get_liberties(self, x, y):
        self.calls += 1
        return x + y


class TestBoardLibertyOracle:

    @pytest.mark.unit
    def test_single_stone_liberties(self):
        board = BoardSnapshot.from_rows([".....", ".....", "..X..", ".....", "....."])
        oracle = BoardLibertyOracle(board)
        assert oracle.get_liberties(2, 2) == 4

    @pytest.mark.unit
    def test_corner_stone(self):
        board = BoardSnapshot.from_rows(["X....", ".....", ".....", ".....", "....."])
        assert BoardLibertyOracle(board).get_liberties(0, 0) == 2

    @pytest.mark.unit
    def test_group_shares_liberties(self):
        board = BoardSnapshot.from_rows([
            ".....",
            ".XX..",
            ".O...",
            ".....",
            ".....",
        ])
        oracle = BoardLibertyOracle(board)
        assert oracle.get_group(1, 1) == {(1, 1), (1, 2)}
        # (0,1), (0,2), (1,0), (1,3), (2,2)
        assert oracle.get_liberties(1, 1) == 5
        assert oracle.get_liberties(1, 2) == 5

    @pytest.mark.unit
    def test_atari(self, surrounded_opponent_position):
        oracle = BoardLibertyOracle(surrounded_opponent_position)
        assert oracle.get_liberties(2, 1) == 1

    @pytest.mark.unit
    def test_empty_cell_raises(self, empty_board_5x5):
        oracle = BoardLibertyOracle(empty_board_5x5)
        with pytest.raises(OracleQueryOnEmptyCell):
            oracle.get_liberties(2, 2)
        with pytest.raises(OracleQueryOnEmptyCell):
            oracle.get_liberties(5, 0)


class TestCachedLibertyOracle:

    @pytest.mark.unit
    def test_caches_per_point(self):
        inner = CountingOracle()
        oracle = CachedLibertyOracle(inner)
        assert oracle.get_liberties(1, 2) == 3
        assert oracle.get_liberties(1, 2) == 3
        assert oracle.get_liberties(2, 2) == 4
        assert inner.calls == 2
        assert oracle.hits == 1

    @pytest.mark.unit
    def test_clear(self):
        inner = CountingOracle()
        oracle = CachedLibertyOracle(inner)
        oracle.get_liberties(0, 0)
        oracle.clear()
        oracle.get_liberties(0, 0)
        assert inner.calls == 2
        assert oracle.hits == 0

    @pytest.mark.unit
    def test_errors_are_not_cached(self, empty_board_5x5):
        oracle = CachedLibertyOracle(BoardLibertyOracle(empty_board_5x5))
        for _ in range(2):
            with pytest.raises(OracleQueryOnEmptyCell):
                oracle.get_liberties(0, 0)

    @pytest.mark.unit
    def test_base_interface(self):
        with pytest.raises(NotImplementedError):
            LibertyOracle().get_liberties(0, 0)


class TestGroupHelpers:
    """The BFS helpers shared by the snapshot oracle and the local game."""

    @pytest.mark.unit
    def test_find_group_on_raw_cells(self):
        cells = np.zeros((5, 5), dtype=np.int8)
        cells[1, 1] = cells[1, 2] = cells[2, 2] = 1
        cells[3, 3] = 1
        assert find_group(cells, 1, 1) == {(1, 1), (1, 2), (2, 2)}
        assert find_group(cells, 3, 3) == {(3, 3)}
        assert find_group(cells, 0, 0) == set()

    @pytest.mark.unit
    def test_count_liberties_on_raw_cells(self):
        cells = np.zeros((3, 3), dtype=np.int8)
        cells[0, 0] = 1
        cells[0, 1] = 2
        assert count_liberties(cells, {(0, 0)}) == 1
        assert count_liberties(cells, set()) == 0

    @pytest.mark.unit
    def test_local_game_and_snapshot_agree(self):
        game = LocalGoGame(size=5, seed=0)
        for x, y in [(0, 0), (0, 1), (2, 2), (2, 3)]:
            game.board[x, y] = 1
        game.board[1, 1] = 2
        oracle = BoardLibertyOracle(game.snapshot())
        for x, y in [(0, 0), (0, 1), (1, 1), (2, 2), (2, 3)]:
            assert game.get_liberties(x, y) == oracle.get_liberties(x, y)
            assert game.get_group(x, y) == oracle.get_group(x, y)
