"""
Liberty-count oracles queried by the capture and defensive strategies
"""
import logging
from collections import deque
from typing import Dict, Set, Tuple

import numpy as np

from board_state import EMPTY, BoardSnapshot, Coordinate, neighbor_points

logger = logging.getLogger(__name__)


def find_group(cells: np.ndarray, x: int, y: int) -> Set[Coordinate]:
    """Get all stones connected to (x, y); empty for an empty point"""
    color = cells[x, y]
    if color == EMPTY:
        return set()

    size = cells.shape[0]
    group = set()
    queue = deque([(x, y)])

    while queue:
        cx, cy = queue.popleft()
        if (cx, cy) in group:
            continue
        group.add((cx, cy))

        for nx, ny in neighbor_points(cx, cy, size):
            if cells[nx, ny] == color and (nx, ny) not in group:
                queue.append((nx, ny))

    return group


def count_liberties(cells: np.ndarray, group: Set[Coordinate]) -> int:
    """Count the distinct empty points adjacent to a group"""
    size = cells.shape[0]
    liberties = set()
    for x, y in group:
        for nx, ny in neighbor_points(x, y, size):
            if cells[nx, ny] == EMPTY:
                liberties.add((nx, ny))
    return len(liberties)


class OracleQueryOnEmptyCell(LookupError):
    """Liberties were requested for a point that holds no stone"""


class LibertyOracle:
    """Interface for the game's analysis layer: liberties of the group at (x, y)"""

    def get_liberties(self, x: int, y: int) -> int:
        raise NotImplementedError()


class BoardLibertyOracle(LibertyOracle):
    """Computes group liberties directly from a board snapshot"""

    def __init__(self, board: BoardSnapshot):
        self.board = board

    def get_group(self, x: int, y: int) -> Set[Coordinate]:
        return find_group(self.board.cells, x, y)

    def get_liberties(self, x: int, y: int) -> int:
        if not self.board.in_bounds(x, y) or self.board[x, y] == EMPTY:
            raise OracleQueryOnEmptyCell(f"No stone at ({x}, {y})")
        return count_liberties(self.board.cells, self.get_group(x, y))


class CachedLibertyOracle(LibertyOracle):
    """Memoizes another oracle for the lifetime of one ply.

    Create a new instance for every board snapshot; the cache is never
    invalidated.
    """

    def __init__(self, oracle: LibertyOracle):
        self.oracle = oracle
        self._cache: Dict[Tuple[int, int], int] = {}
        self.hits = 0

    def get_liberties(self, x: int, y: int) -> int:
        key = (x, y)
        if key in self._cache:
            self.hits += 1
            return self._cache[key]
        liberties = self.oracle.get_liberties(x, y)
        self._cache[key] = liberties
        return liberties

    def clear(self):
        self._cache.clear()
        self.hits = 0
