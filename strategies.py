"""
Heuristic move strategies.

Each strategy scans the legal-move mask and returns the set of coordinates
satisfying its predicate. MoveSelector tries them in priority order:

    capture -> expansion -> defensive -> random
"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Type

import numpy as np

from board_state import OPPONENT, OWN, BoardSnapshot, Coordinate
from liberty_oracle import LibertyOracle

logger = logging.getLogger(__name__)


def _legal_coordinates(mask: np.ndarray) -> List[Coordinate]:
    return [(int(x), int(y)) for x, y in np.argwhere(mask)]


def _touches_group_in_atari(board: BoardSnapshot, x: int, y: int, color: int,
                            oracle: LibertyOracle) -> bool:
    """True if a neighbour of (x, y) holds a `color` stone whose group has one liberty"""
    for nx, ny in board.neighbors(x, y):
        if board[nx, ny] == color and oracle.get_liberties(nx, ny) == 1:
            return True
    return False


def find_capture_moves(board: BoardSnapshot, mask: np.ndarray, oracle: LibertyOracle) -> Set[Coordinate]:
    """Legal moves that take the last liberty of an adjacent opponent group"""
    return {
        (x, y) for x, y in _legal_coordinates(mask)
        if _touches_group_in_atari(board, x, y, OPPONENT, oracle)
    }


def find_expansion_moves(board: BoardSnapshot, mask: np.ndarray) -> Set[Coordinate]:
    """Legal moves on an odd row or column that touch one of our stones"""
    moves = set()
    for x, y in _legal_coordinates(mask):
        if x % 2 == 1 or y % 2 == 1:
            if any(board[nx, ny] == OWN for nx, ny in board.neighbors(x, y)):
                moves.add((x, y))
    return moves


def find_defensive_moves(board: BoardSnapshot, mask: np.ndarray, oracle: LibertyOracle) -> Set[Coordinate]:
    """Legal moves that add a liberty to one of our groups in atari"""
    return {
        (x, y) for x, y in _legal_coordinates(mask)
        if _touches_group_in_atari(board, x, y, OWN, oracle)
    }


def find_random_moves(board: BoardSnapshot, mask: np.ndarray) -> Set[Coordinate]:
    """Every legal move"""
    return set(_legal_coordinates(mask))


class MoveStrategy:
    """Base class: propose a candidate set for the current ply"""

    name = 'base'

    def propose(self, board: BoardSnapshot, mask: np.ndarray, oracle: LibertyOracle) -> Set[Coordinate]:
        raise NotImplementedError()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class CaptureStrategy(MoveStrategy):
    name = 'capture'

    def propose(self, board, mask, oracle):
        return find_capture_moves(board, mask, oracle)


class ExpansionStrategy(MoveStrategy):
    name = 'expansion'

    def propose(self, board, mask, oracle):
        return find_expansion_moves(board, mask)


class DefensiveStrategy(MoveStrategy):
    name = 'defensive'

    def propose(self, board, mask, oracle):
        return find_defensive_moves(board, mask, oracle)


class RandomAnyStrategy(MoveStrategy):
    name = 'random'

    def propose(self, board, mask, oracle):
        return find_random_moves(board, mask)


STRATEGY_REGISTRY: Dict[str, Type[MoveStrategy]] = {
    cls.name: cls for cls in (CaptureStrategy, ExpansionStrategy, DefensiveStrategy, RandomAnyStrategy)
}

DEFAULT_STRATEGY_ORDER = ('capture', 'expansion', 'defensive', 'random')


def build_strategies(names: Optional[Iterable[str]] = None) -> List[MoveStrategy]:
    """Instantiate strategies by name, preserving order"""
    if names is None:
        names = DEFAULT_STRATEGY_ORDER
    strategies = []
    for name in names:
        if name not in STRATEGY_REGISTRY:
            raise ValueError(f"Unknown strategy '{name}'. Available: {sorted(STRATEGY_REGISTRY)}")
        strategies.append(STRATEGY_REGISTRY[name]())
    return strategies


def strategy_names(strategies: Sequence[MoveStrategy]) -> List[str]:
    return [s.name for s in strategies]
