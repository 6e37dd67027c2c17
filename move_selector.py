"""
Priority-cascade move selection for IPvGO.

The first strategy that yields any candidates wins; one of its candidates is
picked uniformly at random. If nothing is legal the selector passes.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

import numpy as np

from board_state import PASS, BoardSnapshot, Coordinate, Move, build_move_mask
from liberty_oracle import LibertyOracle
from strategies import MoveStrategy, build_strategies, strategy_names

logger = logging.getLogger(__name__)


@dataclass
class MoveDecision:
    move: Move
    strategy: Optional[str] = None
    candidates: Set[Coordinate] = field(default_factory=set)

    @property
    def is_pass(self) -> bool:
        return self.move is PASS


class MoveSelector:
    """Greedy single-ply move selector.

    Holds only its strategy list and random generator, so one instance can be
    reused across plies of the same game. Use a separate instance per game when
    games run concurrently.
    """

    def __init__(self, strategies: Optional[Sequence[MoveStrategy]] = None,
                 rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.strategies: List[MoveStrategy] = list(strategies) if strategies is not None else build_strategies()
        self.rng = rng if rng is not None else random.Random(seed)

    def __repr__(self) -> str:
        return f"MoveSelector(strategies={strategy_names(self.strategies)})"

    def decide(self, board: BoardSnapshot, mask: np.ndarray, oracle: LibertyOracle) -> MoveDecision:
        """Run the strategy cascade and report which strategy produced the move"""
        mask = build_move_mask(mask, board.size)

        for strategy in self.strategies:
            candidates = strategy.propose(board, mask, oracle)
            logger.debug("Strategy %s proposed %d move(s): %s", strategy.name, len(candidates), sorted(candidates))
            if candidates:
                # Sorted so that a seeded generator picks reproducibly
                move = self.rng.choice(sorted(candidates))
                return MoveDecision(move=move, strategy=strategy.name, candidates=candidates)

        logger.debug("No strategy proposed a move, passing")
        return MoveDecision(move=PASS)

    def select_move(self, board: BoardSnapshot, mask: np.ndarray, oracle: LibertyOracle) -> Move:
        return self.decide(board, mask, oracle).move


def select_move(board: BoardSnapshot, mask: np.ndarray, oracle: LibertyOracle,
                rng: Optional[random.Random] = None) -> Move:
    """One-shot selection with the default strategy order"""
    return MoveSelector(rng=rng).select_move(board, mask, oracle)
