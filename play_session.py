"""
Asynchronous game loop that drives the move engine against a game-state provider.

One cycle per ply: sample board and legal moves, validate, select, apply the
move, await the opponent, repeat. Malformed samples are logged and retried
after a delay; a game that stays malformed is abandoned and the board reset.
"""
import asyncio
import inspect
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from board_state import PASS, BoardSnapshot, InvalidBoardState, MoveResult, build_move_mask, validate_board
from engine_config import EngineConfig
from liberty_oracle import CachedLibertyOracle
from move_selector import MoveSelector
from strategies import build_strategies

logger = logging.getLogger(__name__)


@dataclass
class SessionStats:
    games_completed: int = 0
    games_aborted: int = 0
    moves: int = 0
    passes: int = 0
    retries: int = 0
    strategy_counts: Counter = field(default_factory=Counter)


async def _call(fn, *args):
    """Call a provider method that may be sync or async"""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class PlaySession:
    """Plays consecutive games against one provider with one MoveSelector"""

    def __init__(self, game, config: Optional[EngineConfig] = None, selector: Optional[MoveSelector] = None):
        self.game = game
        self.config = config or EngineConfig()
        self.selector = selector or MoveSelector(
            strategies=build_strategies(self.config.strategy_order), seed=self.config.seed
        )
        self.stats = SessionStats()

    def _validate(self, board) -> bool:
        return validate_board(board, self.config.own_char, self.config.opponent_char, self.config.empty_char)

    async def initialize_board(self) -> bool:
        """Make sure a game is in progress, resetting the board if needed"""
        logger.debug("Attempting to initialize the board...")
        board = await _call(self.game.get_board_state)
        if self._validate(board):
            logger.debug("Board is already initialized: %s", board)
            return True

        await _call(self.game.reset_board_state, self.config.opponent, self.config.board_size)
        await asyncio.sleep(self.config.retry_delay)

        board = await _call(self.game.get_board_state)
        if not self._validate(board):
            logger.error("Board is still not properly initialized: %r", board)
            return False
        logger.info("Board initialized: %s", board)
        return True

    async def sample(self) -> Tuple[BoardSnapshot, np.ndarray]:
        """Read the board and legal moves once; raises InvalidBoardState on malformed data"""
        rows = await _call(self.game.get_board_state)
        if not self._validate(rows):
            raise InvalidBoardState(f"Invalid board state: {rows!r}")
        board = BoardSnapshot.from_rows(rows, self.config.own_char, self.config.opponent_char, self.config.empty_char)
        mask = build_move_mask(await _call(self.game.get_valid_moves), board.size)
        return board, mask

    async def sample_with_retry(self) -> Optional[Tuple[BoardSnapshot, np.ndarray]]:
        for attempt in range(1, self.config.max_retries + 1):
            try:
                return await self.sample()
            except InvalidBoardState as e:
                self.stats.retries += 1
                logger.warning("%s. Retrying (%d/%d)...", e, attempt, self.config.max_retries)
                await asyncio.sleep(self.config.retry_delay)
        return None

    async def play_turn(self, board: BoardSnapshot, mask: np.ndarray) -> MoveResult:
        """Select and apply one move, then let the opponent respond"""
        oracle = CachedLibertyOracle(self.game)
        decision = self.selector.decide(board, mask, oracle)

        if decision.move is PASS:
            logger.info("No valid move found. Passing turn.")
            self.stats.passes += 1
            result = await _call(self.game.pass_turn)
        else:
            x, y = decision.move
            logger.info("Making move at (%d, %d) [%s]", x, y, decision.strategy)
            self.stats.moves += 1
            self.stats.strategy_counts[decision.strategy] += 1
            result = await _call(self.game.make_move, x, y)

        if result == MoveResult.GAME_OVER:
            return result

        result = await _call(self.game.opponent_next_turn)
        await asyncio.sleep(self.config.turn_delay)
        return result

    async def play_game(self) -> bool:
        """Play until the game ends. Returns False if the game was abandoned."""
        while True:
            sampled = await self.sample_with_retry()
            if sampled is None:
                logger.error("Giving up on current game after %d malformed samples", self.config.max_retries)
                self.stats.games_aborted += 1
                return False

            result = await self.play_turn(*sampled)
            if result == MoveResult.GAME_OVER:
                self.stats.games_completed += 1
                await _call(self.game.reset_board_state, self.config.opponent, self.config.board_size)
                logger.info("Board has been reset. Starting a new game...")
                await asyncio.sleep(self.config.retry_delay)
                return True

    async def play_one(self) -> bool:
        """Initialize, play one game and reset after an abandoned game.

        Returns False only when the board cannot be initialized at all.
        """
        if not await self.initialize_board():
            logger.error("Critical Error: Unable to initialize board.")
            return False
        if not await self.play_game():
            await _call(self.game.reset_board_state, self.config.opponent, self.config.board_size)
        return True

    async def run(self, max_loops: Optional[int] = None) -> SessionStats:
        loops = max_loops if max_loops is not None else self.config.max_loops
        for loop in range(loops):
            logger.info("Starting loop %d of %d", loop + 1, loops)
            if not await self.play_one():
                break
        return self.stats
