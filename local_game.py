"""
In-memory IPvGO game used as a stand-in for the external game API.

Implements stone placement, captures and the suicide rule; the opponent replies
with a uniformly random legal move. Ko and scoring are not modelled.
"""
import logging
import random
from typing import List, Optional, Set, Tuple

import numpy as np

from board_state import (EMPTY, EMPTY_CHAR, OPPONENT, OPPONENT_CHAR, OWN, OWN_CHAR,
                         BoardSnapshot, Coordinate, MoveResult, neighbor_points)
from liberty_oracle import LibertyOracle, OracleQueryOnEmptyCell, count_liberties, find_group

logger = logging.getLogger(__name__)


class IllegalMove(ValueError):
    """Move rejected by the game (occupied, out of bounds, suicide or game over)"""


class LocalGoGame(LibertyOracle):
    """Game-state provider: board rows, legal-move grid, liberties and move application"""

    def __init__(self, size: int = 5, opponent: str = 'Netburners', seed: Optional[int] = None,
                 pass_rate: float = 0.0, own_char: str = OWN_CHAR,
                 opponent_char: str = OPPONENT_CHAR, empty_char: str = EMPTY_CHAR):
        self.rng = random.Random(seed)
        self.pass_rate = pass_rate
        self.chars = {EMPTY: empty_char, OWN: own_char, OPPONENT: opponent_char}
        self.games_started = 0
        self.reset_board_state(opponent, size)

    def reset_board_state(self, opponent: Optional[str] = None, size: Optional[int] = None) -> List[str]:
        """Start a new game; returns the fresh board rows"""
        if opponent is not None:
            self.opponent = opponent
        if size is not None:
            self.size = size
        self.board = np.zeros((self.size, self.size), dtype=np.int8)
        self.captures = {OWN: 0, OPPONENT: 0}
        self.passes = 0
        self.move_count = 0
        # Random play cannot be trusted to end by passing alone
        self.max_moves = self.size * self.size * 4
        self.game_over = False
        self.games_started += 1
        logger.info("New game #%d against %s on %dx%d", self.games_started, self.opponent, self.size, self.size)
        return self.get_board_state()

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(self.board.copy())

    def get_board_state(self) -> List[str]:
        return [''.join(self.chars[int(cell)] for cell in row) for row in self.board]

    def get_valid_moves(self, color: int = OWN) -> List[List[bool]]:
        """Legal-move grid for `color`, indexed [x][y]"""
        return [[self.is_valid_move(x, y, color) for y in range(self.size)] for x in range(self.size)]

    def get_group(self, x: int, y: int) -> Set[Coordinate]:
        return find_group(self.board, x, y)

    def group_liberties(self, x: int, y: int) -> int:
        return count_liberties(self.board, find_group(self.board, x, y))

    def get_liberties(self, x: int, y: int) -> int:
        if not (0 <= x < self.size and 0 <= y < self.size) or self.board[x, y] == EMPTY:
            raise OracleQueryOnEmptyCell(f"No stone at ({x}, {y})")
        return self.group_liberties(x, y)

    def is_valid_move(self, x: int, y: int, color: int) -> bool:
        """Check if move is on an empty point and not suicide"""
        if self.game_over or not (0 <= x < self.size and 0 <= y < self.size):
            return False
        if self.board[x, y] != EMPTY:
            return False

        # Temporarily place stone
        self.board[x, y] = color
        try:
            opponent = OPPONENT if color == OWN else OWN
            for nx, ny in neighbor_points(x, y, self.size):
                if self.board[nx, ny] == opponent and self.group_liberties(nx, ny) == 0:
                    return True
            return self.group_liberties(x, y) > 0
        finally:
            self.board[x, y] = EMPTY

    def _remove_captured(self, color: int) -> List[Coordinate]:
        captured = []
        checked = set()
        for x, y in np.argwhere(self.board == color):
            x, y = int(x), int(y)
            if (x, y) in checked:
                continue
            group = self.get_group(x, y)
            checked.update(group)
            if count_liberties(self.board, group) == 0:
                for gx, gy in group:
                    self.board[gx, gy] = EMPTY
                    captured.append((gx, gy))
        return captured

    def _place(self, x: int, y: int, color: int) -> MoveResult:
        if not self.is_valid_move(x, y, color):
            raise IllegalMove(f"Illegal move at ({x}, {y})")

        self.board[x, y] = color
        opponent = OPPONENT if color == OWN else OWN
        captured = self._remove_captured(opponent)
        self.captures[color] += len(captured)
        if captured:
            logger.debug("Move (%d, %d) captured %d stone(s)", x, y, len(captured))

        self.passes = 0
        return self._advance()

    def _pass(self) -> MoveResult:
        if self.game_over:
            raise IllegalMove("The game is over")
        self.passes += 1
        return self._advance()

    def _advance(self) -> MoveResult:
        self.move_count += 1
        if self.passes >= 2 or self.move_count >= self.max_moves:
            self.game_over = True
            logger.info("Game over after %d moves (captures: own=%d, opponent=%d)",
                        self.move_count, self.captures[OWN], self.captures[OPPONENT])
            return MoveResult.GAME_OVER
        return MoveResult.CONTINUE

    def make_move(self, x: int, y: int) -> MoveResult:
        return self._place(x, y, OWN)

    def pass_turn(self) -> MoveResult:
        return self._pass()

    def opponent_next_turn(self) -> MoveResult:
        """Let the opponent reply with a random legal move, or pass"""
        if self.game_over:
            return MoveResult.GAME_OVER

        moves: List[Tuple[int, int]] = [
            (int(x), int(y)) for x, y in np.argwhere(self.board == EMPTY)
            if self.is_valid_move(int(x), int(y), OPPONENT)
        ]
        if not moves or self.rng.random() < self.pass_rate:
            return self._pass()
        x, y = self.rng.choice(moves)
        return self._place(x, y, OPPONENT)
