"""
Board snapshot, legal-move mask and board validation for the IPvGO move engine
"""
import enum
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Constants for board representation
EMPTY = 0
OWN = 1
OPPONENT = 2

CELL_STATES = (EMPTY, OWN, OPPONENT)

# Default row encoding used by the game API
EMPTY_CHAR = '.'
OWN_CHAR = 'X'
OPPONENT_CHAR = 'O'

NEIGHBOR_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))

Coordinate = Tuple[int, int]
Move = Optional[Coordinate]
PASS: Move = None


def neighbor_points(x: int, y: int, size: int) -> List[Coordinate]:
    """In-bounds orthogonal neighbours in (x-1,y), (x+1,y), (x,y-1), (x,y+1) order"""
    result = []
    for dx, dy in NEIGHBOR_OFFSETS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < size and 0 <= ny < size:
            result.append((nx, ny))
    return result


class InvalidBoardState(ValueError):
    """Board or move mask data is malformed or transiently inconsistent"""


class MoveResult(enum.Enum):
    CONTINUE = 'continue'
    GAME_OVER = 'gameOver'


def _char_map(own_char: str = OWN_CHAR, opponent_char: str = OPPONENT_CHAR,
              empty_char: str = EMPTY_CHAR) -> dict:
    return {empty_char: EMPTY, own_char: OWN, opponent_char: OPPONENT}


def _row_is_valid(row, char_map: dict) -> bool:
    if isinstance(row, str):
        return len(row) > 0 and all(ch in char_map for ch in row)
    if isinstance(row, (list, tuple, np.ndarray)):
        return len(row) > 0 and all(
            isinstance(cell, (int, np.integer)) and not isinstance(cell, bool) and cell in CELL_STATES
            for cell in row
        )
    return False


def validate_board(board, own_char: str = OWN_CHAR, opponent_char: str = OPPONENT_CHAR,
                   empty_char: str = EMPTY_CHAR) -> bool:
    """Check that a sampled board is a non-empty square grid of recognised cells.

    Rows may arrive either as encoded strings ("X.O..") or as sequences of
    integer cell states. Never raises, so callers can use it as a guard before
    every strategy pass.
    """
    if isinstance(board, BoardSnapshot):
        return True

    if board is None or isinstance(board, str):
        is_valid = False
    else:
        try:
            rows = list(board)
        except TypeError:
            rows = []
        char_map = _char_map(own_char, opponent_char, empty_char)
        is_valid = (
            len(rows) > 0
            and all(_row_is_valid(row, char_map) for row in rows)
            and len({len(row) for row in rows}) == 1
            and len(rows[0]) == len(rows)
        )

    logger.debug("Validating board state %r: isValid=%s", board, is_valid)
    return is_valid


class BoardSnapshot:
    """Immutable NxN view of the board, indexed as board[x, y]"""

    def __init__(self, cells: np.ndarray):
        cells = np.array(cells, dtype=np.int8)
        if cells.ndim != 2 or cells.shape[0] == 0 or cells.shape[0] != cells.shape[1]:
            raise InvalidBoardState(f"Board must be a non-empty square grid, got shape {cells.shape}")
        if not np.isin(cells, CELL_STATES).all():
            raise InvalidBoardState("Board contains unrecognised cell states")
        cells.flags.writeable = False
        self.cells = cells
        self.size = cells.shape[0]

    @classmethod
    def from_rows(cls, rows: Sequence[str], own_char: str = OWN_CHAR,
                  opponent_char: str = OPPONENT_CHAR, empty_char: str = EMPTY_CHAR) -> 'BoardSnapshot':
        """Build a snapshot from encoded rows such as ["..X..", ".O..."]"""
        if not validate_board(rows, own_char, opponent_char, empty_char):
            raise InvalidBoardState(f"Invalid board state: {rows!r}")
        char_map = _char_map(own_char, opponent_char, empty_char)
        return cls(np.array([[char_map[ch] for ch in row] for row in rows], dtype=np.int8))

    @classmethod
    def from_states(cls, rows: Sequence[Sequence[int]]) -> 'BoardSnapshot':
        """Build a snapshot from nested sequences of EMPTY/OWN/OPPONENT"""
        if not validate_board(rows):
            raise InvalidBoardState(f"Invalid board state: {rows!r}")
        return cls(np.array(rows, dtype=np.int8))

    @classmethod
    def empty(cls, size: int) -> 'BoardSnapshot':
        return cls(np.zeros((size, size), dtype=np.int8))

    def __getitem__(self, coord: Coordinate) -> int:
        x, y = coord
        return int(self.cells[x, y])

    def __eq__(self, other) -> bool:
        if not isinstance(other, BoardSnapshot):
            return NotImplemented
        return np.array_equal(self.cells, other.cells)

    def __hash__(self) -> int:
        return hash(self.cells.tobytes())

    def __repr__(self) -> str:
        return f"BoardSnapshot({self.to_rows()!r})"

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def neighbors(self, x: int, y: int) -> List[Coordinate]:
        return neighbor_points(x, y, self.size)

    def stones(self, color: int) -> List[Coordinate]:
        return [(int(x), int(y)) for x, y in np.argwhere(self.cells == color)]

    def to_rows(self, own_char: str = OWN_CHAR, opponent_char: str = OPPONENT_CHAR,
                empty_char: str = EMPTY_CHAR) -> List[str]:
        chars = {EMPTY: empty_char, OWN: own_char, OPPONENT: opponent_char}
        return [''.join(chars[int(cell)] for cell in row) for row in self.cells]


def build_move_mask(valid_moves, size: int) -> np.ndarray:
    """Convert the game's legal-move grid into a read-only NxN bool array"""
    if valid_moves is None:
        raise InvalidBoardState("Valid moves are undefined")
    try:
        mask = np.array(valid_moves, dtype=bool)
    except (TypeError, ValueError) as e:
        raise InvalidBoardState(f"Valid moves are not a rectangular grid: {e}") from e
    if mask.shape != (size, size):
        raise InvalidBoardState(f"Valid moves shape {mask.shape} does not match board size {size}")
    mask.flags.writeable = False
    return mask
