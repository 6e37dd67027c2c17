"""
Configuration for the IPvGO bot: engine strategy order, board encoding and
session pacing.
"""
import json
import os
from dataclasses import asdict, dataclass, field
from typing import Optional, Tuple

from board_state import EMPTY_CHAR, OPPONENT_CHAR, OWN_CHAR
from strategies import DEFAULT_STRATEGY_ORDER, STRATEGY_REGISTRY


@dataclass
class EngineConfig:
    """
    Bot configuration.

    Attributes:
        board_size: board edge length used when resetting a game
        opponent: faction name passed to the provider on reset
        strategy_order: strategy names tried by MoveSelector, highest priority first
        seed: seed for the selector's random generator (None = nondeterministic)
        own_char / opponent_char / empty_char: encoding of board rows
        retry_delay: seconds to wait before re-sampling malformed game data
        turn_delay: seconds to wait after the opponent's turn resolves
        max_retries: consecutive malformed samples tolerated before giving up on a game
        max_loops: games played by one session
        opponent_pass_rate: probability that the local opponent passes instead of playing
    """

    board_size: int = 5
    opponent: str = 'Netburners'
    strategy_order: Tuple[str, ...] = field(default_factory=lambda: tuple(DEFAULT_STRATEGY_ORDER))
    seed: Optional[int] = None

    own_char: str = OWN_CHAR
    opponent_char: str = OPPONENT_CHAR
    empty_char: str = EMPTY_CHAR

    retry_delay: float = 1.0
    turn_delay: float = 0.2
    max_retries: int = 100
    max_loops: int = 500

    opponent_pass_rate: float = 0.0

    def __post_init__(self):
        self.strategy_order = tuple(self.strategy_order)
        self.validate()

    def validate(self):
        if self.board_size < 1:
            raise ValueError("board_size must be positive")
        if not self.strategy_order:
            raise ValueError("strategy_order must name at least one strategy")
        unknown = [name for name in self.strategy_order if name not in STRATEGY_REGISTRY]
        if unknown:
            raise ValueError(f"Unknown strategies {unknown}. Available: {sorted(STRATEGY_REGISTRY)}")
        chars = (self.own_char, self.opponent_char, self.empty_char)
        if any(len(c) != 1 for c in chars) or len(set(chars)) != 3:
            raise ValueError("Board characters must be three distinct single characters")
        if self.retry_delay < 0 or self.turn_delay < 0:
            raise ValueError("Delays must be non-negative")
        if self.max_retries < 1 or self.max_loops < 1:
            raise ValueError("max_retries and max_loops must be positive")
        if not 0.0 <= self.opponent_pass_rate <= 1.0:
            raise ValueError("opponent_pass_rate must be in [0, 1]")

    def to_dict(self) -> dict:
        d = asdict(self)
        d['strategy_order'] = list(self.strategy_order)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> 'EngineConfig':
        unknown = set(d) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**d)

    def save(self, path: str) -> None:
        dir_path = os.path.dirname(path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> 'EngineConfig':
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def replace(self, **overrides) -> 'EngineConfig':
        """Copy with the given fields overridden; None values are ignored"""
        d = self.to_dict()
        d.update({k: v for k, v in overrides.items() if v is not None})
        return EngineConfig.from_dict(d)
