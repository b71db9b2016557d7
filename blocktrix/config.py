# Blocktrix - An SRS Falling-Block Puzzle Engine
# config.py - Tunable rule parameters

from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigError

MIN_NEXT_QUEUE = 3


@dataclass(frozen=True)
class GameConfig:
    """Configuration for a game. Times are in milliseconds."""
    lock_delay_ms: float = 500.0
    max_move_resets: int = 15
    next_queue_size: int = 6  # Visible lookahead
    soft_drop_points: int = 1  # Per row
    hard_drop_points: int = 2  # Per row
    frame_rate: int = 60  # Reference clock for the gravity table
    level_transition_ms: float = 0.0  # 0 skips the level-transition phase
    t_spin_kick_upgrade: bool = False  # Upgrade a mini reached through the last kick to a full T-spin
    seed: Optional[int] = None

    def __post_init__(self):
        if self.lock_delay_ms <= 0:
            raise ConfigError(f"lock_delay_ms must be positive, got {self.lock_delay_ms}")
        if self.max_move_resets < 0:
            raise ConfigError(f"max_move_resets must be non-negative, got {self.max_move_resets}")
        if self.next_queue_size < MIN_NEXT_QUEUE:
            raise ConfigError(
                f"next_queue_size must be at least {MIN_NEXT_QUEUE}, got {self.next_queue_size}"
            )
        if self.soft_drop_points < 0 or self.hard_drop_points < 0:
            raise ConfigError("drop points must be non-negative")
        if self.frame_rate <= 0:
            raise ConfigError(f"frame_rate must be positive, got {self.frame_rate}")
        if self.level_transition_ms < 0:
            raise ConfigError(f"level_transition_ms must be non-negative, got {self.level_transition_ms}")

    @property
    def frame_ms(self) -> float:
        """Length of one reference frame."""
        return 1000.0 / self.frame_rate
