# Blocktrix - An SRS Falling-Block Puzzle Engine
# env.py - Gymnasium environment over the engine, driven one 60 Hz frame per step

import gymnasium as gym
from gymnasium import spaces
import numpy as np

from .board import BOARD_WIDTH, VISIBLE_HEIGHT
from .config import GameConfig
from .engine import Intent, Phase, advance, apply_intent, new_game
from .pieces import PieceType
from .view import render_text


class TetrisEnv(gym.Env):
    """
    A Gymnasium environment with a granular action space. Each step applies
    one input (or none) and then advances the game by one reference frame, so
    gravity and lock delay behave as they do for a human player.

    Action Space (Discrete(8)):
    - 0: Do nothing
    - 1: Move Left
    - 2: Move Right
    - 3: Rotate Clockwise
    - 4: Rotate Counter-Clockwise
    - 5: Soft Drop
    - 6: Hard Drop
    - 7: Hold Piece

    Observation Space (Dict):
    - board: visible rows, piece tags 0-7, row 0 at the bottom
    - active: 0/1 mask of the falling piece over the visible rows
    - current / hold: piece tag, 0 if none
    - next: tags of the next-queue pieces

    Reward is the score gained during the step. The episode terminates on
    game over and is truncated after max_steps.
    """
    metadata = {"render_modes": ["ansi"]}

    ACTIONS = (
        None,
        Intent.MOVE_LEFT,
        Intent.MOVE_RIGHT,
        Intent.ROTATE_CW,
        Intent.ROTATE_CCW,
        Intent.SOFT_DROP,
        Intent.HARD_DROP,
        Intent.HOLD,
    )

    def __init__(self, config: GameConfig = None, max_steps: int = 10000, render_mode: str = None):
        super().__init__()
        self.config = config or GameConfig()
        self.max_steps = max_steps
        self.render_mode = render_mode
        num_tags = len(PieceType) + 1

        self.action_space = spaces.Discrete(len(self.ACTIONS))
        self.observation_space = spaces.Dict({
            "board": spaces.Box(low=0, high=len(PieceType), shape=(VISIBLE_HEIGHT, BOARD_WIDTH), dtype=np.int8),
            "active": spaces.Box(low=0, high=1, shape=(VISIBLE_HEIGHT, BOARD_WIDTH), dtype=np.int8),
            "current": spaces.Discrete(num_tags),
            "hold": spaces.Discrete(num_tags),
            "next": spaces.MultiDiscrete([num_tags] * self.config.next_queue_size),
        })

        self.state = None
        self.steps = 0

    def _get_observation(self):
        state = self.state
        active = np.zeros((VISIBLE_HEIGHT, BOARD_WIDTH), dtype=np.int8)
        if state.active is not None:
            for x, y in state.active.cells():
                if 0 <= y < VISIBLE_HEIGHT:
                    active[y, x] = 1

        return {
            "board": state.board.visible(),
            "active": active,
            "current": state.active.piece_type.value if state.active else 0,
            "hold": state.hold.value if state.hold else 0,
            "next": np.array([piece.value for piece in state.next_queue], dtype=np.int64),
        }

    def _get_info(self):
        stats = self.state.stats
        info = {
            "score": stats.score,
            "level": stats.level,
            "lines": stats.lines,
            "phase": self.state.phase.value,
        }
        if self.state.last_clear is not None:
            info["last_clear_lines"] = self.state.last_clear.lines
            info["last_clear_t_spin"] = self.state.last_clear.t_spin.value
        return info

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)  # Important for reproducibility via seeding
        game_seed = int(self.np_random.integers(0, 2**63 - 1))
        self.state = new_game(self.config, game_seed)
        self.steps = 0
        return self._get_observation(), self._get_info()

    def step(self, action):
        if self.state is None:
            raise RuntimeError("Call reset() before step()")
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action: {action!r}")

        score_before = self.state.stats.score
        intent = self.ACTIONS[int(action)]
        if intent is not None:
            self.state = apply_intent(self.state, intent)
        self.state = advance(self.state, self.config.frame_ms)
        self.steps += 1

        reward = float(self.state.stats.score - score_before)
        terminated = self.state.phase == Phase.GAME_OVER
        truncated = not terminated and self.steps >= self.max_steps
        return self._get_observation(), reward, terminated, truncated, self._get_info()

    def render(self):
        if self.render_mode == "ansi" and self.state is not None:
            return render_text(self.state)
        return None

    def close(self):
        pass


if __name__ == '__main__':
    env = TetrisEnv(render_mode="ansi")
    obs, info = env.reset(seed=0)

    print("Initial Observation:")
    for key, value in obs.items():
        if isinstance(value, np.ndarray):
            print(f"{key}: shape {value.shape}, dtype {value.dtype}")
        else:
            print(f"{key}: {value}")

    for i in range(2000):
        obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
        if reward:
            print(f"Step {i + 1}: reward {reward:.0f}, info {info}")
        if terminated or truncated:
            break
    print(env.render())
