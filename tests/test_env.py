import unittest

import numpy as np

from blocktrix.config import GameConfig
from blocktrix.env import TetrisEnv


class TestTetrisEnv(unittest.TestCase):

    def setUp(self):
        self.env = TetrisEnv(render_mode="ansi")

    def tearDown(self):
        self.env.close()

    def test_reset(self):
        obs, info = self.env.reset(seed=3)
        self.assertTrue(self.env.observation_space.contains(obs))
        self.assertEqual(obs["board"].shape, (20, 10))
        self.assertFalse(np.any(obs["board"]))
        self.assertGreater(obs["current"], 0)
        self.assertEqual(obs["hold"], 0)
        self.assertEqual(info["score"], 0)
        self.assertEqual(info["phase"], "playing")

    def test_seeded_resets_match(self):
        other = TetrisEnv()
        obs_a, _ = self.env.reset(seed=9)
        obs_b, _ = other.reset(seed=9)
        self.assertEqual(obs_a["current"], obs_b["current"])
        self.assertTrue(np.array_equal(obs_a["next"], obs_b["next"]))

    def test_step_requires_reset(self):
        with self.assertRaises(RuntimeError):
            self.env.step(0)

    def test_invalid_action(self):
        self.env.reset(seed=1)
        with self.assertRaises(ValueError):
            self.env.step(99)

    def test_hard_drop_rewards_points(self):
        self.env.reset(seed=1)
        obs, reward, terminated, truncated, info = self.env.step(6)
        self.assertGreater(reward, 0)
        self.assertEqual(reward, info["score"])
        self.assertFalse(terminated)
        self.assertFalse(truncated)
        self.assertEqual(int(np.count_nonzero(obs["board"])), 4)
        self.assertEqual(info["last_clear_lines"], 0)

    def test_hold_action(self):
        obs, _ = self.env.reset(seed=1)
        current = obs["current"]
        obs, _, _, _, _ = self.env.step(7)
        self.assertEqual(obs["hold"], current)

    def test_truncation(self):
        env = TetrisEnv(GameConfig(seed=1), max_steps=3)
        env.reset(seed=0)
        results = [env.step(0) for _ in range(3)]
        self.assertFalse(results[1][3])
        self.assertTrue(results[2][3])

    def test_render(self):
        self.env.reset(seed=2)
        self.assertIn("Score:", self.env.render())


if __name__ == '__main__':
    unittest.main()
