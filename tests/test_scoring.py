import unittest

from blocktrix.board import Board
from blocktrix.config import GameConfig
from blocktrix.pieces import ActivePiece, LastAction, PieceType
from blocktrix.scoring import (
    GameStats, TSpin, calculate_score, classify_t_spin, gravity_frames, gravity_interval_ms,
    initial_stats, is_difficult, lines_required, resolve_lock, update_stats,
)

# T slot that a T with its nub down fills for a double. Both bottom
# (front) corners are blocked.
TSD_ROWS = [
    "IIII......",
    "III...IIII",
    "IIII.IIIII",
]

# Nub-down slot whose two top (back) corners and one front corner block
BACK_PAIR_ROWS = [
    "IIII.I....",
    "III...IIII",
    "IIII.....I",
]

TETRIS_ROWS = ["IIIIIIIII."] * 4


class TestScore(unittest.TestCase):

    def test_single_at_level_one(self):
        self.assertEqual(calculate_score(1, 1), 200)

    def test_line_values(self):
        self.assertEqual(calculate_score(0, 1), 0)
        self.assertEqual(calculate_score(2, 1), 600)
        self.assertEqual(calculate_score(3, 2), 1500)
        self.assertEqual(calculate_score(4, 1), 1600)
        self.assertEqual(calculate_score(0, 1, is_t_spin=True), 0)
        self.assertEqual(calculate_score(3, 1, is_t_spin=True), 3200)

    def test_score_grows_with_level(self):
        for lines in range(1, 5):
            scores = [calculate_score(lines, level) for level in range(1, 20)]
            self.assertEqual(scores, sorted(scores))
            self.assertEqual(len(set(scores)), len(scores))

    def test_t_spin_double_beats_double(self):
        for level in range(1, 10):
            self.assertGreater(calculate_score(2, level, is_t_spin=True), calculate_score(2, level))

    def test_difficult_clears(self):
        self.assertTrue(is_difficult(4, TSpin.NONE))
        self.assertTrue(is_difficult(1, TSpin.FULL))
        self.assertFalse(is_difficult(0, TSpin.FULL))
        self.assertFalse(is_difficult(2, TSpin.MINI))
        self.assertFalse(is_difficult(3, TSpin.NONE))


class TestLevels(unittest.TestCase):

    def test_lines_required(self):
        self.assertEqual(lines_required(1), 10)
        self.assertEqual(lines_required(9), 10)
        self.assertEqual(lines_required(10), 20)
        self.assertEqual(lines_required(15), 20)
        self.assertEqual(lines_required(16), 30)

    def test_gravity_table_is_stepwise(self):
        self.assertEqual(gravity_frames(1), 48)
        self.assertEqual(gravity_frames(9), 8)
        self.assertEqual(gravity_frames(11), 6)
        self.assertEqual(gravity_frames(13), 5)
        self.assertEqual(gravity_frames(28), 3)
        self.assertEqual(gravity_frames(29), 2)
        self.assertEqual(gravity_frames(30), 1)
        self.assertEqual(gravity_frames(99), 1)
        self.assertAlmostEqual(gravity_interval_ms(1), 800.0)
        self.assertAlmostEqual(gravity_interval_ms(30), 1000 / 60)

    def test_update_stats_levels_up(self):
        stats = initial_stats()
        for _ in range(2):
            stats = update_stats(stats, 4)
        self.assertEqual((stats.level, stats.lines, stats.lines_until_next), (1, 8, 2))
        stats = update_stats(stats, 4)
        self.assertEqual((stats.level, stats.lines, stats.lines_until_next), (2, 12, 10))

    def test_new_quota_after_level_nine(self):
        stats = update_stats(GameStats(level=9, lines_until_next=1), 4)
        self.assertEqual(stats.level, 10)
        self.assertEqual(stats.lines_until_next, 20)


class TestTSpin(unittest.TestCase):

    def test_both_front_corners_blocked_is_mini(self):
        board = Board.from_rows(TSD_ROWS)
        piece = ActivePiece(PieceType.T, 3, 0, last_action=LastAction.ROTATED)
        self.assertTrue(board.is_valid(piece))
        self.assertEqual(classify_t_spin(board, piece), TSpin.MINI)

    def test_back_corners_blocked_is_full(self):
        board = Board.from_rows(BACK_PAIR_ROWS)
        piece = ActivePiece(PieceType.T, 3, 0, last_action=LastAction.ROTATED)
        self.assertTrue(board.is_valid(piece))
        self.assertEqual(classify_t_spin(board, piece), TSpin.FULL)

    def test_requires_rotation(self):
        board = Board.from_rows(BACK_PAIR_ROWS)
        self.assertEqual(classify_t_spin(board, ActivePiece(PieceType.T, 3, 0, last_action=LastAction.MOVED)),
                         TSpin.NONE)
        self.assertEqual(classify_t_spin(board, ActivePiece(PieceType.L, 3, 0, last_action=LastAction.ROTATED)),
                         TSpin.NONE)

    def test_two_corners_is_not_a_t_spin(self):
        piece = ActivePiece(PieceType.T, 3, 10, last_action=LastAction.ROTATED)
        self.assertEqual(classify_t_spin(Board(), piece), TSpin.NONE)

    def test_floor_counts_as_blocked(self):
        # Nub up on the floor: both back corners are below y = 0
        board = Board.from_rows([
            "...I......",
            "III...IIII",
        ])
        piece = ActivePiece(PieceType.T, 3, -1, rotation=2, last_action=LastAction.ROTATED)
        self.assertTrue(board.is_valid(piece))
        self.assertEqual(classify_t_spin(board, piece), TSpin.FULL)

    def test_kick_upgrade(self):
        board = Board.from_rows(TSD_ROWS)
        piece = ActivePiece(PieceType.T, 3, 0, last_action=LastAction.ROTATED, last_kick=4)
        self.assertEqual(classify_t_spin(board, piece, GameConfig()), TSpin.MINI)
        self.assertEqual(classify_t_spin(board, piece, GameConfig(t_spin_kick_upgrade=True)), TSpin.FULL)
        self.assertEqual(classify_t_spin(board, piece.replace(last_kick=3), GameConfig(t_spin_kick_upgrade=True)),
                         TSpin.MINI)


class TestResolveLock(unittest.TestCase):

    def test_mini_double_scores_as_plain_double(self):
        board = Board.from_rows(TSD_ROWS)
        piece = ActivePiece(PieceType.T, 3, 0, last_action=LastAction.ROTATED)
        new_board, stats, result = resolve_lock(board, piece, initial_stats())
        self.assertEqual(result.rows, (0, 1))
        self.assertEqual(result.t_spin, TSpin.MINI)
        self.assertEqual(result.score, 600)
        self.assertEqual(stats.score, 600)
        self.assertEqual(stats.lines, 2)
        self.assertFalse(stats.back_to_back)
        self.assertEqual(sorted(new_board.occupied_cells()), [(0, 0), (1, 0), (2, 0), (3, 0)])

    def test_mini_breaks_back_to_back(self):
        board = Board.from_rows(TSD_ROWS)
        piece = ActivePiece(PieceType.T, 3, 0, last_action=LastAction.ROTATED)
        _, stats, result = resolve_lock(board, piece, GameStats(back_to_back=True))
        self.assertFalse(result.back_to_back)
        self.assertEqual(result.score, 600)
        self.assertFalse(stats.back_to_back)

    def test_full_t_spin_single(self):
        board = Board.from_rows(BACK_PAIR_ROWS)
        piece = ActivePiece(PieceType.T, 3, 0, last_action=LastAction.ROTATED)
        _, stats, result = resolve_lock(board, piece, initial_stats())
        self.assertEqual(result.rows, (1,))
        self.assertEqual(result.t_spin, TSpin.FULL)
        self.assertEqual(result.score, 1600)
        self.assertTrue(stats.back_to_back)

        _, stats, result = resolve_lock(board, piece, stats)
        self.assertEqual(result.score, 2400)
        self.assertTrue(result.back_to_back)

    def test_back_to_back_tetris(self):
        board = Board.from_rows(TETRIS_ROWS)
        piece = ActivePiece(PieceType.I, 7, 0, rotation=1, last_action=LastAction.DROPPED)

        _, stats, result = resolve_lock(board, piece, initial_stats())
        self.assertEqual(result.score, 1600)
        self.assertFalse(result.back_to_back)
        self.assertTrue(stats.back_to_back)

        _, stats, result = resolve_lock(board, piece, stats)
        self.assertEqual(result.score, 2400)
        self.assertTrue(result.back_to_back)
        self.assertEqual(stats.score, 4000)

    def test_plain_clear_breaks_chain(self):
        board = Board.from_rows(["IIIIIIIII."])
        piece = ActivePiece(PieceType.I, 7, 0, rotation=1)
        _, stats, result = resolve_lock(board, piece, GameStats(back_to_back=True))
        self.assertEqual(result.lines, 1)
        self.assertEqual(result.score, 200)
        self.assertFalse(stats.back_to_back)

    def test_no_clear_keeps_chain(self):
        _, stats, result = resolve_lock(Board(), ActivePiece(PieceType.O, 0, 0), GameStats(back_to_back=True))
        self.assertEqual(result.lines, 0)
        self.assertEqual(result.score, 0)
        self.assertTrue(stats.back_to_back)

    def test_level_up_flag(self):
        board = Board.from_rows(["IIIIIIIII."])
        piece = ActivePiece(PieceType.I, 7, 0, rotation=1)
        _, stats, result = resolve_lock(board, piece, GameStats(lines_until_next=1))
        self.assertTrue(result.level_up)
        self.assertEqual(stats.level, 2)
        self.assertEqual(stats.lines_until_next, 10)

    def test_clearing_is_idempotent(self):
        board = Board.from_rows(TETRIS_ROWS)
        piece = ActivePiece(PieceType.I, 7, 0, rotation=1)
        cleared, _, _ = resolve_lock(board, piece, initial_stats())
        self.assertEqual(cleared.completed_rows(), [])
        self.assertIs(cleared.clear_rows(cleared.completed_rows()), cleared)
        self.assertTrue(cleared.is_empty())


if __name__ == '__main__':
    unittest.main()
