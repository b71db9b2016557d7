import unittest

from blocktrix.board import Board
from blocktrix.exceptions import InvalidMoveError
from blocktrix.pieces import ActivePiece, LastAction, PieceType
from blocktrix.rotation import CLOCKWISE, COUNTER_CLOCKWISE, kick_offsets, try_rotate


class TestKickOffsets(unittest.TestCase):

    def test_vertical_axis_is_mirrored(self):
        self.assertEqual(kick_offsets(PieceType.T, 0, 1),
                         [(0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)])
        self.assertEqual(kick_offsets(PieceType.I, 0, 1),
                         [(0, 0), (-2, 0), (1, 0), (-2, 1), (1, -2)])

    def test_o_piece_never_kicks(self):
        self.assertEqual(kick_offsets(PieceType.O, 0, 1), [(0, 0)])


class TestTryRotate(unittest.TestCase):

    def setUp(self):
        self.board = Board()

    def test_basic_rotation(self):
        piece = ActivePiece(PieceType.T, 4, 10)
        rotated = try_rotate(self.board, piece, CLOCKWISE)
        self.assertEqual(rotated.rotation, 1)
        self.assertEqual((rotated.x, rotated.y), (4, 10))
        self.assertEqual(rotated.move_resets, 1)
        self.assertEqual(rotated.last_action, LastAction.ROTATED)
        self.assertEqual(rotated.last_kick, 0)
        # The input is untouched
        self.assertEqual(piece.rotation, 0)

    def test_rotation_wraps(self):
        piece = ActivePiece(PieceType.J, 4, 10)
        rotated = try_rotate(self.board, piece, COUNTER_CLOCKWISE)
        self.assertEqual(rotated.rotation, 3)
        for _ in range(3):
            rotated = try_rotate(self.board, rotated, CLOCKWISE)
        self.assertEqual(rotated.rotation, 2)

    def test_cw_then_ccw_is_reversible_in_open_field(self):
        for piece_type in PieceType:
            for rotation in range(4):
                piece = ActivePiece(piece_type, 3, 10, rotation=rotation)
                back = try_rotate(self.board, try_rotate(self.board, piece, CLOCKWISE), COUNTER_CLOCKWISE)
                self.assertEqual((back.x, back.y, back.rotation), (piece.x, piece.y, piece.rotation),
                                 f"{piece_type.name} r{rotation}")

    def test_o_piece_keeps_position(self):
        piece = ActivePiece(PieceType.O, 4, 10)
        rotated = try_rotate(self.board, piece, CLOCKWISE)
        self.assertEqual(rotated.rotation, 1)
        self.assertEqual(rotated.cells(), piece.cells())

    def test_wall_kick_off_left_wall(self):
        # Vertical T hugging the left wall, nub pointing right
        piece = ActivePiece(PieceType.T, -1, 10, rotation=1)
        self.assertTrue(self.board.is_valid(piece))
        rotated = try_rotate(self.board, piece, COUNTER_CLOCKWISE)
        self.assertEqual(rotated.rotation, 0)
        self.assertEqual((rotated.x, rotated.y), (0, 10))
        self.assertEqual(rotated.last_kick, 1)

    def test_rotation_fails_when_every_kick_collides(self):
        board = Board.from_rows([
            "IIIIIIIIII",
            "IIIIIIIIII",
            "IIIIIIIIII",
            "IIIIIIIIII",
            "IIIIIIIIII",
            "III....III",
        ])
        piece = ActivePiece(PieceType.I, 3, -1)
        self.assertTrue(board.is_valid(piece))
        self.assertIsNone(try_rotate(board, piece, CLOCKWISE))

    def test_invalid_direction(self):
        with self.assertRaises(InvalidMoveError):
            try_rotate(self.board, ActivePiece(PieceType.T, 4, 10), 2)


if __name__ == '__main__':
    unittest.main()
