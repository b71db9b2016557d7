# Blocktrix - An SRS Falling-Block Puzzle Engine
# rotation.py - Super Rotation System: kick lookup and validated rotation

from typing import List, Optional, Tuple

from .board import Board
from .exceptions import InvalidMoveError
from .pieces import KICK_TABLE, ActivePiece, LastAction, PieceType, kick_class

CLOCKWISE = 1
COUNTER_CLOCKWISE = -1


def kick_offsets(piece_type: PieceType, from_rotation: int, to_rotation: int) -> List[Tuple[int, int]]:
    """
    Board-space offsets to try, in order, for a rotation.

    KICK_TABLE is written with +y meaning "up the screen" in the row-major,
    top-down convention the SRS tables are published in. The mask rows of a
    piece are laid onto the board bottom-up (row r lands on y + r), which
    mirrors the vertical axis, so every kick is applied as (dx, -dy). This is
    the only place that flip happens.
    """
    key = kick_class(piece_type)
    if key is None:
        return [(0, 0)]  # O piece doesn't need wall kicks
    return [(dx, -dy) for dx, dy in KICK_TABLE[(key, from_rotation, to_rotation)]]


def try_rotate(board: Board, piece: ActivePiece, direction: int) -> Optional[ActivePiece]:
    """
    Rotate the piece using SRS wall kicks.
    :param direction: 1 for clockwise, -1 for counter-clockwise.
    Returns the rotated piece, or None when every kick candidate collides.
    """
    if direction not in (CLOCKWISE, COUNTER_CLOCKWISE):
        raise InvalidMoveError(f"Rotation direction must be +1 or -1, got {direction!r}")

    new_rotation = (piece.rotation + direction + 4) % 4
    rotated = piece.replace(rotation=new_rotation)

    for kick_index, (dx, dy) in enumerate(kick_offsets(piece.piece_type, piece.rotation, new_rotation)):
        if board.is_valid(rotated, dx, dy):
            return rotated.replace(
                x=rotated.x + dx,
                y=rotated.y + dy,
                move_resets=piece.move_resets + 1,
                last_action=LastAction.ROTATED,
                last_kick=kick_index,
            )
    return None
