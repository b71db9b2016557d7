# Blocktrix - An SRS Falling-Block Puzzle Engine
# pieces.py - Tetromino shapes, spawn poses, SRS kick data and the active piece value

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from .exceptions import InvalidPieceError


class PieceType(Enum):
    """The 7 standard tetrominoes. Values double as board tags (0 is empty)."""
    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    Z = 6
    T = 7


class KickClass(Enum):
    """Which SRS kick table a piece type uses."""
    I = "I"
    JLSTZ = "JLSTZ"


class LastAction(Enum):
    """Most recent successful action on the active piece (used for T-spin detection)."""
    NONE = 0
    MOVED = 1
    ROTATED = 2
    DROPPED = 3


# Shape masks: SHAPES[type][rotation][row][col], 1 = filled.
# Mask cell (col, row) lands on board cell (x + col, y + row).
SHAPES: Dict[PieceType, List[List[List[int]]]] = {
    PieceType.I: [
        [[0, 0, 0, 0],
         [1, 1, 1, 1],
         [0, 0, 0, 0],
         [0, 0, 0, 0]],
        [[0, 0, 1, 0],
         [0, 0, 1, 0],
         [0, 0, 1, 0],
         [0, 0, 1, 0]],
        [[0, 0, 0, 0],
         [0, 0, 0, 0],
         [1, 1, 1, 1],
         [0, 0, 0, 0]],
        [[0, 1, 0, 0],
         [0, 1, 0, 0],
         [0, 1, 0, 0],
         [0, 1, 0, 0]]
    ],
    PieceType.J: [
        [[1, 0, 0, 0],
         [1, 1, 1, 0],
         [0, 0, 0, 0],
         [0, 0, 0, 0]],
        [[0, 1, 1, 0],
         [0, 1, 0, 0],
         [0, 1, 0, 0],
         [0, 0, 0, 0]],
        [[0, 0, 0, 0],
         [1, 1, 1, 0],
         [0, 0, 1, 0],
         [0, 0, 0, 0]],
        [[0, 1, 0, 0],
         [0, 1, 0, 0],
         [1, 1, 0, 0],
         [0, 0, 0, 0]]
    ],
    PieceType.L: [
        [[0, 0, 1, 0],
         [1, 1, 1, 0],
         [0, 0, 0, 0],
         [0, 0, 0, 0]],
        [[0, 1, 0, 0],
         [0, 1, 0, 0],
         [0, 1, 1, 0],
         [0, 0, 0, 0]],
        [[0, 0, 0, 0],
         [1, 1, 1, 0],
         [1, 0, 0, 0],
         [0, 0, 0, 0]],
        [[1, 1, 0, 0],
         [0, 1, 0, 0],
         [0, 1, 0, 0],
         [0, 0, 0, 0]]
    ],
    # O has four identical states
    PieceType.O: [
        [[0, 1, 1, 0],
         [0, 1, 1, 0],
         [0, 0, 0, 0],
         [0, 0, 0, 0]]
    ] * 4,
    PieceType.S: [
        [[0, 1, 1, 0],
         [1, 1, 0, 0],
         [0, 0, 0, 0],
         [0, 0, 0, 0]],
        [[0, 1, 0, 0],
         [0, 1, 1, 0],
         [0, 0, 1, 0],
         [0, 0, 0, 0]],
        [[0, 0, 0, 0],
         [0, 1, 1, 0],
         [1, 1, 0, 0],
         [0, 0, 0, 0]],
        [[1, 0, 0, 0],
         [1, 1, 0, 0],
         [0, 1, 0, 0],
         [0, 0, 0, 0]]
    ],
    PieceType.Z: [
        [[1, 1, 0, 0],
         [0, 1, 1, 0],
         [0, 0, 0, 0],
         [0, 0, 0, 0]],
        [[0, 0, 1, 0],
         [0, 1, 1, 0],
         [0, 1, 0, 0],
         [0, 0, 0, 0]],
        [[0, 0, 0, 0],
         [1, 1, 0, 0],
         [0, 1, 1, 0],
         [0, 0, 0, 0]],
        [[0, 1, 0, 0],
         [1, 1, 0, 0],
         [1, 0, 0, 0],
         [0, 0, 0, 0]]
    ],
    PieceType.T: [
        [[0, 1, 0, 0],
         [1, 1, 1, 0],
         [0, 0, 0, 0],
         [0, 0, 0, 0]],
        [[0, 1, 0, 0],
         [0, 1, 1, 0],
         [0, 1, 0, 0],
         [0, 0, 0, 0]],
        [[0, 0, 0, 0],
         [1, 1, 1, 0],
         [0, 1, 0, 0],
         [0, 0, 0, 0]],
        [[0, 1, 0, 0],
         [1, 1, 0, 0],
         [0, 1, 0, 0],
         [0, 0, 0, 0]]
    ]
}

SPAWN_ROW = 21  # First row above the 20 visible rows, plus one

SPAWN_COLUMNS: Dict[PieceType, int] = {
    PieceType.I: 3,
    PieceType.J: 3,
    PieceType.L: 3,
    PieceType.O: 4,
    PieceType.S: 3,
    PieceType.Z: 3,
    PieceType.T: 3,
}

# SRS wall kick data (https://tetris.wiki/Super_Rotation_System#Wall_Kicks)
# Keyed by (kick class, from state, to state). Offsets are (dx, dy) with +y
# pointing UP the screen, i.e. the top-down convention of the wiki tables.
# rotation.py mirrors dy before applying it to board coordinates.
KICK_TABLE: Dict[Tuple[KickClass, int, int], Tuple[Tuple[int, int], ...]] = {
    # J, L, S, T, Z
    (KickClass.JLSTZ, 0, 1): ((0, 0), (-1, 0), (-1, +1), (0, -2), (-1, -2)),
    (KickClass.JLSTZ, 1, 0): ((0, 0), (+1, 0), (+1, -1), (0, +2), (+1, +2)),
    (KickClass.JLSTZ, 1, 2): ((0, 0), (+1, 0), (+1, -1), (0, +2), (+1, +2)),
    (KickClass.JLSTZ, 2, 1): ((0, 0), (-1, 0), (-1, +1), (0, -2), (-1, -2)),
    (KickClass.JLSTZ, 2, 3): ((0, 0), (+1, 0), (+1, +1), (0, -2), (+1, -2)),
    (KickClass.JLSTZ, 3, 2): ((0, 0), (-1, 0), (-1, -1), (0, +2), (-1, +2)),
    (KickClass.JLSTZ, 3, 0): ((0, 0), (-1, 0), (-1, -1), (0, +2), (-1, +2)),
    (KickClass.JLSTZ, 0, 3): ((0, 0), (+1, 0), (+1, +1), (0, -2), (+1, -2)),
    # I
    (KickClass.I, 0, 1): ((0, 0), (-2, 0), (+1, 0), (-2, -1), (+1, +2)),
    (KickClass.I, 1, 0): ((0, 0), (+2, 0), (-1, 0), (+2, +1), (-1, -2)),
    (KickClass.I, 1, 2): ((0, 0), (-1, 0), (+2, 0), (-1, +2), (+2, -1)),
    (KickClass.I, 2, 1): ((0, 0), (+1, 0), (-2, 0), (+1, -2), (-2, +1)),
    (KickClass.I, 2, 3): ((0, 0), (+2, 0), (-1, 0), (+2, +1), (-1, -2)),
    (KickClass.I, 3, 2): ((0, 0), (-2, 0), (+1, 0), (-2, -1), (+1, +2)),
    (KickClass.I, 3, 0): ((0, 0), (+1, 0), (-2, 0), (+1, -2), (-2, +1)),
    (KickClass.I, 0, 3): ((0, 0), (-1, 0), (+2, 0), (-1, +2), (+2, -1)),
}


def _mask_offsets(mask: List[List[int]]) -> Tuple[Tuple[int, int], ...]:
    rows, cols = np.nonzero(np.array(mask, dtype=np.int8))
    return tuple((int(c), int(r)) for r, c in zip(rows, cols))


# Precomputed (col, row) offsets of the filled mask cells
CELL_OFFSETS: Dict[Tuple[PieceType, int], Tuple[Tuple[int, int], ...]] = {
    (piece_type, rotation): _mask_offsets(SHAPES[piece_type][rotation])
    for piece_type in PieceType
    for rotation in range(4)
}


def kick_class(piece_type: PieceType) -> Optional[KickClass]:
    """Kick table for a piece type; None for O, which never kicks."""
    if piece_type == PieceType.O:
        return None
    if piece_type == PieceType.I:
        return KickClass.I
    return KickClass.JLSTZ


def get_shape(piece_type: PieceType, rotation: int) -> np.ndarray:
    """Get the 4x4 mask of a piece type at a rotation state."""
    if piece_type not in SHAPES:
        raise InvalidPieceError(f"Unknown piece type: {piece_type!r}")
    if rotation not in (0, 1, 2, 3):
        raise InvalidPieceError(f"Rotation state must be 0-3, got {rotation!r}")
    return np.array(SHAPES[piece_type][rotation], dtype=np.int8)


def cell_offsets(piece_type: PieceType, rotation: int) -> Tuple[Tuple[int, int], ...]:
    """Get the (col, row) offsets of the filled cells of a mask."""
    try:
        return CELL_OFFSETS[(piece_type, rotation)]
    except KeyError:
        raise InvalidPieceError(f"No shape for {piece_type!r} at rotation {rotation!r}") from None


@dataclass(frozen=True)
class ActivePiece:
    """The falling piece. Immutable: every operation returns a new value."""
    piece_type: PieceType
    x: int
    y: int
    rotation: int = 0
    lock_delay: float = 0.0  # Milliseconds spent grounded since the last reset
    move_resets: int = 0
    last_action: LastAction = LastAction.NONE
    last_kick: Optional[int] = None  # Kick index used by the latest rotation

    def cells(self) -> List[Tuple[int, int]]:
        """Absolute (x, y) board cells covered by the piece."""
        return [(self.x + dx, self.y + dy) for dx, dy in cell_offsets(self.piece_type, self.rotation)]

    def translate(self, dx: int, dy: int) -> 'ActivePiece':
        """Move the piece by the given offsets."""
        return replace(self, x=self.x + dx, y=self.y + dy)

    def replace(self, **changes) -> 'ActivePiece':
        return replace(self, **changes)

    @property
    def shape(self) -> np.ndarray:
        return get_shape(self.piece_type, self.rotation)

    def __repr__(self):
        return (f"ActivePiece({self.piece_type.name}, x={self.x}, y={self.y}, r={self.rotation}, "
                f"lock={self.lock_delay:g}, resets={self.move_resets})")


def create_active_piece(piece_type: PieceType) -> ActivePiece:
    """Create a piece at its spawn pose: spawn column, spawn row, rotation 0."""
    if piece_type not in SPAWN_COLUMNS:
        raise InvalidPieceError(f"Unknown piece type: {piece_type!r}")
    return ActivePiece(piece_type, SPAWN_COLUMNS[piece_type], SPAWN_ROW)


def get_all_piece_types() -> List[PieceType]:
    """Get all piece types."""
    return list(PieceType)


if __name__ == '__main__':
    for piece_type in PieceType:
        piece = create_active_piece(piece_type)
        print(f"{piece_type.name} spawns at ({piece.x}, {piece.y}), cells {piece.cells()}")
        for rotation in range(4):
            key = kick_class(piece_type)
            kicks = KICK_TABLE.get((key, rotation, (rotation + 1) % 4)) if key else ((0, 0),)
            print(f"  r{rotation} -> r{(rotation + 1) % 4} kicks: {kicks}")
