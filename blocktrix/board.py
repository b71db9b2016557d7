# Blocktrix - An SRS Falling-Block Puzzle Engine
# board.py - Occupancy grid, placement validation, locking and line clearing

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import BoardShapeError
from .pieces import ActivePiece, PieceType

BOARD_WIDTH = 10
BOARD_HEIGHT = 40
VISIBLE_HEIGHT = 20

EMPTY = 0

_TAGS = {piece_type.value: piece_type for piece_type in PieceType}
_LETTERS = {piece_type.name: piece_type.value for piece_type in PieceType}


class Board:
    """
    The playfield: a 10 x 40 grid of cells, each empty (0) or holding the tag
    (PieceType value) of the piece that locked there.

    Indexed grid[y, x] with the origin at the bottom-left: y = 0 is the floor
    and grows upward. Rows 20-39 are the hidden spawn buffer above the 20
    visible rows.

    A Board is a value. Its array is read-only and every mutation returns a
    new Board, so earlier states stay valid.
    """

    def __init__(self, grid: Optional[np.ndarray] = None,
                 width: int = BOARD_WIDTH, height: int = BOARD_HEIGHT,
                 visible_height: int = VISIBLE_HEIGHT):
        self.width = width
        self.height = height
        self.visible_height = visible_height

        if grid is None:
            grid = np.zeros((height, width), dtype=np.int8)
        else:
            grid = np.array(grid, dtype=np.int8)
            if grid.shape != (height, width):
                raise BoardShapeError(f"Grid must be {height}x{width}, got {grid.shape}")
            if np.any((grid < EMPTY) | (grid > len(PieceType))):
                raise BoardShapeError("Grid holds tags outside the 7 piece types")
        grid.setflags(write=False)
        self.grid = grid

    @classmethod
    def from_rows(cls, rows: Sequence[str], **kwargs) -> 'Board':
        """
        Build a board from text rows, top-most row first, bottom row last.
        '.' is empty, a piece letter is that tag, any other character is a
        generic filled cell (tagged as I).
        """
        board = cls(**kwargs)
        grid = np.zeros((board.height, board.width), dtype=np.int8)
        for depth, row in enumerate(reversed(rows)):
            if len(row) != board.width:
                raise BoardShapeError(f"Row {row!r} is not {board.width} cells wide")
            for x, char in enumerate(row):
                if char != '.':
                    grid[depth, x] = _LETTERS.get(char, PieceType.I.value)
        return cls(grid, board.width, board.height, board.visible_height)

    def _derive(self, grid: np.ndarray) -> 'Board':
        return Board(grid, self.width, self.height, self.visible_height)

    def cell(self, x: int, y: int) -> Optional[PieceType]:
        """The piece tag stored at (x, y), or None when empty or off the grid."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return _TAGS.get(int(self.grid[y, x]))

    def is_occupied(self, x: int, y: int) -> bool:
        """
        Walls and floor count as occupied. Cells at y >= height are always
        empty: there is no ceiling.
        """
        if x < 0 or x >= self.width or y < 0:
            return True
        if y >= self.height:
            return False
        return self.grid[y, x] != EMPTY

    def is_valid(self, piece: ActivePiece, dx: int = 0, dy: int = 0) -> bool:
        """
        Checks if the piece, shifted by (dx, dy), is within bounds and not colliding.
        The only legality test for movement and rotation alike.
        """
        for x, y in piece.cells():
            x += dx
            y += dy
            if x < 0 or x >= self.width or y < 0:
                return False
            if y < self.height and self.grid[y, x] != EMPTY:
                return False
        return True

    def lock(self, piece: ActivePiece) -> 'Board':
        """Write the piece's tag into every cell it covers. Cells above the grid are dropped."""
        grid = self.grid.copy()
        for x, y in piece.cells():
            if 0 <= y < self.height and 0 <= x < self.width:
                grid[y, x] = piece.piece_type.value
        return self._derive(grid)

    def completed_rows(self) -> List[int]:
        """Indices of rows where every cell is occupied, bottom first."""
        return [int(y) for y in np.flatnonzero(np.all(self.grid != EMPTY, axis=1))]

    def clear_rows(self, rows: Iterable[int]) -> 'Board':
        """
        Remove the given rows. Everything above falls down by the number of
        removed rows beneath it and empty rows are added at the top.
        """
        rows = sorted(set(rows))
        if not rows:
            return self
        kept = np.delete(self.grid, rows, axis=0)
        new_rows = np.zeros((len(rows), self.width), dtype=np.int8)
        return self._derive(np.vstack((kept, new_rows)))

    def drop_distance(self, piece: ActivePiece) -> int:
        """Number of rows the piece can fall before it is blocked."""
        distance = 0
        while self.is_valid(piece, 0, -(distance + 1)):
            distance += 1
        return distance

    def is_empty(self) -> bool:
        return not np.any(self.grid)

    def visible(self) -> np.ndarray:
        """Copy of the visible rows, still bottom row first."""
        return self.grid[:self.visible_height].copy()

    def occupied_cells(self) -> List[Tuple[int, int]]:
        ys, xs = np.nonzero(self.grid)
        return [(int(x), int(y)) for y, x in zip(ys, xs)]

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self.grid.shape == other.grid.shape and bool(np.array_equal(self.grid, other.grid))

    def __hash__(self):
        return hash(self.grid.tobytes())

    def __str__(self):
        """Visible rows, top row first."""
        result = []
        for y in range(self.visible_height - 1, -1, -1):
            row = ""
            for x in range(self.width):
                tag = _TAGS.get(int(self.grid[y, x]))
                row += tag.name if tag else "."
            result.append(row)
        return "\n".join(result)

    def __repr__(self):
        return f"Board({self.width}x{self.height}, filled={int(np.count_nonzero(self.grid))})"


if __name__ == '__main__':
    from .pieces import create_active_piece

    board = Board.from_rows([
        "JJJJJ.....",
        "IIIIIIIII.",
    ])
    print("Board (visible portion):")
    print(board)
    print(f"Completed rows: {board.completed_rows()}")

    piece = create_active_piece(PieceType.I).replace(rotation=1, x=7)
    piece = piece.translate(0, -board.drop_distance(piece))
    board = board.lock(piece)
    print(f"\nAfter locking {piece}:")
    print(board)
    rows = board.completed_rows()
    print(f"Clearing {rows}")
    print(board.clear_rows(rows))
