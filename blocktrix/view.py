# Blocktrix - An SRS Falling-Block Puzzle Engine
# view.py - Read-only projection of a game state for presentation layers

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np

from .board import Board
from .pieces import ActivePiece, PieceType
from .scoring import GameStats

if TYPE_CHECKING:
    from .engine import GameState, Phase

Cell = Tuple[int, int]


def ghost_cells(board: Board, piece: Optional[ActivePiece]) -> List[Cell]:
    """Cells of the piece at the pose a hard drop would land it in."""
    if piece is None:
        return []
    return piece.translate(0, -board.drop_distance(piece)).cells()


@dataclass(frozen=True)
class GameView:
    """Everything a renderer needs, detached from engine internals."""
    grid: np.ndarray  # Read-only, grid[y, x], y = 0 at the bottom
    active_type: Optional[PieceType]
    active_cells: Tuple[Cell, ...]
    ghost_cells: Tuple[Cell, ...]
    hold: Optional[PieceType]
    can_hold: bool
    next_queue: Tuple[PieceType, ...]
    stats: GameStats
    phase: 'Phase'
    drop_interval: float


def project(state: 'GameState') -> GameView:
    """Build the presentation view of a GameState."""
    piece = state.active
    return GameView(
        grid=state.board.grid,
        active_type=piece.piece_type if piece else None,
        active_cells=tuple(piece.cells()) if piece else (),
        ghost_cells=tuple(ghost_cells(state.board, piece)),
        hold=state.hold,
        can_hold=state.can_hold,
        next_queue=tuple(state.next_queue),
        stats=state.stats,
        phase=state.phase,
        drop_interval=state.drop_interval,
    )


def render_text(state: 'GameState', include_hidden: bool = False) -> str:
    """
    Plain-text dump, top row first: locked cells by piece letter, the active
    piece as '@', its ghost as '+', empty cells as '.'.
    """
    board = state.board
    top = board.height if include_hidden else board.visible_height
    rows = [['.'] * board.width for _ in range(top)]

    for x, y in board.occupied_cells():
        if y < top:
            rows[y][x] = board.cell(x, y).name
    for x, y in ghost_cells(board, state.active):
        if 0 <= y < top and rows[y][x] == '.':
            rows[y][x] = '+'
    if state.active is not None:
        for x, y in state.active.cells():
            if 0 <= y < top:
                rows[y][x] = '@'

    border = "+" + "-" * board.width + "+"
    result = [border]
    result.extend("|" + "".join(row) + "|" for row in reversed(rows))
    result.append(border)

    stats = state.stats
    hold = state.hold.name if state.hold else "-"
    queue = " ".join(piece.name for piece in state.next_queue)
    result.append(f"Hold: {hold}  Next: {queue}")
    result.append(f"Score: {stats.score}  Level: {stats.level}  Lines: {stats.lines}  "
                  f"Phase: {state.phase.value}")
    return "\n".join(result)
