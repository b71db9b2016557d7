# Blocktrix - An SRS Falling-Block Puzzle Engine
# __init__.py for the blocktrix module

from .board import Board, BOARD_WIDTH, BOARD_HEIGHT, VISIBLE_HEIGHT
from .config import GameConfig
from .engine import (
    GameState, Intent, Phase, TetrisEngine,
    advance, apply_intent, hard_drop, hold, menu_state, move_left, move_right,
    new_game, restart, rotate_ccw, rotate_cw, soft_drop, start, toggle_pause,
)
from .exceptions import BlocktrixError, BoardShapeError, ConfigError, InvalidMoveError, InvalidPieceError
from .pieces import ActivePiece, LastAction, PieceType, create_active_piece
from .randomizer import Bag, next_piece
from .rotation import try_rotate
from .scoring import ClearResult, GameStats, TSpin, calculate_score
from .view import GameView, ghost_cells, project, render_text

__version__ = "0.1.0"
