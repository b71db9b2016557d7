# Blocktrix - An SRS Falling-Block Puzzle Engine
# scoring.py - T-spin detection, line clears, score, levels and gravity

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from .board import Board
from .config import GameConfig
from .pieces import ActivePiece, LastAction, PieceType

logger = logging.getLogger(__name__)


class TSpin(Enum):
    NONE = "none"
    MINI = "mini"
    FULL = "full"


BASE_SCORES = {
    'SINGLE': 100,
    'DOUBLE': 300,
    'TRIPLE': 500,
    'TETRIS': 800,
    'T_SPIN_SINGLE': 800,
    'T_SPIN_DOUBLE': 1200,
    'T_SPIN_TRIPLE': 1600,
}

_LINE_SCORES = {
    1: BASE_SCORES['SINGLE'],
    2: BASE_SCORES['DOUBLE'],
    3: BASE_SCORES['TRIPLE'],
    4: BASE_SCORES['TETRIS'],
}

_T_SPIN_SCORES = {
    1: BASE_SCORES['T_SPIN_SINGLE'],
    2: BASE_SCORES['T_SPIN_DOUBLE'],
    3: BASE_SCORES['T_SPIN_TRIPLE'],
}

BACK_TO_BACK_NUMERATOR, BACK_TO_BACK_DENOMINATOR = 3, 2  # x1.5, floored

# Gravity speeds (frames per row at 60 FPS). A level uses the entry of the
# highest key not above it.
GRAVITY_FRAMES: Dict[int, int] = {
    1: 48,   # 0.8 seconds
    2: 43,
    3: 38,
    4: 33,
    5: 28,
    6: 23,
    7: 18,
    8: 13,
    9: 8,
    10: 6,
    13: 5,
    16: 4,
    19: 3,
    29: 2,
    30: 1,   # 1/60 second
}

# T-piece diagonal corners relative to its center (x + 1, y + 1), and the two
# "front" corners on the side the nub points at, per rotation state. Masks
# are laid bottom-up, so state 0 has its nub below the center.
T_CORNERS = ((-1, -1), (1, -1), (-1, 1), (1, 1))
T_FRONT_CORNERS = {
    0: ((-1, -1), (1, -1)),
    1: ((1, -1), (1, 1)),
    2: ((-1, 1), (1, 1)),
    3: ((-1, -1), (-1, 1)),
}

LAST_KICK_INDEX = 4


@dataclass(frozen=True)
class GameStats:
    score: int = 0
    level: int = 1
    lines: int = 0
    lines_until_next: int = 10
    back_to_back: bool = False  # Last line clear was a Tetris or T-spin


@dataclass(frozen=True)
class ClearResult:
    """What one lock did to the board and the score."""
    rows: Tuple[int, ...] = ()
    t_spin: TSpin = TSpin.NONE
    score: int = 0
    back_to_back: bool = False  # The x1.5 bonus was applied
    level_up: bool = False

    @property
    def lines(self) -> int:
        return len(self.rows)


def lines_required(level: int) -> int:
    """Lines needed to clear the given level."""
    if level <= 9:
        return 10
    if level <= 15:
        return 20
    return 30


def gravity_frames(level: int) -> int:
    """Frames per row for a level."""
    frames = GRAVITY_FRAMES[1]
    for start_level in sorted(GRAVITY_FRAMES):
        if start_level > level:
            break
        frames = GRAVITY_FRAMES[start_level]
    return frames


def gravity_interval_ms(level: int, frame_rate: int = 60) -> float:
    """Milliseconds between gravity steps at a level."""
    return gravity_frames(level) * 1000.0 / frame_rate


def _corner_blocked(board: Board, x: int, y: int) -> bool:
    # Out of horizontal bounds, below the floor, or filled
    return board.is_occupied(x, y)


def classify_t_spin(board: Board, piece: ActivePiece,
                    config: Optional[GameConfig] = None) -> TSpin:
    """
    3-corner T-spin rule, evaluated on the board before the piece locks.
    Needs a T whose last successful action was a rotation and at least 3 of
    the 4 diagonal corners around its center blocked. Both front corners
    blocked makes it a mini, otherwise a full T-spin.
    """
    if piece.piece_type != PieceType.T or piece.last_action != LastAction.ROTATED:
        return TSpin.NONE

    cx, cy = piece.x + 1, piece.y + 1
    blocked = sum(1 for dx, dy in T_CORNERS if _corner_blocked(board, cx + dx, cy + dy))
    if blocked < 3:
        return TSpin.NONE

    front = T_FRONT_CORNERS[piece.rotation]
    if not all(_corner_blocked(board, cx + dx, cy + dy) for dx, dy in front):
        return TSpin.FULL

    if config is not None and config.t_spin_kick_upgrade and piece.last_kick == LAST_KICK_INDEX:
        return TSpin.FULL
    return TSpin.MINI


def calculate_score(lines_cleared: int, level: int, is_t_spin: bool = False) -> int:
    """Score for a line clear: base value times (level + 1)."""
    table = _T_SPIN_SCORES if is_t_spin else _LINE_SCORES
    return table.get(lines_cleared, 0) * (level + 1)


def is_difficult(lines_cleared: int, t_spin: TSpin) -> bool:
    """Tetrises and full T-spin line clears feed the back-to-back chain."""
    if lines_cleared <= 0:
        return False
    return lines_cleared == 4 or t_spin == TSpin.FULL


def update_stats(stats: GameStats, lines_cleared: int) -> GameStats:
    """Add cleared lines and advance the level once the quota is met."""
    level = stats.level
    lines_until_next = stats.lines_until_next - lines_cleared
    while lines_until_next <= 0:
        level += 1
        lines_until_next = lines_required(level)
    return replace(
        stats,
        lines=stats.lines + lines_cleared,
        level=level,
        lines_until_next=lines_until_next,
    )


def initial_stats() -> GameStats:
    return GameStats(score=0, level=1, lines=0, lines_until_next=lines_required(1))


def resolve_lock(board: Board, piece: ActivePiece, stats: GameStats,
                 config: Optional[GameConfig] = None) -> Tuple[Board, GameStats, ClearResult]:
    """
    Lock a piece and settle everything that follows from it: T-spin
    classification, row detection and compaction, score, back-to-back,
    lines and level. Returns the new board, new stats and a summary.
    """
    t_spin = classify_t_spin(board, piece, config)

    locked = board.lock(piece)
    rows = locked.completed_rows()
    cleared = locked.clear_rows(rows)
    lines = len(rows)

    points = calculate_score(lines, stats.level, t_spin == TSpin.FULL)
    difficult = is_difficult(lines, t_spin)
    back_to_back = difficult and stats.back_to_back
    if back_to_back:
        points = points * BACK_TO_BACK_NUMERATOR // BACK_TO_BACK_DENOMINATOR

    new_stats = update_stats(stats, lines)
    new_stats = replace(
        new_stats,
        score=stats.score + points,
        back_to_back=difficult if lines else stats.back_to_back,
    )
    level_up = new_stats.level != stats.level

    if lines:
        logger.debug("Cleared rows %s (t-spin=%s, b2b=%s) for %d points",
                     rows, t_spin.value, back_to_back, points)
    if level_up:
        logger.debug("Level up: %d -> %d", stats.level, new_stats.level)

    return cleared, new_stats, ClearResult(tuple(rows), t_spin, points, back_to_back, level_up)
