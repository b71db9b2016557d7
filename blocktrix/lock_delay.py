# Blocktrix - An SRS Falling-Block Puzzle Engine
# lock_delay.py - Falling -> Locking -> Locked timer with capped move resets

from enum import Enum
from typing import Tuple

from .board import Board
from .config import GameConfig
from .pieces import ActivePiece


class LockState(Enum):
    FALLING = "falling"
    LOCKING = "locking"
    LOCKED = "locked"


def is_grounded(board: Board, piece: ActivePiece) -> bool:
    """True when the piece cannot move down one row."""
    return not board.is_valid(piece, 0, -1)


def lock_state(board: Board, piece: ActivePiece, config: GameConfig) -> LockState:
    if not is_grounded(board, piece):
        return LockState.FALLING
    if piece.lock_delay >= config.lock_delay_ms:
        return LockState.LOCKED
    return LockState.LOCKING


def tick(board: Board, piece: ActivePiece, elapsed_ms: float,
         config: GameConfig) -> Tuple[ActivePiece, bool]:
    """
    Advance the lock timer by elapsed_ms.
    Returns (piece, locked). An airborne piece has its timer cleared; a
    grounded piece accumulates time and locks once it reaches the delay,
    however many moves it still has available.
    """
    if not is_grounded(board, piece):
        if piece.lock_delay == 0:
            return piece, False
        return piece.replace(lock_delay=0.0), False

    lock_delay = piece.lock_delay + elapsed_ms
    piece = piece.replace(lock_delay=lock_delay)
    return piece, lock_delay >= config.lock_delay_ms


def register_move(board: Board, before: ActivePiece, after: ActivePiece,
                  config: GameConfig) -> ActivePiece:
    """
    Apply the move-reset rule after a successful horizontal move or rotation.

    While the piece is grounded (before or after the move) and fewer than
    max_move_resets resets have been spent, the timer restarts and a reset is
    counted. Once the resets are spent the timer keeps running.
    """
    grounded = is_grounded(board, before) or is_grounded(board, after)
    if grounded and before.move_resets < config.max_move_resets:
        return after.replace(lock_delay=0.0, move_resets=before.move_resets + 1)
    return after.replace(lock_delay=before.lock_delay)


def commit(piece: ActivePiece, config: GameConfig) -> ActivePiece:
    """Tag a hard-dropped piece as fully committed: timer expired, no resets left."""
    return piece.replace(lock_delay=config.lock_delay_ms, move_resets=config.max_move_resets)
