# Blocktrix - An SRS Falling-Block Puzzle Engine
# engine.py - Game orchestrator: phases, intents, clock ticks, hold and piece flow

"""
The engine is a set of pure functions from (GameState, input) to a new
GameState. Nothing is mutated in place, so every historical state stays
valid. TetrisEngine wraps one state behind an owned handle for hosts that
prefer a mutable object with callbacks.

Callers own the clock: advance(state, delta_ms) applies gravity and the
lock timer, the intent functions apply discrete inputs.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

from . import lock_delay
from .board import Board
from .config import GameConfig
from .exceptions import InvalidMoveError
from .pieces import ActivePiece, LastAction, PieceType, create_active_piece
from .randomizer import Bag, new_seed, take_next
from .rotation import CLOCKWISE, COUNTER_CLOCKWISE, try_rotate
from .scoring import ClearResult, GameStats, gravity_interval_ms, initial_stats, resolve_lock
from .view import GameView, project, render_text

logger = logging.getLogger(__name__)


class Phase(Enum):
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "gameOver"
    LEVEL_TRANSITION = "levelTransition"


class Intent(Enum):
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    SOFT_DROP = "soft_drop"
    HARD_DROP = "hard_drop"
    ROTATE_CW = "rotate_cw"
    ROTATE_CCW = "rotate_ccw"
    HOLD = "hold"
    TOGGLE_PAUSE = "toggle_pause"
    RESTART = "restart"


@dataclass(frozen=True)
class GameState:
    """Complete state of one game."""
    config: GameConfig
    board: Board
    active: Optional[ActivePiece]
    hold: Optional[PieceType]
    can_hold: bool
    next_queue: Tuple[PieceType, ...]
    bag: Bag
    stats: GameStats
    phase: Phase
    gravity_elapsed: float = 0.0  # Time banked toward the next gravity step
    drop_interval: float = 800.0  # Milliseconds per gravity row at the current level
    transition_remaining: float = 0.0
    last_clear: Optional[ClearResult] = None  # Result of the most recent lock

    @property
    def is_playing(self) -> bool:
        return self.phase == Phase.PLAYING and self.active is not None


def _resolve_seed(config: GameConfig, seed: Optional[int]) -> int:
    if seed is not None:
        return seed
    if config.seed is not None:
        return config.seed
    return new_seed()


def menu_state(config: Optional[GameConfig] = None) -> GameState:
    """An idle game sitting at the menu: empty board, no pieces drawn."""
    config = config or GameConfig()
    return GameState(
        config=config,
        board=Board(),
        active=None,
        hold=None,
        can_hold=True,
        next_queue=(),
        bag=Bag(config.seed if config.seed is not None else 0),  # Replaced by start()
        stats=initial_stats(),
        phase=Phase.MENU,
        drop_interval=gravity_interval_ms(1, config.frame_rate),
    )


def new_game(config: Optional[GameConfig] = None, seed: Optional[int] = None) -> GameState:
    """
    A fresh game in the playing phase. The next queue is filled first, then the
    first piece is taken from its front and the queue is topped up again.
    """
    config = config or GameConfig()
    seed = _resolve_seed(config, seed)
    piece_type, queue, bag = take_next((), Bag(seed), config.next_queue_size)
    logger.debug("New game (seed=%d), first piece %s", seed, piece_type.name)
    return GameState(
        config=config,
        board=Board(),
        active=create_active_piece(piece_type),
        hold=None,
        can_hold=True,
        next_queue=queue,
        bag=bag,
        stats=initial_stats(),
        phase=Phase.PLAYING,
        drop_interval=gravity_interval_ms(1, config.frame_rate),
    )


def start(state: GameState, seed: Optional[int] = None) -> GameState:
    """Leave the menu for a new game. No-op in any other phase."""
    if state.phase != Phase.MENU:
        return state
    return new_game(state.config, seed)


def restart(state: GameState, seed: Optional[int] = None) -> GameState:
    """Throw the game away and start again from scratch with a fresh bag."""
    logger.debug("Restart from phase %s", state.phase.value)
    return new_game(state.config, seed)


def toggle_pause(state: GameState) -> GameState:
    if state.phase == Phase.PLAYING:
        return replace(state, phase=Phase.PAUSED)
    if state.phase == Phase.PAUSED:
        return replace(state, phase=Phase.PLAYING)
    return state


def _game_over(state: GameState, reason: str) -> GameState:
    logger.info("Game over (%s): score=%d level=%d lines=%d",
                reason, state.stats.score, state.stats.level, state.stats.lines)
    return replace(state, active=None, phase=Phase.GAME_OVER)


def _shift(state: GameState, dx: int) -> GameState:
    if not state.is_playing:
        return state
    piece = state.active
    if not state.board.is_valid(piece, dx, 0):
        return state
    moved = piece.translate(dx, 0).replace(last_action=LastAction.MOVED)
    moved = lock_delay.register_move(state.board, piece, moved, state.config)
    return replace(state, active=moved)


def move_left(state: GameState) -> GameState:
    return _shift(state, -1)


def move_right(state: GameState) -> GameState:
    return _shift(state, 1)


def _rotate(state: GameState, direction: int) -> GameState:
    if not state.is_playing:
        return state
    rotated = try_rotate(state.board, state.active, direction)
    if rotated is None:
        return state
    rotated = lock_delay.register_move(state.board, state.active, rotated, state.config)
    return replace(state, active=rotated)


def rotate_cw(state: GameState) -> GameState:
    return _rotate(state, CLOCKWISE)


def rotate_ccw(state: GameState) -> GameState:
    return _rotate(state, COUNTER_CLOCKWISE)


def soft_drop(state: GameState) -> GameState:
    """Move down one row for soft-drop points. Blocked soft drops do nothing."""
    if not state.is_playing or not state.board.is_valid(state.active, 0, -1):
        return state
    piece = state.active.translate(0, -1).replace(lock_delay=0.0, last_action=LastAction.DROPPED)
    stats = replace(state.stats, score=state.stats.score + state.config.soft_drop_points)
    return replace(state, active=piece, stats=stats)


def hard_drop(state: GameState) -> GameState:
    """Drop to the landing pose and lock at once, bypassing the lock timer."""
    if not state.is_playing:
        return state
    piece = state.active
    distance = state.board.drop_distance(piece)
    if distance:
        piece = piece.translate(0, -distance).replace(last_action=LastAction.DROPPED)
    piece = lock_delay.commit(piece, state.config)
    stats = replace(state.stats, score=state.stats.score + distance * state.config.hard_drop_points)
    return _lock_active(replace(state, active=piece, stats=stats))


def hold(state: GameState) -> GameState:
    """
    Store the active piece. An empty hold slot draws the next piece from the
    queue; a full one swaps. Allowed once per locked piece.
    """
    if not state.is_playing or not state.can_hold:
        return state

    queue, bag = state.next_queue, state.bag
    if state.hold is None:
        incoming, queue, bag = take_next(queue, bag, state.config.next_queue_size)
    else:
        incoming = state.hold

    active = create_active_piece(incoming)
    logger.debug("Hold %s, bring in %s", state.active.piece_type.name, incoming.name)
    state = replace(
        state,
        active=active,
        hold=state.active.piece_type,
        can_hold=False,
        next_queue=queue,
        bag=bag,
        gravity_elapsed=0.0,
    )
    if not state.board.is_valid(active):
        return _game_over(state, "block-out after hold")
    return state


def _lock_active(state: GameState) -> GameState:
    """Lock the active piece, clear lines, score, then spawn the next piece."""
    piece = state.active
    config = state.config
    board, stats, result = resolve_lock(state.board, piece, state.stats, config)
    logger.debug("Locked %r", piece)

    state = replace(state, board=board, stats=stats, last_clear=result,
                    active=None, gravity_elapsed=0.0)

    if any(y >= board.visible_height for _, y in piece.cells()):
        return _game_over(state, "lock-out")

    piece_type, queue, bag = take_next(state.next_queue, state.bag, config.next_queue_size)
    active = create_active_piece(piece_type)

    phase, transition = Phase.PLAYING, 0.0
    if result.level_up and config.level_transition_ms > 0:
        phase, transition = Phase.LEVEL_TRANSITION, config.level_transition_ms

    state = replace(
        state,
        active=active,
        next_queue=queue,
        bag=bag,
        can_hold=True,
        phase=phase,
        transition_remaining=transition,
        drop_interval=gravity_interval_ms(stats.level, config.frame_rate),
    )
    if not board.is_valid(active):
        return _game_over(state, "block-out")
    return state


def advance(state: GameState, delta_ms: float) -> GameState:
    """
    Apply delta_ms of game time: gravity first, then the lock timer.
    In the level-transition phase only the transition countdown runs.
    """
    if delta_ms < 0:
        raise ValueError(f"delta_ms must be non-negative, got {delta_ms}")

    if state.phase == Phase.LEVEL_TRANSITION:
        remaining = state.transition_remaining - delta_ms
        if remaining > 0:
            return replace(state, transition_remaining=remaining)
        return replace(state, transition_remaining=0.0, phase=Phase.PLAYING)

    if not state.is_playing:
        return state

    board, piece = state.board, state.active
    gravity_elapsed = state.gravity_elapsed + delta_ms
    while gravity_elapsed >= state.drop_interval:
        if not board.is_valid(piece, 0, -1):
            gravity_elapsed = 0.0
            break
        piece = piece.translate(0, -1).replace(lock_delay=0.0, last_action=LastAction.DROPPED)
        gravity_elapsed -= state.drop_interval

    piece, locked = lock_delay.tick(board, piece, delta_ms, state.config)
    state = replace(state, active=piece, gravity_elapsed=gravity_elapsed)
    if locked:
        return _lock_active(state)
    return state


_INTENT_HANDLERS: Dict[Intent, Callable[[GameState], GameState]] = {
    Intent.MOVE_LEFT: move_left,
    Intent.MOVE_RIGHT: move_right,
    Intent.SOFT_DROP: soft_drop,
    Intent.HARD_DROP: hard_drop,
    Intent.ROTATE_CW: rotate_cw,
    Intent.ROTATE_CCW: rotate_ccw,
    Intent.HOLD: hold,
    Intent.TOGGLE_PAUSE: toggle_pause,
    Intent.RESTART: restart,
}

# Short input names accepted by TetrisEngine, alongside the Intent values
INPUT_ALIASES: Dict[str, Intent] = {
    'left': Intent.MOVE_LEFT,
    'right': Intent.MOVE_RIGHT,
    'pause': Intent.TOGGLE_PAUSE,
    **{intent.value: intent for intent in Intent},
}


def apply_intent(state: GameState, intent: Intent) -> GameState:
    """Apply one discrete input. Illegal inputs return the state unchanged."""
    return _INTENT_HANDLERS[intent](state)


def to_intent(action: Union[Intent, str]) -> Intent:
    if isinstance(action, Intent):
        return action
    try:
        return INPUT_ALIASES[action]
    except KeyError:
        raise InvalidMoveError(f"Unknown input: {action!r}") from None


class TetrisEngine:
    """
    Owned handle around a GameState for hosts that want a mutable object.
    Each call replaces the held state with the next one and fires callbacks
    for what happened in between.
    """

    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None,
                 start_in_menu: bool = False):
        self.config = config or GameConfig()
        self.state = menu_state(self.config) if start_in_menu else new_game(self.config, seed)

        # Callbacks
        self.on_piece_locked: Optional[Callable[[ClearResult], None]] = None
        self.on_line_cleared: Optional[Callable[[int, Tuple[int, ...]], None]] = None
        self.on_level_up: Optional[Callable[[int], None]] = None
        self.on_game_over: Optional[Callable[[GameStats], None]] = None

    def _commit(self, new_state: GameState) -> GameState:
        old_state, self.state = self.state, new_state

        result = new_state.last_clear
        if result is not None and result is not old_state.last_clear:
            if self.on_piece_locked:
                self.on_piece_locked(result)
            if result.lines and self.on_line_cleared:
                self.on_line_cleared(result.lines, result.rows)
            if result.level_up and self.on_level_up:
                self.on_level_up(new_state.stats.level)

        if old_state.phase != Phase.GAME_OVER and new_state.phase == Phase.GAME_OVER:
            if self.on_game_over:
                self.on_game_over(new_state.stats)
        return new_state

    def apply(self, action: Union[Intent, str]) -> GameState:
        """Apply a discrete input."""
        return self._commit(apply_intent(self.state, to_intent(action)))

    def update(self, delta_ms: float, inputs: Optional[Iterable[Union[Intent, str]]] = None) -> GameState:
        """Apply the frame's inputs in order, then advance the clock."""
        for action in inputs or ():
            self.apply(action)
        return self._commit(advance(self.state, delta_ms))

    def start(self, seed: Optional[int] = None) -> GameState:
        return self._commit(start(self.state, seed))

    def reset(self, seed: Optional[int] = None) -> GameState:
        """Reset the game to initial state."""
        return self._commit(restart(self.state, seed))

    @property
    def board(self) -> Board:
        return self.state.board

    @property
    def current_piece(self) -> Optional[ActivePiece]:
        return self.state.active

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def game_over(self) -> bool:
        return self.state.phase == Phase.GAME_OVER

    def view(self) -> GameView:
        return project(self.state)

    def get_stats(self) -> Dict[str, object]:
        """Get current game statistics."""
        stats = self.state.stats
        return {
            'score': stats.score,
            'level': stats.level,
            'lines': stats.lines,
            'lines_until_next': stats.lines_until_next,
            'back_to_back': stats.back_to_back,
            'phase': self.state.phase.value,
            'hold': self.state.hold.name if self.state.hold else None,
            'next': [piece.name for piece in self.state.next_queue],
            'game_over': self.game_over,
        }

    def __str__(self):
        return render_text(self.state)


if __name__ == '__main__':
    import random

    engine = TetrisEngine(GameConfig(seed=7))
    engine.on_line_cleared = lambda lines, rows: print(f"Cleared {lines} line(s): rows {list(rows)}")
    engine.on_game_over = lambda stats: print(f"Game over with {stats.score} points")

    intents = [Intent.MOVE_LEFT, Intent.MOVE_RIGHT, Intent.ROTATE_CW, Intent.ROTATE_CCW, Intent.HARD_DROP]
    frame = 0
    while not engine.game_over and frame < 5000:
        frame += 1
        inputs = [random.choice(intents)] if frame % 10 == 0 else []
        engine.update(1000 / 60, inputs)
        if frame % 500 == 0:
            print(f"\nFrame: {frame}  {engine.get_stats()}")
            print(engine)
