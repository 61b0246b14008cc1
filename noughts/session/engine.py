"""
Game Engine - Owner of the authoritative game state.

The engine:
1. Holds the single current GameState
2. Serializes every transition through one lock
3. Emits each applied transition to its subscribers

Subscribers receive immutable ActionResult snapshots. They are notified,
not consulted: a subscriber cannot veto a transition.
"""

from __future__ import annotations
from typing import Callable
import logging
import threading

from ..engine_core.state import GameState, Mark
from ..engine_core.action import Action, ActionResult, GameResult
from ..engine_core.reducer import apply_action

logger = logging.getLogger(__name__)

Observer = Callable[[ActionResult], None]


class HostCallbacks:
    """
    Adapts the host's two callbacks to an engine subscriber.

    on_move is called with the new state after every transition, resets
    included. on_game_end is called once, on the move that ends a game.
    """

    def __init__(
        self,
        on_move: Callable[[GameState], None] | None = None,
        on_game_end: Callable[[GameResult], None] | None = None,
    ):
        self.on_move = on_move
        self.on_game_end = on_game_end

    def __call__(self, result: ActionResult) -> None:
        if self.on_move:
            self.on_move(result.new_state)
        if result.game_result is not None and self.on_game_end:
            self.on_game_end(result.game_result)


class GameEngine:
    """
    Stateful wrapper around the reducer.

    Usage:
        engine = GameEngine()
        engine.subscribe(HostCallbacks(on_move=render, on_game_end=announce))

        engine.apply_move(0, Mark.X)
        engine.new_game()
    """

    def __init__(self, state: GameState | None = None):
        self._state = state or GameState.new()
        self._lock = threading.RLock()
        self._observers: list[Observer] = []

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def lock(self) -> threading.RLock:
        """The lock every transition holds. Re-entrant."""
        return self._lock

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register a subscriber.

        Returns a callable that unsubscribes it.
        """
        with self._lock:
            self._observers.append(observer)

        def unsubscribe():
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def dispatch(self, action: Action) -> ActionResult:
        """
        Apply an action atomically and notify subscribers if it took effect.

        No-op results are returned but not emitted.
        """
        with self._lock:
            result = apply_action(self._state, action)
            if not result.applied:
                return result

            self._state = result.new_state
            logger.debug(
                "Applied %s (cell=%s), generation=%d, next=%s",
                action.action_type.value,
                action.cell,
                self._state.generation,
                self._state.current_player.value,
            )
            if result.game_result is not None:
                logger.info(
                    "Game %d ended: %s (score %s)",
                    self._state.generation,
                    result.game_result.value,
                    self._state.score,
                )
            self._emit(result)
            return result

    def _emit(self, result: ActionResult) -> None:
        for observer in list(self._observers):
            try:
                observer(result)
            except Exception:
                logger.exception("Observer %r failed", observer)

    def apply_move(self, cell: int, player: Mark | None = None) -> GameState:
        """Place a mark. Returns the resulting (possibly unchanged) state."""
        return self.dispatch(Action.move(cell, player)).new_state

    def reset_board(self) -> GameState:
        """Start a new game, keeping the score."""
        return self.dispatch(Action.reset_board()).new_state

    def new_game(self) -> GameState:
        """Host start signal. Same as reset_board."""
        return self.reset_board()

    def reset_score(self) -> GameState:
        """Zero the score, leave the board alone."""
        return self.dispatch(Action.reset_score()).new_state
