"""
Reducer - Applies actions to game state.

The reducer is the single point of state transition.
All state changes must go through apply_action() or the helpers below.

Design principles:
- Pure function: (state, action) -> ActionResult
- Validates before applying
- Illegal input is a silent no-op: the result carries the unchanged state
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .state import GameState, Mark, Score, BOARD_SIZE, empty_board, STARTING_MARK
from .action import Action, ActionType, ActionResult, GameResult
from .evaluator import evaluate

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the new state, or the unchanged state
        and a reason if the action did not take effect.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            raise ValueError(f"No handler for action type: {action.action_type}")

        result = handler(state, action)
        if not result.applied:
            logger.debug("Ignored %s: %s", action.action_type.value, result.reason)
        return result

    def _validate_move(self, state: GameState, action: Action) -> str | None:
        """
        Validate that a move is legal in the current state.

        Returns reason if it is not, None if it is.
        """
        if state.game_over:
            return "Game is over - no moves allowed"

        cell = action.cell
        if cell is None or not (0 <= cell < BOARD_SIZE):
            return f"Cell {cell} is out of range"

        if not state.board[cell].is_empty:
            return f"Cell {cell} is already occupied by {state.board[cell].value}"

        if action.player is not None and action.player != state.current_player:
            return f"Not {action.player.value}'s turn"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.MOVE: self._handle_move,
            ActionType.RESET_BOARD: self._handle_reset_board,
            ActionType.RESET_SCORE: self._handle_reset_score,
        }
        return handlers.get(action_type)

    def _handle_move(self, state: GameState, action: Action) -> ActionResult:
        """Place the current player's mark and settle the outcome."""
        reason = self._validate_move(state, action)
        if reason:
            return ActionResult.noop(action, state, reason)

        mover = state.current_player
        board = list(state.board)
        board[action.cell] = mover
        new_board = tuple(board)

        outcome = evaluate(new_board)
        game_over = outcome.is_final

        if game_over:
            # The finishing mover stays current; no one moves after this
            new_state = state._copy_with(
                board=new_board,
                winner=outcome.winner,
                game_over=True,
                score=state.score.record(outcome.winner),
            )
            return ActionResult.transition(
                action, state, new_state,
                game_result=GameResult.from_winner(outcome.winner),
            )

        new_state = state._copy_with(
            board=new_board,
            current_player=mover.opposite(),
        )
        return ActionResult.transition(action, state, new_state)

    def _handle_reset_board(self, state: GameState, action: Action) -> ActionResult:
        """Start a new game, keeping the score."""
        new_state = GameState(
            board=empty_board(),
            current_player=STARTING_MARK,
            winner=None,
            game_over=False,
            score=state.score,
            generation=state.generation + 1,
        )
        return ActionResult.transition(action, state, new_state)

    def _handle_reset_score(self, state: GameState, action: Action) -> ActionResult:
        """Zero the score, leave the board alone."""
        new_state = state._copy_with(score=Score())
        return ActionResult.transition(action, state, new_state)


_REDUCER = Reducer()


def apply_action(state: GameState, action: Action) -> ActionResult:
    """Convenience function to apply an action."""
    return _REDUCER.apply(state, action)


def apply_move(state: GameState, cell: int, player: Mark | None = None) -> ActionResult:
    """Apply a move by the side on turn (or by `player`, if it is on turn)."""
    return apply_action(state, Action.move(cell, player))


def reset_board(state: GameState) -> ActionResult:
    """Empty the board for a new game, carrying the score forward."""
    return apply_action(state, Action.reset_board())


def reset_score(state: GameState) -> ActionResult:
    """Zero the score without touching the board."""
    return apply_action(state, Action.reset_score())
