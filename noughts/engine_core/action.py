"""
Action System - Actions and transition results.

Actions represent:
1. Player moves (human or opponent placing a mark)
2. Session resets (new board, zeroed score)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .state import GameState, Mark, HUMAN_MARK, OPPONENT_MARK


class ActionType(Enum):
    """Types of actions in the system."""
    MOVE = "move"
    RESET_BOARD = "reset_board"
    RESET_SCORE = "reset_score"


class GameResult(Enum):
    """Outcome of a finished game, from the human player's point of view."""
    WIN = "win"
    LOSE = "lose"
    DRAW = "draw"

    @classmethod
    def from_winner(cls, winner: Mark | None) -> GameResult:
        if winner == HUMAN_MARK:
            return cls.WIN
        if winner == OPPONENT_MARK:
            return cls.LOSE
        return cls.DRAW


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    For MOVE, `cell` is the target index and `player` optionally names the
    mark expected to be on turn; a move by the wrong side is a no-op.
    """
    action_type: ActionType
    cell: int | None = None
    player: Mark | None = None

    @classmethod
    def move(cls, cell: int, player: Mark | None = None) -> Action:
        """Factory for a move."""
        return cls(action_type=ActionType.MOVE, cell=cell, player=player)

    @classmethod
    def reset_board(cls) -> Action:
        """Factory for a new game on the same session."""
        return cls(action_type=ActionType.RESET_BOARD)

    @classmethod
    def reset_score(cls) -> Action:
        """Factory for zeroing the running score."""
        return cls(action_type=ActionType.RESET_SCORE)


@dataclass(frozen=True)
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - The resulting state (unchanged on a no-op)
    - Whether the action took effect, and why not
    - The game result, on the transition that ended the game

    Results are the snapshots the engine emits to its subscribers.
    """
    action: Action
    new_state: GameState
    previous_state: GameState
    applied: bool = True
    reason: str | None = None
    game_result: GameResult | None = None

    @property
    def game_ended(self) -> bool:
        return self.game_result is not None

    @classmethod
    def noop(cls, action: Action, state: GameState, reason: str) -> ActionResult:
        """Create a result that leaves the state untouched."""
        return cls(
            action=action,
            new_state=state,
            previous_state=state,
            applied=False,
            reason=reason,
        )

    @classmethod
    def transition(
        cls,
        action: Action,
        previous: GameState,
        state: GameState,
        game_result: GameResult | None = None,
    ) -> ActionResult:
        """Create a result for an applied transition."""
        return cls(
            action=action,
            new_state=state,
            previous_state=previous,
            applied=True,
            game_result=game_result,
        )
