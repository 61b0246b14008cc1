"""
Engine Core - Deterministic game state and transitions.

The core:
1. Defines the immutable GameState
2. Evaluates boards for a winner or a draw
3. Applies moves and resets via the reducer
"""

from .state import (
    GameState,
    Mark,
    Board,
    Score,
    empty_board,
    board_from_string,
    HUMAN_MARK,
    OPPONENT_MARK,
    STARTING_MARK,
)
from .evaluator import Outcome, evaluate, winning_line, empty_cells, WINNING_LINES
from .action import Action, ActionType, ActionResult, GameResult
from .reducer import Reducer, apply_action, apply_move, reset_board, reset_score

__all__ = [
    "GameState",
    "Mark",
    "Board",
    "Score",
    "empty_board",
    "board_from_string",
    "HUMAN_MARK",
    "OPPONENT_MARK",
    "STARTING_MARK",
    "Outcome",
    "evaluate",
    "winning_line",
    "empty_cells",
    "WINNING_LINES",
    "Action",
    "ActionType",
    "ActionResult",
    "GameResult",
    "Reducer",
    "apply_action",
    "apply_move",
    "reset_board",
    "reset_score",
]
