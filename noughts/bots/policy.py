"""
Bot Policy - Interface and heuristic for the opponent's decisions.

A BotPolicy takes a board and the mark it plays, and returns a decision.
Decisions include:
- Which cell to take (or None when the board is full)
- Which rule produced it (for UI/debugging)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from ..engine_core.state import Board, Mark, CENTER, CORNERS
from ..engine_core.evaluator import evaluate, empty_cells


class MoveRule(Enum):
    """Heuristic rules, in priority order."""
    WIN = "win"
    BLOCK = "block"
    CENTER = "center"
    CORNER = "corner"
    ANY = "any"
    NO_MOVE = "no_move"


RULE_EXPLANATIONS = {
    MoveRule.WIN: "Completes a line",
    MoveRule.BLOCK: "Blocks the opponent's line",
    MoveRule.CENTER: "Takes the center",
    MoveRule.CORNER: "Takes a corner",
    MoveRule.ANY: "Takes the first free cell",
    MoveRule.NO_MOVE: "Board is full",
}


@dataclass(frozen=True)
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The cell to play, or None if there is no legal move
    - The rule that chose it
    - Explanation (for UI/debugging)
    """
    cell: int | None
    rule: MoveRule
    explanation: str = ""

    @property
    def has_move(self) -> bool:
        return self.cell is not None


def _completing_cell(board: Board, mark: Mark, candidates: list[int]) -> int | None:
    """Lowest candidate cell where `mark` would complete a line."""
    for i in candidates:
        trial = list(board)
        trial[i] = mark
        if evaluate(tuple(trial)).winner == mark:
            return i
    return None


def decide(board: Board, opponent_mark: Mark, player_mark: Mark | None = None) -> BotDecision:
    """
    Run the heuristic and report which rule fired.

    Rules, first match wins:
    1. Win now: lowest empty cell that completes a line for opponent_mark
    2. Block: lowest empty cell that would complete a line for player_mark
    3. Center, if empty
    4. Lowest empty corner of 0, 2, 6, 8
    5. Lowest empty cell
    """
    if player_mark is None:
        player_mark = opponent_mark.opposite()

    free = empty_cells(board)
    if not free:
        return BotDecision(None, MoveRule.NO_MOVE, RULE_EXPLANATIONS[MoveRule.NO_MOVE])

    cell = _completing_cell(board, opponent_mark, free)
    if cell is not None:
        return BotDecision(cell, MoveRule.WIN, RULE_EXPLANATIONS[MoveRule.WIN])

    cell = _completing_cell(board, player_mark, free)
    if cell is not None:
        return BotDecision(cell, MoveRule.BLOCK, RULE_EXPLANATIONS[MoveRule.BLOCK])

    if board[CENTER].is_empty:
        return BotDecision(CENTER, MoveRule.CENTER, RULE_EXPLANATIONS[MoveRule.CENTER])

    for corner in CORNERS:
        if board[corner].is_empty:
            return BotDecision(corner, MoveRule.CORNER, RULE_EXPLANATIONS[MoveRule.CORNER])

    return BotDecision(free[0], MoveRule.ANY, RULE_EXPLANATIONS[MoveRule.ANY])


def choose_move(board: Board, opponent_mark: Mark, player_mark: Mark | None = None) -> int | None:
    """Cell the opponent would play, or None if the board is full."""
    return decide(board, opponent_mark, player_mark).cell


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects a cell.
    """

    @abstractmethod
    def select_move(self, board: Board, mark: Mark) -> BotDecision:
        """
        Select a cell for `mark` to play.

        Args:
            board: Current board
            mark: The mark the bot plays

        Returns:
            BotDecision with the selected cell
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class HeuristicPolicy(BotPolicy):
    """
    Greedy one-ply heuristic: win, block, center, corner, anything.

    Deterministic. Used by the move coordinator and for host suggestions.
    """

    def select_move(self, board: Board, mark: Mark) -> BotDecision:
        return decide(board, mark, mark.opposite())
