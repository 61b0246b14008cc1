"""
Outcome Evaluator - Decides whether a board is won, drawn, or still open.

Pure functions over a 9-cell board. Any 9-cell input is valid.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .state import Board, Mark


# All winning lines, checked in this order
WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    # Rows
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    # Columns
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    # Diagonals
    (0, 4, 8),
    (2, 4, 6),
)


@dataclass(frozen=True)
class Outcome:
    """Result of evaluating a board."""
    winner: Optional[Mark] = None
    is_draw: bool = False

    @property
    def is_final(self) -> bool:
        return self.winner is not None or self.is_draw


def _line_owner(board: Board, line: tuple[int, int, int]) -> Optional[Mark]:
    a, b, c = line
    if not board[a].is_empty and board[a] == board[b] == board[c]:
        return board[a]
    return None


def winning_line(board: Board) -> Optional[tuple[int, int, int]]:
    """Get the first completed line, or None."""
    for line in WINNING_LINES:
        if _line_owner(board, line) is not None:
            return line
    return None


def evaluate(board: Board) -> Outcome:
    """
    Evaluate a board.

    Returns the mark owning the first completed line (by the fixed line
    order), and is_draw when there is no winner and no empty cell.
    """
    for line in WINNING_LINES:
        owner = _line_owner(board, line)
        if owner is not None:
            return Outcome(winner=owner, is_draw=False)

    is_full = all(not cell.is_empty for cell in board)
    return Outcome(winner=None, is_draw=is_full)


def empty_cells(board: Board) -> list[int]:
    """Indices of empty cells, ascending."""
    return [i for i, cell in enumerate(board) if cell.is_empty]
