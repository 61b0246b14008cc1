"""
Tests for board evaluation.

Tests:
- Every winning line is recognized
- Line order decides between two completed lines
- Draw detection
"""

import pytest

from ..engine_core.state import Mark, empty_board, board_from_string
from ..engine_core.evaluator import (
    Outcome,
    WINNING_LINES,
    evaluate,
    winning_line,
    empty_cells,
)


class TestEvaluate:
    """Tests for evaluate()."""

    def test_empty_board_is_open(self):
        """Empty board has no winner and is not a draw."""
        assert evaluate(empty_board()) == Outcome(winner=None, is_draw=False)

    @pytest.mark.parametrize("line", WINNING_LINES)
    @pytest.mark.parametrize("mark", [Mark.X, Mark.O])
    def test_each_line_wins(self, line, mark):
        """Three equal marks on any line win."""
        board = list(empty_board())
        for i in line:
            board[i] = mark
        outcome = evaluate(tuple(board))

        assert outcome.winner == mark
        assert not outcome.is_draw
        assert outcome.is_final

    def test_eight_lines(self):
        """3 rows, 3 columns, 2 diagonals."""
        assert len(WINNING_LINES) == 8
        assert len(set(WINNING_LINES)) == 8

    def test_two_in_a_row_is_not_a_win(self):
        """A line with an empty cell does not count."""
        board = board_from_string("XX_ OO_ ___")
        assert evaluate(board).winner is None

    def test_mixed_line_is_not_a_win(self):
        """A full line of mixed marks does not count."""
        board = board_from_string("XOX ___ ___")
        assert evaluate(board).winner is None

    def test_first_line_in_order_wins(self):
        """When two lines are complete, the earlier one decides."""
        board = board_from_string("OOO XXX ___")
        assert evaluate(board).winner == Mark.O
        assert winning_line(board) == (0, 1, 2)

    def test_full_board_without_line_is_draw(self):
        """Full board and no line means draw."""
        board = board_from_string("XOX XOO OXX")
        outcome = evaluate(board)

        assert outcome.winner is None
        assert outcome.is_draw

    def test_full_board_with_line_is_not_draw(self):
        """A win on the last cell is a win, not a draw."""
        board = board_from_string("XXX OOX OXO")
        outcome = evaluate(board)

        assert outcome.winner == Mark.X
        assert not outcome.is_draw


class TestHelpers:
    """Tests for winning_line() and empty_cells()."""

    def test_winning_line_diagonal(self):
        board = board_from_string("O_X _X_ X_O")
        assert winning_line(board) == (2, 4, 6)

    def test_no_winning_line(self):
        assert winning_line(empty_board()) is None

    def test_empty_cells_ascending(self):
        board = board_from_string("X_O _X_ ___")
        assert empty_cells(board) == [1, 3, 5, 6, 7, 8]

    def test_board_from_string_rejects_bad_input(self):
        with pytest.raises(ValueError):
            board_from_string("XO")
        with pytest.raises(ValueError):
            board_from_string("XOZ ___ ___")
