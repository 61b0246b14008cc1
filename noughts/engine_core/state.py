"""
Game State - Immutable snapshot of a tic-tac-toe session.

Design principles:
- Immutable: every transition returns a new state
- Comparable: equal boards, turns, results and scores compare equal
- Session-scoped: nothing here is persisted
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum


BOARD_SIZE = 9
CENTER = 4
CORNERS = (0, 2, 6, 8)


class Mark(Enum):
    """Cell contents. X always moves first and belongs to the human."""
    X = "X"
    O = "O"
    EMPTY = ""

    def opposite(self) -> Mark:
        """Get the other player's mark."""
        if self == Mark.X:
            return Mark.O
        if self == Mark.O:
            return Mark.X
        raise ValueError("EMPTY has no opposite")

    @property
    def is_empty(self) -> bool:
        return self == Mark.EMPTY


HUMAN_MARK = Mark.X
OPPONENT_MARK = Mark.O
STARTING_MARK = Mark.X

# Row-major, index 0-8
Board = tuple[Mark, ...]


def empty_board() -> Board:
    """Create a board with all nine cells empty."""
    return (Mark.EMPTY,) * BOARD_SIZE


def board_from_string(layout: str) -> Board:
    """
    Build a board from a compact string such as "XO_ _X_ O__".

    'X' and 'O' are marks, '_' or '.' is an empty cell; whitespace is ignored.
    """
    cells = [c for c in layout if not c.isspace()]
    if len(cells) != BOARD_SIZE:
        raise ValueError(f"Board layout must have {BOARD_SIZE} cells, got {len(cells)}")

    board = []
    for c in cells:
        if c.upper() == "X":
            board.append(Mark.X)
        elif c.upper() == "O":
            board.append(Mark.O)
        elif c in "_.":
            board.append(Mark.EMPTY)
        else:
            raise ValueError(f"Invalid cell character: {c!r}")
    return tuple(board)


@dataclass(frozen=True)
class Score:
    """
    Running score for the session.

    Survives board resets; only reset_score zeroes it.
    """
    player_wins: int = 0
    opponent_wins: int = 0
    draws: int = 0

    @property
    def games_played(self) -> int:
        return self.player_wins + self.opponent_wins + self.draws

    def record(self, winner: Mark | None) -> Score:
        """Return new score with one finished game counted."""
        if winner == HUMAN_MARK:
            return replace(self, player_wins=self.player_wins + 1)
        if winner == OPPONENT_MARK:
            return replace(self, opponent_wins=self.opponent_wins + 1)
        return replace(self, draws=self.draws + 1)


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.

    Invariants:
    - game_over is True iff winner is set or the board has no empty cell
    - current_player alternates on every applied move, except the final one
    - generation increases by one on every board reset and is left out of
      equality; it tells two games apart that reach the same position
    """
    board: Board = field(default_factory=empty_board)
    current_player: Mark = STARTING_MARK
    winner: Mark | None = None
    game_over: bool = False
    score: Score = field(default_factory=Score)
    generation: int = field(default=0, compare=False)

    @classmethod
    def new(cls, score: Score | None = None, generation: int = 0) -> GameState:
        """Create a fresh game, optionally carrying a score forward."""
        return cls(score=score or Score(), generation=generation)

    @property
    def move_count(self) -> int:
        """Number of marks on the board."""
        return sum(1 for cell in self.board if not cell.is_empty)

    @property
    def is_full(self) -> bool:
        return all(not cell.is_empty for cell in self.board)

    @property
    def is_draw(self) -> bool:
        return self.game_over and self.winner is None

    def is_turn_of(self, mark: Mark) -> bool:
        """True if `mark` is the side to move in a game still running."""
        return not self.game_over and self.current_player == mark

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def render(self) -> str:
        """Render the board as three text rows, empty cells shown as their 1-9 key."""
        rows = []
        for r in range(3):
            cells = []
            for c in range(3):
                idx = r * 3 + c
                mark = self.board[idx]
                cells.append(mark.value if not mark.is_empty else str(idx + 1))
            rows.append(" " + " | ".join(cells))
        return "\n---+---+---\n".join(rows)
