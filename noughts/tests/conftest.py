"""
Pytest fixtures for Noughts tests.
"""

import pytest

from ..engine_core.state import GameState, Mark, board_from_string
from ..engine_core.reducer import apply_move
from ..session import GameEngine


def play_moves(state: GameState, cells) -> GameState:
    """Apply a sequence of moves, alternating sides, asserting each one lands."""
    for cell in cells:
        result = apply_move(state, cell)
        assert result.applied, f"move {cell} was rejected: {result.reason}"
        state = result.new_state
    return state


def state_with_board(layout: str, to_move: Mark = Mark.O) -> GameState:
    """A running game with the given board and side to move."""
    return GameState(board=board_from_string(layout), current_player=to_move)


# X0 O3 X1 O4 X2: X completes the top row
X_WINS = [0, 3, 1, 4, 2]

# X0 O3 X1 O4 X8 O5: O completes the middle row
O_WINS = [0, 3, 1, 4, 8, 5]

# Ends X O X / X O O / O X X with no line
DRAW = [0, 1, 2, 4, 3, 5, 7, 6, 8]


@pytest.fixture
def new_state() -> GameState:
    """Fresh game, X to move."""
    return GameState.new()


@pytest.fixture
def x_won_state(new_state) -> GameState:
    return play_moves(new_state, X_WINS)


@pytest.fixture
def drawn_state(new_state) -> GameState:
    return play_moves(new_state, DRAW)


@pytest.fixture
def engine() -> GameEngine:
    """Engine with no coordinator attached."""
    return GameEngine()
