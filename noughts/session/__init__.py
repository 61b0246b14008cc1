"""
Session Module - Stateful side of the game.

A session represents one player's sitting at the board:
- Created when the host starts playing
- Holds the engine (current state) and the opponent's coordinator
- Keeps the running score across new games
- Destroyed when the host is done

Sessions are EPHEMERAL: nothing is written anywhere.
"""

from .engine import GameEngine, HostCallbacks, Observer
from .coordinator import MoveCoordinator, CoordinatorState, THINKING_DELAY_SECONDS
from .manager import SessionManager, Session, SessionState
from .announcer import Voice, game_start_message, game_end_message

__all__ = [
    "GameEngine",
    "HostCallbacks",
    "Observer",
    "MoveCoordinator",
    "CoordinatorState",
    "THINKING_DELAY_SECONDS",
    "SessionManager",
    "Session",
    "SessionState",
    "Voice",
    "game_start_message",
    "game_end_message",
]
