"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Host starts a session -> engine + coordinator created (in-memory only)
2. During play:
   - Host submits the human's moves
   - Coordinator answers with the opponent's moves after a delay
   - Host may start a new game or reset the score at any time
3. Session ends -> pending move cancelled, session dropped

PERSISTENCE RULES:
- NO database
- Only the running score survives a new game, and only within the session
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import asyncio
import logging
import time
import uuid

from ..engine_core.state import GameState, HUMAN_MARK, OPPONENT_MARK
from ..bots.policy import BotPolicy, HeuristicPolicy
from .announcer import Voice
from .coordinator import MoveCoordinator, THINKING_DELAY_SECONDS
from .engine import GameEngine, Observer

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The engine owning the current GameState
    - The coordinator playing the opponent
    - Presentation settings for the host

    State is NOT persisted.
    """
    session_id: str
    engine: GameEngine
    coordinator: MoveCoordinator
    created_at: float
    voice: Voice = Voice.ASSISTANT

    state: SessionState = SessionState.ACTIVE

    @property
    def game_state(self) -> GameState:
        return self.engine.state

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def is_human_turn(self) -> bool:
        return self.game_state.is_turn_of(HUMAN_MARK)

    def is_opponent_turn(self) -> bool:
        return self.game_state.is_turn_of(OPPONENT_MARK)


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions
    - Track active sessions
    - Clean up ended and stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(
        self,
        thinking_delay: float = THINKING_DELAY_SECONDS,
        policy: BotPolicy | None = None,
    ):
        self.thinking_delay = thinking_delay
        self.policy = policy or HeuristicPolicy()
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        thinking_delay: float | None = None,
        voice: Voice = Voice.ASSISTANT,
        observers: list[Observer] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            thinking_delay: Opponent delay in seconds (manager default if None)
            voice: Host voice for announcements
            observers: Extra engine subscribers (host callbacks)
            loop: Event loop the coordinator schedules on (the running loop if None)

        Returns:
            New Session with an empty board, human to move
        """
        session_id = str(uuid.uuid4())
        delay = self.thinking_delay if thinking_delay is None else thinking_delay

        engine = GameEngine()
        coordinator = MoveCoordinator(
            engine,
            policy=self.policy,
            opponent_mark=OPPONENT_MARK,
            delay=delay,
            loop=loop,
        )
        for observer in observers or []:
            engine.subscribe(observer)

        session = Session(
            session_id=session_id,
            engine=engine,
            coordinator=coordinator,
            created_at=time.time(),
            voice=Voice(voice),
        )

        self._sessions[session_id] = session
        logger.info("Session %s created (delay=%.2fs, voice=%s)", session_id, delay, session.voice.value)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """
        End a session and clean up.

        Cancels the pending opponent move. Returns False if no such session.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False

        session.coordinator.close()
        session.state = SessionState.ENDED
        logger.info("Session %s ended", session_id)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions. Ended sessions are dropped on end."""
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions older than max_age.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id)
        return len(to_remove)

    def end_all(self) -> None:
        """End every session (server shutdown)."""
        for session_id in list(self._sessions):
            self.end_session(session_id)
