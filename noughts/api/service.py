"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Formats responses for the host

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Union

from .schemas import (
    CreateSessionRequest,
    MoveRequest,
    SessionResponse,
    GameStateResponse,
    MoveResponse,
    SuggestionResponse,
    ErrorResponse,
    ErrorCode,
    ScoreInfo,
    SessionStatus,
)
from ..engine_core.state import HUMAN_MARK
from ..engine_core.action import Action
from ..engine_core.evaluator import winning_line
from ..bots.policy import decide
from ..session import SessionManager, Session, Observer
from ..session.announcer import game_start_message, game_end_message


@dataclass
class APIService:
    """
    Main API service for hosts.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest())
        response = service.make_move(session.session_id, MoveRequest(cell=4))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    def create_session(
        self,
        request: CreateSessionRequest,
        observers: list[Observer] | None = None,
    ) -> SessionResponse:
        """Create a new game session. The human moves first."""
        session = self.session_manager.create_session(
            thinking_delay=request.thinking_delay,
            voice=request.voice,
            observers=observers,
        )
        return self._session_to_response(session, message=game_start_message(session.voice))

    def get_session(self, session_id: str) -> Union[SessionResponse, ErrorResponse]:
        """Get session status."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def get_game_state(self, session_id: str) -> Union[GameStateResponse, ErrorResponse]:
        """Get the current game state."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self.state_to_response(session)

    def make_move(self, session_id: str, request: MoveRequest) -> Union[MoveResponse, ErrorResponse]:
        """
        Apply the human's move.

        Illegal moves are not errors: the response has applied=False and
        the unchanged state.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        result = session.engine.dispatch(Action.move(request.cell, HUMAN_MARK))

        message = None
        if result.game_result is not None:
            message = game_end_message(result.game_result, session.voice)

        return MoveResponse(
            session_id=session_id,
            applied=result.applied,
            reason=result.reason,
            game_result=result.game_result.value if result.game_result else None,
            message=message,
            game_state=self.state_to_response(session),
        )

    def new_game(self, session_id: str) -> Union[SessionResponse, ErrorResponse]:
        """Clear the board, keep the score. Cancels the opponent's pending move."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        session.engine.new_game()
        return self._session_to_response(session, message=game_start_message(session.voice))

    def reset_score(self, session_id: str) -> Union[SessionResponse, ErrorResponse]:
        """Zero the score, keep the board."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        session.engine.reset_score()
        return self._session_to_response(session)

    def suggest_move(self, session_id: str) -> Union[SuggestionResponse, ErrorResponse]:
        """Ask the heuristic what the side on turn should play."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        state = session.game_state
        mover = state.current_player
        if state.game_over:
            return SuggestionResponse(
                session_id=session_id,
                for_player=mover.value,
                cell=None,
                rule="game_over",
                explanation="Game is over",
            )

        decision = decide(state.board, mover)
        return SuggestionResponse(
            session_id=session_id,
            for_player=mover.value,
            cell=decision.cell,
            rule=decision.rule.value,
            explanation=decision.explanation,
        )

    def end_session(self, session_id: str) -> bool:
        """End a session."""
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def state_to_response(self, session: Session) -> GameStateResponse:
        """Convert a session's current GameState to the API model."""
        state = session.game_state
        thinking = session.coordinator.pending or session.is_opponent_turn()

        if state.game_over:
            status = SessionStatus.GAME_OVER
        elif thinking:
            status = SessionStatus.OPPONENT_THINKING
        else:
            status = SessionStatus.YOUR_TURN

        line = winning_line(state.board)
        return GameStateResponse(
            session_id=session.session_id,
            status=status,
            board=[cell.value for cell in state.board],
            current_player=state.current_player.value,
            winner=state.winner.value if state.winner else None,
            game_over=state.game_over,
            is_draw=state.is_draw,
            winning_line=list(line) if line else None,
            score=ScoreInfo.model_validate(state.score),
            generation=state.generation,
            move_count=state.move_count,
            opponent_thinking=thinking and not state.game_over,
        )

    def _session_to_response(self, session: Session, message: str | None = None) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            created_at=session.created_at,
            voice=session.voice,
            thinking_delay=session.coordinator.delay,
            game_state=self.state_to_response(session),
            message=message,
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )
