"""
API Module - HTTP/WebSocket host.

Exposes the engine via REST API for web and chat clients.
A client:
1. Creates a game session
2. Submits the human's moves
3. Receives the opponent's moves over WebSocket (or polls the state)
4. Starts new games or resets the score

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    MoveRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    MoveResponse,
    SuggestionResponse,
    ErrorResponse,
    # Shared
    ScoreInfo,
    SessionStatus,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "MoveRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "MoveResponse",
    "SuggestionResponse",
    "ErrorResponse",
    # Shared
    "ScoreInfo",
    "SessionStatus",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
