"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a host client and the engine.

Board encoding: a list of 9 strings, row-major, "X", "O" or "" for empty.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- VALIDATION_ERROR: Request body could not be parsed
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..session.announcer import Voice


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Whose move it is, from the host's point of view."""
    YOUR_TURN = "your_turn"
    OPPONENT_THINKING = "opponent_thinking"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class ScoreInfo(BaseModel):
    """Running score for the session."""
    player_wins: int = 0
    opponent_wins: int = 0
    draws: int = 0

    model_config = {"from_attributes": True}


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    session_id: str
    status: SessionStatus
    board: list[str] = Field(description="9 cells, row-major: X, O or empty string")
    current_player: str
    winner: Optional[str] = None
    game_over: bool = False
    is_draw: bool = False
    winning_line: Optional[list[int]] = None
    score: ScoreInfo = Field(default_factory=ScoreInfo)
    generation: int = Field(0, description="Game number within the session, starts at 0")
    move_count: int = 0
    opponent_thinking: bool = False


# =============================================================================
# Requests
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to start a session."""
    thinking_delay: Optional[float] = Field(
        None, ge=0.0, le=10.0, description="Opponent delay in seconds (server default if omitted)"
    )
    voice: Voice = Voice.ASSISTANT


class MoveRequest(BaseModel):
    """
    A move by the human player.

    Any integer is accepted; occupied or out-of-range cells are ignored and
    the unchanged state is returned.
    """
    cell: int = Field(description="Cell index, 0-8, row-major")


# =============================================================================
# Responses
# =============================================================================

class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    created_at: float
    voice: Voice
    thinking_delay: float
    game_state: GameStateResponse
    message: Optional[str] = Field(None, description="Host announcement for a new game")


class MoveResponse(BaseModel):
    """Result of a human move."""
    session_id: str
    applied: bool
    reason: Optional[str] = Field(None, description="Why the move was ignored")
    game_result: Optional[str] = Field(None, description="win, lose or draw, when this move ended the game")
    message: Optional[str] = None
    game_state: GameStateResponse


class SuggestionResponse(BaseModel):
    """What the heuristic would play for the side on turn."""
    session_id: str
    for_player: str
    cell: Optional[int] = None
    rule: str
    explanation: str = ""


class SessionListResponse(BaseModel):
    """List of active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None
