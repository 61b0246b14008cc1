"""
FastAPI Application - REST + WebSocket host for the game.

Endpoints:
    POST   /api/v1/sessions                     Create game session
    GET    /api/v1/sessions                     List active sessions
    GET    /api/v1/sessions/{id}                Get session status
    DELETE /api/v1/sessions/{id}                End session
    GET    /api/v1/sessions/{id}/state          Get game state
    POST   /api/v1/sessions/{id}/moves          Human move
    POST   /api/v1/sessions/{id}/new-game       Clear the board, keep the score
    POST   /api/v1/sessions/{id}/reset-score    Zero the score, keep the board
    GET    /api/v1/sessions/{id}/suggestion     Heuristic hint for the side on turn
    WS     /api/v1/sessions/{id}/ws             Real-time updates

Opponent Flow:
    1. POST /moves applies the human's move and returns immediately
       (status=opponent_thinking)
    2. After the thinking delay the opponent's move is applied
    3. WebSocket clients receive state_update (and game_over); REST clients
       poll GET /state

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager
from typing import Union
import asyncio
import json
import logging
import os

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..engine_core.action import ActionResult
from ..engine_core.state import GameState
from ..session import SessionManager
from ..session.announcer import game_end_message
from .service import APIService
from .schemas import (
    CreateSessionRequest,
    MoveRequest,
    SessionResponse,
    GameStateResponse,
    MoveResponse,
    SuggestionResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    ErrorResponse,
    ErrorCode,
)

logger = logging.getLogger(__name__)

# Environment configuration
NOUGHTS_ENV = os.getenv("NOUGHTS_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
NOUGHTS_THINKING_DELAY = float(os.getenv("NOUGHTS_THINKING_DELAY", "1.0"))


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    api_service = service or APIService(
        session_manager=SessionManager(thinking_delay=NOUGHTS_THINKING_DELAY)
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Noughts API (%s)", NOUGHTS_ENV)
        yield
        logger.info("Shutting down Noughts API, ending %d session(s)", len(api_service.list_sessions()))
        api_service.session_manager.end_all()

    app = FastAPI(
        title="Noughts API",
        description="""
Tic-tac-toe against a heuristic opponent that answers after a short thinking delay.

## Moves

`POST /moves` never fails for a bad cell: occupied, out-of-range, out-of-turn
and after-game-over moves return `applied=false` and the unchanged state.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `VALIDATION_ERROR` | Request body could not be parsed |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def not_found(response: ErrorResponse) -> JSONResponse:
        return make_error_response(ErrorCode.SESSION_NOT_FOUND, response.error, status_code=404)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    # =========================================================================
    # Push updates
    # =========================================================================

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        dead_connections = []
        for ws in list(ws_connections.get(session_id, [])):
            try:
                await ws.send_json(message)
            except (WebSocketDisconnect, RuntimeError):
                dead_connections.append(ws)
        for ws in dead_connections:
            if ws in ws_connections.get(session_id, []):
                ws_connections[session_id].remove(ws)

    def schedule_broadcast(session_id: str, message: dict):
        if not ws_connections.get(session_id):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop, dropping %s for %s", message["type"], session_id)
            return
        loop.create_task(broadcast_to_session(session_id, message))

    def watch_session(session_id: str):
        """Push every transition of a session to its WebSocket clients."""
        session = api_service.session_manager.get_session(session_id)

        def on_transition(result: ActionResult):
            schedule_broadcast(session_id, {
                "type": "state_update",
                "payload": api_service.state_to_response(session).model_dump(mode="json"),
            })
            if result.game_result is not None:
                schedule_broadcast(session_id, {
                    "type": "game_over",
                    "payload": {
                        "result": result.game_result.value,
                        "message": game_end_message(result.game_result, session.voice),
                    },
                })

        def on_thinking(state: GameState):
            schedule_broadcast(session_id, {
                "type": "opponent_thinking",
                "payload": {"generation": state.generation, "delay": session.coordinator.delay},
            })

        session.engine.subscribe(on_transition)
        session.coordinator.on_thinking = on_thinking

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: CreateSessionRequest | None = None) -> SessionResponse:
        """Create a session. The human plays X and moves first."""
        response = api_service.create_session(body or CreateSessionRequest())
        watch_session(response.session_id)
        return response

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a game session. A pending opponent move is cancelled."""
        success = api_service.end_session(session_id)
        for ws in ws_connections.pop(session_id, []):
            try:
                await ws.close()
            except RuntimeError:
                logger.debug("WebSocket for %s already closed", session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get current game state",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        response = api_service.get_game_state(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/moves",
        response_model=MoveResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Play the human's move",
    )
    async def make_move(session_id: str, body: MoveRequest) -> Union[MoveResponse, JSONResponse]:
        """
        Place an X.

        **Request Body:**
        ```json
        {"cell": 4}
        ```
        """
        response = api_service.make_move(session_id, body)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/new-game",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Start a new game on the same session",
    )
    async def new_game(session_id: str) -> Union[SessionResponse, JSONResponse]:
        response = api_service.new_game(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/reset-score",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Zero the running score",
    )
    async def reset_score(session_id: str) -> Union[SessionResponse, JSONResponse]:
        response = api_service.reset_score(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/suggestion",
        response_model=SuggestionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Heuristic suggestion for the side on turn",
    )
    async def get_suggestion(session_id: str) -> Union[SuggestionResponse, JSONResponse]:
        response = api_service.suggest_move(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Game state changed
        - opponent_thinking: Opponent move scheduled
        - game_over: Game ended (result + host message)
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        response = api_service.get_game_state(session_id)
        if isinstance(response, ErrorResponse):
            await websocket.send_json({
                "type": "error",
                "payload": response.model_dump(mode="json"),
            })
            await websocket.close()
            return

        ws_connections.setdefault(session_id, []).append(websocket)
        logger.info("WebSocket connected to session %s", session_id)

        try:
            await websocket.send_json({
                "type": "state_update",
                "payload": response.model_dump(mode="json"),
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        except WebSocketDisconnect:
            logger.info("WebSocket disconnected from session %s", session_id)
        finally:
            if websocket in ws_connections.get(session_id, []):
                ws_connections[session_id].remove(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="noughts",
            version=__version__,
            environment=NOUGHTS_ENV,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Noughts API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn noughts.api.app:app
app = create_app()
