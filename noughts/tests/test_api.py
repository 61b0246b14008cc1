"""
Tests for the API service and the FastAPI app.

Service tests call APIService directly; app tests go through TestClient.
The TestClient is used as a context manager so the opponent's delayed
moves run on the same event loop across requests.
"""

import asyncio
import time

import pytest
from fastapi.testclient import TestClient

from ..api import (
    APIService,
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    MoveRequest,
    SessionStatus,
    create_app,
)
from ..session import SessionManager, Voice


def run(coro):
    return asyncio.run(coro)


def make_service(delay: float = 0.0) -> APIService:
    return APIService(session_manager=SessionManager(thinking_delay=delay))


def create_in_loop(service, request=None):
    """Create a session from inside an event loop, as the app does."""
    async def scenario():
        return service.create_session(request or CreateSessionRequest())
    return run(scenario())


class TestAPIService:
    """Tests for APIService."""

    def test_create_session(self):
        service = make_service()
        response = create_in_loop(service, CreateSessionRequest(voice=Voice.GAMER))

        assert response.voice == Voice.GAMER
        assert response.message
        assert response.game_state.status == SessionStatus.YOUR_TURN
        assert response.game_state.board == [""] * 9
        assert response.game_state.current_player == "X"

    def test_unknown_session(self):
        service = make_service()
        for response in (
            service.get_session("nope"),
            service.get_game_state("nope"),
            service.make_move("nope", MoveRequest(cell=0)),
            service.new_game("nope"),
            service.reset_score("nope"),
            service.suggest_move("nope"),
        ):
            assert isinstance(response, ErrorResponse)
            assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_move_then_opponent(self):
        async def scenario():
            service = make_service(delay=0.01)
            sid = service.create_session(CreateSessionRequest()).session_id

            move = service.make_move(sid, MoveRequest(cell=0))
            session = service.session_manager.get_session(sid)
            await session.coordinator.wait_idle()
            return move, service.get_game_state(sid)

        move, state = run(scenario())
        assert move.applied
        assert move.game_state.status == SessionStatus.OPPONENT_THINKING
        assert move.game_state.opponent_thinking
        assert state.board[0] == "X"
        assert state.board[4] == "O"
        assert state.status == SessionStatus.YOUR_TURN

    def test_illegal_move_not_applied(self):
        async def scenario():
            service = make_service(delay=0.01)
            sid = service.create_session(CreateSessionRequest()).session_id
            service.make_move(sid, MoveRequest(cell=0))
            await service.session_manager.get_session(sid).coordinator.wait_idle()
            return service.make_move(sid, MoveRequest(cell=4))

        response = run(scenario())
        assert not response.applied
        assert "occupied" in response.reason
        assert response.game_state.move_count == 2

    def test_winning_move_message(self):
        async def scenario():
            service = make_service(delay=0.01)
            sid = service.create_session(CreateSessionRequest()).session_id
            session = service.session_manager.get_session(sid)
            last = None
            # Fork: O answers 4, 2, 3 and X completes 6-7-8
            for cell in (0, 8, 6, 7):
                last = service.make_move(sid, MoveRequest(cell=cell))
                await session.coordinator.wait_idle()
            return last

        last = run(scenario())
        assert last.game_result == "win"
        assert last.message
        assert last.game_state.status == SessionStatus.GAME_OVER
        assert last.game_state.winning_line == [6, 7, 8]
        assert last.game_state.score.player_wins == 1

    def test_new_game_and_reset_score(self):
        async def scenario():
            service = make_service(delay=0.01)
            sid = service.create_session(CreateSessionRequest()).session_id
            session = service.session_manager.get_session(sid)
            for cell in (0, 8, 6, 7):
                service.make_move(sid, MoveRequest(cell=cell))
                await session.coordinator.wait_idle()

            fresh = service.new_game(sid)
            cleared = service.reset_score(sid)
            return fresh, cleared

        fresh, cleared = run(scenario())
        assert fresh.message
        assert fresh.game_state.board == [""] * 9
        assert fresh.game_state.generation == 1
        assert fresh.game_state.score.player_wins == 1
        assert cleared.game_state.score.player_wins == 0

    def test_suggestion(self):
        service = make_service()
        sid = create_in_loop(service).session_id
        suggestion = service.suggest_move(sid)

        assert suggestion.for_player == "X"
        assert suggestion.cell == 4
        assert suggestion.rule == "center"

    def test_end_session(self):
        service = make_service()
        sid = create_in_loop(service).session_id

        assert service.list_sessions() == [sid]
        assert service.end_session(sid)
        assert service.list_sessions() == []


@pytest.fixture
def client():
    with TestClient(create_app(make_service(delay=0.0))) as test_client:
        yield test_client


def create(client, **body) -> str:
    response = client.post("/api/v1/sessions", json=body)
    assert response.status_code == 200
    return response.json()["session_id"]


def wait_for_state(client, session_id, predicate, timeout=2.0) -> dict:
    """Poll GET /state until predicate holds."""
    deadline = time.monotonic() + timeout
    while True:
        state = client.get(f"/api/v1/sessions/{session_id}/state").json()
        if predicate(state):
            return state
        if time.monotonic() > deadline:
            raise AssertionError(f"state never matched: {state}")
        time.sleep(0.01)


class TestApp:
    """Tests for the HTTP endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "noughts"

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Noughts API"

    def test_create_without_body(self, client):
        response = client.post("/api/v1/sessions")
        assert response.status_code == 200
        data = response.json()
        assert data["game_state"]["status"] == "your_turn"
        assert data["voice"] == "assistant"
        assert data["thinking_delay"] == 0.0

    def test_create_with_options(self, client):
        response = client.post(
            "/api/v1/sessions", json={"thinking_delay": 0.5, "voice": "gamer"}
        )
        data = response.json()
        assert data["voice"] == "gamer"
        assert data["thinking_delay"] == 0.5

    def test_create_rejects_bad_delay(self, client):
        response = client.post("/api/v1/sessions", json={"thinking_delay": -1})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_list_and_get(self, client):
        sid = create(client)
        listing = client.get("/api/v1/sessions").json()
        assert sid in listing["sessions"]
        assert listing["count"] == len(listing["sessions"])

        assert client.get(f"/api/v1/sessions/{sid}").json()["session_id"] == sid

    def test_unknown_session_404(self, client):
        for method, path in [
            ("get", "/api/v1/sessions/nope"),
            ("get", "/api/v1/sessions/nope/state"),
            ("post", "/api/v1/sessions/nope/new-game"),
            ("post", "/api/v1/sessions/nope/reset-score"),
            ("get", "/api/v1/sessions/nope/suggestion"),
        ]:
            response = getattr(client, method)(path)
            assert response.status_code == 404
            assert response.json()["error_code"] == "SESSION_NOT_FOUND"

        response = client.post("/api/v1/sessions/nope/moves", json={"cell": 0})
        assert response.status_code == 404

    def test_move_and_opponent_reply(self, client):
        sid = create(client)
        response = client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": 0})

        assert response.status_code == 200
        assert response.json()["applied"]
        assert response.json()["game_state"]["board"][0] == "X"

        state = wait_for_state(client, sid, lambda s: s["board"][4] == "O")
        assert state["status"] == "your_turn"
        assert state["current_player"] == "X"

    def test_occupied_cell_ignored(self, client):
        sid = create(client)
        client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": 0})
        wait_for_state(client, sid, lambda s: s["move_count"] == 2)

        response = client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": 0})
        assert response.status_code == 200
        assert response.json()["applied"] is False
        assert response.json()["game_state"]["move_count"] == 2

    def test_out_of_range_ignored(self, client):
        sid = create(client)
        response = client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": 42})
        assert response.json()["applied"] is False

    def test_bad_move_body(self, client):
        sid = create(client)
        response = client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": "middle"})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_new_game_and_reset_score(self, client):
        sid = create(client)
        client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": 0})
        wait_for_state(client, sid, lambda s: s["move_count"] == 2)

        data = client.post(f"/api/v1/sessions/{sid}/new-game").json()
        assert data["game_state"]["board"] == [""] * 9
        assert data["game_state"]["generation"] == 1
        assert data["message"]

        data = client.post(f"/api/v1/sessions/{sid}/reset-score").json()
        assert data["game_state"]["score"] == {
            "player_wins": 0, "opponent_wins": 0, "draws": 0,
        }

    def test_suggestion(self, client):
        sid = create(client)
        data = client.get(f"/api/v1/sessions/{sid}/suggestion").json()
        assert data["cell"] == 4
        assert data["rule"] == "center"

    def test_full_game_over_http(self, client):
        sid = create(client)
        for count, cell in ((2, 0), (4, 8), (6, 6)):
            client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": cell})
            wait_for_state(client, sid, lambda s, n=count: s["move_count"] == n)

        data = client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": 7}).json()
        assert data["game_result"] == "win"
        assert data["game_state"]["status"] == "game_over"
        assert data["game_state"]["score"]["player_wins"] == 1

        data = client.get(f"/api/v1/sessions/{sid}/suggestion").json()
        assert data["cell"] is None
        assert data["rule"] == "game_over"

    def test_end_session(self, client):
        sid = create(client)
        response = client.delete(f"/api/v1/sessions/{sid}")
        assert response.json() == {"success": True, "session_id": sid}
        assert client.get(f"/api/v1/sessions/{sid}").status_code == 404


class TestWebSocket:
    """Tests for the WebSocket endpoint."""

    def test_initial_state_and_ping(self, client):
        sid = create(client)
        with client.websocket_connect(f"/api/v1/sessions/{sid}/ws") as ws:
            first = ws.receive_json()
            assert first["type"] == "state_update"
            assert first["payload"]["session_id"] == sid

            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_invalid_json(self, client):
        sid = create(client)
        with client.websocket_connect(f"/api/v1/sessions/{sid}/ws") as ws:
            ws.receive_json()
            ws.send_text("not json")
            assert ws.receive_json()["type"] == "error"

    def test_unknown_session(self, client):
        with client.websocket_connect("/api/v1/sessions/nope/ws") as ws:
            message = ws.receive_json()
            assert message["type"] == "error"
            assert message["payload"]["error_code"] == "SESSION_NOT_FOUND"

    def test_pushes_opponent_move(self, client):
        sid = create(client)
        with client.websocket_connect(f"/api/v1/sessions/{sid}/ws") as ws:
            ws.receive_json()
            client.post(f"/api/v1/sessions/{sid}/moves", json={"cell": 0})

            types = []
            for _ in range(5):
                message = ws.receive_json()
                types.append(message["type"])
                if message["type"] == "state_update" and message["payload"]["board"][4] == "O":
                    break
            else:
                raise AssertionError(f"no opponent move pushed: {types}")

            assert "opponent_thinking" in types
