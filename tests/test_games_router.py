"""Tests for the game HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from app.config import get_settings
from app.main import app
from app.services.game.engine import new_board
from app.services.game.persistence import GamePersistence, set_game_persistence
from app.services.game.registry import SessionRegistry

from .conftest import PLAYER_A, PLAYER_B, FakeStore, create_session


@pytest.fixture
def client(registry: SessionRegistry, persistence: GamePersistence) -> TestClient:
    return TestClient(app)


class TestCreateGame:
    """Test POST /create-game."""

    def test_create_game(self, client: TestClient, registry: SessionRegistry, fake_store: FakeStore):
        response = client.post("/create-game", json={"player1": PLAYER_A, "player2": PLAYER_B})

        assert response.status_code == 200
        game_id = response.json()["gameId"]
        session = registry.get(game_id)
        assert session is not None
        assert session.board == new_board()
        assert session.current_player == PLAYER_A
        assert fake_store.records[game_id]["playerB"] == PLAYER_B

    def test_same_players_rejected(self, client: TestClient, registry: SessionRegistry):
        response = client.post("/create-game", json={"player1": PLAYER_A, "player2": PLAYER_A})

        assert response.status_code == 422
        assert len(registry) == 0

    def test_missing_player(self, client: TestClient):
        response = client.post("/create-game", json={"player1": PLAYER_A})

        assert response.status_code == 422

    def test_database_failure_returns_500(self, client: TestClient):
        set_game_persistence(
            GamePersistence(store=FakeStore(fail_inserts=True), max_retries=0, retry_backoff=0.001)
        )

        response = client.post("/create-game", json={"player1": PLAYER_A, "player2": PLAYER_B})

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to create game"}


class TestGetGame:
    """Test GET /game/{game_id}."""

    def test_live_session_returned(self, client: TestClient, registry: SessionRegistry):
        session = registry.create(PLAYER_A, PLAYER_B)
        registry.apply_move(session.game_id, PLAYER_A, "A-P1:D")

        response = client.get(f"/game/{session.game_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["gameId"] == session.game_id
        assert body["currentPlayer"] == PLAYER_B
        assert body["moveHistory"] == [{"player": PLAYER_A, "move": "A-P1:D"}]

    def test_falls_back_to_database(self, client: TestClient, fake_store: FakeStore):
        """A game this process does not hold is read from its durable record."""
        stored = create_session(current_player=PLAYER_B).to_wire()
        fake_store.records[stored["gameId"]] = stored

        response = client.get(f"/game/{stored['gameId']}")

        assert response.status_code == 200
        assert response.json() == stored

    def test_unknown_game_404(self, client: TestClient):
        response = client.get("/game/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"detail": "Game not found"}


class TestGenerateInvite:
    """Test POST /generate-invite."""

    def test_invite_link(self, client: TestClient):
        response = client.post("/generate-invite", json={"gameId": "abc-123"})

        assert response.status_code == 200
        assert response.json() == {
            "inviteLink": f"{get_settings().INVITE_BASE_URL}/abc-123"
        }

    def test_missing_game_id(self, client: TestClient):
        response = client.post("/generate-invite", json={})

        assert response.status_code == 422


class TestHealth:
    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy"}
