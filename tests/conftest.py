"""Shared fixtures for game engine and endpoint tests."""

import os

# Settings are required at import time of app.main
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_API_KEY", "test-api-key")

import pytest

from app.schemas.game_engine import Board, GameSession
from app.services.game.engine import new_board
from app.services.game.persistence import GamePersistence, set_game_persistence
from app.services.game.registry import SessionRegistry, set_session_registry
from app.services.websocket.manager import ConnectionManager, set_connection_manager

# Fixed identifiers for deterministic testing
GAME_ID = "00000000-0000-0000-0000-000000000001"
OTHER_GAME_ID = "00000000-0000-0000-0000-000000000002"
PLAYER_A = "alice"
PLAYER_B = "bob"


def empty_board() -> Board:
    """Board with no pieces."""
    return [[None] * 5 for _ in range(5)]


def board_with(pieces: dict[tuple[int, int], str]) -> Board:
    """Board holding only the given pieces at (row, col)."""
    board = empty_board()
    for (row, col), piece_id in pieces.items():
        board[row][col] = piece_id
    return board


def create_session(
    board: Board | None = None,
    current_player: str = PLAYER_A,
    game_id: str = GAME_ID,
    is_terminal: bool = False,
    winner: str | None = None,
) -> GameSession:
    """Helper to create a session between alice (A) and bob (B)."""
    return GameSession(
        game_id=game_id,
        player_a=PLAYER_A,
        player_b=PLAYER_B,
        board=board if board is not None else new_board(),
        current_player=current_player,
        is_terminal=is_terminal,
        winner=winner,
    )


class FakeStore:
    """In-memory stand-in for GameStore that can be told to fail."""

    def __init__(self, fail_times: int = 0, fail_inserts: bool = False):
        self.records: dict[str, dict] = {}
        self.update_calls = 0
        self.fail_times = fail_times
        self.fail_inserts = fail_inserts

    async def insert_game(self, game_id: str, player_a: str, player_b: str, state: dict) -> None:
        if self.fail_inserts:
            raise ConnectionError("database unavailable")
        self.records[game_id] = state

    async def update_game_state(self, game_id: str, state: dict) -> None:
        self.update_calls += 1
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ConnectionError("database unavailable")
        self.records[game_id] = state

    async def fetch_game_state(self, game_id: str) -> dict | None:
        return self.records.get(game_id)


class FakeWebSocket:
    """Records JSON sent to it; optionally fails every send."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.closed_with: int | None = None
        self.fail = fail

    async def send_json(self, data: dict) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code


@pytest.fixture
def initial_session() -> GameSession:
    """Fresh game in the starting layout, alice to move."""
    return create_session()


@pytest.fixture
def registry() -> SessionRegistry:
    """Fresh registry installed as the global instance."""
    registry = SessionRegistry()
    set_session_registry(registry)
    return registry


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def persistence(fake_store: FakeStore) -> GamePersistence:
    """GamePersistence over a FakeStore, installed as the global instance."""
    persistence = GamePersistence(store=fake_store, max_retries=2, retry_backoff=0.001)
    set_game_persistence(persistence)
    return persistence


@pytest.fixture
def manager() -> ConnectionManager:
    """Fresh connection manager installed as the global instance."""
    manager = ConnectionManager(heartbeat_interval=30, connection_timeout=600)
    set_connection_manager(manager)
    return manager
