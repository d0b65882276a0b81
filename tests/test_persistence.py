"""Tests for GamePersistence.

Critical scenarios tested:
- Record creation propagates store failures to the caller
- State updates are queued without blocking
- Failed writes are retried with backoff, then dropped and counted
- Stopping the worker flushes the queue
"""

import pytest

from app.services.game.persistence import GamePersistence, PendingWrite

from .conftest import GAME_ID, PLAYER_A, PLAYER_B, FakeStore, create_session


def make_persistence(store: FakeStore, max_retries: int = 2) -> GamePersistence:
    return GamePersistence(store=store, max_retries=max_retries, retry_backoff=0.001)


class TestPersistCreate:
    """Test awaited record creation."""

    @pytest.mark.asyncio
    async def test_create_writes_camel_case_state(
        self, persistence: GamePersistence, fake_store: FakeStore
    ):
        await persistence.persist_create(create_session())

        record = fake_store.records[GAME_ID]
        assert record["gameId"] == GAME_ID
        assert record["playerA"] == PLAYER_A
        assert record["playerB"] == PLAYER_B
        assert record["currentPlayer"] == PLAYER_A
        assert record["moveHistory"] == []
        assert record["isTerminal"] is False

    @pytest.mark.asyncio
    async def test_create_failure_propagates(self):
        persistence = make_persistence(FakeStore(fail_inserts=True))

        with pytest.raises(ConnectionError):
            await persistence.persist_create(create_session())


class TestPersistUpdate:
    """Test queued state writes."""

    def test_update_is_queued(self, persistence: GamePersistence, fake_store: FakeStore):
        persistence.persist_update(create_session())

        assert persistence.pending_writes == 1
        assert fake_store.update_calls == 0

    @pytest.mark.asyncio
    async def test_worker_drains_queue_on_stop(self):
        store = FakeStore()
        persistence = make_persistence(store)

        await persistence.start_worker()
        persistence.persist_update(create_session())
        await persistence.stop_worker()

        assert store.records[GAME_ID]["gameId"] == GAME_ID
        assert persistence.pending_writes == 0

    @pytest.mark.asyncio
    async def test_writes_land_in_order(self):
        """The last queued state for a game is the one stored."""
        store = FakeStore()
        persistence = make_persistence(store)

        await persistence.start_worker()
        persistence.persist_update(create_session())
        persistence.persist_update(create_session(current_player=PLAYER_B))
        await persistence.stop_worker()

        assert store.update_calls == 2
        assert store.records[GAME_ID]["currentPlayer"] == PLAYER_B

    @pytest.mark.asyncio
    async def test_worker_survives_dropped_write(self):
        """A write that exhausts its retries does not stop later writes."""
        store = FakeStore(fail_times=1)
        persistence = make_persistence(store, max_retries=0)

        await persistence.start_worker()
        persistence.persist_update(create_session())
        persistence.persist_update(create_session(current_player=PLAYER_B))
        await persistence.stop_worker()

        assert persistence.failed_writes == 1
        assert store.records[GAME_ID]["currentPlayer"] == PLAYER_B


class TestRetry:
    """Test bounded retry with backoff."""

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self):
        store = FakeStore(fail_times=2)
        persistence = make_persistence(store, max_retries=2)
        write = PendingWrite(game_id=GAME_ID, state=create_session().to_wire())

        landed = await persistence.write_with_retry(write)

        assert landed
        assert store.update_calls == 3
        assert GAME_ID in store.records
        assert persistence.failed_writes == 0

    @pytest.mark.asyncio
    async def test_exhausted_retries_drop_the_write(self):
        store = FakeStore(fail_times=10)
        persistence = make_persistence(store, max_retries=2)
        write = PendingWrite(game_id=GAME_ID, state=create_session().to_wire())

        landed = await persistence.write_with_retry(write)

        assert not landed
        assert store.update_calls == 3
        assert GAME_ID not in store.records
        assert persistence.failed_writes == 1

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self):
        store = FakeStore(fail_times=1)
        persistence = make_persistence(store, max_retries=0)
        write = PendingWrite(game_id=GAME_ID, state={})

        assert not await persistence.write_with_retry(write)
        assert store.update_calls == 1


class TestFetch:
    """Test reading the durable record."""

    @pytest.mark.asyncio
    async def test_fetch_missing_returns_none(self, persistence: GamePersistence):
        assert await persistence.fetch_game_state("missing") is None

    @pytest.mark.asyncio
    async def test_fetch_returns_stored_state(self, persistence: GamePersistence):
        session = create_session()

        await persistence.persist_create(session)

        assert await persistence.fetch_game_state(GAME_ID) == session.to_wire()
