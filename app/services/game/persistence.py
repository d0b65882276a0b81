"""Durable game records in Supabase and the background write queue.

Table layout (``games`` by default):
    id           uuid primary key
    player1_id   text
    player2_id   text
    game_state   text   -- JSON of the camelCase session snapshot
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

from supabase import AsyncClient

from app.config import get_settings
from app.dependencies.supabase import get_async_supabase
from app.schemas.game_engine import GameSession

logger = logging.getLogger(__name__)


class GameStore:
    """Create/update/read-by-id access to the games table."""

    def __init__(self, client: AsyncClient | None = None, table: str = "games"):
        self._client = client
        self._table = table

    def _db(self) -> AsyncClient:
        # Resolved per call so the store can be built before lifespan startup
        return self._client or get_async_supabase()

    async def insert_game(
        self, game_id: str, player_a: str, player_b: str, state: dict[str, Any]
    ) -> None:
        await (
            self._db()
            .table(self._table)
            .insert(
                {
                    "id": game_id,
                    "player1_id": player_a,
                    "player2_id": player_b,
                    "game_state": json.dumps(state),
                }
            )
            .execute()
        )
        logger.debug("Inserted game record %s", game_id)

    async def update_game_state(self, game_id: str, state: dict[str, Any]) -> None:
        await (
            self._db()
            .table(self._table)
            .update({"game_state": json.dumps(state)})
            .eq("id", game_id)
            .execute()
        )
        logger.debug("Updated game record %s", game_id)

    async def fetch_game_state(self, game_id: str) -> dict[str, Any] | None:
        """Return the most recently written state, or None if no record exists."""
        response = (
            await self._db()
            .table(self._table)
            .select("game_state")
            .eq("id", game_id)
            .execute()
        )
        if not response.data:
            return None
        raw = response.data[0].get("game_state")
        if raw is None:
            return None
        return json.loads(raw) if isinstance(raw, str) else raw


@dataclass
class PendingWrite:
    """A queued state write for one game."""

    game_id: str
    state: dict[str, Any]


class GamePersistence:
    """Persistence collaborator for the game core.

    Record creation is awaited by the caller so the HTTP layer can report a
    failure. State updates after moves are queued and written in order by a
    background worker that retries with exponential backoff; a write that
    exhausts its retries is logged and dropped.
    """

    def __init__(
        self,
        store: GameStore | None = None,
        max_retries: int | None = None,
        retry_backoff: float | None = None,
    ):
        if store is None or max_retries is None or retry_backoff is None:
            settings = get_settings()
            store = store or GameStore(table=settings.GAMES_TABLE)
            max_retries = settings.PERSIST_MAX_RETRIES if max_retries is None else max_retries
            retry_backoff = (
                settings.PERSIST_RETRY_BACKOFF if retry_backoff is None else retry_backoff
            )

        self._store = store
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff
        self._queue: asyncio.Queue[PendingWrite] = asyncio.Queue()
        self._worker_task: asyncio.Task | None = None
        self._failed_writes = 0

    @property
    def pending_writes(self) -> int:
        return self._queue.qsize()

    @property
    def failed_writes(self) -> int:
        """Number of writes dropped after exhausting retries."""
        return self._failed_writes

    async def persist_create(self, session: GameSession) -> None:
        """Insert the record for a new game.

        Raises:
            Exception: Whatever the store raises; the caller reports it.
        """
        await self._store.insert_game(
            session.game_id,
            session.player_a,
            session.player_b,
            session.to_wire(),
        )
        logger.info("Game %s persisted", session.game_id)

    def persist_update(self, session: GameSession) -> None:
        """Queue the session's current state for a durable write. Never blocks."""
        self._queue.put_nowait(PendingWrite(game_id=session.game_id, state=session.to_wire()))
        logger.debug(
            "Queued state write for game %s (%d pending)",
            session.game_id,
            self._queue.qsize(),
        )

    async def fetch_game_state(self, game_id: str) -> dict[str, Any] | None:
        return await self._store.fetch_game_state(game_id)

    async def write_with_retry(self, write: PendingWrite) -> bool:
        """Write one queued state, retrying with exponential backoff.

        Returns:
            True if the write landed, False if it was dropped.
        """
        attempts = self._max_retries + 1
        for attempt in range(attempts):
            try:
                await self._store.update_game_state(write.game_id, write.state)
            except Exception as e:
                if attempt + 1 >= attempts:
                    self._failed_writes += 1
                    logger.error(
                        "Dropping state write for game %s after %d attempts: %s",
                        write.game_id,
                        attempts,
                        e,
                    )
                    return False
                delay = self._retry_backoff * (2**attempt)
                logger.warning(
                    "State write for game %s failed (attempt %d/%d): %s; retrying in %.2fs",
                    write.game_id,
                    attempt + 1,
                    attempts,
                    e,
                    delay,
                )
                await asyncio.sleep(delay)
            else:
                if attempt:
                    logger.info(
                        "State write for game %s succeeded after %d retries",
                        write.game_id,
                        attempt,
                    )
                return True
        return False

    async def start_worker(self) -> None:
        """Start the background task that drains the write queue."""
        if self._worker_task is not None:
            logger.warning("Persistence worker already running")
            return

        async def worker_loop():
            logger.info("Starting persistence worker")
            while True:
                write = await self._queue.get()
                try:
                    await self.write_with_retry(write)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error("Error in persistence worker: %s", e)
                finally:
                    self._queue.task_done()

        self._worker_task = asyncio.create_task(worker_loop())

    async def stop_worker(self, drain_timeout: float = 10.0) -> None:
        """Flush pending writes, then stop the worker."""
        if self._worker_task is None:
            return

        try:
            await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Persistence worker stopped with %d unwritten states",
                self._queue.qsize(),
            )

        self._worker_task.cancel()
        try:
            await self._worker_task
        except asyncio.CancelledError:
            pass
        self._worker_task = None
        logger.info("Persistence worker stopped")


# Global persistence instance (worker started in lifespan)
_game_persistence: GamePersistence | None = None


def get_game_persistence() -> GamePersistence:
    """Get the global GamePersistence instance."""
    global _game_persistence
    if _game_persistence is None:
        _game_persistence = GamePersistence()
    return _game_persistence


def set_game_persistence(persistence: GamePersistence) -> None:
    """Set the global GamePersistence instance."""
    global _game_persistence
    _game_persistence = persistence
