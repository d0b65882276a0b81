import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import WebSocket

from app.config import get_settings
from app.schemas.ws import WSCloseCode, WSServerMessage, connection_established

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """Represents an active WebSocket connection."""

    connection_id: str
    websocket: WebSocket
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_heartbeat: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    game_id: str | None = None


class ConnectionManager:
    """Tracks WebSocket connections and their game subscriptions.

    Local storage:
        - _connections: connection_id -> Connection
        - _game_connections: game_id -> set of connection_ids

    A connection is subscribed to at most one game at a time. Broadcasts for
    a game reach only that game's subscribers.
    """

    def __init__(self, heartbeat_interval: int | None = None, connection_timeout: int | None = None):
        if heartbeat_interval is None or connection_timeout is None:
            settings = get_settings()
            heartbeat_interval = heartbeat_interval or settings.WS_HEARTBEAT_INTERVAL
            connection_timeout = connection_timeout or settings.WS_CONNECTION_TIMEOUT
        self._heartbeat_interval = heartbeat_interval
        self._connection_timeout = connection_timeout

        self._connections: dict[str, Connection] = {}
        self._game_connections: dict[str, set[str]] = {}

        # Cleanup task
        self._cleanup_task: asyncio.Task | None = None

        logger.info("ConnectionManager initialized")

    async def connect(self, websocket: WebSocket) -> Connection:
        """Register an accepted WebSocket and greet it.

        Args:
            websocket: The accepted WebSocket instance.

        Returns:
            The created Connection object.
        """
        connection = Connection(
            connection_id=str(uuid.uuid4()),
            websocket=websocket,
        )
        self._connections[connection.connection_id] = connection
        logger.info("Connection %s established", connection.connection_id)

        await self.send_to_connection(connection.connection_id, connection_established())
        return connection

    async def disconnect(self, connection_id: str) -> None:
        """Forget a connection and its game subscription."""
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            logger.debug("Connection %s not found locally for disconnect", connection_id)
            return

        if connection.game_id:
            self._unsubscribe_from_game_internal(connection_id, connection.game_id)

        logger.info("Connection %s disconnected", connection_id)

    async def heartbeat(self, connection_id: str) -> None:
        """Update the last heartbeat timestamp for a connection."""
        connection = self._connections.get(connection_id)
        if connection:
            connection.last_heartbeat = datetime.now(timezone.utc)
            logger.debug("Heartbeat updated for connection %s", connection_id)

    async def cleanup_stale_connections(self) -> None:
        """Remove connections that have exceeded the timeout period."""
        now = datetime.now(timezone.utc)
        stale_connections = []

        # Snapshot: disconnect() mutates the dict
        for conn_id, connection in list(self._connections.items()):
            elapsed = (now - connection.last_heartbeat).total_seconds()
            if elapsed > self._connection_timeout:
                stale_connections.append(conn_id)
                logger.warning(
                    "Connection %s is stale (%.1fs since heartbeat)",
                    conn_id,
                    elapsed,
                )

        for conn_id in stale_connections:
            connection = self._connections.get(conn_id)
            if connection:
                try:
                    await connection.websocket.close(code=WSCloseCode.GOING_AWAY)
                except Exception as e:
                    logger.debug("Error closing stale websocket %s: %s", conn_id, e)
            await self.disconnect(conn_id)

        if stale_connections:
            logger.info("Cleaned up %d stale connections", len(stale_connections))

    async def start_cleanup_task(self) -> None:
        """Start the periodic cleanup task for stale connections."""
        if self._cleanup_task is not None:
            logger.warning("Cleanup task already running")
            return

        async def cleanup_loop():
            logger.info("Starting cleanup task with interval %ds", self._heartbeat_interval)
            while True:
                try:
                    await asyncio.sleep(self._heartbeat_interval)
                    await self.cleanup_stale_connections()
                except asyncio.CancelledError:
                    logger.info("Cleanup task cancelled")
                    break
                except Exception as e:
                    logger.error("Error in cleanup task: %s", e)

        self._cleanup_task = asyncio.create_task(cleanup_loop())

    async def stop_cleanup_task(self) -> None:
        """Stop the periodic cleanup task."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Cleanup task stopped")

    async def close_all_connections(self) -> None:
        """Close all active WebSocket connections gracefully."""
        logger.info("Closing all %d connections", len(self._connections))
        for conn_id in list(self._connections.keys()):
            connection = self._connections.get(conn_id)
            if connection:
                try:
                    await connection.websocket.close(code=WSCloseCode.GOING_AWAY)
                except Exception as e:
                    logger.debug("Error closing websocket %s: %s", conn_id, e)
            await self.disconnect(conn_id)

    async def send_to_connection(self, connection_id: str, message: WSServerMessage) -> bool:
        """Send a message to a specific connection.

        A connection that cannot be written to is dropped.

        Returns:
            True if sent successfully, False otherwise.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug("Connection %s not found for sending", connection_id)
            return False

        try:
            await connection.websocket.send_json(message.to_wire())
            return True
        except Exception as e:
            logger.warning("Failed to send to connection %s: %s", connection_id, e)
            await self.disconnect(connection_id)
            return False

    def subscribe_to_game(self, connection_id: str, game_id: str) -> None:
        """Subscribe a connection to a game, leaving any previous game."""
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.warning("Connection %s not found for game subscription", connection_id)
            return

        if connection.game_id == game_id:
            return
        if connection.game_id:
            self._unsubscribe_from_game_internal(connection_id, connection.game_id)

        connection.game_id = game_id
        self._game_connections.setdefault(game_id, set()).add(connection_id)
        logger.info("Connection %s subscribed to game %s", connection_id, game_id)

    def unsubscribe_from_game(self, connection_id: str) -> None:
        """Unsubscribe a connection from its current game."""
        connection = self._connections.get(connection_id)
        if connection is None or connection.game_id is None:
            return

        self._unsubscribe_from_game_internal(connection_id, connection.game_id)
        connection.game_id = None

    def _unsubscribe_from_game_internal(self, connection_id: str, game_id: str) -> None:
        """Remove a connection from game tracking.

        Does not modify connection.game_id - caller is responsible for that.
        """
        if game_id in self._game_connections:
            self._game_connections[game_id].discard(connection_id)
            if not self._game_connections[game_id]:
                del self._game_connections[game_id]
        logger.debug("Connection %s unsubscribed from game %s", connection_id, game_id)

    async def send_to_game(
        self, game_id: str, message: WSServerMessage, exclude_connection: str | None = None
    ) -> int:
        """Send a message to every connection subscribed to a game.

        A failed send is skipped; delivery to the other subscribers continues.

        Returns:
            Number of connections the message was sent to.
        """
        conn_ids = self._game_connections.get(game_id, set())
        sent = 0
        for conn_id in list(conn_ids):
            if conn_id == exclude_connection:
                continue
            if await self.send_to_connection(conn_id, message):
                sent += 1
        logger.debug("Sent %s to %d connections of game %s", message.type.value, sent, game_id)
        return sent

    def get_connection(self, connection_id: str) -> Connection | None:
        """Get a connection by ID."""
        return self._connections.get(connection_id)

    def get_game_subscribers(self, game_id: str) -> set[str]:
        """Connection ids subscribed to a game."""
        return set(self._game_connections.get(game_id, set()))

    def get_total_connection_count(self) -> int:
        """Get the total number of connections."""
        return len(self._connections)


# Global manager instance (initialized in lifespan)
_connection_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the global ConnectionManager instance."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def set_connection_manager(manager: ConnectionManager) -> None:
    """Set the global ConnectionManager instance."""
    global _connection_manager
    _connection_manager = manager
