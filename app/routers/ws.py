import json
import logging
import time
from collections import defaultdict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from app.schemas.ws import WSClientMessage, WSCloseCode, error_message
from app.services.websocket.handlers import HandlerContext, dispatch
from app.services.websocket.manager import get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])

# Rate limiting configuration
MAX_MESSAGE_SIZE = 64 * 1024  # 64 KB
MAX_MESSAGES_PER_SECOND = 10
RATE_LIMIT_WINDOW = 1.0  # seconds


class RateLimiter:
    """Simple sliding-window rate limiter per connection."""

    def __init__(
        self, max_tokens: int = MAX_MESSAGES_PER_SECOND, window: float = RATE_LIMIT_WINDOW
    ):
        self.max_tokens = max_tokens
        self.window = window
        self._tokens: dict[str, list[float]] = defaultdict(list)

    def is_allowed(self, connection_id: str) -> bool:
        """Check if a message is allowed under rate limiting."""
        now = time.time()
        cutoff = now - self.window

        self._tokens[connection_id] = [t for t in self._tokens[connection_id] if t > cutoff]

        if len(self._tokens[connection_id]) >= self.max_tokens:
            return False

        self._tokens[connection_id].append(now)
        return True

    def remove(self, connection_id: str) -> None:
        """Remove rate limit tracking for a connection."""
        self._tokens.pop(connection_id, None)


# Global rate limiter instance
_rate_limiter = RateLimiter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for real-time game play.

    Clients connect with: ws://host/ws

    On connection the server sends 'connection_established'. Clients then send
    'join_game' to follow a game, or a move ({sessionId, player, move}), which
    also subscribes them to that game.
    """
    await websocket.accept()

    manager = get_connection_manager()
    connection = await manager.connect(websocket)

    try:
        while True:
            if websocket.client_state != WebSocketState.CONNECTED:
                logger.debug("WebSocket no longer connected, exiting loop")
                break

            # A failed send unregisters the connection; replies would go nowhere
            if manager.get_connection(connection.connection_id) is None:
                logger.info(
                    "Connection %s dropped by the manager, closing socket",
                    connection.connection_id,
                )
                if websocket.application_state == WebSocketState.CONNECTED:
                    await websocket.close(code=WSCloseCode.GOING_AWAY)
                break

            try:
                message_data = await websocket.receive()
            except Exception as e:
                logger.debug("Error receiving message: %s", e)
                break

            if message_data.get("type") == "websocket.disconnect":
                break

            raw_text = message_data.get("text")
            raw_bytes = message_data.get("bytes")

            if raw_text:
                message_size = len(raw_text.encode("utf-8"))
            elif raw_bytes:
                message_size = len(raw_bytes)
            else:
                continue

            # Any inbound frame counts as liveness
            await manager.heartbeat(connection.connection_id)

            if message_size > MAX_MESSAGE_SIZE:
                logger.warning(
                    "Message too large from connection %s: %d bytes (max %d)",
                    connection.connection_id,
                    message_size,
                    MAX_MESSAGE_SIZE,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    error_message(
                        "MESSAGE_TOO_LARGE",
                        f"Message exceeds maximum size of {MAX_MESSAGE_SIZE} bytes",
                    ),
                )
                continue

            if not _rate_limiter.is_allowed(connection.connection_id):
                logger.warning(
                    "Rate limit exceeded for connection %s",
                    connection.connection_id,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    error_message("RATE_LIMITED", "Too many messages, please slow down"),
                )
                continue

            if not raw_text:
                logger.warning(
                    "Binary frame from connection %s (%d bytes)",
                    connection.connection_id,
                    message_size,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    error_message("INVALID_MESSAGE", "Binary frames are not supported"),
                )
                continue

            try:
                data = json.loads(raw_text)
            except json.JSONDecodeError:
                logger.warning(
                    "Invalid JSON from connection %s",
                    connection.connection_id,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    error_message("INVALID_JSON", "Invalid JSON format"),
                )
                continue

            try:
                message = WSClientMessage.model_validate(data)
            except ValidationError as e:
                logger.warning(
                    "Invalid message from connection %s: %s",
                    connection.connection_id,
                    e,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    error_message("INVALID_MESSAGE", "Invalid message format"),
                )
                continue

            ctx = HandlerContext(
                connection_id=connection.connection_id,
                message=message,
                manager=manager,
            )

            result = await dispatch(ctx)

            if result is None:
                logger.debug(
                    "Unhandled message type %s from connection %s",
                    message.type,
                    connection.connection_id,
                )
                continue

            if result.response:
                await manager.send_to_connection(connection.connection_id, result.response)

            if result.game_id:
                for broadcast in result.broadcasts:
                    await manager.send_to_game(result.game_id, broadcast)

    except WebSocketDisconnect as e:
        logger.info(
            "WS disconnected: connection %s, code %s",
            connection.connection_id,
            e.code,
        )
    except Exception as e:
        logger.error(
            "WS error for connection %s: %s",
            connection.connection_id,
            e,
        )
    finally:
        _rate_limiter.remove(connection.connection_id)
        await manager.disconnect(connection.connection_id)
