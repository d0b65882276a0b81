from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class MessageType(str, Enum):
    """WebSocket message types."""

    # Core
    PING = "ping"
    PONG = "pong"
    CONNECTION_ESTABLISHED = "connection_established"
    ERROR = "error"

    # Game
    JOIN_GAME = "join_game"
    MOVE = "move"
    UPDATE = "update"
    GAME_OVER = "game_over"
    INVALID_MOVE = "invalid_move"


class WSCloseCode:
    """WebSocket close codes (RFC 6455)."""

    NORMAL = 1000
    GOING_AWAY = 1001
    PROTOCOL_ERROR = 1002
    UNSUPPORTED_DATA = 1003
    INVALID_DATA = 1007
    POLICY_VIOLATION = 1008
    MESSAGE_TOO_BIG = 1009
    INTERNAL_ERROR = 1011


class WSClientMessage(BaseModel):
    """Message sent from client to server.

    A bare ``{sessionId, player, move}`` body is a move; ``gameId`` is
    accepted in place of ``sessionId``.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: MessageType = MessageType.MOVE
    session_id: str | None = Field(
        None,
        validation_alias=AliasChoices("sessionId", "gameId", "session_id"),
    )
    player: str | None = None
    move: str | None = None


class WSServerMessage(BaseModel):
    """Message sent from server to client.

    Only ``type`` is always present; the other fields are set per message
    type and dropped from the JSON when unset.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: MessageType
    game_state: dict[str, Any] | None = Field(None, alias="gameState")
    winner: str | None = None
    error_code: str | None = Field(None, alias="errorCode")
    message: str | None = None
    server_time: datetime | None = Field(None, alias="serverTime")

    def to_wire(self) -> dict[str, Any]:
        # Top-level only: a null winner inside gameState is kept
        data = self.model_dump(mode="json", by_alias=True)
        return {key: value for key, value in data.items() if value is not None}


# --- Payload schemas ---


class MovePayload(BaseModel):
    """Fields required on a MOVE message."""

    session_id: str = Field(..., min_length=1)
    player: str = Field(..., min_length=1)
    move: str = Field(..., min_length=3, description="'<pieceId>:<direction>', e.g. 'A-P1:D'")


class JoinGamePayload(BaseModel):
    """Fields required on a JOIN_GAME message."""

    session_id: str = Field(..., min_length=1)


def connection_established() -> WSServerMessage:
    return WSServerMessage(type=MessageType.CONNECTION_ESTABLISHED)


def update_message(game_state: dict[str, Any]) -> WSServerMessage:
    return WSServerMessage(type=MessageType.UPDATE, game_state=game_state)


def game_over_message(winner: str) -> WSServerMessage:
    return WSServerMessage(type=MessageType.GAME_OVER, winner=winner)


def invalid_move_message(error_code: str | None = None) -> WSServerMessage:
    return WSServerMessage(type=MessageType.INVALID_MOVE, error_code=error_code)


def error_message(error_code: str, message: str) -> WSServerMessage:
    return WSServerMessage(type=MessageType.ERROR, error_code=error_code, message=message)


def pong_message() -> WSServerMessage:
    return WSServerMessage(type=MessageType.PONG, server_time=datetime.now())
