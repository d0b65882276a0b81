"""Base types and helpers for WebSocket message handlers."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from app.schemas.ws import WSClientMessage, WSServerMessage, error_message

if TYPE_CHECKING:
    from app.services.websocket.manager import ConnectionManager

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class HandlerContext:
    """Context passed to each message handler."""

    connection_id: str
    message: WSClientMessage
    manager: "ConnectionManager"


@dataclass
class HandlerResult:
    """Result returned by message handlers.

    ``response`` goes to the originating connection only; each message in
    ``broadcasts`` goes, in order, to every subscriber of ``game_id``.
    """

    success: bool
    response: WSServerMessage | None = None
    broadcasts: list[WSServerMessage] = field(default_factory=list)
    game_id: str | None = None


def validate_payload(
    data: dict[str, Any],
    schema: type[T],
) -> tuple[T | None, HandlerResult | None]:
    """Validate message fields against a Pydantic schema.

    Args:
        data: The raw fields to validate.
        schema: The Pydantic model class to validate against.

    Returns:
        Tuple of (validated_payload, error_result). One will be None.
    """
    try:
        validated = schema.model_validate(data)
        return validated, None
    except ValidationError as e:
        logger.warning("Invalid %s payload: %s", schema.__name__, e)
        return None, error_response("VALIDATION_ERROR", str(e))


def error_response(error_code: str, message: str) -> HandlerResult:
    """Build an ERROR HandlerResult for the originating connection."""
    return HandlerResult(
        success=False,
        response=error_message(error_code, message),
    )
