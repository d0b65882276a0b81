"""Handler for PING messages."""

import logging

from app.schemas.ws import MessageType, pong_message

from . import handler
from .base import HandlerContext, HandlerResult

logger = logging.getLogger(__name__)


@handler(MessageType.PING)
async def handle_ping(ctx: HandlerContext) -> HandlerResult:
    """Answer PING with PONG; the heartbeat itself is refreshed by the receive loop."""
    logger.debug("Ping/pong for connection %s", ctx.connection_id)
    return HandlerResult(success=True, response=pong_message())
