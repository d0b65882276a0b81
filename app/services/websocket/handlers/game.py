"""Handlers for MOVE and JOIN_GAME messages."""

import logging

from app.schemas.ws import (
    JoinGamePayload,
    MessageType,
    MovePayload,
    game_over_message,
    invalid_move_message,
    update_message,
)
from app.services.game.persistence import get_game_persistence
from app.services.game.registry import get_session_registry

from . import handler
from .base import HandlerContext, HandlerResult, error_response, validate_payload

logger = logging.getLogger(__name__)


@handler(MessageType.MOVE)
async def handle_move(ctx: HandlerContext) -> HandlerResult:
    """Handle MOVE by applying it to the live session.

    Flow:
    1. Validate message fields
    2. Subscribe the connection to the referenced game
    3. Apply the move through the session registry
    4. Queue the durable write
    5. Broadcast update (and game_over) to the game's subscribers

    Returns:
        HandlerResult with invalid_move for the requester on rejection, or
        broadcasts for the game on success.
    """
    payload, validation_error = validate_payload(
        ctx.message.model_dump(include={"session_id", "player", "move"}),
        MovePayload,
    )
    if validation_error:
        return validation_error

    registry = get_session_registry()
    game_id = payload.session_id

    # Subscribe on first reference so the mover also receives the update
    if game_id in registry:
        ctx.manager.subscribe_to_game(ctx.connection_id, game_id)

    result = registry.apply_move(game_id, payload.player, payload.move)

    if not result.success or result.state is None:
        logger.info(
            "Move rejected for player %s in game %s: %s - %s",
            payload.player,
            game_id,
            result.error_code,
            result.error_message,
        )
        return HandlerResult(
            success=False,
            response=invalid_move_message(result.error_code),
        )

    get_game_persistence().persist_update(result.state)

    broadcasts = [update_message(result.state.to_wire())]
    if result.winner is not None:
        broadcasts.append(game_over_message(result.winner))

    logger.info(
        "Move %s by %s applied in game %s (captured=%s, winner=%s)",
        payload.move,
        payload.player,
        game_id,
        result.captured,
        result.winner,
    )

    return HandlerResult(
        success=True,
        broadcasts=broadcasts,
        game_id=game_id,
    )


@handler(MessageType.JOIN_GAME)
async def handle_join_game(ctx: HandlerContext) -> HandlerResult:
    """Handle JOIN_GAME by subscribing the connection and sending a snapshot."""
    payload, validation_error = validate_payload(
        ctx.message.model_dump(include={"session_id"}),
        JoinGamePayload,
    )
    if validation_error:
        return validation_error

    session = get_session_registry().get(payload.session_id)
    if session is None:
        logger.info(
            "Connection %s tried to join unknown game %s",
            ctx.connection_id,
            payload.session_id,
        )
        return error_response("GAME_NOT_FOUND", "No game with this id")

    ctx.manager.subscribe_to_game(ctx.connection_id, session.game_id)

    return HandlerResult(
        success=True,
        response=update_message(session.to_wire()),
    )
