"""REST endpoints for game records."""

import logging

from fastapi import APIRouter, HTTPException, status

from app.config import get_settings
from app.schemas.game import (
    CreateGameRequest,
    CreateGameResponse,
    InviteRequest,
    InviteResponse,
)
from app.services.game.persistence import get_game_persistence
from app.services.game.registry import get_session_registry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["games"])


@router.post(
    "/create-game",
    response_model=CreateGameResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
)
async def create_game(request: CreateGameRequest):
    """Create a new game between two named players.

    The live session is registered first, then its record is written to the
    database. Player 1 controls team A and moves first.

    Args:
        request: The two player names.

    Returns:
        CreateGameResponse with the new game's id.

    Raises:
        HTTPException 500: If the database insert fails.
    """
    logger.info("POST /create-game - players: %s vs %s", request.player1, request.player2)

    session = get_session_registry().create(request.player1, request.player2)

    try:
        await get_game_persistence().persist_create(session)
    except Exception as e:
        logger.error("Database insert failed for game %s: %s", session.game_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create game",
        )

    return CreateGameResponse(game_id=session.game_id)


@router.get("/game/{game_id}")
async def get_game(game_id: str) -> dict:
    """Return a game's state.

    The live session is authoritative; the durable record is used for games
    this process does not hold (e.g. after a restart).

    Raises:
        HTTPException 404: If no live session or record exists.
        HTTPException 500: If the database read fails.
    """
    logger.info("GET /game/%s", game_id)

    session = get_session_registry().get(game_id)
    if session is not None:
        return session.to_wire()

    try:
        state = await get_game_persistence().fetch_game_state(game_id)
    except Exception as e:
        logger.error("Database query failed for game %s: %s", game_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve game",
        )

    if state is None:
        logger.warning("Game not found: %s", game_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Game not found",
        )
    return state


@router.post("/generate-invite", response_model=InviteResponse, response_model_by_alias=True)
async def generate_invite(request: InviteRequest):
    """Build the join link a player shares with their opponent."""
    invite_link = f"{get_settings().INVITE_BASE_URL}/{request.game_id}"
    logger.debug("Invite link for game %s: %s", request.game_id, invite_link)
    return InviteResponse(invite_link=invite_link)
