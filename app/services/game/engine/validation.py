"""Validation layer for moves and the ProcessResult pattern.

Separates validation from processing logic:
- validate_move() is the pure board-legality check
- validate_action() adds turn, ownership and game-over rules with error codes
- ProcessResult replaces exceptions for control flow
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

from app.schemas.game_engine import Board, Direction, GameSession

from .actions import MoveAction
from .board import cell_at, in_bounds, locate, target_cell, team_of


@dataclass
class ProcessResult:
    """Result of processing a move.

    Replaces exceptions for control flow, providing explicit success/failure
    with error codes suitable for client localization.
    """

    state: GameSession | None = None
    captured: str | None = None
    winner: str | None = None
    success: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(
        cls,
        state: GameSession,
        captured: str | None = None,
        winner: str | None = None,
    ) -> "ProcessResult":
        """Create a successful result with the new session state."""
        return cls(
            state=state,
            captured=captured,
            winner=winner,
            success=True,
        )

    @classmethod
    def failure(cls, code: str, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            state=None,
            success=False,
            error_code=code,
            error_message=message,
        )


@dataclass
class ValidationResult:
    """Result of validating a move before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


def validate_move(board: Board, piece_id: str, direction: Direction) -> bool:
    """Check whether a piece may step one cell in a direction.

    The target must be on the board and must not hold a piece of the moving
    piece's own team. An empty target or an opposing piece (capture) is legal.
    """
    return _check_board_rules(board, piece_id, direction).is_valid


def _check_board_rules(board: Board, piece_id: str, direction: Direction) -> ValidationResult:
    position = locate(board, piece_id)
    if position is None:
        return ValidationResult.error(
            "PIECE_NOT_FOUND",
            f"Piece '{piece_id}' is not on the board",
        )

    new_row, new_col = target_cell(*position, direction)
    if not in_bounds(new_row, new_col):
        return ValidationResult.error(
            "OUT_OF_BOUNDS",
            f"Moving '{piece_id}' {direction.name.lower()} leaves the board",
        )

    occupant = cell_at(board, new_row, new_col)
    if occupant is not None and team_of(occupant) == team_of(piece_id):
        return ValidationResult.error(
            "TARGET_OCCUPIED",
            f"Cell ({new_row}, {new_col}) holds your own piece '{occupant}'",
        )

    return ValidationResult.ok()


def validate_action(
    session: GameSession,
    action: MoveAction,
    player: str,
) -> ValidationResult:
    """Validate a move request before processing.

    Checks:
    - The game is not over
    - The requester is one of the two players
    - It's the requester's turn
    - The piece exists and belongs to the requester's team
    - The target cell is on the board and not held by a friendly piece

    Args:
        session: Current game session.
        action: The move to validate.
        player: The player attempting the move.

    Returns:
        ValidationResult indicating success or failure with error details.
    """
    logger.debug(
        "Validating move: game=%s, player=%s, move=%s",
        session.game_id,
        player,
        action.to_wire(),
    )

    if session.is_terminal:
        logger.warning("Validation failed: GAME_FINISHED, game=%s", session.game_id)
        return ValidationResult.error(
            "GAME_FINISHED",
            "Game has already finished",
        )

    player_team = session.team_for(player)
    if player_team is None:
        logger.warning(
            "Validation failed: NOT_A_PLAYER, game=%s, player=%s",
            session.game_id,
            player,
        )
        return ValidationResult.error(
            "NOT_A_PLAYER",
            "You are not a player in this game",
        )

    if session.current_player != player:
        logger.warning(
            "Validation failed: NOT_YOUR_TURN, current=%s, attempted=%s",
            session.current_player,
            player,
        )
        return ValidationResult.error(
            "NOT_YOUR_TURN",
            "It's not your turn",
        )

    if team_of(action.piece_id) != player_team:
        logger.warning(
            "Validation failed: NOT_YOUR_PIECE, piece=%s, player_team=%s",
            action.piece_id,
            player_team.value,
        )
        return ValidationResult.error(
            "NOT_YOUR_PIECE",
            f"'{action.piece_id}' does not belong to team {player_team.value}",
        )

    result = _check_board_rules(session.board, action.piece_id, action.direction)
    if not result.is_valid:
        logger.warning(
            "Validation failed: %s, move=%s",
            result.error_code,
            action.to_wire(),
        )
        return result

    logger.debug("Move validated successfully: %s", action.to_wire())
    return ValidationResult.ok()
