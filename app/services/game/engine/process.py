"""Main entry point for move processing.

This module provides the primary interface for applying a move:
- process_move(): Re-validates and applies a move to a copy of the session
- is_terminal() / check_win_condition(): Win detection after each move
- Returns ProcessResult with the new session
"""

import logging

logger = logging.getLogger(__name__)

from app.schemas.game_engine import Board, GameSession, MoveHistoryEntry, Team

from .actions import MoveAction
from .board import copy_board, count_pieces, locate, target_cell
from .validation import ProcessResult, validate_action


def process_move(
    session: GameSession,
    action: MoveAction,
    player: str,
) -> ProcessResult:
    """Process a move and return the result.

    This is the only code path that produces a new session state. It:
    1. Validates the move against the current board (never a cached check)
    2. Captures an opposing piece on the target cell, if any
    3. Relocates the moving piece
    4. Appends the move to history and passes the turn
    5. Marks the session terminal if one team has no pieces left

    The input session is never modified; the new state is a copy.

    Args:
        session: Current game session.
        action: The move to apply.
        player: The player attempting the move.

    Returns:
        ProcessResult containing:
        - success: Whether the move was applied
        - state: The new session (if successful)
        - captured: Identity of the removed piece, if any
        - winner: The winning player, if this move ended the game
        - error_code/error_message: Error details (if failed)

    Example:
        >>> result = process_move(session, parse_move("A-P1:D"), "alice")
        >>> if result.success:
        ...     sessions[session.game_id] = result.state
        ... else:
        ...     send_invalid_move(result.error_code)
    """
    logger.info(
        "Processing move: game=%s, player=%s, move=%s",
        session.game_id,
        player,
        action.to_wire(),
    )

    validation = validate_action(session, action, player)
    if not validation.is_valid:
        return ProcessResult.failure(
            validation.error_code or "VALIDATION_ERROR",
            validation.error_message or "Invalid move",
        )

    board = copy_board(session.board)
    from_row, from_col = locate(board, action.piece_id)
    to_row, to_col = target_cell(from_row, from_col, action.direction)

    captured = board[to_row][to_col]
    if captured is not None:
        logger.info(
            "Capture: %s takes %s at (%d, %d)",
            action.piece_id,
            captured,
            to_row,
            to_col,
        )

    board[from_row][from_col] = None
    board[to_row][to_col] = action.piece_id

    winner = player if is_terminal(board) else None

    new_state = session.model_copy(
        update={
            "board": board,
            "move_history": [
                *session.move_history,
                MoveHistoryEntry(player=player, move=action.to_wire()),
            ],
            "current_player": session.other_player(player),
            "is_terminal": winner is not None,
            "winner": winner,
        }
    )

    logger.info(
        "Move processed: game=%s, %s (%d, %d) -> (%d, %d), next=%s",
        session.game_id,
        action.piece_id,
        from_row,
        from_col,
        to_row,
        to_col,
        new_state.current_player,
    )
    if winner is not None:
        logger.info("Game over: game=%s, winner=%s", session.game_id, winner)

    return ProcessResult.ok(new_state, captured=captured, winner=winner)


def is_terminal(board: Board) -> bool:
    """True iff either team has no pieces left."""
    return check_win_condition(board) is not None


def check_win_condition(board: Board) -> Team | None:
    """Check if a team has won.

    A team wins when the opposing team has no pieces left on the board.

    Args:
        board: Board to inspect.

    Returns:
        The winning team, or None if both teams still have pieces.
    """
    counts = count_pieces(board)
    for team in Team:
        if counts[team] == 0:
            logger.debug("Win check: team %s has no pieces left", team.value)
            return team.opponent
    return None
