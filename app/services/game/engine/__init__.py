"""Game engine module - pure functional game logic.

This module provides the core game engine with:
- Board model for the fixed 5x5 grid
- Move actions parsed from their "<pieceId>:<direction>" wire form
- ProcessResult pattern for error handling
- Win detection

Usage:
    from app.services.game.engine import parse_move, process_move

    result = process_move(session, parse_move("A-P1:D"), player)

    if result.success:
        new_session = result.state
    else:
        print(f"Error: {result.error_code} - {result.error_message}")
"""

# Actions - explicit user inputs
from .actions import MoveAction, parse_move

# Board model
from .board import (
    BOARD_SIZE,
    INITIAL_LAYOUT,
    cell_at,
    count_pieces,
    in_bounds,
    locate,
    new_board,
    target_cell,
    team_of,
)

# Main processing
from .process import check_win_condition, is_terminal, process_move

# Result types
from .validation import ProcessResult, ValidationResult, validate_action, validate_move

__all__ = [
    # Actions
    "MoveAction",
    "parse_move",
    # Board
    "BOARD_SIZE",
    "INITIAL_LAYOUT",
    "cell_at",
    "count_pieces",
    "in_bounds",
    "locate",
    "new_board",
    "target_cell",
    "team_of",
    # Processing
    "process_move",
    "is_terminal",
    "check_win_condition",
    # Validation
    "ProcessResult",
    "ValidationResult",
    "validate_action",
    "validate_move",
]
