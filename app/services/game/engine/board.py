"""Board model: the fixed 5x5 grid and positional queries.

All functions are read-only; callers that need a modified board work on a
copy (see copy_board).
"""

import logging

from app.schemas.game_engine import Board, Direction, Team

logger = logging.getLogger(__name__)

BOARD_SIZE = 5

INITIAL_LAYOUT: tuple[tuple[str | None, ...], ...] = (
    ("A-P1", "A-P2", "A-H1", "A-H2", "A-P3"),
    (None, None, None, None, None),
    (None, None, None, None, None),
    (None, None, None, None, None),
    ("B-P1", "B-P2", "B-H1", "B-H2", "B-P3"),
)

DIRECTION_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
}


def new_board() -> Board:
    """Return a fresh board in the starting layout."""
    return [list(row) for row in INITIAL_LAYOUT]


def copy_board(board: Board) -> Board:
    return [list(row) for row in board]


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def cell_at(board: Board, row: int, col: int) -> str | None:
    """Read a cell.

    Returns:
        The piece identity in the cell, or None if empty.

    Raises:
        IndexError: If (row, col) is off the board.
    """
    if not in_bounds(row, col):
        raise IndexError(f"Cell ({row}, {col}) is off the board")
    return board[row][col]


def locate(board: Board, piece_id: str) -> tuple[int, int] | None:
    """Find the (row, col) of a piece, or None if it is not on the board."""
    for row_index, row in enumerate(board):
        for col_index, cell in enumerate(row):
            if cell == piece_id:
                return row_index, col_index
    return None


def team_of(piece_id: str | None) -> Team | None:
    """Team encoded in a piece identity's prefix ("A-P1" -> Team.A)."""
    if not piece_id:
        return None
    prefix, sep, role = piece_id.partition("-")
    if not sep or not role:
        return None
    try:
        return Team(prefix)
    except ValueError:
        return None


def target_cell(row: int, col: int, direction: Direction) -> tuple[int, int]:
    """Apply a direction's unit offset. The result may be off the board."""
    d_row, d_col = DIRECTION_OFFSETS[direction]
    return row + d_row, col + d_col


def count_pieces(board: Board) -> dict[Team, int]:
    """Count remaining pieces per team."""
    counts = {Team.A: 0, Team.B: 0}
    for row in board:
        for cell in row:
            team = team_of(cell)
            if team is not None:
                counts[team] += 1
    logger.debug("Piece count: A=%d, B=%d", counts[Team.A], counts[Team.B])
    return counts
