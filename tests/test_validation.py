"""Tests for move validation.

Critical scenarios tested:
- Pure board rules (bounds, friendly target, capture target)
- Turn validation (not your turn)
- Ownership validation (piece team must match the requester's team)
- Terminal games reject every move
"""

from app.schemas.game_engine import Direction, GameSession
from app.services.game.engine import (
    MoveAction,
    new_board,
    process_move,
    validate_action,
    validate_move,
)

from .conftest import PLAYER_A, PLAYER_B, board_with, create_session


class TestBoardRules:
    """Test validate_move against the board alone."""

    def test_move_onto_empty_cell_is_legal(self):
        assert validate_move(new_board(), "A-P1", Direction.DOWN)

    def test_move_off_board_is_illegal(self):
        """A piece on row 0 cannot move up; column 0 cannot move left."""
        assert not validate_move(new_board(), "A-P1", Direction.UP)
        assert not validate_move(new_board(), "A-P1", Direction.LEFT)

    def test_move_onto_own_team_is_illegal(self):
        """No self-capture: A-P1 cannot step onto A-P2."""
        assert not validate_move(new_board(), "A-P1", Direction.RIGHT)

    def test_move_onto_opponent_is_legal(self):
        """Stepping onto an opposing piece is a capture and allowed."""
        board = board_with({(0, 0): "A-P1", (1, 0): "B-P1"})

        assert validate_move(board, "A-P1", Direction.DOWN)

    def test_missing_piece_is_illegal(self):
        board = board_with({(0, 0): "A-P1"})

        assert not validate_move(board, "A-P2", Direction.DOWN)


class TestTurnValidation:
    """Test whose turn it is."""

    def test_player_b_cannot_move_on_player_a_turn(self, initial_session: GameSession):
        """Moving out of turn should fail and leave the session unchanged."""
        result = process_move(
            initial_session,
            MoveAction(piece_id="B-P1", direction=Direction.UP),
            PLAYER_B,
        )

        assert not result.success
        assert result.error_code == "NOT_YOUR_TURN"
        assert result.state is None
        assert initial_session.board == new_board()
        assert initial_session.current_player == PLAYER_A

    def test_stranger_cannot_move(self, initial_session: GameSession):
        result = process_move(
            initial_session,
            MoveAction(piece_id="A-P1", direction=Direction.DOWN),
            "mallory",
        )

        assert not result.success
        assert result.error_code == "NOT_A_PLAYER"


class TestOwnershipValidation:
    """Test that the piece's team must be the requester's team."""

    def test_player_a_cannot_move_team_b_piece(self):
        """Alice (team A) naming a B piece is rejected even on her turn."""
        session = create_session(board=board_with({(0, 0): "A-P1", (3, 0): "B-P1"}))

        result = validate_action(
            session,
            MoveAction(piece_id="B-P1", direction=Direction.UP),
            PLAYER_A,
        )

        assert not result.is_valid
        assert result.error_code == "NOT_YOUR_PIECE"

    def test_player_b_moves_own_piece_on_their_turn(self):
        session = create_session(current_player=PLAYER_B)

        result = validate_action(
            session,
            MoveAction(piece_id="B-P1", direction=Direction.UP),
            PLAYER_B,
        )

        assert result.is_valid


class TestRejectionCodes:
    """Test the error code reported for each board-rule failure."""

    def test_piece_not_found(self):
        session = create_session(board=board_with({(0, 0): "A-P1", (4, 4): "B-P3"}))

        result = validate_action(
            session, MoveAction(piece_id="A-P2", direction=Direction.DOWN), PLAYER_A
        )

        assert result.error_code == "PIECE_NOT_FOUND"

    def test_out_of_bounds(self, initial_session: GameSession):
        result = validate_action(
            initial_session, MoveAction(piece_id="A-P3", direction=Direction.RIGHT), PLAYER_A
        )

        assert result.error_code == "OUT_OF_BOUNDS"

    def test_target_occupied_by_own_team(self, initial_session: GameSession):
        result = validate_action(
            initial_session, MoveAction(piece_id="A-P2", direction=Direction.LEFT), PLAYER_A
        )

        assert result.error_code == "TARGET_OCCUPIED"

    def test_finished_game_rejects_moves(self):
        """A terminal session never accepts another move."""
        session = create_session(
            board=board_with({(2, 2): "A-P1"}),
            is_terminal=True,
            winner=PLAYER_A,
        )

        result = validate_action(
            session, MoveAction(piece_id="A-P1", direction=Direction.DOWN), PLAYER_A
        )

        assert not result.is_valid
        assert result.error_code == "GAME_FINISHED"
