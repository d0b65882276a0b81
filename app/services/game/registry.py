"""In-memory registry of live game sessions."""

import logging
import uuid

from app.schemas.game_engine import GameSession
from app.services.game.engine import ProcessResult, new_board, parse_move, process_move

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns the game_id -> GameSession mapping for this process.

    create() and apply_move() are the only mutators. apply_move() runs
    validation, processing and the commit without awaiting anything, so on a
    single event loop two moves for the same game can never both see the
    pre-move board.
    """

    def __init__(self, sessions: dict[str, GameSession] | None = None) -> None:
        self._sessions: dict[str, GameSession] = dict(sessions or {})

    def create(self, player_a: str, player_b: str) -> GameSession:
        """Allocate a session in the starting layout with player A to move.

        Raises:
            ValueError: If a player name is blank or both names are equal.
        """
        if not player_a or not player_a.strip() or not player_b or not player_b.strip():
            raise ValueError("Both players must be named")
        if player_a == player_b:
            raise ValueError("Players must be distinct")

        game_id = str(uuid.uuid4())
        session = GameSession(
            game_id=game_id,
            player_a=player_a,
            player_b=player_b,
            board=new_board(),
            current_player=player_a,
        )
        self._sessions[game_id] = session
        logger.info("Game %s created: %s (A) vs %s (B)", game_id, player_a, player_b)
        return session

    def get(self, game_id: str) -> GameSession | None:
        return self._sessions.get(game_id)

    def apply_move(self, game_id: str, player: str, move: str) -> ProcessResult:
        """Apply a move in wire form to a live session and commit the result.

        Args:
            game_id: The target game.
            player: The requesting player.
            move: The move, e.g. "A-P1:D".

        Returns:
            ProcessResult from the engine. GAME_NOT_FOUND and
            INVALID_MOVE_FORMAT are added here for unknown games and
            unparsable moves.
        """
        session = self._sessions.get(game_id)
        if session is None:
            logger.info("Move for unknown game %s from %s", game_id, player)
            return ProcessResult.failure("GAME_NOT_FOUND", "No game with this id")

        try:
            action = parse_move(move)
        except ValueError as e:
            logger.info("Unparsable move %r for game %s: %s", move, game_id, e)
            return ProcessResult.failure("INVALID_MOVE_FORMAT", str(e))

        result = process_move(session, action, player)
        if result.success and result.state is not None:
            self._sessions[game_id] = result.state
        return result

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


# Global registry instance
_session_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    """Get the global SessionRegistry instance."""
    global _session_registry
    if _session_registry is None:
        _session_registry = SessionRegistry()
    return _session_registry


def set_session_registry(registry: SessionRegistry) -> None:
    """Set the global SessionRegistry instance."""
    global _session_registry
    _session_registry = registry
