"""Game action types - explicit user inputs separated from game state."""

from pydantic import BaseModel, Field

from app.schemas.game_engine import Direction


class MoveAction(BaseModel):
    """Player moves one of their pieces a single cell."""

    piece_id: str = Field(..., min_length=1, description="Identity of the piece to move, e.g. 'A-P1'")
    direction: Direction

    def to_wire(self) -> str:
        """Wire form of the move, e.g. 'A-P1:D'."""
        return f"{self.piece_id}:{self.direction.value}"


def parse_move(raw: str) -> MoveAction:
    """Build a MoveAction from its wire form "<pieceId>:<direction>".

    Raises:
        ValueError: If the string has no separator, an empty piece id, or an
            unknown direction.
    """
    piece_id, sep, direction = raw.strip().partition(":")
    if not sep or not piece_id:
        raise ValueError(f"Malformed move: {raw!r}")
    try:
        parsed_direction = Direction(direction.upper())
    except ValueError:
        raise ValueError(f"Unknown direction {direction!r} in move {raw!r}") from None
    return MoveAction(piece_id=piece_id, direction=parsed_direction)
