from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Row-major 5x5 grid; each cell holds a piece identity or None
Board = list[list[str | None]]


# Teams, bound to the piece identity prefix ("A-P1" belongs to team A)
class Team(str, Enum):
    A = "A"
    B = "B"

    @property
    def opponent(self) -> "Team":
        return Team.B if self is Team.A else Team.A


# Single-step movement directions
class Direction(str, Enum):
    LEFT = "L"
    RIGHT = "R"
    UP = "U"
    DOWN = "D"


class MoveHistoryEntry(BaseModel):
    """One accepted move, appended once and never edited."""

    model_config = ConfigDict(frozen=True)

    player: str
    move: str


# Game state for broadcasting and persistence
class GameSession(BaseModel):
    """Complete state of one game.

    Serialized with camelCase keys (gameId, playerA, currentPlayer, ...) for
    the wire and for the durable record; both spellings are accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(alias="gameId")
    player_a: str = Field(alias="playerA")
    player_b: str = Field(alias="playerB")
    board: Board
    current_player: str = Field(alias="currentPlayer")
    move_history: list[MoveHistoryEntry] = Field(default_factory=list, alias="moveHistory")
    is_terminal: bool = Field(False, alias="isTerminal")
    winner: str | None = None

    def team_for(self, player: str) -> Team | None:
        """Team controlled by a player, or None for a stranger."""
        if player == self.player_a:
            return Team.A
        if player == self.player_b:
            return Team.B
        return None

    def other_player(self, player: str) -> str:
        return self.player_b if player == self.player_a else self.player_a

    def to_wire(self) -> dict:
        """Serialize with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
