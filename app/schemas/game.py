"""Pydantic schemas for the game HTTP endpoints."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CreateGameRequest(BaseModel):
    """Request body for creating a game."""

    player1: str = Field(..., min_length=1, description="Player A, moves first")
    player2: str = Field(..., min_length=1, description="Player B")

    @model_validator(mode="after")
    def validate_distinct_players(self) -> "CreateGameRequest":
        if not self.player1.strip() or not self.player2.strip():
            raise ValueError("Player names cannot be blank")
        if self.player1 == self.player2:
            raise ValueError("player1 and player2 must be different")
        return self


class CreateGameResponse(BaseModel):
    """Response from game creation."""

    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(..., alias="gameId", description="UUID of the game")


class InviteRequest(BaseModel):
    """Request body for generating an invite link."""

    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(..., alias="gameId", min_length=1)


class InviteResponse(BaseModel):
    """Invite link for the second player."""

    model_config = ConfigDict(populate_by_name=True)

    invite_link: str = Field(..., alias="inviteLink")
