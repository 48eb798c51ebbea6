"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal

from core.player import validate_player_name

from config import config


# Game schemas
class NewGameRequest(BaseModel):
    """Request to sit down at the table."""

    player_name: str = Field(
        default=config.game.default_player_name,
        description="Display name shown above the player's hand",
    )

    @field_validator("player_name")
    @classmethod
    def check_player_name(cls, value: str) -> str:
        return validate_player_name(
            value,
            min_length=config.game.player_name_min_length,
            max_length=config.game.player_name_max_length,
        )


class NewGameResponse(BaseModel):
    """Session created for a new game."""

    session_id: str
    player_name: str


class ActionRequest(BaseModel):
    """Request for player action."""

    action: Literal["hit", "stand"]


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    suit_symbol: str
    value: int
    image_url: str
    text: str
    hidden: bool = False


class HandResponse(BaseModel):
    """Hand representation."""

    name: str
    cards: list[CardResponse]
    value: int | None
    is_soft: bool
    is_blackjack: bool
    is_busted: bool


class RoundResultResponse(BaseModel):
    """Round result."""

    outcome: str
    result: Literal["win", "loss", "tie"]
    message: str
    player_score: int
    dealer_score: int


class GameStateResponse(BaseModel):
    """Current game state."""

    state: str
    player_hand: HandResponse
    dealer_hand: HandResponse
    cards_remaining: int
    can_hit: bool
    can_stand: bool
    can_deal: bool
    result: RoundResultResponse | None = None


# Statistics schemas
class StatsResponse(BaseModel):
    """Cumulative results for the session."""

    games_played: int
    wins: int
    losses: int
    ties: int
    win_rate: float
