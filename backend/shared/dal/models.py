"""Persistence models for the data access layer."""

from pydantic import BaseModel


class PlayerRecord(BaseModel, frozen=True):
    """A player known to the score store."""

    id: str
    name: str


class ScoreRecord(BaseModel, frozen=True):
    """One player's rank after a committed round of a game."""

    game_uuid: str
    player_id: str
    seat_no: int
    rank: int
    created_at: str | None = None  # set by the store on insert
