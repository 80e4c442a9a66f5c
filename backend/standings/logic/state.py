"""
Game state models for table standings.

Every model is frozen; transitions build new objects with ``model_copy``.
Field aliases are the camelCase keys of the persisted snapshot schema.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from standings.logic.enums import PlayerStatus

# Length in bytes of the random part of a round id (rendered as 8 hex chars).
_ROUND_ID_BYTES = 4

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


def new_game_id() -> str:
    return str(uuid.uuid4())


class Player(BaseModel):
    """A seated player and their current standing."""

    model_config = _MODEL_CONFIG

    id: str
    name: str
    seat_no: int = Field(alias="seatNo", ge=1)
    rank: int
    status: PlayerStatus = PlayerStatus.ACTIVE
    joined_round: int = Field(default=0, alias="joinedRound", ge=0)  # round index at which the player sat down

    @property
    def is_active(self) -> bool:
        return self.status == PlayerStatus.ACTIVE


class RoundInput(BaseModel):
    """Outcome of one round as entered at the table, before it is committed."""

    model_config = _MODEL_CONFIG

    dealer_seat: int = Field(alias="dealerSeat")
    first_caller_id: str = Field(alias="firstCallerId", min_length=1)
    helper_ids: tuple[str, ...] = Field(default=(), alias="helperIds")
    house_won: bool = Field(alias="houseWon")
    level_steps: int = Field(default=1, alias="levelSteps", ge=1)

    @model_validator(mode="after")
    def _validate_house(self) -> RoundInput:
        if self.first_caller_id in self.helper_ids:
            raise ValueError("helperIds must not contain the first caller")
        if len(set(self.helper_ids)) != len(self.helper_ids):
            raise ValueError("helperIds must not contain duplicates")
        return self

    @property
    def house_ids(self) -> frozenset[str]:
        return frozenset((self.first_caller_id, *self.helper_ids))


class RoundRecord(RoundInput):
    """A committed round. Immutable once appended to history."""

    id: str
    created_at: str = Field(alias="createdAt")
    non_house_score: int = Field(default=0, alias="nonHouseScore")  # legacy point total, 0 for new rounds

    @classmethod
    def from_input(cls, round_input: RoundInput, *, now: datetime | None = None) -> RoundRecord:
        """Stamp a round outcome with a fresh id and creation time."""
        created = (now or datetime.now(tz=UTC)).astimezone(UTC)
        return cls(
            id=secrets.token_hex(_ROUND_ID_BYTES),
            created_at=created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            dealer_seat=round_input.dealer_seat,
            first_caller_id=round_input.first_caller_id,
            helper_ids=round_input.helper_ids,
            house_won=round_input.house_won,
            level_steps=round_input.level_steps,
        )


class PendingRound(BaseModel):
    """A previewed round and the roster it was computed from."""

    model_config = _MODEL_CONFIG

    round_input: RoundInput
    base_players: tuple[Player, ...]


class VacatedDealer(BaseModel):
    """Dealer seat given up because its holder was frozen."""

    model_config = _MODEL_CONFIG

    player_id: str
    seat_no: int


class RoundResult(BaseModel):
    """Output of the rank engine for one round."""

    model_config = ConfigDict(frozen=True)

    updated_players: tuple[Player, ...]
    delta: dict[str, int]


class GameState(BaseModel):
    """
    Full standings state of one table.

    ``pending`` and ``vacated_dealer`` are transient and never persisted.
    """

    model_config = _MODEL_CONFIG

    game_id: str = Field(default_factory=new_game_id, alias="gameId")
    round_index: int = Field(default=0, alias="roundIndex", ge=0)  # number of committed rounds
    current_dealer_seat: int = Field(default=1, alias="currentDealerSeat")
    players: tuple[Player, ...] = ()
    history: tuple[RoundRecord, ...] = ()
    pending: PendingRound | None = Field(default=None, exclude=True)
    vacated_dealer: VacatedDealer | None = Field(default=None, exclude=True)

    def find_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

