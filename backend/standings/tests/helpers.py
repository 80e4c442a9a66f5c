"""Builders for standings test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

from standings.logic.enums import PlayerStatus
from standings.logic.service import StandingsController
from standings.logic.settings import DEFAULT_INITIAL_RANK, GameSettings
from standings.logic.state import GameState, Player, RoundInput, RoundRecord

if TYPE_CHECKING:
    from collections.abc import Sequence


class RecordingSink:
    """PersistenceSink that keeps every call for assertions."""

    def __init__(self) -> None:
        self.players: list[tuple[str, str]] = []
        self.scores: list[tuple[str, list]] = []

    def upsert_player(self, player_id: str, name: str) -> None:
        self.players.append((player_id, name))

    def insert_scores(self, game_id: str, rows) -> None:
        self.scores.append((game_id, list(rows)))


class FailingSink:
    def upsert_player(self, player_id: str, name: str) -> None:
        raise RuntimeError("database is down")

    def insert_scores(self, game_id: str, rows) -> None:
        raise RuntimeError("database is down")


class RecordingObserver:
    def __init__(self) -> None:
        self.states: list[GameState] = []

    def state_changed(self, state: GameState) -> None:
        self.states.append(state)


def create_player(
    seat_no: int = 1,
    name: str | None = None,
    *,
    player_id: str | None = None,
    rank: int = DEFAULT_INITIAL_RANK,
    status: PlayerStatus = PlayerStatus.ACTIVE,
    joined_round: int = 0,
) -> Player:
    """Create a Player with sensible defaults for testing. The id defaults to ``p<seat>``."""
    return Player(
        id=player_id if player_id is not None else f"p{seat_no}",
        name=name if name is not None else f"Player{seat_no}",
        seat_no=seat_no,
        rank=rank,
        status=status,
        joined_round=joined_round,
    )


def create_players(count: int, *, frozen: Sequence[int] = ()) -> tuple[Player, ...]:
    """Seats 1..count with ids p1..p<count>; seats listed in ``frozen`` start frozen."""
    return tuple(
        create_player(seat, status=PlayerStatus.FROZEN if seat in frozen else PlayerStatus.ACTIVE)
        for seat in range(1, count + 1)
    )


def create_round(
    first_caller_id: str = "p1",
    helper_ids: Sequence[str] = (),
    *,
    house_won: bool = True,
    level_steps: int = 1,
    dealer_seat: int = 1,
) -> RoundInput:
    return RoundInput(
        dealer_seat=dealer_seat,
        first_caller_id=first_caller_id,
        helper_ids=tuple(helper_ids),
        house_won=house_won,
        level_steps=level_steps,
    )


def create_record(round_id: str = "r1", **kwargs) -> RoundRecord:
    """Create a committed RoundRecord; keyword arguments go to create_round."""
    round_input = create_round(**kwargs)
    return RoundRecord.from_input(round_input).model_copy(update={"id": round_id})


def create_controller(
    count: int = 6,
    *,
    settings: GameSettings | None = None,
    frozen: Sequence[int] = (),
    dealer_seat: int = 1,
    sink=None,
    observers=(),
) -> StandingsController:
    """Controller with ``count`` seated players and no history."""
    state = GameState(
        game_id="game-1",
        current_dealer_seat=dealer_seat,
        players=create_players(count, frozen=frozen),
    )
    return StandingsController(settings, state=state, sink=sink, observers=observers)


def ranks(players: Sequence[Player]) -> dict[str, int]:
    return {p.id: p.rank for p in players}


def seats(players: Sequence[Player]) -> dict[str, int]:
    return {p.id: p.seat_no for p in players}
