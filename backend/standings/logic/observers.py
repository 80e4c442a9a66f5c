"""
Collaborator protocols the standings controller notifies after each transition.

Observers see every new state once it is in place. The persistence sink is a
best-effort mirror of players and per-round scores; its failures never undo a
transition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from collections.abc import Sequence

    from standings.logic.state import GameState


class ScoreRow(BaseModel):
    """One player's standing after a committed round."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    seat_no: int
    rank: int


class StateObserver(Protocol):
    """Receives the new game state after every transition."""

    def state_changed(self, state: GameState) -> None: ...


class PersistenceSink(Protocol):
    """Durable mirror for players and committed standings."""

    def upsert_player(self, player_id: str, name: str) -> None: ...

    def insert_scores(self, game_id: str, rows: Sequence[ScoreRow]) -> None: ...
