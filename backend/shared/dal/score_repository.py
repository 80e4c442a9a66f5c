"""Abstract interface for player and score persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.dal.models import PlayerRecord, ScoreRecord


class ScoreRepository(ABC):
    """Abstract interface for the standings score store.

    Implementations can use SQLite, a hosted database, etc.
    """

    @abstractmethod
    def upsert_player(self, player: PlayerRecord) -> None: ...

    @abstractmethod
    def insert_scores(self, scores: Sequence[ScoreRecord]) -> int: ...

    @abstractmethod
    def get_player(self, player_id: str) -> PlayerRecord | None: ...

    @abstractmethod
    def get_scores(self, game_uuid: str) -> list[ScoreRecord]: ...
