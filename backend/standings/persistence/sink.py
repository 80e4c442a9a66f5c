"""Persistence sinks that mirror players and committed standings to a score store."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shared.dal.models import PlayerRecord, ScoreRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.dal.score_repository import ScoreRepository
    from standings.logic.observers import ScoreRow

logger = structlog.get_logger()


class NullPersistenceSink:
    """Sink used when no score store is configured: logs and skips every write."""

    def upsert_player(self, player_id: str, name: str) -> None:
        logger.warning("score store not configured, skipping player persist", player_id=player_id, name=name)

    def insert_scores(self, game_id: str, rows: Sequence[ScoreRow]) -> None:
        logger.warning("score store not configured, skipping scores persist", game_id=game_id, rows=len(rows))


class RepositoryPersistenceSink:
    """Forwards controller writes to a ScoreRepository.

    Repository errors propagate; the controller catches and logs them so a
    failed write never rolls back a transition.
    """

    def __init__(self, repository: ScoreRepository) -> None:
        self._repository = repository

    def upsert_player(self, player_id: str, name: str) -> None:
        self._repository.upsert_player(PlayerRecord(id=player_id, name=name))

    def insert_scores(self, game_id: str, rows: Sequence[ScoreRow]) -> None:
        logger.info("persisting scores", game_id=game_id, rows=len(rows))
        written = self._repository.insert_scores(
            [ScoreRecord(game_uuid=game_id, player_id=r.player_id, seat_no=r.seat_no, rank=r.rank) for r in rows]
        )
        logger.info("scores persisted", game_id=game_id, rows=written)
