"""SQLite-backed score repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shared.dal.models import PlayerRecord, ScoreRecord
from shared.dal.score_repository import ScoreRepository

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.db.connection import Database

logger = structlog.get_logger()


class SqliteScoreRepository(ScoreRepository):
    """SQLite implementation of ScoreRepository.

    Players are upserted by id (the name follows the latest write). Scores
    are append-only: each committed round adds one row per player.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def upsert_player(self, player: PlayerRecord) -> None:
        conn = self._db.connection
        conn.execute(
            "INSERT INTO players (id, name) VALUES (?, ?) ON CONFLICT(id) DO UPDATE SET name = excluded.name",
            (player.id, player.name),
        )
        conn.commit()

    def insert_scores(self, scores: Sequence[ScoreRecord]) -> int:
        """Insert all rows in one transaction. Returns the number of rows written."""
        if not scores:
            return 0
        conn = self._db.connection
        try:
            conn.executemany(
                "INSERT INTO scores (game_uuid, player_id, seat_no, rank) VALUES (?, ?, ?, ?)",
                [(s.game_uuid, s.player_id, s.seat_no, s.rank) for s in scores],
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        logger.debug("inserted score rows", game_uuid=scores[0].game_uuid, rows=len(scores))
        return len(scores)

    def get_player(self, player_id: str) -> PlayerRecord | None:
        row = self._db.connection.execute("SELECT id, name FROM players WHERE id = ?", (player_id,)).fetchone()
        if row is None:
            return None
        return PlayerRecord(id=row[0], name=row[1])

    def get_scores(self, game_uuid: str) -> list[ScoreRecord]:
        """Return score rows for a game in insertion order."""
        rows = self._db.connection.execute(
            "SELECT game_uuid, player_id, seat_no, rank, created_at FROM scores WHERE game_uuid = ? ORDER BY id",
            (game_uuid,),
        ).fetchall()
        return [
            ScoreRecord(game_uuid=r[0], player_id=r[1], seat_no=r[2], rank=r[3], created_at=r[4]) for r in rows
        ]
