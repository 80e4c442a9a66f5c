"""SQLite database layer: connection management and repository implementations."""

from shared.db.connection import Database
from shared.db.score_repository import SqliteScoreRepository

__all__ = [
    "Database",
    "SqliteScoreRepository",
]
