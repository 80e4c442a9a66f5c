"""Data access layer: repository interfaces and shared persistence models."""

from shared.dal.models import PlayerRecord, ScoreRecord
from shared.dal.score_repository import ScoreRepository

__all__ = [
    "PlayerRecord",
    "ScoreRecord",
    "ScoreRepository",
]
