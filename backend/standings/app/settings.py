"""Standings application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from standings.logic.enums import RotationPolicy
from standings.logic.settings import DEFAULT_INITIAL_RANK, DEFAULT_RANK_FLOOR, GameSettings


class StandingsAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STANDINGS_")

    snapshot_dir: str = "data/snapshots"
    database_path: str | None = None  # score mirror is disabled when unset
    log_dir: str | None = None

    initial_rank: int = DEFAULT_INITIAL_RANK
    rank_floor: int = DEFAULT_RANK_FLOOR
    default_dealer_seat: int = 1
    rotation_policy: RotationPolicy = RotationPolicy.NEXT_SEAT
    legacy_deck_count: int = 2

    def to_game_settings(self) -> GameSettings:
        return GameSettings(
            initial_rank=self.initial_rank,
            rank_floor=self.rank_floor,
            default_dealer_seat=self.default_dealer_seat,
            rotation_policy=self.rotation_policy,
            legacy_deck_count=self.legacy_deck_count,
        )
