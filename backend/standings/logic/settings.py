"""Centralized standings settings - all configurable ranking rules."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from standings.logic.enums import RotationPolicy
from standings.logic.exceptions import UnsupportedSettingsError

# Rank of the "2" card face; every player starts a game here.
DEFAULT_INITIAL_RANK = 2

# Lowest rank a player can fall to. Displayed as "2-22".
DEFAULT_RANK_FLOOR = -20


class GameSettings(BaseModel):
    """
    Configuration for rank progression and dealer rotation.

    All fields have default values matching the current table rules.
    """

    model_config = ConfigDict(frozen=True)

    # --- Ranks ---
    initial_rank: int = DEFAULT_INITIAL_RANK
    rank_floor: int = DEFAULT_RANK_FLOOR
    first_caller_bonus: int = 1  # extra step on a house win, lost on a house loss

    # --- Dealer ---
    default_dealer_seat: int = 1
    rotation_policy: RotationPolicy = RotationPolicy.NEXT_SEAT

    # --- Legacy point-score histories ---
    legacy_deck_count: int = 2


def validate_settings(settings: GameSettings) -> None:
    """Validate that all settings values are coherent.

    Raises UnsupportedSettingsError listing every offending value.
    """
    errors: list[str] = []

    if settings.rank_floor > settings.initial_rank:
        errors.append(f"rank_floor={settings.rank_floor} is above initial_rank={settings.initial_rank}")

    if settings.first_caller_bonus < 0:
        errors.append(f"first_caller_bonus={settings.first_caller_bonus} must not be negative")

    if settings.default_dealer_seat < 1:
        errors.append(f"default_dealer_seat={settings.default_dealer_seat} must be a positive seat number")

    if settings.legacy_deck_count < 1:
        errors.append(f"legacy_deck_count={settings.legacy_deck_count} must be at least 1")

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))


def max_helpers(active_count: int) -> int:
    """House size cap: half the table (rounded down) including the first caller."""
    return max(0, active_count // 2 - 1)
