"""
Migration of point-score round records to the level-steps schema.

Early histories stored the non-house team's card points instead of a level
count. Points are measured in units of 20 per deck (40 with two decks): the
house holds below two units, winning two steps below one unit, and the
non-house side climbs one step per full unit above two.

The tables these records came from give no level change for a score between
two and three units (80 to 119 with two decks). A round always moves at
least one level, so that band is migrated as a one-step house loss.
"""

from __future__ import annotations

from typing import Any

# Card points per deck that make up one level unit.
POINTS_PER_DECK_UNIT = 20

# Non-house side needs this many units to take the round.
_HOLD_UNITS = 2


def level_steps_from_points(non_house_score: int, deck_count: int) -> tuple[bool, int]:
    """Return (house_won, level_steps) for a legacy non-house point total."""
    unit = POINTS_PER_DECK_UNIT * deck_count
    threshold = unit * _HOLD_UNITS
    if non_house_score < threshold:
        return True, 2 if non_house_score < unit else 1
    return False, max(1, (non_house_score - threshold) // unit)


def is_legacy_round(raw: dict[str, Any]) -> bool:
    return "levelSteps" not in raw and "nonHouseScore" in raw


def migrate_round(raw: dict[str, Any], deck_count: int) -> dict[str, Any]:
    """
    Return a round dict in the level-steps schema.

    Records that already carry ``levelSteps`` are returned unchanged. An
    explicit ``houseWon`` from the record wins over the one derived from points.
    """
    if not is_legacy_round(raw):
        return raw
    house_won, steps = level_steps_from_points(int(raw["nonHouseScore"]), deck_count)
    migrated = dict(raw)
    migrated.setdefault("houseWon", house_won)
    migrated["levelSteps"] = steps
    return migrated
