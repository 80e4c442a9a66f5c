"""
Rank engine: apply one round outcome to a roster.

Pure functions only. The engine consumes the house it is given and never
validates it; rounds are checked where they are built (see rounds.py).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from standings.logic.settings import GameSettings
from standings.logic.state import RoundResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from standings.logic.state import Player, RoundInput

_DEFAULT_SETTINGS = GameSettings()


def clamp_rank(rank: int, settings: GameSettings | None = None) -> int:
    """Clamp a rank to the configured floor."""
    return max((settings or _DEFAULT_SETTINGS).rank_floor, rank)


def rank_change(player_id: str, round_input: RoundInput, settings: GameSettings | None = None) -> int:
    """
    Compute the signed rank change for one player.

    House win: every house member advances ``level_steps``, the first caller
    advances one more. House loss: every non-house member advances
    ``level_steps`` and the first caller drops one; helpers keep their rank.
    """
    bonus = (settings or _DEFAULT_SETTINGS).first_caller_bonus
    is_first = player_id == round_input.first_caller_id
    is_house = player_id in round_input.house_ids

    if round_input.house_won:
        if not is_house:
            return 0
        return round_input.level_steps + (bonus if is_first else 0)

    if not is_house:
        return round_input.level_steps
    return -bonus if is_first else 0


def apply_round(
    players: Sequence[Player],
    round_input: RoundInput,
    settings: GameSettings | None = None,
) -> RoundResult:
    """
    Return the roster after one round, plus the per-player change applied.

    The input roster is never mutated; order and identity are preserved and
    only ``rank`` differs. ``delta`` holds the unclamped change, for display.
    """
    settings = settings or _DEFAULT_SETTINGS
    delta: dict[str, int] = {}
    updated: list[Player] = []
    for player in players:
        change = rank_change(player.id, round_input, settings)
        delta[player.id] = change
        updated.append(player.model_copy(update={"rank": clamp_rank(player.rank + change, settings)}))
    return RoundResult(updated_players=tuple(updated), delta=delta)
