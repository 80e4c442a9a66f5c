"""
Rebuild standings by replaying committed rounds over a reset roster.

Undo relies on this instead of stored snapshots: the ranks after N rounds are
whatever the rank engine produces for those N rounds, nothing else. A player
only takes part in rounds at or after their ``joined_round``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from standings.logic.engine import apply_round
from standings.logic.settings import GameSettings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from standings.logic.state import Player, RoundRecord

_DEFAULT_SETTINGS = GameSettings()


class TimelineEntry(BaseModel):
    """Ranks right after one committed round; None for players not yet seated."""

    model_config = ConfigDict(frozen=True)

    round_id: str
    round_number: int  # 1-based
    ranks: dict[str, int | None]


def reset_ranks(players: Sequence[Player], settings: GameSettings | None = None) -> tuple[Player, ...]:
    """Return the roster with every rank set back to the initial rank."""
    initial = (settings or _DEFAULT_SETTINGS).initial_rank
    return tuple(p.model_copy(update={"rank": initial}) for p in players)


def _apply_recorded_round(
    players: tuple[Player, ...],
    round_record: RoundRecord,
    round_position: int,
    settings: GameSettings,
) -> tuple[Player, ...]:
    result = apply_round(players, round_record, settings)
    return tuple(
        after if before.joined_round <= round_position else before
        for before, after in zip(players, result.updated_players, strict=True)
    )


def replay_history(
    players: Sequence[Player],
    history: Sequence[RoundRecord],
    settings: GameSettings | None = None,
) -> tuple[Player, ...]:
    """
    Recompute the roster from scratch.

    Ranks are reset to the initial rank, then every round is applied in
    order. Replaying the same history over the same roster always yields the
    same result.
    """
    settings = settings or _DEFAULT_SETTINGS
    current = reset_ranks(players, settings)
    for position, round_record in enumerate(history):
        current = _apply_recorded_round(current, round_record, position, settings)
    return current


def rank_timeline(
    players: Sequence[Player],
    history: Sequence[RoundRecord],
    settings: GameSettings | None = None,
) -> tuple[TimelineEntry, ...]:
    """Return every player's rank after each round, masking rounds before they joined."""
    settings = settings or _DEFAULT_SETTINGS
    current = reset_ranks(players, settings)
    entries: list[TimelineEntry] = []
    for position, round_record in enumerate(history):
        current = _apply_recorded_round(current, round_record, position, settings)
        entries.append(
            TimelineEntry(
                round_id=round_record.id,
                round_number=position + 1,
                ranks={p.id: p.rank if p.joined_round <= position else None for p in current},
            )
        )
    return tuple(entries)


def find_replay_mismatches(
    players: Sequence[Player],
    history: Sequence[RoundRecord],
    settings: GameSettings | None = None,
) -> dict[str, tuple[int, int]]:
    """Map player id to (live rank, replayed rank) wherever the two disagree."""
    replayed = replay_history(players, history, settings)
    return {
        live.id: (live.rank, again.rank)
        for live, again in zip(players, replayed, strict=True)
        if live.rank != again.rank
    }
