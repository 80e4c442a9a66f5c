"""
Immutable roster update utilities using Pydantic model_copy.

These functions never mutate their input - they always return new tuples
or state objects with the requested changes applied. Rosters are kept
ordered by seat number.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from standings.logic.state import GameState, Player


def sort_by_seat(players: Iterable[Player]) -> tuple[Player, ...]:
    return tuple(sorted(players, key=lambda p: p.seat_no))


def next_free_seat(players: Iterable[Player]) -> int:
    """
    Return the seat after the highest occupied one.

    Returns:
        1 for an empty roster

    """
    return max((p.seat_no for p in players), default=0) + 1


def update_player(
    players: Iterable[Player],
    player_id: str,
    **updates: object,
) -> tuple[Player, ...]:
    """
    Return roster with the matching player updated.

    Args:
        players: Current roster
        player_id: Player to update
        **updates: Fields to update on the player

    Returns:
        New roster tuple; unchanged players are the same objects

    """
    return tuple(p.model_copy(update=updates) if p.id == player_id else p for p in players)


def open_seat(players: Iterable[Player], seat_no: int) -> tuple[Player, ...]:
    """
    Return roster with every seat at or after ``seat_no`` moved up by one.

    Args:
        players: Current roster
        seat_no: Seat to free for an incoming player

    Returns:
        New roster tuple, sorted by seat

    """
    return sort_by_seat(p.model_copy(update={"seat_no": p.seat_no + 1}) if p.seat_no >= seat_no else p for p in players)


def close_seat(players: Iterable[Player], seat_no: int) -> tuple[Player, ...]:
    """
    Return roster with every seat after ``seat_no`` moved down by one.

    The player at ``seat_no`` must already have been removed.

    Args:
        players: Roster without the departing player
        seat_no: Seat that was vacated

    Returns:
        New roster tuple, sorted by seat

    """
    return sort_by_seat(p.model_copy(update={"seat_no": p.seat_no - 1}) if p.seat_no > seat_no else p for p in players)


def clear_transient(state: GameState) -> GameState:
    """Return new game state without a pending preview or vacated dealer seat."""
    return state.model_copy(update={"pending": None, "vacated_dealer": None})
