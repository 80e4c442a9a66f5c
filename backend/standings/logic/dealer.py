"""
Dealer seat rotation among active players.

Two rotation rules exist in older table histories. NEXT_SEAT picks the next
higher seat number and tolerates gaps left by removals; NEXT_INDEX walks the
sorted active list and assumes seats are contiguous. NEXT_SEAT is the default.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from standings.logic.enums import RotationPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable

    from standings.logic.state import Player


def _active_by_seat(players: Iterable[Player]) -> list[Player]:
    return sorted((p for p in players if p.is_active), key=lambda p: p.seat_no)


def next_dealer_seat(
    current_seat: int,
    players: Iterable[Player],
    policy: RotationPolicy = RotationPolicy.NEXT_SEAT,
) -> int:
    """
    Return the seat that deals after ``current_seat``.

    Frozen players are skipped. With no active player the current seat is
    returned unchanged.
    """
    active = _active_by_seat(players)
    if not active:
        return current_seat

    if policy == RotationPolicy.NEXT_INDEX:
        seats = [p.seat_no for p in active]
        if current_seat not in seats:
            return seats[0]
        return seats[(seats.index(current_seat) + 1) % len(seats)]

    ahead = next((p for p in active if p.seat_no > current_seat), None)
    return ahead.seat_no if ahead is not None else active[0].seat_no


def first_active_seat(players: Iterable[Player], fallback: int) -> int:
    """Return the lowest active seat, else the lowest seat, else ``fallback``."""
    ordered = sorted(players, key=lambda p: p.seat_no)
    active = [p for p in ordered if p.is_active]
    if active:
        return active[0].seat_no
    if ordered:
        return ordered[0].seat_no
    return fallback


def is_valid_dealer(seat: int, players: Iterable[Player]) -> bool:
    """Check whether an active player holds ``seat``."""
    return any(p.is_active and p.seat_no == seat for p in players)
