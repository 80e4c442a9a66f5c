"""
Build validated round outcomes from table input.

This is the only place a round is checked against the roster. The rank engine
trusts whatever RoundInput it receives.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from standings.logic.exceptions import InvalidRoundError
from standings.logic.settings import max_helpers
from standings.logic.state import RoundInput

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from standings.logic.state import Player


def build_round(
    players: Sequence[Player],
    *,
    dealer_seat: int,
    first_caller_id: str | None,
    helper_ids: Iterable[str] = (),
    house_won: bool,
    level_steps: int = 1,
) -> RoundInput:
    """
    Return a RoundInput checked against the active roster.

    The first caller is silently dropped from the helpers. Raises
    InvalidRoundError when the first caller is missing or not active, when a
    helper is not active, or when the house exceeds the table's cap.
    """
    if not first_caller_id:
        raise InvalidRoundError("a first caller must be chosen before recording a round")

    active_ids = {p.id for p in players if p.is_active}
    if first_caller_id not in active_ids:
        raise InvalidRoundError(f"first caller {first_caller_id} is not an active player")

    helpers = tuple(dict.fromkeys(h for h in helper_ids if h != first_caller_id))
    inactive = sorted(set(helpers) - active_ids)
    if inactive:
        raise InvalidRoundError(f"helpers are not active players: {inactive}")

    cap = max_helpers(len(active_ids))
    if len(helpers) > cap:
        raise InvalidRoundError(f"{len(helpers)} helpers exceed the cap of {cap} for {len(active_ids)} active players")

    try:
        return RoundInput(
            dealer_seat=dealer_seat,
            first_caller_id=first_caller_id,
            helper_ids=helpers,
            house_won=house_won,
            level_steps=level_steps,
        )
    except ValidationError as exc:
        raise InvalidRoundError(str(exc)) from exc
