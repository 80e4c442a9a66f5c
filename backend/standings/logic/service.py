"""
Standings controller: round history, live preview, undo and roster changes.

The controller owns one GameState. Every operation reads the current state,
builds a new one and swaps it in whole; observers and the persistence sink
are told afterwards. Undo never restores a stored snapshot: it drops the last
round and replays the remaining history through the rank engine.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog

from standings.logic.dealer import first_active_seat, is_valid_dealer, next_dealer_seat
from standings.logic.engine import apply_round
from standings.logic.enums import PlayerStatus
from standings.logic.exceptions import UnknownPlayerError
from standings.logic.observers import ScoreRow
from standings.logic.replay import find_replay_mismatches, rank_timeline, replay_history, reset_ranks
from standings.logic.settings import GameSettings, validate_settings
from standings.logic.state import (
    GameState,
    PendingRound,
    Player,
    RoundRecord,
    VacatedDealer,
    new_game_id,
)
from standings.logic.state_utils import (
    clear_transient,
    close_seat,
    next_free_seat,
    open_seat,
    sort_by_seat,
    update_player,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from standings.logic.observers import PersistenceSink, StateObserver
    from standings.logic.replay import TimelineEntry
    from standings.logic.state import RoundInput, RoundResult

logger = structlog.get_logger()


class StandingsController:
    """
    Single-table standings state machine.

    Operations are synchronous and never partially applied. Persistence is
    fire-and-forget: a failing sink or observer is logged and otherwise
    ignored, the in-memory state stays the source of truth.
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        *,
        state: GameState | None = None,
        sink: PersistenceSink | None = None,
        observers: Iterable[StateObserver] = (),
    ) -> None:
        self._settings = settings or GameSettings()
        validate_settings(self._settings)
        self._state = state if state is not None else self._fresh_state()
        self._sink = sink
        self._observers: list[StateObserver] = list(observers)

    # --- Read access ---

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def players(self) -> tuple[Player, ...]:
        return self._state.players

    @property
    def history(self) -> tuple[RoundRecord, ...]:
        return self._state.history

    @property
    def current_dealer_seat(self) -> int:
        return self._state.current_dealer_seat

    @property
    def pending_round(self) -> RoundInput | None:
        pending = self._state.pending
        return pending.round_input if pending is not None else None

    def standings(self) -> tuple[Player, ...]:
        """Roster ordered for the leaderboard: highest rank first, then by seat."""
        return tuple(sorted(self._state.players, key=lambda p: (-p.rank, p.seat_no)))

    def timeline(self) -> tuple[TimelineEntry, ...]:
        return rank_timeline(self._committed_players(), self._state.history, self._settings)

    def verify_replay(self) -> dict[str, tuple[int, int]]:
        """Replay the committed history and return players whose live rank disagrees."""
        return find_replay_mismatches(self._committed_players(), self._state.history, self._settings)

    def add_observer(self, observer: StateObserver) -> None:
        self._observers.append(observer)

    def restore(self, state: GameState) -> None:
        """Replace the whole state, e.g. from a saved snapshot. Observers are not notified."""
        self._state = clear_transient(state)
        logger.info(
            "restored game state",
            game_id=state.game_id,
            round_index=state.round_index,
            players=len(state.players),
        )

    # --- Rounds ---

    def preview_round(self, round_input: RoundInput) -> RoundResult:
        """
        Show a round's effect on the roster without committing it.

        Repeated previews are always computed from the roster as it was before
        the first one, never stacked on a previous preview.
        """
        base = self._committed_players()
        result = apply_round(base, round_input, self._settings)
        self._set_state(
            self._state.model_copy(
                update={
                    "players": result.updated_players,
                    "pending": PendingRound(round_input=round_input, base_players=base),
                }
            )
        )
        logger.debug("previewed round", game_id=self._state.game_id, delta=result.delta)
        return result

    def confirm_pending_round(self, round_override: RoundInput | None = None) -> RoundRecord | None:
        """
        Commit the pending preview (or ``round_override``) to history.

        Returns the committed record, or None when there was nothing to commit.
        """
        round_input = round_override if round_override is not None else self.pending_round
        if round_input is None:
            logger.debug("no pending round to confirm", game_id=self._state.game_id)
            return None
        return self._commit(round_input)

    def record_round(self, round_input: RoundInput) -> RoundRecord:
        """Preview and commit in one step."""
        return self._commit(round_input)

    def _commit(self, round_input: RoundInput) -> RoundRecord:
        state = self._state
        result = apply_round(self._committed_players(), round_input, self._settings)
        record = RoundRecord.from_input(round_input)
        dealer = next_dealer_seat(round_input.dealer_seat, result.updated_players, self._settings.rotation_policy)

        self._set_state(
            state.model_copy(
                update={
                    "round_index": state.round_index + 1,
                    "history": (*state.history, record),
                    "players": result.updated_players,
                    "current_dealer_seat": dealer,
                    "pending": None,
                    "vacated_dealer": None,
                }
            )
        )
        logger.info(
            "round committed",
            game_id=state.game_id,
            round_id=record.id,
            round_index=state.round_index + 1,
            house_won=record.house_won,
            level_steps=record.level_steps,
            next_dealer_seat=dealer,
        )

        rows = [ScoreRow(player_id=p.id, seat_no=p.seat_no, rank=p.rank) for p in result.updated_players]
        self._notify_sink("insert_scores", lambda sink: sink.insert_scores(state.game_id, rows))
        return record

    def undo_last_round(self) -> bool:
        """
        Undo the pending preview, or else the last committed round.

        A pending preview is simply dropped. A committed round is removed and
        the remaining history replayed from reset ranks. Returns False when
        there was nothing to undo.
        """
        state = self._state
        if state.pending is not None:
            self._set_state(state.model_copy(update={"players": state.pending.base_players, "pending": None}))
            logger.info("discarded pending round", game_id=state.game_id)
            return True

        if not state.history:
            logger.debug("nothing to undo", game_id=state.game_id)
            return False

        history = state.history[:-1]
        # a player who sat down after the undone round now joins at the next one
        seated = tuple(p.model_copy(update={"joined_round": min(p.joined_round, len(history))}) for p in state.players)
        players = replay_history(seated, history, self._settings)
        if history:
            dealer = next_dealer_seat(history[-1].dealer_seat, players, self._settings.rotation_policy)
        else:
            dealer = self._default_dealer(players)

        self._set_state(
            state.model_copy(
                update={
                    "round_index": max(0, state.round_index - 1),
                    "history": history,
                    "players": players,
                    "current_dealer_seat": dealer,
                    "vacated_dealer": None,
                }
            )
        )
        logger.info(
            "undid round",
            game_id=state.game_id,
            round_id=state.history[-1].id,
            remaining_rounds=len(history),
            dealer_seat=dealer,
        )
        return True

    # --- Roster ---

    def add_player(
        self,
        name: str,
        seat_no: int | None = None,
        *,
        player_id: str | None = None,
        persist: bool = True,
    ) -> Player:
        """
        Seat a new player at the initial rank.

        Without ``seat_no`` the player takes the next free seat. An explicit
        seat moves everyone at or after it up by one; the dealer moves with
        the player holding the deal.
        """
        state = self._drop_pending("add_player")
        target = next_free_seat(state.players) if seat_no is None else max(1, seat_no)
        player = Player(
            id=player_id or str(uuid.uuid4()),
            name=name,
            seat_no=target,
            rank=self._settings.initial_rank,
            status=PlayerStatus.ACTIVE,
            joined_round=state.round_index,
        )
        players = sort_by_seat((*open_seat(state.players, target), player))

        dealer = state.current_dealer_seat
        if state.players and target <= dealer:
            dealer += 1
        dealer = self._ensure_dealer(dealer, players)

        vacated = state.vacated_dealer
        if vacated is not None and vacated.seat_no >= target:
            vacated = vacated.model_copy(update={"seat_no": vacated.seat_no + 1})

        self._set_state(
            state.model_copy(update={"players": players, "current_dealer_seat": dealer, "vacated_dealer": vacated})
        )
        logger.info("player added", game_id=state.game_id, player_id=player.id, seat_no=target, dealer_seat=dealer)

        if persist:
            self._notify_sink("upsert_player", lambda sink: sink.upsert_player(player.id, player.name))
        return player

    def remove_player(self, player_id: str) -> Player | None:
        """
        Remove a player and close the gap in seat numbers.

        If the removed player held the deal, it passes to the next active
        player after them. Returns the removed player, or None if unknown.
        """
        state = self._state
        target = state.find_player(player_id)
        if target is None:
            logger.debug("remove of unknown player ignored", game_id=state.game_id, player_id=player_id)
            return None

        state = self._drop_pending("remove_player")
        target = state.find_player(player_id) or target
        removed_seat = target.seat_no
        remaining = close_seat((p for p in state.players if p.id != player_id), removed_seat)

        dealer = state.current_dealer_seat
        if not remaining:
            dealer = self._settings.default_dealer_seat
        elif removed_seat < dealer:
            dealer = max(1, dealer - 1)
        elif removed_seat == dealer:
            dealer = self._successor_of_removed(state.players, target)

        self._set_state(
            state.model_copy(update={"players": remaining, "current_dealer_seat": dealer, "vacated_dealer": None})
        )
        logger.info("player removed", game_id=state.game_id, player_id=player_id, seat_no=removed_seat, dealer_seat=dealer)
        return target

    def set_player_status(self, player_id: str, status: PlayerStatus) -> Player:
        """
        Freeze or unfreeze a player.

        Freezing the dealer passes the deal on and remembers the seat; the
        same player returning to active takes it back.
        """
        current = self._state.find_player(player_id)
        if current is None:
            raise UnknownPlayerError(player_id)
        if current.status == status:
            return current

        state = self._drop_pending("set_player_status")
        players = update_player(state.players, player_id, status=status)
        dealer = state.current_dealer_seat
        vacated = state.vacated_dealer

        if status == PlayerStatus.FROZEN and current.seat_no == dealer:
            successor = next_dealer_seat(dealer, players, self._settings.rotation_policy)
            if successor != dealer:
                vacated = VacatedDealer(player_id=player_id, seat_no=current.seat_no)
                dealer = successor
        elif status == PlayerStatus.ACTIVE and vacated is not None and vacated.player_id == player_id:
            dealer = vacated.seat_no
            vacated = None

        dealer = self._ensure_dealer(dealer, players)
        self._set_state(
            state.model_copy(update={"players": players, "current_dealer_seat": dealer, "vacated_dealer": vacated})
        )
        logger.info(
            "player status changed",
            game_id=state.game_id,
            player_id=player_id,
            status=status,
            dealer_seat=dealer,
        )
        return next(p for p in players if p.id == player_id)

    def advance_dealer(self) -> int:
        """Pass the deal to the next active seat without recording a round."""
        state = self._state
        dealer = next_dealer_seat(state.current_dealer_seat, state.players, self._settings.rotation_policy)
        self._set_state(state.model_copy(update={"current_dealer_seat": dealer, "vacated_dealer": None}))
        logger.info("dealer advanced", game_id=state.game_id, dealer_seat=dealer)
        return dealer

    # --- Game lifecycle ---

    def start_new_game(self) -> GameState:
        """Start a new game with the same roster and seats; ranks and history are reset."""
        state = self._state
        players = reset_ranks(self._committed_players(), self._settings)
        players = tuple(p.model_copy(update={"joined_round": 0}) for p in players)
        new_state = GameState(
            game_id=new_game_id(),
            round_index=0,
            current_dealer_seat=first_active_seat(players, self._settings.default_dealer_seat),
            players=players,
            history=(),
        )
        self._set_state(new_state)
        logger.info("new game started", previous_game_id=state.game_id, game_id=new_state.game_id)
        return new_state

    def reset_game(self) -> GameState:
        """Discard everything, roster included."""
        previous = self._state.game_id
        self._set_state(self._fresh_state())
        logger.info("game reset", previous_game_id=previous, game_id=self._state.game_id)
        return self._state

    # --- Internals ---

    def _fresh_state(self) -> GameState:
        return GameState(current_dealer_seat=self._settings.default_dealer_seat)

    def _committed_players(self) -> tuple[Player, ...]:
        pending = self._state.pending
        return pending.base_players if pending is not None else self._state.players

    def _drop_pending(self, operation: str) -> GameState:
        """Return current state with any preview rolled back before a roster change."""
        state = self._state
        if state.pending is None:
            return state
        logger.info("pending round discarded by roster change", game_id=state.game_id, operation=operation)
        return state.model_copy(update={"players": state.pending.base_players, "pending": None})

    def _default_dealer(self, players: Sequence[Player]) -> int:
        seat = self._settings.default_dealer_seat
        if is_valid_dealer(seat, players):
            return seat
        return first_active_seat(players, seat)

    def _ensure_dealer(self, dealer: int, players: Sequence[Player]) -> int:
        """Move the deal on if nobody active holds ``dealer``; unchanged when nobody is active."""
        if is_valid_dealer(dealer, players):
            return dealer
        return next_dealer_seat(dealer, players, self._settings.rotation_policy)

    def _successor_of_removed(self, players: Sequence[Player], removed: Player) -> int:
        """Seat, after renumbering, of the next active player following ``removed``."""
        others = [p for p in players if p.id != removed.id]
        if not any(p.is_active for p in others):
            return first_active_seat(close_seat(others, removed.seat_no), self._settings.default_dealer_seat)
        candidates = [*others, removed.model_copy(update={"status": PlayerStatus.ACTIVE})]
        successor = next_dealer_seat(removed.seat_no, candidates, self._settings.rotation_policy)
        return successor - 1 if successor > removed.seat_no else successor

    def _set_state(self, state: GameState) -> None:
        self._state = state
        for observer in self._observers:
            try:
                observer.state_changed(state)
            except Exception:
                logger.exception("state observer failed", game_id=state.game_id, observer=type(observer).__name__)

    def _notify_sink(self, operation: str, call: Callable[[PersistenceSink], None]) -> None:
        if self._sink is None:
            return
        try:
            call(self._sink)
        except Exception:
            logger.exception("persistence call failed", game_id=self._state.game_id, operation=operation)
