"""Versioned local snapshots of a table's game state.

A snapshot is the JSON envelope ``{"version": 1, "state": {...}}``. The state
uses the camelCase keys of the GameState schema; ``pendingRound`` and
``pendingBasePlayers`` are always written as null because a preview is never
persisted. Loading accepts the envelope or a bare state object from builds
that predate it, fills missing fields from a fresh state and migrates legacy
point-score rounds.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from standings.logic.exceptions import SnapshotLoadError
from standings.logic.legacy import migrate_round
from standings.logic.settings import GameSettings
from standings.logic.state import GameState

if TYPE_CHECKING:
    from shared.storage import SnapshotStorage
    from standings.logic.state import RoundRecord

logger = structlog.get_logger()

SNAPSHOT_VERSION = 1
STORAGE_KEY = "ecpoker/game-state/v1"

_ROUND_KEY_ORDER = (
    "id",
    "createdAt",
    "dealerSeat",
    "firstCallerId",
    "helperIds",
    "houseWon",
    "levelSteps",
    "nonHouseScore",
)


def _round_to_json(record: RoundRecord) -> dict[str, Any]:
    dumped = record.model_dump(mode="json", by_alias=True)
    return {key: dumped[key] for key in _ROUND_KEY_ORDER}


def snapshot_payload(state: GameState) -> dict[str, Any]:
    """Return the envelope dict for ``state``, with any preview rolled back."""
    players = state.pending.base_players if state.pending is not None else state.players
    return {
        "version": SNAPSHOT_VERSION,
        "state": {
            "gameId": state.game_id,
            "roundIndex": state.round_index,
            "currentDealerSeat": state.current_dealer_seat,
            "players": [p.model_dump(mode="json", by_alias=True) for p in players],
            "history": [_round_to_json(r) for r in state.history],
            "pendingRound": None,
            "pendingBasePlayers": None,
        },
    }


def encode_snapshot(state: GameState) -> str:
    return json.dumps(snapshot_payload(state), ensure_ascii=False, separators=(",", ":"))


def _unwrap(parsed: object) -> dict[str, Any]:
    if not isinstance(parsed, dict):
        raise SnapshotLoadError(f"Snapshot root must be a JSON object, got {type(parsed).__name__}")
    if "version" not in parsed:
        return parsed
    version = parsed["version"]
    if version != SNAPSHOT_VERSION:
        raise SnapshotLoadError(f"Snapshot version mismatch: expected {SNAPSHOT_VERSION}, got {version}")
    state = parsed.get("state")
    if not isinstance(state, dict):
        raise SnapshotLoadError("Snapshot envelope is missing its 'state' object")
    return state


def decode_snapshot(raw: str, settings: GameSettings | None = None) -> GameState:
    """
    Parse snapshot content into a GameState.

    Missing fields take their fresh-game defaults. Any pending preview in the
    content is dropped. Raises SnapshotLoadError on malformed content.
    """
    settings = settings or GameSettings()
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SnapshotLoadError(f"Malformed snapshot JSON: {exc}") from exc

    state = _unwrap(parsed)
    history = state.get("history") or []
    if not isinstance(history, list):
        raise SnapshotLoadError("Snapshot 'history' must be a list")

    try:
        migrated = [migrate_round(r, settings.legacy_deck_count) if isinstance(r, dict) else r for r in history]
    except (TypeError, ValueError) as exc:
        raise SnapshotLoadError(f"Invalid legacy round: {exc}") from exc

    hydrated: dict[str, Any] = {
        "currentDealerSeat": settings.default_dealer_seat,
        **{k: v for k, v in state.items() if k not in ("pendingRound", "pendingBasePlayers") and v is not None},
        "history": migrated,
    }
    try:
        return GameState.model_validate(hydrated)
    except ValidationError as exc:
        raise SnapshotLoadError(f"Invalid snapshot state: {exc}") from exc


class SnapshotObserver:
    """Saves the game state after every transition. Write failures are logged, not raised."""

    def __init__(self, storage: SnapshotStorage, key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    def state_changed(self, state: GameState) -> None:
        try:
            self._storage.save(self._key, encode_snapshot(state))
        except (OSError, ValueError):
            logger.exception("failed to persist game state", game_id=state.game_id, key=self._key)


def load_snapshot(
    storage: SnapshotStorage,
    settings: GameSettings | None = None,
    key: str = STORAGE_KEY,
) -> GameState | None:
    """Return the saved state, or None when nothing was saved or it cannot be read."""
    try:
        raw = storage.load(key)
    except OSError:
        logger.exception("failed to read saved game state", key=key)
        return None
    if raw is None:
        return None
    try:
        return decode_snapshot(raw, settings)
    except SnapshotLoadError:
        logger.exception("failed to hydrate game state", key=key)
        return None
