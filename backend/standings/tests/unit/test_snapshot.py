import json
import logging

import pytest

from shared.storage import LocalSnapshotStorage
from standings.logic.enums import PlayerStatus
from standings.logic.exceptions import SnapshotLoadError
from standings.logic.settings import GameSettings
from standings.persistence.snapshot import (
    STORAGE_KEY,
    SnapshotObserver,
    decode_snapshot,
    encode_snapshot,
    load_snapshot,
    snapshot_payload,
)
from standings.tests.helpers import create_controller, create_round, ranks


def _legacy_history(non_house_score):
    legacy_round = {"id": "old1", "createdAt": "x", "dealerSeat": 1, "firstCallerId": "a", "nonHouseScore": non_house_score}
    return json.dumps({"version": 1, "state": {"history": [legacy_round]}})


def _played_controller():
    controller = create_controller(4, frozen=[4])
    controller.record_round(create_round("p1", ["p2"], house_won=True, level_steps=2))
    controller.record_round(create_round("p3", house_won=False, dealer_seat=2))
    return controller


class TestEncodeSnapshot:
    def test_envelope_shape(self):
        payload = json.loads(encode_snapshot(_played_controller().state))
        assert payload["version"] == 1
        state = payload["state"]
        assert list(state) == [
            "gameId",
            "roundIndex",
            "currentDealerSeat",
            "players",
            "history",
            "pendingRound",
            "pendingBasePlayers",
        ]
        assert state["gameId"] == "game-1"
        assert state["roundIndex"] == 2
        assert state["pendingRound"] is None
        assert state["pendingBasePlayers"] is None

    def test_player_and_round_keys(self):
        state = json.loads(encode_snapshot(_played_controller().state))["state"]
        assert state["players"][3] == {
            "id": "p4",
            "name": "Player4",
            "seatNo": 4,
            "rank": 3,
            "status": "frozen",
            "joinedRound": 0,
        }
        assert list(state["history"][0]) == [
            "id",
            "createdAt",
            "dealerSeat",
            "firstCallerId",
            "helperIds",
            "houseWon",
            "levelSteps",
            "nonHouseScore",
        ]
        assert state["history"][0]["helperIds"] == ["p2"]

    def test_preview_is_not_persisted(self):
        controller = _played_controller()
        committed = ranks(controller.players)
        controller.preview_round(create_round("p2", house_won=True, level_steps=4))
        players = snapshot_payload(controller.state)["state"]["players"]
        assert {p["id"]: p["rank"] for p in players} == committed

    def test_non_ascii_names_kept(self):
        controller = create_controller(0)
        controller.add_player("小明")
        assert "小明" in encode_snapshot(controller.state)


class TestDecodeSnapshot:
    def test_restores_saved_state(self):
        controller = _played_controller()
        restored = decode_snapshot(encode_snapshot(controller.state))
        assert restored == controller.state

    def test_bare_state_accepted(self):
        raw = json.dumps({"gameId": "g", "players": [{"id": "a", "name": "A", "seatNo": 1, "rank": 5}]})
        state = decode_snapshot(raw)
        assert state.game_id == "g"
        assert state.players[0].status == PlayerStatus.ACTIVE
        assert state.history == ()

    def test_missing_fields_take_defaults(self):
        state = decode_snapshot(json.dumps({"version": 1, "state": {}}), GameSettings(default_dealer_seat=3))
        assert state.current_dealer_seat == 3
        assert state.round_index == 0
        assert state.game_id

    def test_pending_content_ignored(self):
        raw = json.dumps({"version": 1, "state": {"gameId": "g", "pendingRound": {"x": 1}, "pendingBasePlayers": []}})
        state = decode_snapshot(raw)
        assert state.pending is None

    def test_legacy_rounds_migrated(self):
        legacy_round = {
            "id": "old1",
            "createdAt": "2023-01-01T00:00:00.000Z",
            "dealerSeat": 1,
            "firstCallerId": "a",
            "helperIds": [],
            "nonHouseScore": 130,
        }
        state = decode_snapshot(json.dumps({"gameId": "g", "history": [legacy_round]}))
        record = state.history[0]
        assert record.house_won is False
        assert record.level_steps == 1
        assert record.non_house_score == 130

    def test_legacy_deck_count_from_settings(self):
        legacy_round = {"id": "old1", "createdAt": "x", "dealerSeat": 1, "firstCallerId": "a", "nonHouseScore": 100}
        state = decode_snapshot(json.dumps({"history": [legacy_round]}), GameSettings(legacy_deck_count=3))
        assert state.history[0].house_won is True
        assert state.history[0].level_steps == 1

    @pytest.mark.parametrize(
        ("raw", "match"),
        [
            ("{not json", "Malformed"),
            ("[1, 2]", "JSON object"),
            ('{"version": 2, "state": {}}', "version mismatch"),
            ('{"version": 1}', "missing its 'state'"),
            ('{"history": {"a": 1}}', "must be a list"),
            ('{"players": [{"id": "a", "name": "A", "seatNo": 0, "rank": 2}]}', "Invalid snapshot state"),
            (_legacy_history(None), "Invalid legacy round"),
            (_legacy_history("abc"), "Invalid legacy round"),
            (_legacy_history([1]), "Invalid legacy round"),
        ],
    )
    def test_rejects_malformed_content(self, raw, match):
        with pytest.raises(SnapshotLoadError, match=match):
            decode_snapshot(raw)


class TestSnapshotObserver:
    def test_saves_after_every_transition(self, tmp_path):
        storage = LocalSnapshotStorage(str(tmp_path))
        controller = create_controller(4, observers=[SnapshotObserver(storage)])
        controller.record_round(create_round("p1"))
        assert (tmp_path / f"{STORAGE_KEY}.json").exists()
        restored = load_snapshot(storage)
        assert restored == controller.state

    def test_write_failure_is_logged(self, caplog):
        class BrokenStorage:
            def save(self, key, content):
                raise OSError("read-only file system")

            def load(self, key):
                return None

        controller = create_controller(2, observers=[SnapshotObserver(BrokenStorage())])
        with caplog.at_level(logging.ERROR):
            controller.record_round(create_round("p1"))
        assert len(controller.history) == 1
        assert any(r.msg["event"] == "failed to persist game state" for r in caplog.records)


class TestLoadSnapshot:
    def test_nothing_saved(self, tmp_path):
        assert load_snapshot(LocalSnapshotStorage(str(tmp_path))) is None

    def test_corrupt_snapshot_returns_none(self, tmp_path, caplog):
        storage = LocalSnapshotStorage(str(tmp_path))
        storage.save(STORAGE_KEY, "{broken")
        with caplog.at_level(logging.ERROR):
            assert load_snapshot(storage) is None
        assert any(r.msg["event"] == "failed to hydrate game state" for r in caplog.records)

    def test_unusable_legacy_score_returns_none(self, tmp_path, caplog):
        storage = LocalSnapshotStorage(str(tmp_path))
        storage.save(STORAGE_KEY, _legacy_history("abc"))
        with caplog.at_level(logging.ERROR):
            assert load_snapshot(storage) is None
        assert any(r.msg["event"] == "failed to hydrate game state" for r in caplog.records)
