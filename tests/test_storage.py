"""Profile persistence: per-key schemas, defaults, write-through."""

import json

import pytest

from focus_cafe.ledger import DEFAULT_COSMETIC, Ledger
from focus_cafe.profile import Playlist
from focus_cafe.storage import KeyValueStore, ProfileStore, encode, load_profile


def write_raw(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


def stored(path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def path(tmp_path):
    return tmp_path / "profile.json"


class TestFirstRun:
    def test_defaults(self, path):
        p = ProfileStore(str(path)).profile
        assert p.coins == 0
        assert (p.focus_completed, p.break_completed) == (0, 0)
        assert p.activity == {}
        assert p.unlocked == [DEFAULT_COSMETIC]
        assert p.selected == DEFAULT_COSMETIC
        assert p.playlists == []
        assert p.display_name == ""
        assert p.needs_name
        assert not path.exists()

    def test_corrupt_file_falls_back(self, path):
        path.write_text("{not json", encoding="utf-8")
        assert ProfileStore(str(path)).profile.coins == 0

    def test_non_object_file(self, path):
        write_raw(path, [1, 2, 3])
        assert KeyValueStore(str(path)).keys() == []


class TestLoad:
    def test_browser_layout(self, path):
        write_raw(path, {
            "coins": "40",
            "stats": json.dumps({"focus": 4, "break": 3}),
            "activity": json.dumps({"2026-02-10": 2, "2026-02-11": 2}),
            "unlocked": json.dumps(["mug", "candle"]),
            "theme": "candle",
            "custom-playlists": json.dumps([{"id": 1700000000000, "name": "Mine",
                                             "url": "https://open.spotify.com/embed/playlist/x"}]),
            "user": "Ana",
        })
        p = load_profile(KeyValueStore(str(path)))
        assert p.coins == 40
        assert (p.focus_completed, p.break_completed) == (4, 3)
        assert p.activity == {"2026-02-10": 2, "2026-02-11": 2}
        assert p.unlocked == ["mug", "candle"]
        assert p.selected == "candle"
        assert p.playlists == [Playlist(1700000000000, "Mine", "https://open.spotify.com/embed/playlist/x")]
        assert p.display_name == "Ana"

    def test_one_bad_key_keeps_the_others(self, path):
        write_raw(path, {"coins": "lots", "stats": json.dumps({"focus": 2, "break": 1})})
        p = load_profile(KeyValueStore(str(path)))
        assert p.coins == 0
        assert p.focus_completed == 2

    @pytest.mark.parametrize("raw", ["-5", "1.5", "true", "null"])
    def test_invalid_coins(self, path, raw):
        write_raw(path, {"coins": raw})
        assert load_profile(KeyValueStore(str(path))).coins == 0

    def test_bad_activity_entries_dropped(self, path):
        write_raw(path, {"activity": json.dumps({"2026-02-11": 3, "yesterday": 1,
                                                 "2026-02-12": -1, "2026-02-13": "2",
                                                 "20260214": 4, "2026-W07-3": 2})})
        assert load_profile(KeyValueStore(str(path))).activity == {"2026-02-11": 3}

    def test_unlocked_always_has_default(self, path):
        write_raw(path, {"unlocked": json.dumps(["horizon", "nope", "horizon"])})
        assert load_profile(KeyValueStore(str(path))).unlocked == [DEFAULT_COSMETIC, "horizon"]

    def test_locked_theme_falls_back(self, path):
        write_raw(path, {"theme": "bonsai"})
        assert load_profile(KeyValueStore(str(path))).selected == DEFAULT_COSMETIC

    def test_bad_playlists_dropped(self, path):
        write_raw(path, {"custom-playlists": json.dumps([
            {"id": 1, "name": "ok", "url": "u"},
            {"id": "2", "name": "string id", "url": "u"},
            {"id": 3, "name": "no url"},
            "junk",
        ])})
        assert [pl.id for pl in load_profile(KeyValueStore(str(path))).playlists] == [1]

    def test_durations_clamped(self, path):
        write_raw(path, {"durations": json.dumps({"focus": 90, "break": 0})})
        p = load_profile(KeyValueStore(str(path)))
        assert (p.focus_minutes, p.break_minutes) == (60, 1)


class TestWriteThrough:
    def test_each_change_writes_its_key(self, path):
        store = ProfileStore(str(path))
        store.profile.credit(10)
        assert stored(path) == {"coins": "10"}
        store.profile.record_focus("2026-02-11")
        data = stored(path)
        assert json.loads(data["stats"]) == {"focus": 1, "break": 0}
        assert json.loads(data["activity"]) == {"2026-02-11": 1}

    def test_round_trip_after_purchase(self, path):
        store = ProfileStore(str(path))
        store.profile.credit(60)
        Ledger(store.profile).purchase("candle")
        Ledger(store.profile).select("candle")
        p = ProfileStore(str(path)).profile
        assert p.coins == 10
        assert p.unlocked == ["mug", "candle"]
        assert p.selected == "candle"

    def test_empty_name_not_written(self, path):
        store = ProfileStore(str(path))
        assert encode(store.profile, "user") is None
        store.profile.rename("  Bo ")
        assert stored(path)["user"] == "Bo"

    def test_flush_writes_everything(self, path):
        store = ProfileStore(str(path))
        store.flush()
        assert set(stored(path)) == {"coins", "stats", "activity", "unlocked", "theme",
                                     "custom-playlists", "durations"}

    def test_write_failure_is_not_fatal(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        store = ProfileStore(str(blocker / "profile.json"))
        store.profile.credit(5)
        assert store.profile.coins == 5
        assert store.store.get("coins") == "5"

    def test_close_stops_writing(self, path):
        store = ProfileStore(str(path))
        store.close()
        store.profile.credit(5)
        assert not path.exists()
