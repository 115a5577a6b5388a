import pytest

from focus_cafe.playlists import (DEFAULT_PLAYLISTS, add_playlist, all_playlists,
                                  clear_playlists, embed_url, remove_playlist)
from focus_cafe.profile import Profile


class TestEmbedUrl:
    def test_share_link(self):
        assert (embed_url("https://open.spotify.com/playlist/abc?si=123")
                == "https://open.spotify.com/embed/playlist/abc")

    def test_already_embed(self):
        assert (embed_url("https://open.spotify.com/embed/playlist/abc?si=1")
                == "https://open.spotify.com/embed/playlist/abc")

    def test_other_links_untouched(self):
        assert embed_url("https://example.com/mix?x=1") == "https://example.com/mix?x=1"


class TestSavedPlaylists:
    def test_add(self):
        p = Profile()
        entry = add_playlist(p, " Deep Work ", "https://open.spotify.com/playlist/abc", now_ms=1000)
        assert (entry.id, entry.name, entry.url) == (1000, "Deep Work",
                                                     "https://open.spotify.com/embed/playlist/abc")
        assert p.playlists == [entry]

    @pytest.mark.parametrize("name, link", [("", "https://x"), ("n", ""), ("   ", "https://x")])
    def test_add_rejects_blank(self, name, link):
        p = Profile()
        assert add_playlist(p, name, link) is None
        assert p.playlists == []

    def test_ids_stay_unique(self):
        p = Profile()
        a = add_playlist(p, "a", "https://x", now_ms=5)
        b = add_playlist(p, "b", "https://y", now_ms=5)
        assert a.id != b.id

    def test_all_lists_builtins_first(self):
        p = Profile()
        add_playlist(p, "mine", "https://x", now_ms=1)
        names = [name for _, name, _ in all_playlists(p)]
        assert names == [name for _, name, _ in DEFAULT_PLAYLISTS] + ["mine"]

    def test_remove_and_clear(self):
        p = Profile()
        keys = []
        p.subscribe(keys.append)
        add_playlist(p, "a", "https://x", now_ms=1)
        add_playlist(p, "b", "https://y", now_ms=2)
        assert remove_playlist(p, 1)
        assert not remove_playlist(p, 99)
        assert [pl.name for pl in p.playlists] == ["b"]
        clear_playlists(p)
        assert p.playlists == []
        assert keys == ["custom-playlists"] * 4
