"""Music links: the built-in playlists plus the ones the user saves."""
from __future__ import annotations
import time
from typing import Optional

from .profile import Playlist, Profile

DEFAULT_PLAYLISTS: tuple[tuple[str, str, str], ...] = (
    ("lofi",  "Lofi Girl",      "https://open.spotify.com/embed/playlist/0vvXsWCC9xrXsKd4FyS8kM"),
    ("piano", "Peaceful Piano", "https://open.spotify.com/embed/playlist/37i9dQZF1DX4sWSpwq3LiO"),
    ("alpha", "Alpha Waves",    "https://open.spotify.com/embed/playlist/5XBZaWeBRk5QBL5BdI3D2A?si=abeefe9bb86b4a7f"),
)


def embed_url(link: str) -> str:
    """Turn a Spotify share link into its embed form; other links pass through."""
    link = link.strip()
    url = link
    if "open.spotify.com" in link:
        if "/embed/" not in link:
            url = link.replace(".com/", ".com/embed/", 1)
        url = url.split("?")[0]
    return url


def all_playlists(profile: Profile) -> list[tuple[object, str, str]]:
    """(id, name, url) for the built-ins followed by the saved ones."""
    return list(DEFAULT_PLAYLISTS) + [(pl.id, pl.name, pl.url) for pl in profile.playlists]


def add_playlist(profile: Profile, name: str, link: str,
                 now_ms: Optional[int] = None) -> Optional[Playlist]:
    name, link = (name or "").strip(), (link or "").strip()
    if not name or not link:
        return None
    pid = int(time.time() * 1000) if now_ms is None else now_ms
    taken = {pl.id for pl in profile.playlists}
    while pid in taken:
        pid += 1
    entry = Playlist(pid, name, embed_url(link))
    profile.set_playlists(profile.playlists + [entry])
    return entry


def remove_playlist(profile: Profile, playlist_id: int) -> bool:
    kept = [pl for pl in profile.playlists if pl.id != playlist_id]
    if len(kept) == len(profile.playlists):
        return False
    profile.set_playlists(kept)
    return True


def clear_playlists(profile: Profile) -> None:
    if profile.playlists:
        profile.set_playlists([])
