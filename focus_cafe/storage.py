"""Durable key-value storage for the profile.

The profile file is one JSON object mapping each key to a JSON-encoded string,
the same shape as a browser key-value store::

    {"coins": "40", "stats": "{\\"focus\\": 4, \\"break\\": 3}", ...}

Each key is decoded and validated on its own.  A missing or malformed key
falls back to its default and never takes the other keys down with it.
Writes are best effort: an I/O error is logged and the app carries on.
"""
from __future__ import annotations
import datetime
import json
import logging
import math
import os
from typing import Any, Callable, Optional

from .config import (BREAK_MAX_TIME, BREAK_MIN_TIME, DEFAULT_BREAK, DEFAULT_FOCUS,
                     FOCUS_MAX_TIME, FOCUS_MIN_TIME)
from .ledger import CATALOG, DEFAULT_COSMETIC
from .profile import (ALL_KEYS, KEY_ACTIVITY, KEY_COINS, KEY_DURATIONS, KEY_PLAYLISTS,
                      KEY_STATS, KEY_THEME, KEY_UNLOCKED, KEY_USER, Playlist, Profile)

log = logging.getLogger(__name__)

# Plain strings, stored without JSON encoding
RAW_KEYS = frozenset({KEY_THEME, KEY_USER})


class KeyValueStore:
    """String values under string keys, kept in one JSON file."""

    def __init__(self, path: str):
        self.path = path
        self._data: dict[str, str] = {}
        if os.path.exists(path):
            try:
                with open(path, encoding="utf-8") as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    self._data = {str(k): v for k, v in raw.items() if isinstance(v, str)}
                else:
                    log.warning("Profile file %s is not a JSON object. Using defaults.", path)
            except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
                log.warning("Profile load error: %s. Using defaults.", e)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        """Store ``value`` and rewrite the file.  Returns False if the write failed."""
        self._data[key] = value
        try:
            folder = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(folder, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            log.warning("Profile save error (%s): %s", key, e)
            return False

    def keys(self) -> list[str]:
        return list(self._data)


# ─── Schemas ──────────────────────────────────────────────────
def _count(value: Any) -> int:
    """A non-negative integer; bools and fractional numbers are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"not a count: {value!r}")
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        raise ValueError(f"not a count: {value!r}")
    if value < 0:
        raise ValueError(f"negative count: {value!r}")
    return int(value)


def _decode_coins(value: Any) -> int:
    if isinstance(value, str):
        value = int(value.strip())
    return _count(value)


def _decode_stats(value: Any) -> tuple[int, int]:
    if not isinstance(value, dict):
        raise ValueError("stats must be an object")
    return _count(value.get("focus", 0)), _count(value.get("break", 0))


def _decode_activity(value: Any) -> dict[str, int]:
    if not isinstance(value, dict):
        raise ValueError("activity must be an object")
    out = {}
    for key, count in value.items():
        try:
            if datetime.date.fromisoformat(key).isoformat() != key:
                raise ValueError("not YYYY-MM-DD")
            n = _count(count)
        except (TypeError, ValueError):
            log.debug("Dropping activity entry %r: %r", key, count)
            continue
        if n:
            out[key] = n
    return out


def _decode_unlocked(value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ValueError("unlocked must be a list")
    known = {c.id for c in CATALOG}
    ids = [DEFAULT_COSMETIC]
    for item in value:
        if isinstance(item, str) and item in known and item not in ids:
            ids.append(item)
    return ids


def _decode_theme(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError("theme must be a non-empty string")
    return value


def _decode_playlists(value: Any) -> list[Playlist]:
    if not isinstance(value, list):
        raise ValueError("playlists must be a list")
    out = []
    for item in value:
        if not isinstance(item, dict):
            continue
        pid, name, url = item.get("id"), item.get("name"), item.get("url")
        if isinstance(pid, bool) or not isinstance(pid, int):
            continue
        if not isinstance(name, str) or not isinstance(url, str) or not url:
            continue
        out.append(Playlist(pid, name, url))
    return out


def _decode_user(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("user must be a string")
    return value.strip()


def _decode_durations(value: Any) -> tuple[int, int]:
    if not isinstance(value, dict):
        raise ValueError("durations must be an object")
    f = _count(value.get("focus", DEFAULT_FOCUS))
    b = _count(value.get("break", DEFAULT_BREAK))
    return (max(FOCUS_MIN_TIME, min(FOCUS_MAX_TIME, f)),
            max(BREAK_MIN_TIME, min(BREAK_MAX_TIME, b)))


def _read(store: KeyValueStore, key: str, decode: Callable[[Any], Any], default: Any) -> Any:
    raw = store.get(key)
    if raw is None:
        return default
    try:
        value = raw if key in RAW_KEYS else json.loads(raw)
        return decode(value)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        log.warning("Ignoring stored %r (%s). Using default.", key, e)
        return default


def load_profile(store: KeyValueStore) -> Profile:
    """Build a profile from the store, defaulting every missing or bad key."""
    p = Profile()
    p.coins = _read(store, KEY_COINS, _decode_coins, 0)
    p.focus_completed, p.break_completed = _read(store, KEY_STATS, _decode_stats, (0, 0))
    p.activity = _read(store, KEY_ACTIVITY, _decode_activity, {})
    p.unlocked = _read(store, KEY_UNLOCKED, _decode_unlocked, [DEFAULT_COSMETIC])
    selected = _read(store, KEY_THEME, _decode_theme, DEFAULT_COSMETIC)
    p.selected = selected if selected in p.unlocked else DEFAULT_COSMETIC
    p.playlists = _read(store, KEY_PLAYLISTS, _decode_playlists, [])
    p.display_name = _read(store, KEY_USER, _decode_user, "")
    p.focus_minutes, p.break_minutes = _read(store, KEY_DURATIONS, _decode_durations,
                                             (DEFAULT_FOCUS, DEFAULT_BREAK))
    return p


def encode(profile: Profile, key: str) -> Optional[str]:
    """The stored string for one field group, or None if it should not be written."""
    if key == KEY_COINS:
        return json.dumps(profile.coins)
    if key == KEY_STATS:
        return json.dumps({"focus": profile.focus_completed, "break": profile.break_completed})
    if key == KEY_ACTIVITY:
        return json.dumps(profile.activity, sort_keys=True)
    if key == KEY_UNLOCKED:
        return json.dumps(profile.unlocked)
    if key == KEY_THEME:
        return profile.selected
    if key == KEY_PLAYLISTS:
        return json.dumps([pl.to_dict() for pl in profile.playlists], ensure_ascii=False)
    if key == KEY_USER:
        # Never overwrite a saved name with an empty one
        return profile.display_name or None
    if key == KEY_DURATIONS:
        return json.dumps({"focus": profile.focus_minutes, "break": profile.break_minutes})
    raise KeyError(key)


def save_field(store: KeyValueStore, profile: Profile, key: str) -> bool:
    value = encode(profile, key)
    if value is None:
        return False
    return store.set(key, value)


class ProfileStore:
    """Keeps a :class:`KeyValueStore` in step with a live :class:`Profile`.

    Every profile change writes only the field group it touched (last write
    wins per key).
    """

    def __init__(self, path: str):
        self.store = KeyValueStore(path)
        self.profile = load_profile(self.store)
        self._unsubscribe = self.profile.subscribe(self._on_change)
        if not self.store.keys():
            log.info("New profile at %s", path)

    def _on_change(self, key: str) -> None:
        save_field(self.store, self.profile, key)

    def flush(self) -> None:
        """Write every field group (used on quit)."""
        for key in ALL_KEYS:
            save_field(self.store, self.profile, key)

    def close(self) -> None:
        self._unsubscribe()
