"""The durable profile: coins, counters, activity log, cosmetics, name, playlists.

The profile lives in memory and announces every change with the persistence
key of the field group it touched; :mod:`focus_cafe.storage` listens and
writes that key.  Nothing here touches the disk.
"""
from __future__ import annotations
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator

from .config import DEFAULT_BREAK, DEFAULT_FOCUS
from .ledger import DEFAULT_COSMETIC

log = logging.getLogger(__name__)

# Persistence keys, one per field group
KEY_COINS = "coins"
KEY_STATS = "stats"
KEY_ACTIVITY = "activity"
KEY_UNLOCKED = "unlocked"
KEY_THEME = "theme"
KEY_PLAYLISTS = "custom-playlists"
KEY_USER = "user"
KEY_DURATIONS = "durations"

ALL_KEYS = (KEY_COINS, KEY_STATS, KEY_ACTIVITY, KEY_UNLOCKED, KEY_THEME,
            KEY_PLAYLISTS, KEY_USER, KEY_DURATIONS)

ChangeListener = Callable[[str], None]


@dataclass
class Playlist:
    id: int
    name: str
    url: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "url": self.url}


@dataclass
class Profile:
    display_name: str = ""
    coins: int = 0
    focus_completed: int = 0
    break_completed: int = 0
    activity: dict[str, int] = field(default_factory=dict)
    unlocked: list[str] = field(default_factory=lambda: [DEFAULT_COSMETIC])
    selected: str = DEFAULT_COSMETIC
    playlists: list[Playlist] = field(default_factory=list)
    focus_minutes: int = DEFAULT_FOCUS
    break_minutes: int = DEFAULT_BREAK

    def __post_init__(self) -> None:
        self._listeners: list[ChangeListener] = []
        self._held: list[str] | None = None

    # ━━━ Notification ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Call ``listener(key)`` after each change.  Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def changed(self, key: str) -> None:
        if self._held is not None:
            if key not in self._held:
                self._held.append(key)
            return
        for listener in list(self._listeners):
            try:
                listener(key)
            except Exception:
                log.exception("Profile listener failed for %r", key)

    @contextlib.contextmanager
    def deferred(self) -> Iterator["Profile"]:
        """Hold change notifications until the block ends, then send each key once."""
        if self._held is not None:
            yield self
            return
        self._held = []
        try:
            yield self
        finally:
            held, self._held = self._held, None
            for key in held:
                self.changed(key)

    # ━━━ Mutations ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def credit(self, amount: int) -> None:
        if amount <= 0:
            return
        self.coins += amount
        self.changed(KEY_COINS)

    def debit(self, amount: int) -> bool:
        """Take coins away.  Refuses (returns False) if the balance would go negative."""
        if amount < 0 or amount > self.coins:
            return False
        if amount:
            self.coins -= amount
            self.changed(KEY_COINS)
        return True

    def record_focus(self, day_key: str) -> None:
        self.focus_completed += 1
        self.activity[day_key] = self.activity.get(day_key, 0) + 1
        self.changed(KEY_STATS)
        self.changed(KEY_ACTIVITY)

    def record_break(self) -> None:
        self.break_completed += 1
        self.changed(KEY_STATS)

    def reset_stats(self) -> None:
        """Clear session counters and history.  Coins and cosmetics are kept."""
        self.focus_completed = 0
        self.break_completed = 0
        self.activity = {}
        self.changed(KEY_STATS)
        self.changed(KEY_ACTIVITY)

    def rename(self, name: str) -> bool:
        name = (name or "").strip()
        if not name:
            return False
        if name != self.display_name:
            self.display_name = name
            self.changed(KEY_USER)
        return True

    def unlock(self, cosmetic_id: str) -> None:
        if cosmetic_id not in self.unlocked:
            self.unlocked.append(cosmetic_id)
            self.changed(KEY_UNLOCKED)

    def choose(self, cosmetic_id: str) -> None:
        if cosmetic_id != self.selected:
            self.selected = cosmetic_id
            self.changed(KEY_THEME)

    def set_durations(self, focus_minutes: int, break_minutes: int) -> None:
        if (focus_minutes, break_minutes) == (self.focus_minutes, self.break_minutes):
            return
        self.focus_minutes = focus_minutes
        self.break_minutes = break_minutes
        self.changed(KEY_DURATIONS)

    def set_playlists(self, playlists: list[Playlist]) -> None:
        self.playlists = list(playlists)
        self.changed(KEY_PLAYLISTS)

    @property
    def needs_name(self) -> bool:
        return not self.display_name
