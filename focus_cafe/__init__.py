"""Focus Café: a focus/break timer with coins, themes and a 30-day history."""

from .activity import DayCount, last_30_days, today_key, total_sessions
from .engine import Mode, SessionTimer, TimerEvent, format_clock
from .errors import Attempt, DisplayUnavailable, FocusCafeError
from .ledger import CATALOG, DEFAULT_COSMETIC, Cosmetic, Ledger
from .profile import Playlist, Profile
from .projection import DETACHED, PROJECTED, ProjectionRenderer, frame_spec, render_frame
from .storage import KeyValueStore, ProfileStore, load_profile

__version__ = "1.0.0"

__all__ = [
    "Attempt",
    "CATALOG",
    "Cosmetic",
    "DEFAULT_COSMETIC",
    "DETACHED",
    "DayCount",
    "DisplayUnavailable",
    "FocusCafeError",
    "KeyValueStore",
    "Ledger",
    "Mode",
    "PROJECTED",
    "Playlist",
    "Profile",
    "ProfileStore",
    "ProjectionRenderer",
    "SessionTimer",
    "TimerEvent",
    "format_clock",
    "frame_spec",
    "last_30_days",
    "load_profile",
    "render_frame",
    "today_key",
    "total_sessions",
]
