"""The session timer: FOCUS/BREAK state machine and countdown clock.

The engine owns the session state and nothing else.  It mutates the profile
it was given when a session completes, and tells subscribers about every
change with a :class:`TimerEvent`; sound, persistence and the floating
display are all subscribers.  The 1 Hz callback only exists while the timer
is running.
"""
from __future__ import annotations
import datetime
import enum
import logging
import math
import re
from typing import Any, Callable, NamedTuple, Optional, Protocol

from .activity import today_key
from .config import (BREAK_MAX_TIME, BREAK_MIN_TIME, COINS_REWARD, FOCUS_MAX_TIME,
                     FOCUS_MIN_TIME, TICK_SECONDS)
from .profile import Profile

log = logging.getLogger(__name__)


class Mode(str, enum.Enum):
    FOCUS = "FOCUS"
    BREAK = "BREAK"

    @property
    def other(self) -> "Mode":
        return Mode.BREAK if self is Mode.FOCUS else Mode.FOCUS


BOUNDS = {
    Mode.FOCUS: (FOCUS_MIN_TIME, FOCUS_MAX_TIME),
    Mode.BREAK: (BREAK_MIN_TIME, BREAK_MAX_TIME),
}


class Scheduler(Protocol):
    """Host primitive: a recurring callback that can be cancelled."""

    def every(self, seconds: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class TimerEvent(NamedTuple):
    kind: str                       # start, pause, reset, switch, duration, tick, expire
    mode: Mode
    time_left: int
    running: bool
    completed: Optional[Mode] = None  # the mode that just finished (expire only)


Listener = Callable[[TimerEvent], None]

_LEADING_INT = re.compile(r"\s*([+-]?)0*(\d+)")
_MAX_DIGITS = 9  # beyond any bound; keeps int() clear of the str-digits limit


def parse_minutes(value: Any) -> Optional[int]:
    """Integer minutes from user input, or None if it is not a number.

    Strings are read up to the first non-digit (``"12min"`` is 12); floats
    are truncated.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        if not m:
            return None
        sign, digits = m.groups()
        n = int(digits) if len(digits) <= _MAX_DIGITS else 10 ** _MAX_DIGITS
        return -n if sign == "-" else n
    return None


def clamp_minutes(mode: Mode, minutes: int) -> int:
    lo, hi = BOUNDS[mode]
    return max(lo, min(hi, minutes))


def format_clock(seconds: int) -> str:
    """``MM:SS``, zero padded."""
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m:02d}:{s:02d}"


class SessionTimer:

    def __init__(self, profile: Profile, scheduler: Scheduler,
                 today: Callable[[], datetime.date] = datetime.date.today):
        self.profile = profile
        self.scheduler = scheduler
        self._today = today
        self._listeners: list[Listener] = []
        self._handle: Any = None

        self.focus_minutes = clamp_minutes(Mode.FOCUS, profile.focus_minutes)
        self.break_minutes = clamp_minutes(Mode.BREAK, profile.break_minutes)
        self._mode = Mode.FOCUS
        self._running = False
        self._time_left = self.focus_minutes * 60

    # ━━━ Read-only state ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def running(self) -> bool:
        return self._running

    def duration_for(self, mode: Mode) -> int:
        """Configured minutes for ``mode``."""
        return self.focus_minutes if mode is Mode.FOCUS else self.break_minutes

    @property
    def remaining_fraction(self) -> float:
        return self._time_left / (self.duration_for(self._mode) * 60)

    @property
    def elapsed_fraction(self) -> float:
        return 1 - self.remaining_fraction

    def snapshot(self, kind: str = "state", completed: Optional[Mode] = None) -> TimerEvent:
        return TimerEvent(kind, self._mode, self._time_left, self._running, completed)

    # ━━━ Listeners ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _emit(self, kind: str, completed: Optional[Mode] = None) -> None:
        event = self.snapshot(kind, completed)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception("Timer listener failed on %s", kind)

    # ━━━ Scheduling ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _arm(self) -> None:
        if self._handle is None:
            self._handle = self.scheduler.every(TICK_SECONDS, self.tick)

    def _disarm(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            self.scheduler.cancel(handle)

    # ━━━ Controls ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def start(self) -> None:
        """Run the countdown.  Does nothing at 00:00; reset or switch first."""
        if self._running or self._time_left <= 0:
            return
        self._running = True
        self._arm()
        self._emit("start")

    def pause(self) -> None:
        if not self._running:
            return
        self._running = False
        self._disarm()
        self._emit("pause")

    def toggle(self) -> None:
        if self._running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        was = (self._running, self._time_left)
        self._running = False
        self._disarm()
        self._time_left = self.duration_for(self._mode) * 60
        if was != (self._running, self._time_left):
            self._emit("reset")

    def switch_mode(self, mode: Mode) -> None:
        """Stop and load a fresh clock for ``mode``.  There is no cross-mode resume."""
        mode = Mode(mode)
        self._running = False
        self._disarm()
        self._mode = mode
        self._time_left = self.duration_for(mode) * 60
        self._emit("switch")

    def set_duration(self, mode: Mode, value: Any) -> Optional[int]:
        """Set the minutes for ``mode``, clamped to its bounds.

        Returns the minutes applied, or None if ``value`` was not a number.
        The running countdown is never touched; an idle clock in the same
        mode is reloaded straight away.
        """
        mode = Mode(mode)
        minutes = parse_minutes(value)
        if minutes is None:
            return None
        minutes = clamp_minutes(mode, minutes)
        if mode is Mode.FOCUS:
            self.focus_minutes = minutes
        else:
            self.break_minutes = minutes
        if mode is self._mode and not self._running:
            self._time_left = minutes * 60
        self.profile.set_durations(self.focus_minutes, self.break_minutes)
        self._emit("duration")
        return minutes

    # ━━━ Clock ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def tick(self) -> None:
        """One elapsed second.  Fires the expiry when the clock reaches zero."""
        if not self._running or self._time_left <= 0:
            return
        self._time_left -= 1
        if self._time_left == 0:
            self._expire()
        else:
            self._emit("tick")

    def _expire(self) -> None:
        completed = self._mode
        self._running = False
        self._disarm()
        # Profile effects and the mode switch land before anyone is told
        with self.profile.deferred():
            if completed is Mode.FOCUS:
                self.profile.credit(COINS_REWARD)
                self.profile.record_focus(today_key(self._today()))
            else:
                self.profile.record_break()
            self._mode = completed.other
            self._time_left = self.duration_for(self._mode) * 60
        log.info("%s session complete, next up %s (%s)",
                 completed.value, self._mode.value, format_clock(self._time_left))
        self._emit("expire", completed)

    def close(self) -> None:
        """Cancel the tick callback (process teardown)."""
        self._running = False
        self._disarm()
