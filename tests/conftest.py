import datetime

import pytest

from focus_cafe.engine import SessionTimer
from focus_cafe.errors import DisplayUnavailable
from focus_cafe.profile import Profile

TODAY = datetime.date(2026, 2, 11)


class FakeScheduler:
    """Stands in for the tk event loop; ``advance(n)`` fires n one-second callbacks."""

    def __init__(self):
        self.handles = []
        self.registered = 0

    def every(self, seconds, callback):
        handle = {"callback": callback, "cancelled": False}
        self.handles.append(handle)
        self.registered += 1
        return handle

    def cancel(self, handle):
        handle["cancelled"] = True

    @property
    def active(self):
        return [h for h in self.handles if not h["cancelled"]]

    def advance(self, seconds):
        for _ in range(seconds):
            for h in list(self.active):
                h["callback"]()


class FakeDisplay:
    def __init__(self, available=True, refuse=False):
        self.is_available = available
        self.refuse = refuse
        self.opened_with = None
        self.shown = []
        self.closed = 0
        self.on_closed = None

    def available(self):
        return self.is_available

    def open(self, frame, on_closed):
        if self.refuse:
            raise DisplayUnavailable("refused by host")
        self.opened_with = frame
        self.on_closed = on_closed

    def show(self, frame):
        self.shown.append(frame)

    def close(self):
        self.closed += 1


@pytest.fixture
def profile():
    return Profile()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def engine(profile, scheduler):
    return SessionTimer(profile, scheduler, today=lambda: TODAY)


@pytest.fixture
def events(engine):
    seen = []
    engine.subscribe(seen.append)
    return seen
