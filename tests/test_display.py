"""Host primitives against stand-ins for tk (no window needed)."""

import pytest

pytest.importorskip("tkinter")
pytest.importorskip("PIL.ImageTk")

import tkinter as tk  # noqa: E402

from PIL import Image, ImageTk  # noqa: E402

from focus_cafe.display import FloatingDisplay, TkScheduler  # noqa: E402
from focus_cafe.engine import SessionTimer  # noqa: E402
from focus_cafe.errors import DisplayUnavailable  # noqa: E402
from focus_cafe.profile import Profile  # noqa: E402


class FakeRoot:
    def __init__(self):
        self.pending = {}
        self.delays = []
        self._next = 0

    def after(self, ms, fn):
        self._next += 1
        after_id = f"after#{self._next}"
        self.pending[after_id] = fn
        self.delays.append(ms)
        return after_id

    def after_cancel(self, after_id):
        self.pending.pop(after_id, None)

    def run_pending(self):
        jobs, self.pending = self.pending, {}
        for fn in jobs.values():
            fn()


class TestTkScheduler:
    def test_recurs_until_cancelled(self):
        root = FakeRoot()
        sched = TkScheduler(root)
        calls = []
        handle = sched.every(1, lambda: calls.append(1))
        for _ in range(3):
            root.run_pending()
        assert len(calls) == 3
        sched.cancel(handle)
        root.run_pending()
        assert len(calls) == 3
        assert root.pending == {}

    def test_speed(self):
        root = FakeRoot()
        TkScheduler(root, speed=60).every(1, lambda: None)
        assert root.delays == [16]

    def test_cancel_from_inside_callback(self):
        root = FakeRoot()
        engine = SessionTimer(Profile(focus_minutes=1), TkScheduler(root))
        engine.start()
        for _ in range(60):
            root.run_pending()
        assert not engine.running
        assert root.pending == {}


class FakeToplevel:
    instances = []

    def __init__(self, root):
        self.destroyed = False
        FakeToplevel.instances.append(self)

    def overrideredirect(self, flag):
        pass

    def attributes(self, *args):
        raise tk.TclError("window manager refused -topmost")

    def destroy(self):
        self.destroyed = True


class FailingLabel:
    def config(self, **kwargs):
        raise tk.TclError("image lost")


class TestFloatingDisplay:
    def test_failed_open_destroys_window(self, monkeypatch):
        FakeToplevel.instances = []
        monkeypatch.setattr(tk, "Toplevel", FakeToplevel)
        display = FloatingDisplay(FakeRoot())
        with pytest.raises(DisplayUnavailable):
            display.open(Image.new("RGB", (8, 8)), lambda: None)
        [win] = FakeToplevel.instances
        assert win.destroyed

    def test_failed_show_destroys_window(self, monkeypatch):
        monkeypatch.setattr(ImageTk, "PhotoImage", lambda img: object())
        closed = []
        display = FloatingDisplay(FakeRoot())
        win = FakeToplevel.__new__(FakeToplevel)
        win.destroyed = False
        win.winfo_x = win.winfo_y = lambda: 0
        display._win, display._label = win, FailingLabel()
        display._on_closed = lambda: closed.append(1)
        with pytest.raises(DisplayUnavailable):
            display.show(Image.new("RGB", (8, 8)))
        assert win.destroyed
        assert display._win is None
        assert closed == []
