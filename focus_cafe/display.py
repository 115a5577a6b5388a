"""tkinter host primitives: the 1 Hz scheduler and the floating display."""
from __future__ import annotations
import logging
import tkinter as tk
from typing import Callable, Optional

from PIL import Image, ImageTk

from .config import WIDGET_ALPHA, WIDGET_MARGIN, WIDGET_SIZE
from .errors import DisplayUnavailable

log = logging.getLogger(__name__)


class _Recurring:
    __slots__ = ("after_id", "cancelled")

    def __init__(self):
        self.after_id: Optional[str] = None
        self.cancelled = False


class TkScheduler:
    """Recurring callbacks on the tk event loop.

    ``speed`` shortens the interval (``--test`` runs the clock faster).
    """

    def __init__(self, root: tk.Misc, speed: int = 1):
        self.root = root
        self.speed = max(1, speed)

    def every(self, seconds: float, callback: Callable[[], None]) -> _Recurring:
        handle = _Recurring()
        ms = max(1, int(seconds * 1000 / self.speed))

        def fire():
            if handle.cancelled:
                return
            try:
                callback()
            finally:
                if not handle.cancelled:
                    handle.after_id = self.root.after(ms, fire)

        handle.after_id = self.root.after(ms, fire)
        return handle

    def cancel(self, handle: _Recurring) -> None:
        handle.cancelled = True
        if handle.after_id:
            try:
                self.root.after_cancel(handle.after_id)
            except (tk.TclError, ValueError):
                pass
            handle.after_id = None


def _destroy_quietly(win: tk.Misc) -> None:
    try:
        win.destroy()
    except tk.TclError:
        pass


class FloatingDisplay:
    """A small borderless always-on-top window showing the projected frame.

    Drag to move; right-click for a menu.  ``menu_items`` is a list of
    (label, command) pairs, label may be a callable for dynamic text.
    """

    def __init__(self, root: tk.Misc, size: int = WIDGET_SIZE,
                 menu_items: Optional[list] = None):
        self.root = root
        self.size = size
        self.menu_items = menu_items or []
        self._win: Optional[tk.Toplevel] = None
        self._label: Optional[tk.Label] = None
        self._photo: Optional[ImageTk.PhotoImage] = None  # keep a reference or tk drops the image
        self._on_closed: Optional[Callable[[], None]] = None
        self._position: Optional[tuple[int, int]] = None
        self._drag_x = 0;  self._drag_y = 0

    def available(self) -> bool:
        """Probe whether the window manager accepts ``-topmost``."""
        try:
            return bool(self.root.winfo_exists()) and "-topmost" in str(self.root.attributes())
        except tk.TclError:
            return False

    def open(self, frame: Image.Image, on_closed: Callable[[], None]) -> None:
        if self._win is not None:
            self.show(frame)
            return
        win = None
        try:
            win = tk.Toplevel(self.root)
            win.overrideredirect(True)
            win.attributes("-topmost", True)
            try:
                win.attributes("-alpha", WIDGET_ALPHA)
            except tk.TclError:
                pass

            sw, sh = win.winfo_screenwidth(), win.winfo_screenheight()
            w = h = self.size
            if self._position:
                x = max(0, min(self._position[0], sw - w))
                y = max(0, min(self._position[1], sh - h))
            else:
                x, y = sw - w - WIDGET_MARGIN, WIDGET_MARGIN
            win.geometry(f"{w}x{h}+{x}+{y}")

            lbl = tk.Label(win, bd=0, highlightthickness=0, cursor="fleur")
            lbl.pack(fill="both", expand=True)
            for widget in (win, lbl):
                widget.bind("<Button-1>", self._press)
                widget.bind("<B1-Motion>", self._drag)
                widget.bind("<Button-3>", self._menu)
            win.bind("<Destroy>", self._destroyed)
        except tk.TclError as e:
            if win is not None:
                _destroy_quietly(win)
            raise DisplayUnavailable(e) from e

        self._win, self._label = win, lbl
        self._on_closed = on_closed
        self.show(frame)

    def show(self, frame: Image.Image) -> None:
        if self._win is None:
            return
        try:
            img = frame.resize((self.size, self.size), Image.LANCZOS)
            self._photo = ImageTk.PhotoImage(img)
            self._label.config(image=self._photo)
        except tk.TclError as e:
            self.close()
            raise DisplayUnavailable(e) from e

    def close(self) -> None:
        win = self._win
        self._on_closed = None
        self._forget()
        if win is not None:
            _destroy_quietly(win)

    def _forget(self) -> None:
        if self._win is not None:
            try:
                self._position = (self._win.winfo_x(), self._win.winfo_y())
            except tk.TclError:
                pass
        self._win = None;  self._label = None;  self._photo = None

    def _destroyed(self, event) -> None:
        if event.widget is not self._win:
            return
        callback = self._on_closed
        self._on_closed = None
        self._forget()
        if callback:
            callback()

    def _press(self, event) -> None:
        self._drag_x = event.x_root - self._win.winfo_x()
        self._drag_y = event.y_root - self._win.winfo_y()

    def _drag(self, event) -> None:
        x = event.x_root - self._drag_x
        y = event.y_root - self._drag_y
        self._win.geometry(f"+{x}+{y}")
        self._position = (x, y)

    def _menu(self, event) -> None:
        menu = tk.Menu(self._win, tearoff=0)
        for label, command in self.menu_items:
            text = label() if callable(label) else label
            menu.add_command(label=text, command=lambda c=command: self.root.after(0, c))
        try:
            menu.tk_popup(event.x_root, event.y_root)
        finally:
            menu.grab_release()
