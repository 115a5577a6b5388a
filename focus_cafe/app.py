"""The tkinter application: main window, dialogs, tray icon.

Everything here is a consumer of the core: it reads timer/profile state and
calls engine, ledger and playlist operations.
"""
from __future__ import annotations
import argparse
import logging
import threading
import tkinter as tk
import webbrowser
from tkinter import messagebox, simpledialog
from typing import Any, Callable, Optional

from . import sound
from .activity import last_30_days, total_sessions
from .config import APP_NAME, COINS_REWARD, TEST_SPEED
from .display import FloatingDisplay, TkScheduler
from .engine import Mode, SessionTimer, TimerEvent, format_clock
from .ledger import CATALOG, Ledger
from .playlists import add_playlist, all_playlists, clear_playlists, embed_url, remove_playlist
from .projection import PROJECTED, ProjectionRenderer
from .storage import ProfileStore
from .theme import (C_BTN_PRI, C_BTN_SEC, C_CARD, C_CARD_IN, C_COIN, C_ERR, C_OK, C_PAUSED,
                    C_TEXT, C_TEXT_DIM, C_TEXT_MUT, COSMETIC_ACCENT, FONT, HEAT_COLOURS,
                    MODE_ACCENT, MODE_BG, MONO, create_tray_icon, heat_tier)

log = logging.getLogger(__name__)

try:
    import pystray
    HAS_TRAY = True
except ImportError:  # no tray backend on this desktop (pystray needs a display server)
    HAS_TRAY = False

NOTICE_MS = 4000


def expiry_feedback(completed: Mode) -> tuple[str, str]:
    """The cue to play and the notice to show when a session runs out."""
    if Mode(completed) is Mode.FOCUS:
        return sound.ALARM, f"Focus complete! +{COINS_REWARD} coins"
    return sound.CHIME, "Break over. Ready when you are."


class FocusCafeApp:

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.root = tk.Tk()
        self.root.title(APP_NAME)
        self.root.geometry("420x560")
        self.root.minsize(380, 520)
        self.root.protocol("WM_DELETE_WINDOW", self._quit)

        self.store = ProfileStore(args.profile)
        self.profile = self.store.profile
        self.ledger = Ledger(self.profile)
        self.engine = SessionTimer(self.profile,
                                   TkScheduler(self.root, TEST_SPEED if args.test else 1))
        self.display = FloatingDisplay(self.root, menu_items=[
            (lambda: "Pause" if self.engine.running else "Start", self.engine.toggle),
            ("Reset", self.engine.reset),
            ("Hide", self._toggle_projection),
        ])
        self.renderer = ProjectionRenderer(self.display, on_state=self._on_projection_state)

        self._shop_win = None;  self._stats_win = None
        self._settings_win = None;  self._music_win = None
        self._notice_id = None
        self.tray: Any = None

        self._build_main()
        self.engine.subscribe(self._on_timer)
        self.renderer.attach(self.engine)
        self.profile.subscribe(lambda key: self.root.after(0, self._refresh_profile))
        self._refresh_timer(self.engine.snapshot())
        self._refresh_profile()

        if HAS_TRAY and not args.no_tray:
            threading.Thread(target=self._run_tray, daemon=True).start()
        if self.profile.needs_name:
            self.root.after(200, self._ask_name)

    def run(self) -> None:
        self.root.mainloop()

    # ━━━ Main Window ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _build_main(self) -> None:
        root = self.root
        self._frame = tk.Frame(root, padx=18, pady=14)
        self._frame.pack(fill="both", expand=True)
        f = self._frame

        head = tk.Frame(f)
        head.pack(fill="x")
        self._hello = tk.Label(head, font=(FONT, 11, "bold"), anchor="w")
        self._hello.pack(side="left")
        self._coins = tk.Label(head, font=(FONT, 11, "bold"), fg=C_COIN, anchor="e")
        self._coins.pack(side="right")

        modes = tk.Frame(f)
        modes.pack(pady=(18, 8))
        self._mode_btns = {}
        for mode, text in ((Mode.FOCUS, "Focus"), (Mode.BREAK, "Break")):
            b = self._btn(modes, text, C_BTN_SEC, lambda m=mode: self.engine.switch_mode(m))
            b.pack(side="left", padx=4)
            self._mode_btns[mode] = b

        self._clock = tk.Label(f, font=(MONO, 56, "bold"))
        self._clock.pack(pady=(8, 0))
        self._status = tk.Label(f, font=(FONT, 11, "bold"))
        self._status.pack()

        self._bar = tk.Canvas(f, height=8, highlightthickness=0)
        self._bar.pack(fill="x", pady=(12, 12))

        dur = tk.Frame(f)
        dur.pack()
        self._dur_label = tk.Label(dur, font=(FONT, 10))
        self._dur_label.pack(side="left")
        self._dur_var = tk.StringVar()
        self._dur_spin = tk.Spinbox(dur, from_=1, to=60, width=4, font=(MONO, 10),
                                    textvariable=self._dur_var, justify="center",
                                    command=self._apply_duration)
        self._dur_spin.pack(side="left", padx=6)
        self._dur_spin.bind("<Return>", lambda e: self._apply_duration())
        self._dur_spin.bind("<FocusOut>", lambda e: self._apply_duration())
        tk.Label(dur, text="min", font=(FONT, 10), fg=C_TEXT_MUT).pack(side="left")

        ctl = tk.Frame(f)
        ctl.pack(pady=16)
        self._start_btn = self._btn(ctl, "Start", C_BTN_PRI, self.engine.toggle, bold=True)
        self._start_btn.pack(side="left", padx=4)
        self._btn(ctl, "Reset", C_BTN_SEC, self.engine.reset).pack(side="left", padx=4)

        nav = tk.Frame(f)
        nav.pack(side="bottom", fill="x")
        for text, cmd in (("Shop", self._show_shop_win), ("Stats", self._show_stats_win),
                          ("Music", self._show_music_win), ("Settings", self._show_settings_win)):
            self._btn(nav, text, C_BTN_SEC, cmd).pack(side="left", expand=True, fill="x", padx=2)
        self._pip_btn = self._btn(nav, "Float", C_BTN_SEC, self._toggle_projection)
        self._pip_btn.pack(side="left", expand=True, fill="x", padx=2)

        self._notice = tk.Label(f, font=(FONT, 9), fg=C_TEXT_DIM)
        self._notice.pack(side="bottom", pady=(0, 6))

    def _btn(self, parent: tk.Misc, text: str, bg: str, cmd: Callable, bold: bool = False) -> tk.Button:
        return tk.Button(parent, text=text, font=(FONT, 10, "bold" if bold else "normal"),
                         bg=bg, fg=C_TEXT, activebackground=bg, activeforeground=C_TEXT,
                         relief="flat", padx=12, pady=4, cursor="hand2", command=cmd)

    def _paint(self, widget: tk.Misc, bg: str) -> None:
        try:
            widget.configure(bg=bg)
        except tk.TclError:
            pass
        for child in widget.winfo_children():
            if not isinstance(child, (tk.Button, tk.Spinbox)):
                self._paint(child, bg)

    # ━━━ Timer → UI ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _on_timer(self, event: TimerEvent) -> None:
        if event.kind == "expire":
            cue, notice = expiry_feedback(event.completed)
            self._play(cue)
            self._notify(notice, C_OK)
        self._refresh_timer(event)
        if event.kind in ("start", "pause", "switch", "expire"):
            self._update_tray_icon()

    def _refresh_timer(self, event: TimerEvent) -> None:
        mode = event.mode
        bg = MODE_BG[mode.value]
        self._paint(self._frame, bg)
        self.root.configure(bg=bg)
        self._clock.config(text=format_clock(event.time_left), fg=C_TEXT)
        if event.running:
            self._status.config(text=mode.value, fg=MODE_ACCENT[mode.value])
        else:
            self._status.config(text="PAUSED" if event.time_left < self.engine.duration_for(mode) * 60
                                else "READY", fg=C_PAUSED)
        for m, b in self._mode_btns.items():
            b.config(bg=MODE_ACCENT[m.value] if m is mode else C_BTN_SEC,
                     fg=MODE_BG[m.value] if m is mode else C_TEXT)
        self._start_btn.config(text="Pause" if event.running else "Start")

        self._dur_label.config(text=f"{mode.value.title()} length", fg=C_TEXT_DIM)
        self._dur_spin.config(to=60 if mode is Mode.FOCUS else 15)
        if self.root.focus_get() is not self._dur_spin:
            self._dur_var.set(str(self.engine.duration_for(mode)))

        self._bar.delete("all")
        w = max(1, self._bar.winfo_width())
        accent = COSMETIC_ACCENT.get(self.profile.selected, C_BTN_PRI)
        self._bar.create_rectangle(0, 0, w, 8, fill=C_CARD_IN, outline="")
        self._bar.create_rectangle(0, 0, int(w * self.engine.elapsed_fraction), 8,
                                   fill=accent, outline="")

        if event.running:
            self.root.title(f"({format_clock(event.time_left)}) {APP_NAME} ☕")
        elif event.kind == "expire":
            self.root.title(f"🔔 Done! {APP_NAME}")
        else:
            self.root.title(APP_NAME)

    def _refresh_profile(self) -> None:
        name = self.profile.display_name
        self._hello.config(text=f"Hi, {name}" if name else APP_NAME, fg=C_TEXT)
        self._coins.config(text=f"🪙 {self.profile.coins}")

    def _apply_duration(self) -> None:
        applied = self.engine.set_duration(self.engine.mode, self._dur_var.get())
        if applied is None:
            self._dur_var.set(str(self.engine.duration_for(self.engine.mode)))
        else:
            self._dur_var.set(str(applied))

    def _play(self, kind: str) -> None:
        result = sound.play_cue(kind)
        if not result.ok:
            log.debug("Cue %s not played: %s", kind, result.error)

    def _notify(self, text: str, color: str = C_TEXT_DIM) -> None:
        """Transient status line under the controls."""
        self._notice.config(text=text, fg=color)
        if self._notice_id:
            self.root.after_cancel(self._notice_id)
        self._notice_id = self.root.after(NOTICE_MS, lambda: self._notice.config(text=""))

    # ━━━ Projection ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _toggle_projection(self) -> None:
        result = self.renderer.toggle()
        if not result.ok:
            self._notify(f"Could not open the floating timer: {result.error}", C_ERR)

    def _on_projection_state(self, state: str) -> None:
        self._pip_btn.config(text="Unfloat" if state == PROJECTED else "Float")

    # ━━━ Name Prompt ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _ask_name(self) -> None:
        name = simpledialog.askstring(APP_NAME, "What should I call you?", parent=self.root)
        if name and self.profile.rename(name):
            self._notify(f"Welcome, {self.profile.display_name}!", C_OK)

    # ━━━ Shop ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _show_shop_win(self) -> None:
        if self._lift(self._shop_win):
            return
        win = self._toplevel("Theme Shop", "380x360")
        self._shop_win = win
        body = tk.Frame(win, bg=C_CARD)
        body.pack(fill="both", expand=True, padx=14, pady=(0, 14))

        def build():
            for child in body.winfo_children():
                child.destroy()
            tk.Label(body, text=f"🪙 {self.profile.coins} coins", font=(FONT, 11, "bold"),
                     fg=C_COIN, bg=C_CARD).pack(anchor="e", pady=(0, 8))
            for item in CATALOG:
                row = tk.Frame(body, bg=C_CARD_IN, padx=10, pady=8)
                row.pack(fill="x", pady=3)
                tk.Label(row, text=f"{item.icon}  {item.name}", font=(FONT, 11),
                         fg=C_TEXT, bg=C_CARD_IN).pack(side="left")
                if self.profile.selected == item.id:
                    tk.Label(row, text="Selected", font=(FONT, 9, "bold"),
                             fg=C_OK, bg=C_CARD_IN).pack(side="right")
                elif self.ledger.is_unlocked(item.id):
                    self._btn(row, "Select", C_BTN_SEC,
                              lambda i=item.id: (self.ledger.select(i), build())).pack(side="right")
                else:
                    b = self._btn(row, f"Buy {item.cost}", C_BTN_PRI,
                                  lambda i=item.id: (self.ledger.purchase(i), build()))
                    if not self.ledger.can_afford(item.id):
                        b.config(state="disabled")
                    b.pack(side="right")
        build()

    # ━━━ Stats ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _show_stats_win(self) -> None:
        if self._lift(self._stats_win):
            return
        win = self._toplevel("Activity", "380x340")
        self._stats_win = win
        tk.Label(win, text="Last 30 days", font=(FONT, 10), fg=C_TEXT_MUT,
                 bg=C_CARD).pack(anchor="w", padx=16)

        cell, gap, cols = 36, 8, 6
        canvas = tk.Canvas(win, width=cols * (cell + gap), height=5 * (cell + gap),
                           bg=C_CARD, highlightthickness=0)
        canvas.pack(pady=10)
        for i, day in enumerate(last_30_days(self.profile.activity)):
            x = (i % cols) * (cell + gap);  y = (i // cols) * (cell + gap)
            canvas.create_rectangle(x, y, x + cell, y + cell, outline="",
                                    fill=HEAT_COLOURS[heat_tier(day.count)])
            canvas.create_text(x + cell / 2, y + cell / 2, text=day.date_key[-2:],
                               font=(FONT, 8), fill=C_TEXT_MUT)

        foot = tk.Frame(win, bg=C_CARD)
        foot.pack(fill="x", padx=16, pady=8)
        for value, label, color in (
                (total_sessions(self.profile.activity), "Total sessions", C_TEXT),
                (self.profile.break_completed, "Breaks taken", C_TEXT),
                (self.profile.coins, "Current coins", C_COIN)):
            col = tk.Frame(foot, bg=C_CARD)
            col.pack(side="left", expand=True)
            tk.Label(col, text=str(value), font=(FONT, 16, "bold"), fg=color, bg=C_CARD).pack()
            tk.Label(col, text=label.upper(), font=(FONT, 7, "bold"),
                     fg=C_TEXT_MUT, bg=C_CARD).pack()

    # ━━━ Settings ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _show_settings_win(self) -> None:
        if self._lift(self._settings_win):
            return
        win = self._toplevel("Settings", "340x240")
        self._settings_win = win
        tk.Label(win, text="DISPLAY NAME", font=(FONT, 8, "bold"), fg=C_TEXT_MUT,
                 bg=C_CARD).pack(anchor="w", padx=16)
        name_var = tk.StringVar(value=self.profile.display_name)
        entry = tk.Entry(win, textvariable=name_var, font=(FONT, 11), bg=C_CARD_IN, fg=C_TEXT,
                         relief="flat", insertbackground=C_TEXT)
        entry.pack(fill="x", padx=16, pady=(4, 12), ipady=4)
        entry.bind("<Return>", lambda e: self.profile.rename(name_var.get()))
        entry.bind("<FocusOut>", lambda e: self.profile.rename(name_var.get()))

        def clear():
            if messagebox.askyesno(APP_NAME, "Delete all your saved playlists?", parent=win):
                clear_playlists(self.profile)

        def reset():
            if messagebox.askyesno(APP_NAME, "Are you sure you want to reset your stats?", parent=win):
                self.profile.reset_stats()

        self._btn(win, "Clear My Playlists", C_BTN_SEC, clear).pack(fill="x", padx=16, pady=3)
        self._btn(win, "Reset Stats & History", C_ERR, reset).pack(fill="x", padx=16, pady=3)

    # ━━━ Music ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _show_music_win(self) -> None:
        if self._lift(self._music_win):
            return
        win = self._toplevel("Music", "380x360")
        self._music_win = win
        lst = tk.Listbox(win, font=(FONT, 10), bg=C_CARD_IN, fg=C_TEXT, relief="flat",
                         selectbackground=C_OK, activestyle="none")
        lst.pack(fill="both", expand=True, padx=14)
        entries: list = []

        def fill():
            entries[:] = all_playlists(self.profile)
            lst.delete(0, "end")
            for pid, name, _ in entries:
                lst.insert("end", f"{name}  ✕" if isinstance(pid, int) else name)

        def selected():
            sel = lst.curselection()
            return entries[sel[0]] if sel else None

        def open_selected(event=None):
            entry = selected()
            if entry:
                webbrowser.open(entry[2])

        def remove():
            entry = selected()
            if entry and isinstance(entry[0], int):
                remove_playlist(self.profile, entry[0])
                fill()

        link_var = tk.StringVar()
        row = tk.Frame(win, bg=C_CARD)
        row.pack(fill="x", padx=14, pady=8)
        tk.Entry(row, textvariable=link_var, font=(FONT, 10), bg=C_CARD_IN, fg=C_TEXT,
                 relief="flat", insertbackground=C_TEXT).pack(side="left", fill="x", expand=True, ipady=3)

        def play_link():
            if link_var.get().strip():
                webbrowser.open(embed_url(link_var.get()))

        def save_link():
            if not link_var.get().strip():
                return
            name = simpledialog.askstring(APP_NAME, "Name this playlist:", parent=win)
            if name and add_playlist(self.profile, name, link_var.get()):
                link_var.set("")
                fill()

        self._btn(row, "Open", C_BTN_SEC, play_link).pack(side="left", padx=(6, 2))
        self._btn(row, "Save", C_OK, save_link).pack(side="left")
        bottom = tk.Frame(win, bg=C_CARD)
        bottom.pack(fill="x", padx=14, pady=(0, 12))
        self._btn(bottom, "Play selected", C_BTN_PRI, open_selected).pack(side="left")
        self._btn(bottom, "Remove", C_BTN_SEC, remove).pack(side="right")
        lst.bind("<Double-Button-1>", open_selected)
        fill()

    # ━━━ Window helpers ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _toplevel(self, title: str, geometry: str) -> tk.Toplevel:
        win = tk.Toplevel(self.root)
        win.title(f"{APP_NAME} — {title}")
        win.geometry(geometry)
        win.configure(bg=C_CARD)
        win.transient(self.root)
        tk.Label(win, text=title, font=(FONT, 15, "bold"), fg=C_TEXT,
                 bg=C_CARD).pack(anchor="w", padx=16, pady=(14, 6))
        return win

    def _lift(self, win: Optional[tk.Toplevel]) -> bool:
        """Bring an already open dialog to the front.  False if it needs building."""
        if not win:
            return False
        try:
            if win.winfo_exists():
                win.lift();  win.focus_force()
                return True
        except tk.TclError:
            pass
        return False

    # ━━━ System Tray ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _update_tray_icon(self) -> None:
        if self.tray is None:
            return
        try:
            self.tray.icon = create_tray_icon(self.engine.mode.value, self.engine.running)
            self.tray.title = f"{APP_NAME} ({self.engine.mode.value.title()})"
        except Exception as e:
            log.debug("Tray update failed: %s", e)

    def _run_tray(self) -> None:
        later = lambda fn: (lambda icon, item: self.root.after(0, fn))
        menu = pystray.Menu(
            pystray.MenuItem("Open", later(self._show_main), default=True, visible=False),
            pystray.MenuItem(APP_NAME, later(self._show_main)),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem(lambda item: "⏸  Pause" if self.engine.running else "▶  Start",
                             later(self.engine.toggle)),
            pystray.MenuItem("↺  Reset", later(self.engine.reset)),
            pystray.MenuItem("⧉  Floating timer", later(self._toggle_projection)),
            pystray.MenuItem("📊  Stats", later(self._show_stats_win)),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Quit", later(self._quit)),
        )
        try:
            self.tray = pystray.Icon("focus_cafe", create_tray_icon(), APP_NAME, menu)
            self.tray.run()
        except Exception as e:
            log.warning("Tray icon unavailable: %s", e)
            self.tray = None

    def _show_main(self) -> None:
        self.root.deiconify()
        self.root.lift()

    def _quit(self) -> None:
        self.engine.close()
        self.renderer.close()
        self.store.flush()
        if self.tray is not None:
            self.tray.stop()
        self.root.after(0, self.root.quit)
