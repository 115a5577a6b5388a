"""Named constants, file locations and command-line options."""
from __future__ import annotations
import argparse
import os
from typing import Optional, Sequence

# ─── Timer ────────────────────────────────────────────────────
COINS_REWARD = 10                  # Coins credited per completed focus session
FOCUS_MIN_TIME = 1
FOCUS_MAX_TIME = 60                # Minutes
BREAK_MIN_TIME = 1
BREAK_MAX_TIME = 15                # Minutes
DEFAULT_FOCUS = 25
DEFAULT_BREAK = 5
TICK_SECONDS = 1                   # The countdown advances at 1 Hz
TEST_SPEED = 60                    # --test: one minute of countdown per second

# ─── History ──────────────────────────────────────────────────
HISTORY_DAYS = 30

# ─── Projection ───────────────────────────────────────────────
FRAME_SIZE = 512                   # Off-screen surface, square, px
WIDGET_SIZE = 168                  # Floating display edge, px
WIDGET_MARGIN = 20                 # Default distance from the screen edge
WIDGET_ALPHA = 0.94

# ─── Files ────────────────────────────────────────────────────
PROFILE_FILE = os.path.join(os.path.expanduser("~"), "focus_cafe_profile.json")
LOG_FILE = os.path.join(os.path.expanduser("~"), ".focus_cafe", "focus_cafe.log")

APP_NAME = "Focus Café"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="focus-cafe",
                                     description="Focus/break timer with coins, themes and history")
    parser.add_argument("--profile", default=PROFILE_FILE,
                        help=f"Profile file (default: {PROFILE_FILE})")
    parser.add_argument("--test", action="store_true",
                        help=f"Run the clock {TEST_SPEED}x faster for testing")
    parser.add_argument("--log-file", default=None, metavar="PATH",
                        help=f"Also log to a rotating file (e.g. {LOG_FILE})")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--no-tray", action="store_true", help="Do not start the tray icon")
    return parser.parse_args(argv)
