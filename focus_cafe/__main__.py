"""Command-line entry point: ``python -m focus_cafe`` or ``focus-cafe``."""
from __future__ import annotations
import sys
from typing import Optional, Sequence

from .config import TEST_SPEED, parse_args
from .log import setup_logging


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    log = setup_logging(args.log_file, args.verbose)
    try:
        import tkinter  # noqa: F401
    except ImportError:
        log.error("tkinter is required (e.g. sudo apt install python3-tk)")
        return 1

    from .app import FocusCafeApp
    if args.test:
        log.warning("TEST MODE: clock runs %dx faster", TEST_SPEED)
    log.info("Profile: %s", args.profile)
    try:
        FocusCafeApp(args).run()
    except tkinter.TclError as e:
        log.error("Cannot open a window: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
