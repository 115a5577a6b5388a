"""Logging setup for the app and the command line."""
from __future__ import annotations
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "  [%(levelname)s] %(message)s"


def setup_logging(log_file: Optional[str] = None, verbose: bool = False,
                  max_bytes: int = 1_000_000, backup_count: int = 3) -> logging.Logger:
    """Configure the ``focus_cafe`` logger: console always, rotating file if asked."""
    logger = logging.getLogger("focus_cafe")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        folder = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(folder, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes,
                                      backupCount=backup_count, encoding="utf-8")
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(handler)

    logger.propagate = False
    return logger
