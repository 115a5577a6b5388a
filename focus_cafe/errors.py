"""Error types and the outcome record for best-effort operations."""
from __future__ import annotations
from typing import NamedTuple, Optional


class FocusCafeError(Exception):
    """Base class for Focus Café errors."""


class DisplayUnavailable(FocusCafeError):
    """The host refused or cannot provide the always-on-top display."""


class Attempt(NamedTuple):
    """Result of a fire-and-forget operation (sound, floating display)."""
    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "Attempt":
        return cls(True)

    @classmethod
    def failure(cls, error: object) -> "Attempt":
        return cls(False, str(error) or error.__class__.__name__)
