"""Completion cues.  Fire and forget: nothing here waits or raises."""
from __future__ import annotations
import logging
import platform
import subprocess

from .errors import Attempt

log = logging.getLogger(__name__)

IS_MAC = platform.system() == "Darwin"
IS_WIN = platform.system() == "Windows"

ALARM = "alarm"   # focus session finished
CHIME = "chime"   # break finished

_WIN_ALIASES = {ALARM: "SystemExclamation", CHIME: "SystemAsterisk"}
_MAC_SOUNDS = {ALARM: "Glass", CHIME: "Blow"}
_LINUX_SOUNDS = {
    ALARM: "/usr/share/sounds/freedesktop/stereo/complete.oga",
    CHIME: "/usr/share/sounds/freedesktop/stereo/message.oga",
}
_LINUX_PLAYERS = (
    ["paplay"],
    ["pw-play"],
    ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"],
)


def _spawn(cmd: list[str]) -> None:
    subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)


def play_cue(kind: str = CHIME) -> Attempt:
    """Start playing the cue for ``kind`` in the background."""
    try:
        if IS_WIN:
            import winsound
            winsound.PlaySound(_WIN_ALIASES.get(kind, "SystemAsterisk"),
                               winsound.SND_ALIAS | winsound.SND_ASYNC)
            return Attempt.success()
        if IS_MAC:
            _spawn(["afplay", f"/System/Library/Sounds/{_MAC_SOUNDS.get(kind, 'Blow')}.aiff"])
            return Attempt.success()
        path = _LINUX_SOUNDS.get(kind, _LINUX_SOUNDS[CHIME])
        for player in _LINUX_PLAYERS:
            try:
                _spawn(player + [path])
                return Attempt.success()
            except FileNotFoundError:
                continue
        return Attempt.failure("no audio player found")
    except Exception as e:
        log.info("Audio blocked: %s", e)
        return Attempt.failure(e)
