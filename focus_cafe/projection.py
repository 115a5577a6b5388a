"""Mirror of the timer on an off-screen surface, optionally projected to a
floating always-on-top display.

The frame is a pure function of (mode, time left, running).  The renderer
redraws it on every timer event and, while projected, hands each frame to
the host display.  Failing to project is never fatal: the renderer stays
detached and reports an :class:`~focus_cafe.errors.Attempt`.
"""
from __future__ import annotations
import functools
import logging
from typing import TYPE_CHECKING, Callable, NamedTuple, Optional, Protocol

from PIL import Image, ImageDraw, ImageFont

from .config import FRAME_SIZE
from .engine import Mode, TimerEvent, format_clock
from .errors import Attempt, DisplayUnavailable
from .theme import C_BREAK, C_BREAK_BG, C_FOCUS, C_FOCUS_BG, C_PAUSED

if TYPE_CHECKING:
    from .engine import SessionTimer

log = logging.getLogger(__name__)

DETACHED = "detached"
PROJECTED = "projected"

_CLOCK_FONTS = ("DejaVuSansMono-Bold.ttf", "Menlo.ttc", "consolab.ttf", "Courier New Bold.ttf")
_LABEL_FONTS = ("DejaVuSans-Bold.ttf", "Helvetica.ttc", "segoeuib.ttf", "arialbd.ttf")


class FrameSpec(NamedTuple):
    background: str
    clock: str
    status: str
    status_color: str


def frame_spec(mode: Mode, time_left: int, running: bool) -> FrameSpec:
    mode = Mode(mode)
    bg = C_FOCUS_BG if mode is Mode.FOCUS else C_BREAK_BG
    if not running:
        status, color = "PAUSED", C_PAUSED
    elif mode is Mode.FOCUS:
        status, color = "FOCUS", C_FOCUS
    else:
        status, color = "BREAK", C_BREAK
    return FrameSpec(bg, format_clock(time_left), status, color)


@functools.lru_cache(maxsize=8)
def _font(names: tuple[str, ...], size: int) -> ImageFont.ImageFont:
    for name in names:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _centred(draw: ImageDraw.ImageDraw, cx: float, cy: float, text: str,
             font: ImageFont.ImageFont, fill: str) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    draw.text((cx - (left + right) / 2, cy - (top + bottom) / 2), text, font=font, fill=fill)


def render_frame(spec: FrameSpec, size: int = FRAME_SIZE) -> Image.Image:
    """Paint one frame: background, big centred clock, status label below."""
    img = Image.new("RGB", (size, size), spec.background)
    draw = ImageDraw.Draw(img)
    scale = size / 512
    _centred(draw, size / 2, size / 2, spec.clock,
             _font(_CLOCK_FONTS, max(8, int(150 * scale))), "#ffffff")
    _centred(draw, size / 2, size / 2 + 120 * scale, spec.status,
             _font(_LABEL_FONTS, max(6, int(40 * scale))), spec.status_color)
    return img


class ExternalDisplay(Protocol):
    """Host primitive: an always-on-top window showing frames."""

    def available(self) -> bool: ...

    def open(self, frame: Image.Image, on_closed: Callable[[], None]) -> None: ...

    def show(self, frame: Image.Image) -> None: ...

    def close(self) -> None: ...


class ProjectionRenderer:

    def __init__(self, display: Optional[ExternalDisplay] = None, size: int = FRAME_SIZE,
                 on_state: Optional[Callable[[str], None]] = None):
        self.display = display
        self.size = size
        self.on_state = on_state
        self.state = DETACHED
        self.surface: Optional[Image.Image] = None
        self.spec: Optional[FrameSpec] = None
        self.frames = 0
        self._event: Optional[TimerEvent] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def projected(self) -> bool:
        return self.state == PROJECTED

    def attach(self, engine: "SessionTimer") -> None:
        """Follow ``engine``: draw now, then on every timer event."""
        if self._unsubscribe:
            self._unsubscribe()
        self._unsubscribe = engine.subscribe(self.redraw)
        self.redraw(engine.snapshot())

    def redraw(self, event: Optional[TimerEvent] = None) -> Image.Image:
        if event is not None:
            self._event = event
        if self._event is None:
            raise ValueError("nothing to draw yet; attach() or pass an event")
        e = self._event
        self.spec = frame_spec(e.mode, e.time_left, e.running)
        self.surface = render_frame(self.spec, self.size)
        self.frames += 1
        if self.projected:
            try:
                self.display.show(self.surface)
            except DisplayUnavailable as err:
                log.warning("Floating display lost: %s", err)
                self._set_state(DETACHED)
        return self.surface

    def enter(self) -> Attempt:
        """Start projecting.  The first frame is drawn before the display opens."""
        if self.projected:
            return Attempt.success()
        if self.display is None:
            return self._refused("no floating display on this system")
        try:
            if not self.display.available():
                return self._refused("floating display not supported")
            self.redraw()
            self.display.open(self.surface, self._host_closed)
        except (DisplayUnavailable, ValueError) as err:
            return self._refused(err)
        self._set_state(PROJECTED)
        log.info("Projection on")
        return Attempt.success()

    def leave(self) -> None:
        if not self.projected:
            return
        self._set_state(DETACHED)
        try:
            self.display.close()
        except DisplayUnavailable as err:
            log.debug("Floating display already gone: %s", err)
        log.info("Projection off")

    def toggle(self) -> Attempt:
        if self.projected:
            self.leave()
            return Attempt.success()
        return self.enter()

    def close(self) -> None:
        """Leave projection and stop following the engine."""
        self.leave()
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _host_closed(self) -> None:
        if self.projected:
            log.info("Floating display closed by the host")
            self._set_state(DETACHED)

    def _refused(self, reason: object) -> Attempt:
        log.warning("Could not open floating display: %s", reason)
        return Attempt.failure(reason)

    def _set_state(self, state: str) -> None:
        self.state = state
        if self.on_state:
            self.on_state(state)
