"""Colours, fonts, heatmap policy and the tray icon."""
from __future__ import annotations
import platform

from PIL import Image, ImageDraw

# ─── Platform fonts ───────────────────────────────────────────
IS_MAC = platform.system() == "Darwin"
IS_WIN = platform.system() == "Windows"
FONT = "Helvetica Neue" if IS_MAC else "Segoe UI" if IS_WIN else "DejaVu Sans"
MONO = "Menlo" if IS_MAC else "Consolas" if IS_WIN else "DejaVu Sans Mono"

# ─── Colours ──────────────────────────────────────────────────
C_FOCUS_BG = "#0c0a09";  C_BREAK_BG = "#064e3b"
C_FOCUS    = "#fbbf24";  C_BREAK    = "#34d399";  C_PAUSED = "#94a3b8"
C_CARD     = "#1c1917";  C_CARD_IN  = "#292524"
C_BTN_PRI  = "#d97706";  C_BTN_SEC  = "#44403c"
C_TEXT     = "#f5f5f4";  C_TEXT_DIM = "#a8a29e";  C_TEXT_MUT = "#78716c"
C_OK       = "#22c55e";  C_ERR      = "#ef4444";  C_COIN    = "#fbbf24"

MODE_BG = {"FOCUS": C_FOCUS_BG, "BREAK": C_BREAK_BG}
MODE_ACCENT = {"FOCUS": C_FOCUS, "BREAK": C_BREAK}

# Accent colour for each cosmetic in the main window
COSMETIC_ACCENT = {
    "mug": "#d97706",
    "candle": "#f97316",
    "horizon": "#f59e0b",
    "bonsai": "#10b981",
}

# ─── Heatmap ──────────────────────────────────────────────────
HEAT_NONE, HEAT_LOW, HEAT_MEDIUM, HEAT_HIGH = "none", "low", "medium", "high"
HEAT_COLOURS = {
    HEAT_NONE:   "#262626",
    HEAT_LOW:    "#064e3b",
    HEAT_MEDIUM: "#059669",
    HEAT_HIGH:   "#34d399",
}


def heat_tier(count: int) -> str:
    """0 none, 1-2 low, 3-5 medium, 6+ high."""
    if count >= 6:
        return HEAT_HIGH
    if count >= 3:
        return HEAT_MEDIUM
    if count >= 1:
        return HEAT_LOW
    return HEAT_NONE


# ─── Tray icon ────────────────────────────────────────────────
def create_tray_icon(mode: str = "FOCUS", running: bool = False, size: int = 64) -> Image.Image:
    """A coffee mug; amber while focusing, green on break, grey when paused."""
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    s = size / 64

    if not running:
        body, rim, steam = (120, 113, 108, 255), (87, 83, 78, 255), (168, 162, 158, 255)
    elif mode == "BREAK":
        body, rim, steam = (52, 211, 153, 255), (6, 78, 59, 255), (209, 250, 229, 255)
    else:
        body, rim, steam = (251, 191, 36, 255), (146, 64, 14, 255), (254, 243, 199, 255)
    black = (12, 10, 9, 255)

    def box(x0, y0, x1, y1):
        return [int(x0 * s), int(y0 * s), int(x1 * s), int(y1 * s)]

    w = max(1, int(2 * s))
    # Handle
    draw.ellipse(box(38, 26, 56, 46), outline=black, width=max(2, int(6 * s)))
    draw.ellipse(box(38, 26, 56, 46), outline=rim, width=max(1, int(3 * s)))
    # Cup
    draw.rounded_rectangle(box(10, 22, 44, 56), radius=int(6 * s), fill=body, outline=black, width=w)
    draw.rectangle(box(12, 22, 42, 27), fill=rim)
    # Steam
    if running:
        for x in (18, 27, 36):
            draw.arc(box(x - 3, 6, x + 3, 14), 90, 270, fill=steam, width=w)
            draw.arc(box(x - 3, 12, x + 3, 20), 270, 90, fill=steam, width=w)
    return img
