from focus_cafe.theme import COSMETIC_ACCENT, MODE_ACCENT, create_tray_icon
from focus_cafe.ledger import CATALOG


def test_tray_icon_reflects_state():
    paused = create_tray_icon("FOCUS", running=False)
    focus = create_tray_icon("FOCUS", running=True)
    rest = create_tray_icon("BREAK", running=True)
    assert paused.size == (64, 64) and paused.mode == "RGBA"
    assert len({paused.tobytes(), focus.tobytes(), rest.tobytes()}) == 3


def test_every_cosmetic_has_an_accent():
    assert {c.id for c in CATALOG} <= set(COSMETIC_ACCENT)
    assert set(MODE_ACCENT) == {"FOCUS", "BREAK"}
