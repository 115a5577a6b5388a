"""Coins and cosmetics: the theme catalog and the purchase/select rules."""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, NamedTuple, Optional

if TYPE_CHECKING:
    from .profile import Profile

log = logging.getLogger(__name__)


class Cosmetic(NamedTuple):
    id: str
    name: str
    cost: int
    icon: str


CATALOG: tuple[Cosmetic, ...] = (
    Cosmetic("mug",     "Classic Mug",       0, "☕"),
    Cosmetic("candle",  "Midnight Candle",  50, "🕯️"),
    Cosmetic("horizon", "Golden Horizon",  150, "🌅"),
    Cosmetic("bonsai",  "Zen Bonsai",      300, "🌳"),
)

DEFAULT_COSMETIC = next(c.id for c in CATALOG if c.cost == 0)

_BY_ID = {c.id: c for c in CATALOG}


def cosmetic(cosmetic_id: str) -> Optional[Cosmetic]:
    return _BY_ID.get(cosmetic_id)


class Ledger:
    """Purchase and selection of cosmetics against a profile's coin balance.

    Failed attempts are no-ops that return False; nothing here raises and the
    balance never goes below zero.
    """

    def __init__(self, profile: "Profile"):
        self.profile = profile

    def is_unlocked(self, cosmetic_id: str) -> bool:
        return cosmetic_id in self.profile.unlocked

    def can_afford(self, cosmetic_id: str) -> bool:
        item = cosmetic(cosmetic_id)
        return item is not None and self.profile.coins >= item.cost

    def purchase(self, cosmetic_id: str) -> bool:
        item = cosmetic(cosmetic_id)
        if item is None or self.is_unlocked(cosmetic_id):
            return False
        with self.profile.deferred():
            if not self.profile.debit(item.cost):
                log.debug("Cannot afford %s (%d < %d)", cosmetic_id, self.profile.coins, item.cost)
                return False
            self.profile.unlock(cosmetic_id)
        log.info("Unlocked %s for %d coins", item.name, item.cost)
        return True

    def select(self, cosmetic_id: str) -> bool:
        if not self.is_unlocked(cosmetic_id):
            return False
        self.profile.choose(cosmetic_id)
        return True
