"""Per-day activity log queries for the history heatmap."""
from __future__ import annotations
import datetime
from typing import Mapping, NamedTuple, Optional

from .config import HISTORY_DAYS


class DayCount(NamedTuple):
    date_key: str
    count: int


def today_key(day: Optional[datetime.date] = None) -> str:
    """ISO ``YYYY-MM-DD`` key for a local calendar day (today by default)."""
    return (day or datetime.date.today()).isoformat()


def last_30_days(activity: Mapping[str, int],
                 today: Optional[datetime.date] = None) -> list[DayCount]:
    """Counts for [today - 29, today], oldest first.  Missing days count 0."""
    today = today or datetime.date.today()
    days = [today - datetime.timedelta(days=i) for i in range(HISTORY_DAYS - 1, -1, -1)]
    return [DayCount(d.isoformat(), int(activity.get(d.isoformat(), 0))) for d in days]


def total_sessions(activity: Mapping[str, int]) -> int:
    """All completed focus sessions ever logged, not just the visible window."""
    return sum(activity.values())
