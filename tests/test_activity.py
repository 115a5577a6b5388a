import datetime

from focus_cafe.activity import last_30_days, today_key, total_sessions
from focus_cafe.theme import heat_tier

TODAY = datetime.date(2026, 3, 5)


class TestLast30Days:
    def test_empty_log(self):
        days = last_30_days({}, TODAY)
        assert len(days) == 30
        assert all(d.count == 0 for d in days)
        assert days[-1].date_key == "2026-03-05"
        assert days[0].date_key == "2026-02-04"

    def test_ascending_across_month_boundary(self):
        keys = [d.date_key for d in last_30_days({}, TODAY)]
        assert keys == sorted(keys)
        assert "2026-02-28" in keys and "2026-03-01" in keys

    def test_counts_and_sparsity(self):
        log = {"2026-03-05": 4, "2026-02-20": 1, "2025-12-01": 9}
        days = dict(last_30_days(log, TODAY))
        assert days["2026-03-05"] == 4
        assert days["2026-02-20"] == 1
        assert "2025-12-01" not in days
        assert sum(days.values()) == 5

    def test_defaults_to_today(self):
        assert last_30_days({})[-1].date_key == datetime.date.today().isoformat()


def test_total_counts_everything():
    assert total_sessions({"2026-03-05": 4, "2025-12-01": 9}) == 13
    assert total_sessions({}) == 0


def test_today_key():
    assert today_key(TODAY) == "2026-03-05"
    assert today_key() == datetime.date.today().isoformat()


def test_heat_tiers():
    assert [heat_tier(n) for n in (0, 1, 2, 3, 5, 6, 40)] == [
        "none", "low", "low", "medium", "medium", "high", "high"]
