from focus_cafe.profile import Profile


class TestMutations:
    def test_debit_never_negative(self):
        p = Profile(coins=5)
        assert not p.debit(6)
        assert p.coins == 5
        assert not p.debit(-1)
        assert p.debit(5)
        assert p.coins == 0

    def test_rename(self):
        p = Profile()
        assert not p.rename("   ")
        assert p.needs_name
        assert p.rename("  Kim ")
        assert p.display_name == "Kim"
        assert not p.needs_name

    def test_reset_stats_keeps_coins(self):
        p = Profile(coins=30, focus_completed=3, break_completed=2,
                    activity={"2026-01-01": 3})
        p.reset_stats()
        assert (p.coins, p.focus_completed, p.break_completed, p.activity) == (30, 0, 0, {})


class TestNotifications:
    def test_keys(self):
        p = Profile()
        keys = []
        p.subscribe(keys.append)
        p.credit(10)
        p.record_break()
        p.rename("Sol")
        p.set_durations(30, 5)
        assert keys == ["coins", "stats", "user", "durations"]

    def test_no_change_no_notification(self):
        p = Profile()
        keys = []
        p.subscribe(keys.append)
        p.credit(0)
        p.choose(p.selected)
        p.set_durations(p.focus_minutes, p.break_minutes)
        assert keys == []

    def test_deferred_sends_each_key_once_at_end(self):
        p = Profile()
        keys = []
        p.subscribe(keys.append)
        with p.deferred():
            p.credit(1)
            p.credit(1)
            p.record_focus("2026-01-01")
            assert keys == []
        assert keys == ["coins", "stats", "activity"]

    def test_nested_deferred(self):
        p = Profile()
        keys = []
        p.subscribe(keys.append)
        with p.deferred():
            with p.deferred():
                p.credit(1)
            assert keys == []
        assert keys == ["coins"]

    def test_failing_listener_is_isolated(self):
        p = Profile()
        keys = []
        p.subscribe(lambda key: 1 / 0)
        p.subscribe(keys.append)
        p.credit(3)
        assert keys == ["coins"]

    def test_unsubscribe(self):
        p = Profile()
        keys = []
        unsubscribe = p.subscribe(keys.append)
        unsubscribe()
        unsubscribe()
        p.credit(1)
        assert keys == []
