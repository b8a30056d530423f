from datetime import date

from focusflow.ui.calendar_cache import CacheKey, CalendarCache, ViewMode

MARCH = CacheKey(date(2024, 3, 1), date(2024, 3, 31), ViewMode.MONTH)


class FakeClock:

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def test_entry_valid_until_ttl():
    clock = FakeClock()
    cache = CalendarCache(ttl=300, clock=clock)
    cache.set(MARCH, "march")

    clock.now = 299.9
    assert cache.get(MARCH) == "march"

    clock.now = 300
    assert cache.get(MARCH) is None
    assert len(cache) == 0


def test_stats_count_hits_and_misses():
    clock = FakeClock()
    cache = CalendarCache(clock=clock)
    cache.get(MARCH)
    cache.set(MARCH, "march")
    cache.get(MARCH)
    clock.now = 1000
    cache.get(MARCH)

    assert (cache.stats.hits, cache.stats.misses, cache.stats.evictions) == (1, 2, 1)
    assert round(cache.stats.hit_rate, 2) == 0.33


def test_keys_differ_by_view():
    cache = CalendarCache(clock=FakeClock())
    week = CacheKey(date(2024, 3, 1), date(2024, 3, 31), ViewMode.WEEK)
    cache.set(MARCH, "month")

    assert CacheKey(date(2024, 3, 1), date(2024, 3, 31), ViewMode.MONTH) in cache
    assert week not in cache


def test_set_overwrites_and_restarts_ttl():
    clock = FakeClock()
    cache = CalendarCache(ttl=300, clock=clock)
    cache.set(MARCH, "old")
    clock.now = 200
    cache.set(MARCH, "new")
    clock.now = 450
    assert cache.get(MARCH) == "new"
