"""Tests for the report cache and report service."""

import threading

import pytest

from fxjournal.journal.filters import TradeFilter
from fxjournal.journal.ingest import TradeIngester
from fxjournal.reports.cache import ReportCache, fingerprint
from fxjournal.reports.service import ReportService


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestFingerprint:
    def test_stable_for_same_input(self, sample_trades):
        assert fingerprint("report", sample_trades) == fingerprint("report", list(sample_trades))

    def test_changes_with_any_trade_field(self, sample_trades):
        before = fingerprint("report", sample_trades)
        edited = [sample_trades[0].with_memo("revenge trade")] + sample_trades[1:]
        assert fingerprint("report", edited) != before

    def test_same_records_loaded_twice_share_a_key(self):
        """Generated record ids do not reach the key, so a re-import hits the cache."""
        records = [
            {"ticket": 1, "openTime": "2025.01.06 03:00:00", "type": "buy", "item": "usdjpy", "profit": 10},
            {"ticket": 2, "openTime": "2025.01.07 03:00:00", "type": "sell", "item": "usdjpy", "profit": -5},
        ]
        first = TradeIngester().load_records(records).trades
        second = TradeIngester().load_records(records).trades

        assert first[0].id != second[0].id
        assert fingerprint("report", first) == fingerprint("report", second)

    def test_changes_with_kind_and_extra(self, sample_trades):
        key = fingerprint("report", sample_trades)
        assert fingerprint("dashboard", sample_trades) != key
        assert fingerprint("report", sample_trades, {"server_clock": "utc"}) != key


class TestReportCache:
    """Tests for TTL and LRU behaviour."""

    def test_get_and_set(self):
        cache = ReportCache(ttl_seconds=60, max_entries=4)
        cache.set("a", {"value": 1})

        assert cache.get("a") == {"value": 1}
        assert cache.get("missing") is None
        assert cache.hits == 1
        assert cache.misses == 1

    def test_entries_expire(self):
        clock = FakeClock()
        cache = ReportCache(ttl_seconds=10, max_entries=4, clock=clock)
        cache.set("a", 1)

        clock.now = 9.9
        assert cache.get("a") == 1
        clock.now = 10.0
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_least_recently_used_is_evicted(self):
        cache = ReportCache(ttl_seconds=60, max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_values_are_copied(self):
        cache = ReportCache(ttl_seconds=60, max_entries=2)
        value = {"rows": [1, 2]}
        cache.set("a", value)
        value["rows"].append(3)

        cached = cache.get("a")
        assert cached == {"rows": [1, 2]}
        cached["rows"].clear()
        assert cache.get("a") == {"rows": [1, 2]}

    def test_get_or_compute(self):
        cache = ReportCache(ttl_seconds=60, max_entries=2)
        calls = []

        def compute():
            calls.append(1)
            return {"n": len(calls)}

        assert cache.get_or_compute("k", compute) == {"n": 1}
        assert cache.get_or_compute("k", compute) == {"n": 1}
        assert len(calls) == 1

    def test_invalidate(self):
        cache = ReportCache(ttl_seconds=60, max_entries=4)
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.invalidate() == 2
        assert len(cache) == 0

    def test_stats(self):
        cache = ReportCache(ttl_seconds=30, max_entries=8)
        cache.set("a", 1)
        stats = cache.get_cache_stats()

        assert stats["entries"] == 1
        assert stats["max_entries"] == 8
        assert stats["ttl_seconds"] == 30

    def test_size_and_stats_wait_for_the_lock(self):
        """Readers see a consistent snapshot, never one taken mid-update."""
        cache = ReportCache(ttl_seconds=60, max_entries=4)
        cache.set("a", 1)
        seen = {}

        def read():
            seen["len"] = len(cache)
            seen["stats"] = cache.get_cache_stats()

        with cache._lock:
            reader = threading.Thread(target=read)
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()

        reader.join(timeout=5)
        assert not reader.is_alive()
        assert seen["len"] == 1
        assert seen["stats"]["entries"] == 1

    def test_defaults_come_from_settings(self):
        cache = ReportCache()
        assert cache.ttl_seconds > 0
        assert cache.max_entries >= 1

    @pytest.mark.parametrize("kwargs", [{"ttl_seconds": 0}, {"max_entries": 0}])
    def test_invalid_limits(self, kwargs):
        with pytest.raises(ValueError):
            ReportCache(**kwargs)


class TestReportService:
    """Tests for cached report assembly."""

    def test_second_request_is_served_from_cache(self, sample_trades):
        cache = ReportCache(ttl_seconds=60, max_entries=8)
        service = ReportService(cache=cache)

        first = service.analysis_report(sample_trades)
        second = service.analysis_report(sample_trades)

        assert first == second
        assert cache.hits == 1
        assert len(cache) == 1

    def test_report_and_dashboard_cached_separately(self, sample_trades):
        cache = ReportCache(ttl_seconds=60, max_entries=8)
        service = ReportService(cache=cache)

        report = service.analysis_report(sample_trades)
        dashboard = service.dashboard(sample_trades)

        assert "graphs" not in report
        assert "graphs" in dashboard
        assert len(cache) == 2

    def test_changed_trades_miss_the_cache(self, sample_trades):
        cache = ReportCache(ttl_seconds=60, max_entries=8)
        service = ReportService(cache=cache)

        service.analysis_report(sample_trades)
        service.analysis_report(sample_trades[:-2])

        assert cache.hits == 0
        assert len(cache) == 2

    def test_filter_applies(self, sample_trades):
        service = ReportService()
        payload = service.analysis_report(sample_trades, TradeFilter(items=["eurusd"]))

        assert payload["summary"]["totalTrades"] == 2
        assert [s["symbol"] for s in payload["symbolStats"]] == ["eurusd"]

    def test_without_cache_matches_cached(self, sample_trades):
        cached = ReportService(cache=ReportCache(ttl_seconds=60, max_entries=8))
        assert ReportService().dashboard(sample_trades) == cached.dashboard(sample_trades)

    def test_unknown_clock(self):
        with pytest.raises(ValueError):
            ReportService(server_clock="est")

    def test_reimported_trades_hit_the_cache(self):
        records = [{"ticket": 1, "openTime": "2025.01.06 03:00:00", "type": "buy", "item": "usdjpy", "profit": 10}]
        cache = ReportCache(ttl_seconds=60, max_entries=8)
        service = ReportService(cache=cache)

        service.analysis_report(TradeIngester().load_records(records).trades)
        service.analysis_report(TradeIngester().load_records(records).trades)

        assert cache.hits == 1
        assert len(cache) == 1
