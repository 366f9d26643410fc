"""Tests for CacheStatsCollector: per-cache counters."""

from __future__ import annotations

import threading

import pytest

from refcache.infrastructure.services.cache_stats import CacheStats, CacheStatsCollector


class TestCacheStats:
    def test_empty(self):
        s = CacheStats()
        assert s.total == 0
        assert s.hit_rate == 0.0

    def test_mixed(self):
        s = CacheStats(hits=7, misses=3)
        assert s.hit_rate == pytest.approx(0.7)
        assert s.total == 10


class TestCacheStatsCollector:
    def test_counters_are_independent(self):
        c = CacheStatsCollector()
        c.record_hit("fields")
        c.record_miss("fields")
        c.record_computation("fields")
        c.record_reclaimed("fields", 3)
        assert c.get("fields") == CacheStats(hits=1, misses=1, computations=1, reclaimed=3)
        assert c.get("methods") == CacheStats()

    def test_zero_reclaimed_is_not_recorded(self):
        c = CacheStatsCollector()
        c.record_reclaimed("fields", 0)
        assert c.all() == {}

    def test_all_is_sorted(self):
        c = CacheStatsCollector()
        c.record_hit("methods")
        c.record_hit("fields")
        assert list(c.all()) == ["fields", "methods"]

    def test_reset_single_and_all(self):
        c = CacheStatsCollector()
        c.record_hit("fields")
        c.record_hit("methods")
        c.reset("fields")
        assert c.get("fields").hits == 0
        assert c.get("methods").hits == 1
        c.reset()
        assert c.all() == {}

    def test_thread_safety(self):
        c = CacheStatsCollector()

        def worker():
            for _ in range(1000):
                c.record_hit("fields")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert c.get("fields").hits == 4000
