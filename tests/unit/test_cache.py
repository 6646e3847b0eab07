"""Unit tests for catalog/cache.py - CachedProvider."""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from catalog.cache import CachedProvider
from game.errors import RetrievalError
from game.state import EntityKind


class SlowProvider:
    """Upstream that takes a while and counts calls."""

    def __init__(self, inner, delay=0.05):
        self.inner = inner
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def fetch_details(self, kind, entity_id):
        with self._lock:
            self.calls += 1
        time.sleep(self.delay)
        return self.inner.fetch_details(kind, entity_id)

    def search(self, kind, query, limit=6):
        with self._lock:
            self.calls += 1
        return self.inner.search(kind, query, limit)


class TestCaching:
    """Tests for memoized lookups."""

    def test_details_cached(self, fake_provider):
        cached = CachedProvider(fake_provider)

        first = cached.fetch_details(EntityKind.ACTOR, 6193)
        second = cached.fetch_details(EntityKind.ACTOR, 6193)

        assert first is second
        assert fake_provider.detail_calls == [(EntityKind.ACTOR, 6193)]
        assert len(cached) == 1

    def test_kind_is_part_of_key(self, fake_provider):
        cached = CachedProvider(fake_provider)
        cached.fetch_details(EntityKind.MOVIE, 27205)

        with pytest.raises(RetrievalError):
            cached.fetch_details(EntityKind.ACTOR, 27205)

    def test_failures_not_cached(self, fake_provider):
        cached = CachedProvider(fake_provider)
        fake_provider.fail = True
        with pytest.raises(RetrievalError):
            cached.fetch_details(EntityKind.ACTOR, 6193)

        fake_provider.fail = False
        assert cached.fetch_details(EntityKind.ACTOR, 6193).name == "Leonardo DiCaprio"

    def test_search_cached_case_insensitively(self, fake_provider):
        cached = CachedProvider(fake_provider)

        hits = cached.search(EntityKind.MOVIE, "Inception")
        again = cached.search(EntityKind.MOVIE, " inception ")

        assert hits == again
        assert len(fake_provider.search_calls) == 1

    def test_search_results_are_copies(self, fake_provider):
        cached = CachedProvider(fake_provider)
        cached.search(EntityKind.MOVIE, "Inception").clear()
        assert len(cached.search(EntityKind.MOVIE, "Inception")) == 1

    def test_find_best_match_uses_cached_search(self, fake_provider):
        cached = CachedProvider(fake_provider)
        assert cached.find_best_match(EntityKind.MOVIE, "Titanic") == 597
        assert cached.find_best_match(EntityKind.MOVIE, "Titanic") == 597
        assert len(fake_provider.search_calls) == 1

    def test_key_locks_do_not_accumulate(self, fake_provider):
        cached = CachedProvider(fake_provider)
        for query in ("Inc", "Ince", "Incep", "Inception"):
            cached.search(EntityKind.MOVIE, query)
        cached.fetch_details(EntityKind.MOVIE, 27205)

        fake_provider.fail = True
        with pytest.raises(RetrievalError):
            cached.fetch_details(EntityKind.ACTOR, 6193)
        with pytest.raises(RetrievalError):
            cached.search(EntityKind.ACTOR, "Leo")

        assert cached._key_locks == {}

    def test_parallel_lookups_leave_no_locks(self, fake_provider):
        cached = CachedProvider(SlowProvider(fake_provider, delay=0.01))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: cached.search(EntityKind.MOVIE, f"t{i % 3}"), range(24)))

        assert cached._key_locks == {}

    def test_clear(self, fake_provider):
        cached = CachedProvider(fake_provider)
        cached.fetch_details(EntityKind.ACTOR, 6193)
        cached.clear()
        cached.fetch_details(EntityKind.ACTOR, 6193)

        assert len(fake_provider.detail_calls) == 2


class TestConcurrency:
    """Concurrent identical lookups reach upstream once."""

    def test_parallel_details(self, fake_provider):
        upstream = SlowProvider(fake_provider)
        cached = CachedProvider(upstream)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(
                lambda _: cached.fetch_details(EntityKind.MOVIE, 27205), range(8)
            ))

        assert upstream.calls == 1
        assert all(result is results[0] for result in results)

    def test_different_keys_do_not_block_each_other(self, fake_provider):
        upstream = SlowProvider(fake_provider, delay=0.2)
        cached = CachedProvider(upstream)
        keys = [(EntityKind.MOVIE, 27205), (EntityKind.MOVIE, 597), (EntityKind.ACTOR, 6193)]

        started = time.monotonic()
        with ThreadPoolExecutor(max_workers=3) as pool:
            list(pool.map(lambda key: cached.fetch_details(*key), keys))
        elapsed = time.monotonic() - started

        assert upstream.calls == 3
        assert elapsed < 0.55
