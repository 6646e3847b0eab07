"""Memoizing wrapper around any DataProvider.

Details are keyed by (kind, id) and searches by (kind, lowered query, limit).
Lookups for the same key are serialized so a burst of identical requests
from worker threads hits the upstream provider once. Failures are not cached.
"""
import logging
import threading
from typing import Dict, Hashable, List, Tuple

from game.provider import DataProvider, SearchHit
from game.state import EntityKind, SubjectEntity


logger = logging.getLogger(__name__)


class CachedProvider(DataProvider):
    """Thread-safe cache in front of another provider."""

    def __init__(self, upstream: DataProvider):
        self.upstream = upstream
        self._details: Dict[Tuple[EntityKind, int], SubjectEntity] = {}
        self._searches: Dict[Tuple[EntityKind, str, int], List[SearchHit]] = {}
        self._lock = threading.Lock()
        self._key_locks: Dict[Hashable, threading.Lock] = {}

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def _forget_lock(self, key: Hashable, key_lock: threading.Lock) -> None:
        # later callers either hit the cache or start a fresh lookup
        with self._lock:
            if self._key_locks.get(key) is key_lock:
                del self._key_locks[key]

    def fetch_details(self, kind: EntityKind, entity_id: int) -> SubjectEntity:
        key = (kind, entity_id)
        cached = self._details.get(key)
        if cached is not None:
            return cached

        key_lock = self._lock_for(key)
        with key_lock:
            try:
                cached = self._details.get(key)
                if cached is not None:
                    return cached
                entity = self.upstream.fetch_details(kind, entity_id)
                with self._lock:
                    stored = self._details.setdefault(key, entity)
                logger.debug("Cached %s %d (%s)", kind.value, entity_id, entity.name)
                return stored
            finally:
                self._forget_lock(key, key_lock)

    def search(self, kind: EntityKind, query: str, limit: int = 6) -> List[SearchHit]:
        key = (kind, query.strip().lower(), limit)
        cached = self._searches.get(key)
        if cached is not None:
            return list(cached)

        key_lock = self._lock_for(key)
        with key_lock:
            try:
                cached = self._searches.get(key)
                if cached is not None:
                    return list(cached)
                hits = self.upstream.search(kind, query, limit)
                with self._lock:
                    stored = self._searches.setdefault(key, list(hits))
                return list(stored)
            finally:
                self._forget_lock(key, key_lock)

    def clear(self) -> None:
        """Forget everything cached so far."""
        with self._lock:
            self._details.clear()
            self._searches.clear()
            self._key_locks.clear()

    def __len__(self) -> int:
        return len(self._details)

