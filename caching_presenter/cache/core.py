"""
Per-presenter result store.

Each presenter owns exactly one CacheStore. Entries live as long as the
store does: there is no expiry, eviction or invalidation.
"""
import contextlib
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .keys import CacheKey


class _Missing:
    """Sentinel type signalling a cache miss."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class CacheStore:
    """
    In-memory mapping from CacheKey to a previously computed result.

    Keys whose canonical form is hashable live in a dict. Keys holding an
    unhashable argument (an object defining __eq__ without __hash__) are
    kept in a list and matched with ==, so value semantics hold for both.

    The store is not thread-safe on its own. Pass a lock (usually a
    threading.RLock) and hold locked() around lookup/compute/store when
    a presenter is shared between threads.
    """

    def __init__(self, lock: Optional[Any] = None):
        """
        Initialize an empty store.

        Args:
            lock: Optional re-entrant lock guarding lookup/compute/store
        """
        self._entries: Dict[CacheKey, Any] = {}
        self._unhashable: List[Tuple[CacheKey, Any]] = []
        self._lock = lock
        self._hits = 0
        self._misses = 0

    def lookup(self, key: CacheKey) -> Any:
        """
        Get a stored result.

        Args:
            key: Cache key to retrieve

        Returns:
            The stored result, or MISSING if the key has no entry
        """
        if _is_hashable(key):
            value = self._entries.get(key, MISSING)
        else:
            value = MISSING
            for stored_key, stored_value in self._unhashable:
                if stored_key == key:
                    value = stored_value
                    break

        if value is MISSING:
            self._misses += 1
        else:
            self._hits += 1
        return value

    def store(self, key: CacheKey, value: Any) -> None:
        """
        Store a result, replacing any existing entry for the key.

        Args:
            key: Cache key
            value: Result to store
        """
        if _is_hashable(key):
            self._entries[key] = value
            return

        for index, (stored_key, _) in enumerate(self._unhashable):
            if stored_key == key:
                self._unhashable[index] = (key, value)
                return
        self._unhashable.append((key, value))

    @contextlib.contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store's lock, if it has one."""
        if self._lock is None:
            yield
            return
        with self._lock:
            yield

    @property
    def thread_safe(self) -> bool:
        return self._lock is not None

    def __len__(self) -> int:
        return len(self._entries) + len(self._unhashable)

    def __contains__(self, key: CacheKey) -> bool:
        if _is_hashable(key):
            return key in self._entries
        return any(stored_key == key for stored_key, _ in self._unhashable)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get store statistics.

        Returns:
            Dictionary with size, hits, misses and hit ratio
        """
        total_requests = self._hits + self._misses
        hit_ratio = self._hits / total_requests if total_requests > 0 else 0

        return {
            'size': len(self),
            'hits': self._hits,
            'misses': self._misses,
            'hit_ratio': hit_ratio,
            'thread_safe': self.thread_safe,
        }


def _is_hashable(key: CacheKey) -> bool:
    try:
        hash(key)
    except TypeError:
        return False
    return True
