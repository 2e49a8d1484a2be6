import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

ALL_ENTRIES_PREFIX = "all_entries"


def cache_key(limit: Optional[int] = None, offset: Optional[int] = None) -> str:
    """Deterministic key for a pagination window.

    An unset limit renders as an empty segment (unbounded window). An unset
    offset is the same window as offset 0 and shares its key.
    """
    limit_part = "" if limit is None else str(limit)
    offset_part = str(offset or 0)
    return f"{ALL_ENTRIES_PREFIX}_{limit_part}_{offset_part}"


@dataclass
class CacheEntry:
    data: List[Dict[str, Any]]
    inserted_at: float = field(default_factory=time.monotonic)

    def is_expired(self, ttl: float, now: float) -> bool:
        return now - self.inserted_at > ttl


class TTLCache:
    """In-memory cache of materialized entry windows with a fixed TTL.

    Expiry is checked lazily on `get` (a stale entry reads as a miss but
    stays in the table) and enforced by `sweep`, which a background job
    calls on an interval. The table keeps insertion order so `stats()`
    lists keys deterministically; overwriting a key moves it to the end.

    All access goes through one lock: handlers run in the threadpool and
    the sweep runs on the scheduler thread.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl_seconds
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired(self.ttl, self._clock()):
                # left in place for sweep()
                return None
            return entry

    def put(self, key: str, data: List[Dict[str, Any]]) -> CacheEntry:
        entry = CacheEntry(data=data, inserted_at=self._clock())
        with self._lock:
            self._store.pop(key, None)
            self._store[key] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def sweep(self) -> int:
        """remove every expired entry, returns how many were removed"""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._store.items() if e.is_expired(self.ttl, now)]
            for key in expired:
                del self._store[key]
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "size": len(self._store),
                "keys": list(self._store.keys()),
                "ttl": int(self.ttl * 1000),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        # raw presence, ignores staleness
        with self._lock:
            return key in self._store
