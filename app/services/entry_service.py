import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.services.pagination import paginate
from app.services.store_adapter import BaseStoreAdapter
from app.services.ttl_cache import TTLCache, cache_key
from app.utils.log import app_logger


@dataclass
class EntryPage:
    entries: List[Dict[str, Any]]
    cache_key: str
    cache_hit: bool


class EntryService:
    """Serves entry windows from the TTL cache, scanning the store on a miss.

    Two concurrent misses for the same key may both scan; the last `put`
    wins.
    """

    def __init__(self, store: BaseStoreAdapter, cache: TTLCache):
        self.store = store
        self.cache = cache

    def list_entries(self, limit: Optional[int] = None, offset: Optional[int] = None) -> EntryPage:
        start = time.perf_counter()
        key = cache_key(limit, offset)

        cached = self.cache.get(key)
        if cached is not None:
            app_logger.info("cache.hit", cache_key=key, count=len(cached.data), duration_ms=_elapsed_ms(start))
            return EntryPage(entries=cached.data, cache_key=key, cache_hit=True)

        app_logger.info("cache.miss", cache_key=key)
        entries = paginate(self.store.scan(), limit=limit, offset=offset)
        self.cache.put(key, entries)
        app_logger.info("store.fetch_completed", cache_key=key, count=len(entries), duration_ms=_elapsed_ms(start))
        return EntryPage(entries=entries, cache_key=key, cache_hit=False)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
