"""
db/cache.py — Content cache keyed by collection name
=====================================================

Best-effort memoization of "all active documents" reads. Entries live until
a write handler invalidates them; there is no TTL, no size bound and no
locking. A read that started before an invalidation can repopulate the entry
with data fetched before the write, so callers only get read-your-writes under
non-concurrent access.

The cache is an ordinary object attached to the FastAPI app (app.state.cache)
so tests construct their own instance instead of sharing process globals.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    data: Any
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ContentCache:
    """Mapping of key → CacheEntry with explicit get/set/invalidate."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def set(self, key: str, data: Any) -> CacheEntry:
        entry = CacheEntry(data=data)
        self._entries[key] = entry
        logger.info(f"Data for {key} cached at {entry.last_updated.isoformat()}")
        return entry

    def invalidate(self, key: str) -> bool:
        """Drop *key*; returns True if an entry was removed."""
        return self._entries.pop(key, None) is not None

    def clear(self):
        self._entries.clear()

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        """Return cached data for *key*, calling *loader* once on a miss."""
        entry = self._entries.get(key)
        if entry is not None and entry.data is not None:
            return entry.data
        logger.info(f"No cached data for {key}. Querying database...")
        return self.set(key, loader()).data

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
