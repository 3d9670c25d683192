"""
app/services/content.py — Cached content service
=================================================

Combines ContentRepository with ContentCache and enforces the invalidation
convention: every write to a collection drops that collection's cache entry
and the aggregated collection counts. Likes are the one exception and only
drop the collection entry.

Routers never touch the repository or the cache directly for content
collections; they call this service.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from db.cache import ContentCache
from db.collections import (
    COUNTED_COLLECTIONS, COUNTS_CACHE_KEY, LIKE_TARGETS, UNFILTERED_COUNTS,
)
from db.repository import ContentRepository

logger = logging.getLogger(__name__)


class UnknownLikeType(KeyError):
    pass


class ContentService:
    def __init__(self, repo: ContentRepository, cache: ContentCache):
        self.repo = repo
        self.cache = cache

    # --- cache contract ---

    def get_cached_all(self, name: str) -> List[dict]:
        """Active documents of *name*, served from cache after the first read."""
        return self.cache.get_or_load(name, lambda: self.repo.find_active(name))

    def invalidate(self, name: str, counts: bool = True):
        self.cache.invalidate(name)
        if counts:
            self.cache.invalidate(COUNTS_CACHE_KEY)

    # --- reads ---

    def get_by_link(self, name: str, link_field: str, value: str) -> Optional[dict]:
        return self.repo.find_active_by(name, link_field, value)

    def collection_counts(self) -> Dict[str, int]:
        def load():
            return {
                name: (
                    self.repo.count_all(name) if name in UNFILTERED_COUNTS
                    else self.repo.count_active(name)
                )
                for name in COUNTED_COLLECTIONS
            }
        return self.cache.get_or_load(COUNTS_CACHE_KEY, load)

    # --- writes ---

    def add(self, name: str, doc: dict) -> dict:
        """Insert *doc* and return it with its generated _id."""
        doc = {k: v for k, v in doc.items() if k != "_id"}
        inserted_id = self.repo.insert(name, doc)
        self.invalidate(name)
        return {**doc, "_id": inserted_id}

    def update(self, name: str, doc_id: Any, fields: dict) -> int:
        matched = self.repo.update(name, doc_id, fields)
        self.invalidate(name)
        return matched

    def soft_delete(self, name: str, doc_id: Any, extra: Optional[dict] = None) -> int:
        matched = self.repo.soft_delete(name, doc_id, extra)
        self.invalidate(name)
        return matched

    def hard_delete(self, name: str, doc_id: Any) -> int:
        deleted = self.repo.hard_delete(name, doc_id)
        self.invalidate(name)
        return deleted

    def reorder(self, name: str, items: Iterable[Dict[str, Any]]) -> int:
        matched = self.repo.bulk_set_order(name, items)
        self.invalidate(name, counts=False)
        return matched

    def add_like(self, like_type: str, title: str) -> int:
        """
        Increment likesCount on the active document of *like_type* titled *title*.

        Raises UnknownLikeType for an unmapped type; returns the modified count
        (0 when nothing matched).
        """
        try:
            name, title_field = LIKE_TARGETS[like_type]
        except KeyError:
            raise UnknownLikeType(like_type)
        modified = self.repo.increment_likes(name, title_field, title)
        if modified:
            self.invalidate(name, counts=False)
        return modified
