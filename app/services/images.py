"""Image preload lists served to the frontend splash loader."""

import logging
from typing import List

from db.cache import ContentCache
from db.collections import IMAGE_SOURCES
from db.repository import ContentRepository

logger = logging.getLogger(__name__)

MUST_LOAD_KEY = "must-load-images"
DYNAMIC_KEY = "dynamic-images"


def first_image(value) -> str | None:
    if isinstance(value, list):
        return value[0] if value else None
    if isinstance(value, str):
        return value or None
    return None


class ImageService:
    def __init__(self, config: dict, repo: ContentRepository, cache: ContentCache):
        self.must_load = list(config.get("images", {}).get("must_load", []))
        self.repo = repo
        self.cache = cache

    def refresh_must_load(self) -> List[str]:
        return self.cache.set(MUST_LOAD_KEY, list(self.must_load)).data

    def refresh_dynamic(self) -> List[str]:
        urls: List[str] = []
        for name, field in IMAGE_SOURCES:
            cursor = self.repo.collection(name).find(
                {field: {"$exists": True}, "deleted": {"$ne": True}}
            )
            for doc in cursor:
                url = first_image(doc.get(field))
                if url and url not in urls:
                    urls.append(url)
        return self.cache.set(DYNAMIC_KEY, urls).data

    def get_must_load(self) -> List[str]:
        entry = self.cache.get(MUST_LOAD_KEY)
        return entry.data if entry else self.refresh_must_load()

    def get_dynamic(self) -> List[str]:
        entry = self.cache.get(DYNAMIC_KEY)
        return entry.data if entry else self.refresh_dynamic()
