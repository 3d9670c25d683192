"""
db/repository.py — Content repository
======================================

All collection access goes through ContentRepository so the soft-delete
filter lives in one place:

  find_active / find_active_by / count_active  → exclude deleted: true
  soft_delete                                  → set deleted: true
  hard_delete                                  → deleteOne (feeds, scripts)

Singleton collections (about me, settings, admin, OTP) use the *_singleton
helpers, which always address the first document.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from pymongo import UpdateOne
from pymongo.database import Database

from db.mongo import parse_object_id

logger = logging.getLogger(__name__)

ACTIVE = {"deleted": {"$ne": True}}


class ContentRepository:
    def __init__(self, db: Database):
        self.db = db

    def collection(self, name: str):
        return self.db[name]

    # --- reads ---

    def find_active(self, name: str) -> List[dict]:
        return list(self.db[name].find(ACTIVE))

    def find_all(self, name: str) -> List[dict]:
        """Every document, soft-deleted ones included."""
        return list(self.db[name].find({}))

    def find_active_by(self, name: str, field: str, value: Any) -> Optional[dict]:
        return self.db[name].find_one({field: value, **ACTIVE})

    def find_by_id(self, name: str, doc_id: Any) -> Optional[dict]:
        return self.db[name].find_one({"_id": parse_object_id(doc_id)})

    def count_active(self, name: str) -> int:
        return self.db[name].count_documents(ACTIVE)

    def count_all(self, name: str) -> int:
        return self.db[name].count_documents({})

    # --- writes ---

    def insert(self, name: str, doc: dict):
        """Insert *doc* (without mutating it) and return the new _id."""
        result = self.db[name].insert_one(dict(doc))
        return result.inserted_id

    def update(self, name: str, doc_id: Any, fields: dict) -> int:
        """$set *fields* on one document; a client-sent _id is ignored."""
        fields = {k: v for k, v in fields.items() if k != "_id"}
        query = {"_id": parse_object_id(doc_id)}
        if not fields:
            # nothing to $set; report whether the document exists
            return self.db[name].count_documents(query)
        result = self.db[name].update_one(query, {"$set": fields})
        return result.matched_count

    def soft_delete(self, name: str, doc_id: Any, extra: Optional[dict] = None) -> int:
        fields = {"deleted": True, **(extra or {})}
        result = self.db[name].update_one(
            {"_id": parse_object_id(doc_id)}, {"$set": fields}
        )
        return result.matched_count

    def hard_delete(self, name: str, doc_id: Any) -> int:
        result = self.db[name].delete_one({"_id": parse_object_id(doc_id)})
        return result.deleted_count

    def bulk_set_order(self, name: str, items: Iterable[Dict[str, Any]]) -> int:
        """Set `order` on each {_id, order} item in one bulk write."""
        ops = [
            UpdateOne({"_id": parse_object_id(item["_id"])}, {"$set": {"order": item["order"]}})
            for item in items
        ]
        if not ops:
            return 0
        result = self.db[name].bulk_write(ops)
        return result.matched_count

    def increment_likes(self, name: str, title_field: str, title: str) -> int:
        result = self.db[name].update_one(
            {title_field: title, **ACTIVE}, {"$inc": {"likesCount": 1}}
        )
        return result.modified_count

    # --- singletons ---

    def find_singleton(self, name: str) -> Optional[dict]:
        return self.db[name].find_one({})

    def replace_singleton(self, name: str, doc: dict):
        self.db[name].replace_one({}, doc, upsert=True)

    def insert_singleton(self, name: str, doc: dict):
        """Drop every document in *name* and insert *doc* as the only one."""
        self.db[name].delete_many({})
        return self.db[name].insert_one(dict(doc)).inserted_id

    def delete_singleton(self, name: str) -> int:
        return self.db[name].delete_one({}).deleted_count
