"""
db/mongo.py — MongoDB connection and document helpers
======================================================
Thin wrapper around pymongo: builds the client from config, parses route ids
into ObjectIds and converts stored documents into JSON-safe dicts.
"""

import logging
import re
import struct
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pymongo import MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"^\d+$")


class InvalidObjectId(ValueError):
    """Raised when a route id is neither a timestamp nor a 24-hex ObjectId."""


def get_client(config: dict) -> MongoClient:
    mongo_cfg = config.get("mongo", {})
    uri = mongo_cfg.get("uri", "mongodb://localhost:27017")
    timeout = mongo_cfg.get("timeout_ms", 5000)
    logger.info(f"Connecting to MongoDB (timeout={timeout}ms)")
    return MongoClient(uri, serverSelectionTimeoutMS=timeout, tz_aware=True)


def get_db(config: dict, client: MongoClient | None = None) -> Database:
    """Return the configured database, creating a client if none is given."""
    client = client or get_client(config)
    db_name = config.get("mongo", {}).get("db_name", "KalePortfolioDB")
    return client[db_name]


def parse_object_id(value: Any) -> ObjectId:
    """
    Convert a route parameter into an ObjectId.

    A 24-hex string is parsed directly; any other string of digits is a Unix
    timestamp in seconds and yields an ObjectId generated for that time.
    """
    if isinstance(value, ObjectId):
        return value
    text = str(value)
    if ObjectId.is_valid(text):
        return ObjectId(text)
    if _DIGITS.match(text):
        try:
            return ObjectId.from_datetime(datetime.fromtimestamp(int(text), tz=timezone.utc))
        except (OverflowError, OSError, ValueError, struct.error):
            raise InvalidObjectId(f"Timestamp id out of range: {text!r}")
    raise InvalidObjectId(f"Invalid id format: {text!r}")


def to_jsonable(value: Any) -> Any:
    """Recursively turn ObjectIds and datetimes into strings."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
