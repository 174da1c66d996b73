"""MongoDB adapter for meal plan and recipe storage.
"""

from typing import Optional
import logging

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from app.config import settings

logger = logging.getLogger("smartplates.mongo")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


# ------------------ Connection ------------------
def _get_db() -> Database:
    """Lazy init DB connection."""
    global _client, _db
    if _db is not None:
        return _db
    _client = MongoClient(settings.mongo_uri)
    _db = _client[settings.mongo_db_name]
    return _db


def connect(uri: str, db_name: str = "smartplates") -> bool:
    """Open the client and ping the server. Returns False when it is unreachable."""
    global _client, _db
    try:
        _client = MongoClient(uri, serverSelectionTimeoutMS=2000)
        _db = _client[db_name]
        _client.admin.command("ping")
        logger.info("Connected to MongoDB %s (database: %s)", uri, db_name)
        return True
    except Exception as exc:
        _client = None
        _db = None
        logger.warning("Could not initialize MongoDB client: %s", exc)
        return False


def close():
    """Close MongoDB connection."""
    global _client, _db
    try:
        if _client is not None:
            _client.close()
            logger.info("MongoDB client closed")
    except Exception:
        logger.exception("Error closing MongoDB client")
    finally:
        _client = None
        _db = None


def is_connected() -> bool:
    return _db is not None


# ------------------ Collections ------------------
def meal_plans() -> Collection:
    return _get_db()[settings.meal_plans_collection]


def recipes() -> Collection:
    return _get_db()[settings.recipes_collection]


def ensure_indexes() -> None:
    """One plan per user and week; range queries by user and week start."""
    col = meal_plans()
    col.create_index(
        [("userId", ASCENDING), ("weekStartDate", ASCENDING)],
        unique=True,
        name="user_week_unique",
    )
    col.create_index([("userId", ASCENDING), ("isTemplate", ASCENDING)], name="user_templates")
    logger.info("MongoDB indexes ensured on %s", settings.meal_plans_collection)
