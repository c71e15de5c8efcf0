#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Record store package
====================
``get_store(model, collection)`` returns the process-wide store for a
collection, using the backend selected by ``Settings.storage_backend``:

    json  → storage_path/<collection>.json   (aiofiles)
    sql   → rows in the ``records`` table    (SQLAlchemy async)
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel

from knowledge_base.core.config import get_settings
from .base import Predicate, RecordStore, StoreError
from .json_file import JsonFileStore
from .sql import SqlRecordStore

__all__ = [
    "Predicate", "RecordStore", "StoreError",
    "JsonFileStore", "SqlRecordStore",
    "TOPICS", "TOPIC_VERSIONS", "USERS",
    "get_store", "reset_stores",
]

# Collection names (also the JSON file stems)
TOPICS = "topics"
TOPIC_VERSIONS = "topic-versions"
USERS = "users"


# -----------------------------------------------------------------------------

@lru_cache
def get_store(model: type[BaseModel], collection: str) -> RecordStore:
    settings = get_settings()
    if settings.storage_backend == "sql":
        from knowledge_base.core.database import get_session_factory
        return SqlRecordStore(model, collection, get_session_factory())
    path = settings.storage_path_resolved / f"{collection}.json"
    return JsonFileStore(model, path, collection)


# -----------------------------------------------------------------------------

def reset_stores() -> None:
    """Forget cached stores (after settings change, in tests)."""
    get_store.cache_clear()


# -----------------------------------------------------------------------------
