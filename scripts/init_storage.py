#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Initialise the record store and optionally seed users.

    python scripts/init_storage.py
    python scripts/init_storage.py --users scripts/users.example.json

The seed file is a JSON array of objects with ``name``, ``email``, ``role``,
``password`` and an optional fixed ``id``.  Users whose e-mail already exists
are skipped.  The backend and location come from the usual settings
(STORAGE_BACKEND, STORAGE_PATH, DATABASE_URL).
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from knowledge_base.core.config import get_settings
from knowledge_base.core.log_config import configure_logging
from knowledge_base.models import Topic, TopicVersion, User
from knowledge_base.services.users import UserEmailConflict, UserService
from knowledge_base.store import TOPIC_VERSIONS, TOPICS, USERS, get_store

logger = logging.getLogger("init_storage")


# -----------------------------------------------------------------------------

async def init_storage(users_file: Path | None) -> int:
    settings = get_settings()
    use_sql = settings.storage_backend == "sql"
    if use_sql:
        from knowledge_base.core.database import dispose_engine, init_db
        await init_db()

    try:
        created = await _populate(users_file)
    finally:
        if use_sql:
            await dispose_engine()

    logger.info("Storage initialisation complete (%s backend, %d user(s) created)",
                settings.storage_backend, created)
    return created


# -----------------------------------------------------------------------------

async def _populate(users_file: Path | None) -> int:
    # Touching each store creates its collection file (json backend)
    get_store(Topic, TOPICS)
    get_store(TopicVersion, TOPIC_VERSIONS)
    users = UserService(get_store(User, USERS))

    created = 0
    if users_file is None:
        return created
    for entry in json.loads(users_file.read_text(encoding="utf-8")):
        try:
            await users.create_user(
                name=entry["name"],
                email=entry["email"],
                role=entry.get("role", "viewer"),
                password=entry.get("password"),
                user_id=entry.get("id"),
            )
            created += 1
        except UserEmailConflict as e:
            logger.info("Skipping: %s", e)
    return created


# -----------------------------------------------------------------------------

def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument("--users", type=Path, default=None, help="JSON file of users to seed")
    args = parser.parse_args()

    configure_logging(get_settings().log_level)
    asyncio.run(init_storage(args.users))


if __name__ == "__main__":
    main()


# -----------------------------------------------------------------------------
