#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Test fixtures
=============
Stores live under pytest's ``tmp_path``: JSON files for the default backend,
a SQLite file for the SQL backend.  Service-level fixtures are parametrised
over both backends so every engine test exercises the same store contract
twice.  The HTTP client runs the real app with its service dependencies
pointed at the test stores.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ── Env vars must be set before importing app modules ────────────────────────
os.environ.setdefault("SECRET_KEY",      "test-secret-key-not-for-production")
os.environ.setdefault("ENVIRONMENT",     "testing")
os.environ.setdefault("STORAGE_BACKEND", "json")
os.environ.setdefault("STORAGE_PATH",    tempfile.mkdtemp())
os.environ.setdefault("LOG_LEVEL",       "WARNING")

from knowledge_base.core.database import build_engine, build_session_factory, drop_db, init_db
from knowledge_base.core.security import create_access_token
from knowledge_base.main import create_app
from knowledge_base.models import Role, Topic, TopicVersion, User
from knowledge_base.routes.deps import get_topic_service, get_user_service
from knowledge_base.services.permissions import PermissionService
from knowledge_base.services.topics import TopicService
from knowledge_base.services.users import UserService
from knowledge_base.store import (
    TOPIC_VERSIONS, TOPICS, USERS, JsonFileStore, RecordStore, SqlRecordStore,
)


# ── Store factories ──────────────────────────────────────────────────────────

class StoreFactory:
    """Builds stores for one backend, all sharing one location."""

    def __init__(self, backend: str, root, session_factory=None):
        self.backend = backend
        self.root = root
        self.session_factory = session_factory

    def __call__(self, model, collection: str) -> RecordStore:
        if self.backend == "sql":
            return SqlRecordStore(model, collection, self.session_factory)
        return JsonFileStore(model, self.root / f"{collection}.json", collection)


@pytest_asyncio.fixture(params=["json", "sql"])
async def make_store(request, tmp_path) -> AsyncGenerator[StoreFactory, None]:
    if request.param == "json":
        yield StoreFactory("json", tmp_path)
        return

    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'kb.db'}")
    await init_db(engine)
    yield StoreFactory("sql", tmp_path, build_session_factory(engine))
    await drop_db(engine)
    await engine.dispose()


# ── Services ─────────────────────────────────────────────────────────────────

@pytest.fixture
def topic_service(make_store) -> TopicService:
    return TopicService(make_store(Topic, TOPICS), make_store(TopicVersion, TOPIC_VERSIONS))


@pytest.fixture
def user_service(make_store) -> UserService:
    return UserService(make_store(User, USERS))


@pytest.fixture
def permission_service(user_service) -> PermissionService:
    return PermissionService(user_service)


SEED_USERS = [
    ("admin1",  "Admin",   "admin@example.com",   Role.ADMIN),
    ("editor1", "Editor",  "editor@example.com",  Role.EDITOR),
    ("viewer1", "Viewer",  "viewer@example.com",  Role.VIEWER),
    ("viewer2", "Viewer2", "viewer2@example.com", Role.VIEWER),
]


@pytest_asyncio.fixture
async def seeded_users(user_service) -> dict[str, User]:
    """The four standard users, keyed by id (no passwords; tokens are minted directly)."""
    out = {}
    for user_id, name, email, role in SEED_USERS:
        out[user_id] = await user_service.create_user(name, email, role, user_id=user_id)
    return out


# ── HTTP client ──────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient over the app, JSON stores in tmp_path, standard users seeded."""
    stores = StoreFactory("json", tmp_path / "api")
    topics = TopicService(stores(Topic, TOPICS), stores(TopicVersion, TOPIC_VERSIONS))
    users = UserService(stores(User, USERS))
    for user_id, name, email, role in SEED_USERS:
        await users.create_user(name, email, role, user_id=user_id)

    app = create_app()
    app.dependency_overrides[get_topic_service] = lambda: topics
    app.dependency_overrides[get_user_service] = lambda: users

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        c.users = users     # type: ignore[attr-defined]
        c.topics = topics   # type: ignore[attr-defined]
        yield c


# ── Helpers ──────────────────────────────────────────────────────────────────

def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


# -----------------------------------------------------------------------------
