#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Database engine and session factory for the SQL record-store backend.
Uses SQLAlchemy 2.x async API with aiosqlite (default) or asyncpg.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from .config import get_settings


# -----------------------------------------------------------------------------

class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""
    pass


# -----------------------------------------------------------------------------

def build_engine(url: str | None = None) -> AsyncEngine:
    settings = get_settings()
    db_url = url or settings.database_url
    kwargs: dict = {"echo": settings.db_echo, "pool_pre_ping": True}
    # SQLite pools don't take sizing arguments
    if not db_url.startswith("sqlite"):
        kwargs.update(pool_size=settings.db_pool_size, max_overflow=settings.db_max_overflow)
    return create_async_engine(db_url, **kwargs)


# -----------------------------------------------------------------------------

def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


_engine: AsyncEngine | None = None
_SessionLocal: async_sessionmaker[AsyncSession] | None = None


# -----------------------------------------------------------------------------

def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


# -----------------------------------------------------------------------------

def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = build_session_factory(get_engine())
    return _SessionLocal


# -----------------------------------------------------------------------------

async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create the records table if it does not exist."""
    from knowledge_base.models import record  # noqa: F401  (registers the table)
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# -----------------------------------------------------------------------------

async def drop_db(engine: AsyncEngine | None = None) -> None:
    """Drop all tables (tests only)."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# -----------------------------------------------------------------------------

async def dispose_engine() -> None:
    global _engine, _SessionLocal
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _SessionLocal = None


# -----------------------------------------------------------------------------
