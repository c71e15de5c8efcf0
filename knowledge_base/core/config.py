#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Application configuration.

Every setting can be overridden by an environment variable of the same name
(case-insensitive) or by a ``.env`` file in the working directory, e.g.

    STORAGE_BACKEND=sql
    DATABASE_URL=postgresql+asyncpg://kb:kb@localhost:5432/kb
    SECRET_KEY=...
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# -----------------------------------------------------------------------------

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Service ────────────────────────────────────────────────────────────

    app_name: str = "KnowledgeBase"
    app_version: str = "1.0.0"
    environment: Literal["development", "testing", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ── Storage ────────────────────────────────────────────────────────────

    storage_backend: Literal["json", "sql"] = "json"
    # json backend: one <collection>.json file per collection in this directory
    storage_path: Path = Path("./storage")
    # sql backend
    database_url: str = "sqlite+aiosqlite:///./storage/knowledge_base.db"
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_echo: bool = False

    # ── Bearer tokens ──────────────────────────────────────────────────────

    secret_key: str = "CHANGE-ME-IN-PRODUCTION-use-a-random-64-char-hex-string"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 8   # 8 hours

    # ── HTTP ───────────────────────────────────────────────────────────────

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level

    @property
    def storage_path_resolved(self) -> Path:
        """``storage_path``, created on first use."""
        self.storage_path.mkdir(parents=True, exist_ok=True)
        return self.storage_path


# -----------------------------------------------------------------------------

@lru_cache
def get_settings() -> Settings:
    return Settings()


# -----------------------------------------------------------------------------
