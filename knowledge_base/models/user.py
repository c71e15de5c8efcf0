#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
User model
==========
Users live in the ``users`` collection of the record store.  The permission
engine only ever looks at ``id`` and ``role``.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from .topic import new_id


# -----------------------------------------------------------------------------

class Role(str, Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


# -----------------------------------------------------------------------------

class User(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    email: str
    role: str = Role.VIEWER.value   # unknown roles load, and are denied later
    password_hash: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<User {self.email!r} role={self.role}>"


# -----------------------------------------------------------------------------
