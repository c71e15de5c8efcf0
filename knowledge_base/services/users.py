#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
User service: look up users and their roles.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Optional

from knowledge_base.core.security import hash_password, verify_password
from knowledge_base.models import Role, User
from knowledge_base.store import RecordStore

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

class UserEmailConflict(Exception):
    pass


# -----------------------------------------------------------------------------

class UserService:

    def __init__(self, users: RecordStore[User]) -> None:
        self.users = users

    # ---------------------------------------------------------------- lookups

    async def get_all_users(self) -> list[User]:
        return await self.users.find_all()

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        return await self.users.find_by_id(user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        return await self.users.find_by(lambda u: u.email.lower() == email)

    # ------------------------------------------------------------------ roles

    async def is_admin(self, user_id: str) -> bool:
        user = await self.get_user_by_id(user_id)
        return user is not None and user.role == Role.ADMIN.value

    async def is_editor(self, user_id: str) -> bool:
        user = await self.get_user_by_id(user_id)
        return user is not None and user.role == Role.EDITOR.value

    async def can_modify_content(self, user_id: str) -> bool:
        user = await self.get_user_by_id(user_id)
        return user is not None and user.role in (Role.ADMIN.value, Role.EDITOR.value)

    # ------------------------------------------------------------------- auth

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when *password* matches, else None."""
        user = await self.get_user_by_email(email)
        if user is None or not user.password_hash:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    # -------------------------------------------------------------- mutations

    async def create_user(
        self,
        name: str,
        email: str,
        role: Role | str = Role.VIEWER,
        password: str | None = None,
        user_id: str | None = None,
    ) -> User:
        if await self.get_user_by_email(email):
            raise UserEmailConflict(f"User with e-mail '{email}' already exists")

        fields: dict = {
            "name": name,
            "email": email.strip().lower(),
            "role": Role(role).value,
            "password_hash": hash_password(password) if password else "",
        }
        if user_id:
            fields["id"] = user_id
        user = User(**fields)
        await self.users.create(user)
        logger.info("Created user %s (%s, role=%s)", user.id, user.email, user.role)
        return user


# -----------------------------------------------------------------------------
