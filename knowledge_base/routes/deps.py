#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Shared FastAPI dependencies: services wired to their record stores, and the
authenticated user.  Tests swap these out through ``app.dependency_overrides``.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from fastapi import Depends

from knowledge_base.core.security import credentials_error, get_current_user_id
from knowledge_base.models import Topic, TopicVersion, User
from knowledge_base.services.permissions import PermissionService
from knowledge_base.services.topics import TopicService
from knowledge_base.services.users import UserService
from knowledge_base.store import TOPIC_VERSIONS, TOPICS, USERS, get_store


# -----------------------------------------------------------------------------

def get_user_service() -> UserService:
    return UserService(get_store(User, USERS))


# -----------------------------------------------------------------------------

def get_topic_service() -> TopicService:
    return TopicService(get_store(Topic, TOPICS), get_store(TopicVersion, TOPIC_VERSIONS))


# -----------------------------------------------------------------------------

def get_permission_service(users: UserService = Depends(get_user_service)) -> PermissionService:
    return PermissionService(users)


# -----------------------------------------------------------------------------

async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> User:
    """Resolve the bearer token to a stored user, or raise 401."""
    user = await users.get_user_by_id(user_id)
    if user is None:
        raise credentials_error("Invalid token")
    return user


# -----------------------------------------------------------------------------
