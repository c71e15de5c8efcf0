#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Permission service
==================
Decides whether a user may perform an action on a kind of resource.

Resolution order:
  1. the user owns the resource           → allowed, whatever the role
  2. unknown user                         → denied
  3. the role's strategy decides          (unrecognised role → denied)

Ownership is a per-resource override on top of the role-wide ceiling, so a
viewer can edit the topics they created and nothing else.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Optional

from knowledge_base.models.permission import Action, ResourceKind, strategy_for
from .users import UserService

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

class PermissionService:

    def __init__(self, users: UserService) -> None:
        self.users = users

    async def has_permission(
        self,
        user_id: str,
        kind: ResourceKind,
        action: Action,
        resource_owner_id: Optional[str] = None,
    ) -> bool:
        if resource_owner_id and resource_owner_id == user_id:
            return True

        user = await self.users.get_user_by_id(user_id)
        if user is None:
            logger.debug("Permission denied: unknown user %s", user_id)
            return False

        strategy = strategy_for(user.role)
        if strategy is None:
            logger.warning("Permission denied: user %s has unrecognised role %r", user_id, user.role)
            return False

        allowed = strategy(ResourceKind(kind), Action(action))
        logger.debug(
            "Permission %s: user=%s role=%s %s:%s",
            "granted" if allowed else "denied", user_id, user.role,
            ResourceKind(kind).value, Action(action).value,
        )
        return allowed

    # -------------------------------------------------------------- shortcuts

    async def can_create(self, user_id: str, kind: ResourceKind) -> bool:
        return await self.has_permission(user_id, kind, Action.CREATE)

    async def can_read(self, user_id: str, kind: ResourceKind, owner_id: Optional[str] = None) -> bool:
        return await self.has_permission(user_id, kind, Action.READ, owner_id)

    async def can_update(self, user_id: str, kind: ResourceKind, owner_id: Optional[str] = None) -> bool:
        return await self.has_permission(user_id, kind, Action.UPDATE, owner_id)

    async def can_delete(self, user_id: str, kind: ResourceKind, owner_id: Optional[str] = None) -> bool:
        return await self.has_permission(user_id, kind, Action.DELETE, owner_id)


# -----------------------------------------------------------------------------
