#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Permission primitives
=====================
Resource kinds, actions, and the per-role strategies.

A strategy is a pure function ``(kind, action) -> bool``.  The set of roles is
closed, so the strategies live in a plain mapping rather than a registry.
Ownership is not handled here; see ``services.permissions``.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from enum import Enum
from typing import Callable

from .user import Role


# -----------------------------------------------------------------------------

class ResourceKind(str, Enum):
    TOPIC = "topic"
    USER = "user"
    SYSTEM = "system"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


PermissionStrategy = Callable[[ResourceKind, Action], bool]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Strategies
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def admin_strategy(kind: ResourceKind, action: Action) -> bool:
    return True


# -----------------------------------------------------------------------------

def editor_strategy(kind: ResourceKind, action: Action) -> bool:
    """Editors manage topic content but cannot delete topics."""
    if kind == ResourceKind.TOPIC:
        return action != Action.DELETE
    if kind == ResourceKind.USER:
        return action == Action.READ
    return False


# -----------------------------------------------------------------------------

def viewer_strategy(kind: ResourceKind, action: Action) -> bool:
    return kind == ResourceKind.TOPIC and action == Action.READ


# -----------------------------------------------------------------------------

ROLE_STRATEGIES: dict[str, PermissionStrategy] = {
    Role.ADMIN.value: admin_strategy,
    Role.EDITOR.value: editor_strategy,
    Role.VIEWER.value: viewer_strategy,
}


def strategy_for(role: str) -> PermissionStrategy | None:
    return ROLE_STRATEGIES.get(role)


# -----------------------------------------------------------------------------
