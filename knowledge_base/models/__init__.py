#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------

"""Domain models package."""

from .permission import Action, ResourceKind, ROLE_STRATEGIES
from .topic import Resource, ResourceType, Topic, TopicNode, TopicVersion
from .user import Role, User

__all__ = [
    "Action", "ResourceKind", "ROLE_STRATEGIES",
    "Resource", "ResourceType", "Topic", "TopicNode", "TopicVersion",
    "Role", "User",
]
