#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Topic / TopicVersion / Resource models
======================================
Topic         : the versioned, hierarchical knowledge unit (aggregate root)
TopicVersion  : append-only snapshot of a topic at one version number
Resource      : at most one external link attached to a topic
TopicNode     : derived parent/children tree, rebuilt on every request

These are plain pydantic values; persistence goes through the record store,
which hands back a freshly parsed copy on every call.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# -----------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# -----------------------------------------------------------------------------

def _require_text(value: str, field: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{field} must not be empty")
    return value


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Resource
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ResourceType(str, Enum):
    VIDEO = "video"
    ARTICLE = "article"
    PODCAST = "podcast"
    AUDIO = "audio"
    IMAGE = "image"
    PDF = "pdf"


class Resource(BaseModel):
    id: str = Field(default_factory=new_id)
    topic_id: str = ""
    url: str
    description: str
    type: ResourceType


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Topic
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Topic(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    content: str
    parent_topic_id: Optional[str] = None
    version: int = Field(default=1, ge=1)
    owner_id: str
    resource: Optional[Resource] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    model_config = {"validate_assignment": True}

    @field_validator("name", "content", "owner_id")
    @classmethod
    def _not_blank(cls, v: str, info) -> str:
        return _require_text(v, info.field_name)

    # ── Versioning ──────────────────────────────────────────────────────────

    def create_new_version(self) -> "Topic":
        """Return a copy one version ahead; the receiver is left untouched."""
        return self.model_copy(
            update={"version": self.version + 1, "updated_at": _now()},
            deep=True,
        )

    # ── Resource ────────────────────────────────────────────────────────────

    def set_resource(self, resource: Resource) -> None:
        self.resource = resource
        self.updated_at = _now()

    def remove_resource(self) -> None:
        self.resource = None
        self.updated_at = _now()

    def __repr__(self) -> str:
        return f"<Topic {self.name!r} v{self.version}>"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TopicVersion
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TopicVersion(BaseModel):
    id: str = Field(default_factory=new_id)
    topic_id: str
    name: str
    content: str
    parent_topic_id: Optional[str] = None
    version: int = Field(ge=1)
    owner_id: str
    resource: Optional[Resource] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"frozen": True}

    @classmethod
    def from_topic(cls, topic: Topic) -> "TopicVersion":
        """Snapshot *topic* as it stands right now."""
        return cls(
            topic_id=topic.id,
            name=topic.name,
            content=topic.content,
            parent_topic_id=topic.parent_topic_id,
            version=topic.version,
            owner_id=topic.owner_id,
            resource=topic.resource.model_copy() if topic.resource else None,
            created_at=topic.created_at,
            updated_at=topic.updated_at,
        )

    def __repr__(self) -> str:
        return f"<TopicVersion topic={self.topic_id} v={self.version}>"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Hierarchy
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TopicNode(BaseModel):
    topic: Topic
    children: list["TopicNode"] = Field(default_factory=list)

    def find(self, topic_id: str) -> Optional["TopicNode"]:
        """Depth-first lookup of a node within this subtree."""
        if self.topic.id == topic_id:
            return self
        for child in self.children:
            hit = child.find(topic_id)
            if hit is not None:
                return hit
        return None

    def size(self) -> int:
        return 1 + sum(child.size() for child in self.children)


TopicNode.model_rebuild()


# -----------------------------------------------------------------------------
