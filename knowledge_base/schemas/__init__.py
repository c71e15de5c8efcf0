#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------

"""
Pydantic v2 schemas for request/response validation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from knowledge_base.models.topic import ResourceType


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Auth
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: str

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Resource
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ResourceIn(BaseModel):
    url: str = Field(min_length=1, max_length=2048)
    description: str = Field(min_length=1, max_length=1024)
    type: ResourceType


class ResourceOut(BaseModel):
    id: str
    topic_id: str
    url: str
    description: str
    type: ResourceType

    model_config = {"from_attributes": True}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Topic
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TopicCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    parent_topic_id: Optional[str] = None
    resource: Optional[ResourceIn] = None


class TopicUpdate(BaseModel):
    """Payload for saving a new version of an existing topic."""
    name: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    resource: Optional[ResourceIn] = None   # if None, resource is unchanged


class TopicMove(BaseModel):
    parent_topic_id: Optional[str] = None   # None makes the topic a root


class TopicOut(BaseModel):
    id: str
    name: str
    content: str
    parent_topic_id: Optional[str]
    version: int
    owner_id: str
    resource: Optional[ResourceOut] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Topic Version / History
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TopicVersionOut(BaseModel):
    id: str
    topic_id: str
    name: str
    content: str
    parent_topic_id: Optional[str]
    version: int
    owner_id: str
    resource: Optional[ResourceOut] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Hierarchy & graph queries
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TopicNodeOut(BaseModel):
    topic: TopicOut
    children: list["TopicNodeOut"] = []

    model_config = {"from_attributes": True}


class PathOut(BaseModel):
    path: list[TopicOut]
    distance: int

    model_config = {"from_attributes": True}


class AncestorOut(BaseModel):
    ancestor: TopicOut


TopicNodeOut.model_rebuild()
