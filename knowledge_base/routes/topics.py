#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Topics router
=============
GET    /api/v1/topics                              — list topics
POST   /api/v1/topics                              — create topic
GET    /api/v1/topics/path/{from_id}/{to_id}       — shortest path
GET    /api/v1/topics/ancestor/{id1}/{id2}         — lowest common ancestor
GET    /api/v1/topics/{id}                         — current topic
PUT    /api/v1/topics/{id}                         — save new version
DELETE /api/v1/topics/{id}?cascade=true|false      — delete topic
GET    /api/v1/topics/{id}/versions                — version list
GET    /api/v1/topics/{id}/versions/{ver}          — specific version
GET    /api/v1/topics/{id}/hierarchy               — subtree
PUT    /api/v1/topics/{id}/parent                  — move under another topic
PUT    /api/v1/topics/{id}/resource                — attach / replace resource
DELETE /api/v1/topics/{id}/resource                — detach resource

Every route requires a bearer token.  Mutations of an existing topic pass its
owner to the permission check, so owners may edit their own topics whatever
their role.

``cascade`` is parsed as a FastAPI bool, so ``1``, ``yes`` and ``on`` also
mean true; any value outside the bool spellings is rejected with 422.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from knowledge_base.models import Action, ResourceKind, Topic, User
from knowledge_base.schemas import (
    AncestorOut, PathOut, ResourceIn, TopicCreate, TopicMove,
    TopicNodeOut, TopicOut, TopicUpdate, TopicVersionOut,
)
from knowledge_base.services.permissions import PermissionService
from knowledge_base.services.topics import (
    DELETE_NOT_FOUND,
    InvalidTopicData,
    TopicService,
)
from .deps import get_current_user, get_permission_service, get_topic_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/topics", tags=["Topics"])


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _not_found(message: str = "Topic not found"):
    raise HTTPException(status_code=404, detail=message)


def _bad_request(e: Exception):
    raise HTTPException(status_code=400, detail=str(e))


# -----------------------------------------------------------------------------

async def _authorize(
    perms: PermissionService,
    user: User,
    action: Action,
    owner_id: Optional[str] = None,
) -> None:
    if await perms.has_permission(user.id, ResourceKind.TOPIC, action, owner_id):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "message": f"You do not have permission to {action.value} this topic",
            "details": {
                "role": user.role,
                "action": action.value,
                "is_owner": owner_id is not None and owner_id == user.id,
            },
        },
    )


# -----------------------------------------------------------------------------

async def _load_for_change(
    topic_id: str,
    action: Action,
    user: User,
    topics: TopicService,
    perms: PermissionService,
) -> Topic:
    topic = await topics.get_topic_by_id(topic_id)
    if topic is None:
        _not_found()
    await _authorize(perms, user, action, topic.owner_id)
    return topic


# ── List / Create ─────────────────────────────────────────────────────────

@router.get("", response_model=list[TopicOut])
async def list_topics_endpoint(
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _authorize(perms, current_user, Action.READ)
    return await topics.get_all_topics()


@router.post("", response_model=TopicOut, status_code=status.HTTP_201_CREATED)
async def create_topic_endpoint(
    data: TopicCreate,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _authorize(perms, current_user, Action.CREATE)
    try:
        return await topics.create_topic(
            data.name, data.content, data.parent_topic_id, current_user.id, data.resource,
        )
    except InvalidTopicData as e:
        _bad_request(e)


# ── Graph queries (registered before /{topic_id} routes) ───────────────────

@router.get("/path/{from_id}/{to_id}", response_model=PathOut)
async def shortest_path_endpoint(
    from_id: str,
    to_id: str,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _authorize(perms, current_user, Action.READ)
    result = await topics.find_shortest_path(from_id, to_id)
    if result is None:
        _not_found("No path found between topics")
    return {"path": result.path, "distance": result.distance}


@router.get("/ancestor/{id1}/{id2}", response_model=AncestorOut)
async def common_ancestor_endpoint(
    id1: str,
    id2: str,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _authorize(perms, current_user, Action.READ)
    ancestor = await topics.find_lowest_common_ancestor(id1, id2)
    if ancestor is None:
        _not_found("No common ancestor found")
    return {"ancestor": ancestor}


# ── Read ──────────────────────────────────────────────────────────────────

@router.get("/{topic_id}", response_model=TopicOut)
async def get_topic_endpoint(
    topic_id: str,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _authorize(perms, current_user, Action.READ)
    topic = await topics.get_topic_by_id(topic_id)
    if topic is None:
        _not_found()
    return topic


@router.get("/{topic_id}/versions", response_model=list[TopicVersionOut])
async def list_versions_endpoint(
    topic_id: str,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _authorize(perms, current_user, Action.READ)
    return await topics.get_all_topic_versions(topic_id)


@router.get("/{topic_id}/versions/{version}", response_model=TopicVersionOut)
async def get_version_endpoint(
    topic_id: str,
    version: int = Path(ge=1, description="Version number, starting at 1"),
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _authorize(perms, current_user, Action.READ)
    found = await topics.get_topic_version(topic_id, version)
    if found is None:
        _not_found("Topic version not found")
    return found


@router.get("/{topic_id}/hierarchy", response_model=TopicNodeOut)
async def hierarchy_endpoint(
    topic_id: str,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _authorize(perms, current_user, Action.READ)
    node = await topics.get_topic_hierarchy(topic_id)
    if node is None:
        _not_found()
    return node


# ── Update (new version) ──────────────────────────────────────────────────

@router.put("/{topic_id}", response_model=TopicOut)
async def update_topic_endpoint(
    topic_id: str,
    data: TopicUpdate,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _load_for_change(topic_id, Action.UPDATE, current_user, topics, perms)
    try:
        updated = await topics.update_topic(topic_id, data.name, data.content, data.resource)
    except InvalidTopicData as e:
        _bad_request(e)
    if updated is None:
        _not_found()
    logger.info("Topic %s updated by user %s (role=%s)", topic_id, current_user.id, current_user.role)
    return updated


@router.put("/{topic_id}/parent", response_model=TopicOut)
async def move_topic_endpoint(
    topic_id: str,
    data: TopicMove,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _load_for_change(topic_id, Action.UPDATE, current_user, topics, perms)
    try:
        moved = await topics.move_topic(topic_id, data.parent_topic_id)
    except InvalidTopicData as e:
        _bad_request(e)
    if moved is None:
        _not_found()
    return moved


# ── Resource ──────────────────────────────────────────────────────────────

@router.put("/{topic_id}/resource", response_model=TopicOut)
async def set_resource_endpoint(
    topic_id: str,
    data: ResourceIn,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _load_for_change(topic_id, Action.UPDATE, current_user, topics, perms)
    try:
        updated = await topics.set_topic_resource(topic_id, data.url, data.description, data.type)
    except InvalidTopicData as e:
        _bad_request(e)
    if updated is None:
        _not_found()
    logger.info("Resource (%s) set on topic %s by user %s", data.type.value, topic_id, current_user.id)
    return updated


@router.delete("/{topic_id}/resource", response_model=TopicOut)
async def remove_resource_endpoint(
    topic_id: str,
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _load_for_change(topic_id, Action.UPDATE, current_user, topics, perms)
    updated = await topics.remove_topic_resource(topic_id)
    if updated is None:
        _not_found("Topic does not have a resource")
    logger.info("Resource removed from topic %s by user %s", topic_id, current_user.id)
    return updated


# ── Delete ────────────────────────────────────────────────────────────────

@router.delete("/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_topic_endpoint(
    topic_id: str,
    cascade: bool = Query(default=False, description="Also delete every descendant (true/1/yes/on; false/0/no/off)"),
    current_user: User = Depends(get_current_user),
    topics: TopicService = Depends(get_topic_service),
    perms: PermissionService = Depends(get_permission_service),
):
    await _load_for_change(topic_id, Action.DELETE, current_user, topics, perms)
    result = await topics.delete_topic(topic_id, cascade=cascade)
    if not result.success:
        code = 404 if result.code == DELETE_NOT_FOUND else 409
        raise HTTPException(status_code=code, detail=result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -----------------------------------------------------------------------------
