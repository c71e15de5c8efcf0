#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Topic service
=============
All topic operations: create, read (current + specific version), update,
resource attach/detach, move, delete (optionally cascading), the derived
hierarchy, and the two graph queries over it (shortest path, lowest common
ancestor).

Every accepted mutation bumps ``version`` by exactly one and appends a
TopicVersion snapshot, whatever the number of fields it touched.

Outcomes:
  - bad input           → InvalidTopicData (raised before any write)
  - missing topic etc.  → None
  - delete refused      → DeleteResult(success=False, error=...)
  - storage failure     → StoreError propagates (logged here and in the store)
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from knowledge_base.models import Resource, ResourceType, Topic, TopicNode, TopicVersion
from knowledge_base.schemas import ResourceIn
from knowledge_base.store import RecordStore, StoreError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

class InvalidTopicData(ValueError):
    pass


class TopicCycleError(InvalidTopicData):
    pass


# -----------------------------------------------------------------------------

DELETE_NOT_FOUND = "not_found"
DELETE_HAS_CHILDREN = "has_children"


@dataclass
class DeleteResult:
    success: bool
    error: Optional[str] = None
    code: Optional[str] = None
    deleted: int = 0


@dataclass
class ShortestPath:
    path: list[Topic] = field(default_factory=list)
    distance: int = 0


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Validation helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _require(**fields: Optional[str]) -> None:
    missing = [k for k, v in fields.items() if not v or not str(v).strip()]
    if missing:
        raise InvalidTopicData(f"Required field(s) missing: {', '.join(missing)}")


# -----------------------------------------------------------------------------

def _resource_type(url: str, description: str, type: str | ResourceType) -> ResourceType:
    if not url or not description or not type:
        raise InvalidTopicData("Resource must include url, description, and type")
    try:
        return ResourceType(type)
    except ValueError:
        allowed = ", ".join(t.value for t in ResourceType)
        raise InvalidTopicData(f"Resource type must be one of: {allowed}") from None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Service
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TopicService:

    def __init__(self, topics: RecordStore[Topic], versions: RecordStore[TopicVersion]) -> None:
        self.topics = topics
        self.versions = versions

    # ── Internal helpers ───────────────────────────────────────────────────

    async def _children(self, parent_id: str) -> list[Topic]:
        return await self.topics.find_many_by(lambda t: t.parent_topic_id == parent_id)

    async def _append_version(self, topic: Topic, operation: str) -> None:
        try:
            await self.versions.create(TopicVersion.from_topic(topic))
        except StoreError:
            logger.error(
                "%s: topic %s stored at v%d but its version snapshot was not written",
                operation, topic.id, topic.version,
            )
            raise

    async def _save(self, topic: Topic, operation: str) -> Topic:
        """Persist an already-bumped topic, then append its snapshot."""
        await self.topics.update(lambda t: t.id == topic.id, topic)
        await self._append_version(topic, operation)
        logger.info("%s: topic %s now at v%d", operation, topic.id, topic.version)
        return topic

    async def _walk_up(self, topic: Topic) -> AsyncIterator[Topic]:
        """Yield *topic* and then each ancestor up to its root."""
        seen: set[str] = set()
        current: Optional[Topic] = topic
        while current is not None and current.id not in seen:
            seen.add(current.id)
            yield current
            if current.parent_topic_id is None:
                return
            current = await self.topics.find_by_id(current.parent_topic_id)
        if current is not None:
            logger.warning("Cycle in parent links detected at topic %s", current.id)

    # ── Reads ──────────────────────────────────────────────────────────────

    async def get_all_topics(self) -> list[Topic]:
        return await self.topics.find_all()

    async def get_topic_by_id(self, topic_id: str) -> Optional[Topic]:
        if not topic_id:
            return None
        return await self.topics.find_by_id(topic_id)

    async def get_topic_version(self, topic_id: str, version: int) -> Optional[TopicVersion]:
        if not topic_id or version < 1:
            return None
        return await self.versions.find_by(
            lambda v: v.topic_id == topic_id and v.version == version
        )

    async def get_all_topic_versions(self, topic_id: str) -> list[TopicVersion]:
        rows = await self.versions.find_many_by(lambda v: v.topic_id == topic_id)
        return sorted(rows, key=lambda v: v.version)

    # ── Create ─────────────────────────────────────────────────────────────

    async def create_topic(
        self,
        name: str,
        content: str,
        parent_topic_id: Optional[str],
        owner_id: str,
        resource: Optional[ResourceIn] = None,
    ) -> Topic:
        _require(name=name, content=content, owner_id=owner_id)
        rtype = None
        if resource is not None:
            rtype = _resource_type(resource.url, resource.description, resource.type)
        if parent_topic_id and await self.topics.find_by_id(parent_topic_id) is None:
            raise InvalidTopicData(f"Parent topic {parent_topic_id} not found")

        topic = Topic(
            name=name,
            content=content,
            parent_topic_id=parent_topic_id or None,
            owner_id=owner_id,
        )
        if resource is not None:
            topic.resource = Resource(
                topic_id=topic.id,
                url=resource.url,
                description=resource.description,
                type=rtype,
            )

        await self.topics.create(topic)
        await self._append_version(topic, "create_topic")
        logger.info("Created topic %s (%r) owner=%s parent=%s",
                    topic.id, topic.name, owner_id, topic.parent_topic_id)
        return topic

    # ── Update ─────────────────────────────────────────────────────────────

    async def update_topic(
        self,
        topic_id: str,
        name: str,
        content: str,
        resource: Optional[ResourceIn] = None,
    ) -> Optional[Topic]:
        _require(name=name, content=content)
        rtype = None
        if resource is not None:
            rtype = _resource_type(resource.url, resource.description, resource.type)

        existing = await self.get_topic_by_id(topic_id)
        if existing is None:
            return None

        topic = existing.create_new_version()
        topic.name = name
        topic.content = content
        if resource is not None:
            if topic.resource is not None:
                topic.resource.url = resource.url
                topic.resource.description = resource.description
                topic.resource.type = rtype
            else:
                topic.resource = Resource(
                    topic_id=topic.id,
                    url=resource.url,
                    description=resource.description,
                    type=rtype,
                )
        return await self._save(topic, "update_topic")

    # -----------------------------------------------------------------------------

    async def set_topic_resource(
        self,
        topic_id: str,
        url: str,
        description: str,
        type: str | ResourceType,
    ) -> Optional[Topic]:
        rtype = _resource_type(url, description, type)
        existing = await self.get_topic_by_id(topic_id)
        if existing is None:
            return None

        topic = existing.create_new_version()
        resource = topic.resource
        if resource is None:
            resource = Resource(topic_id=topic.id, url=url, description=description, type=rtype)
        else:
            # re-attach keeps the resource id
            resource.url = url
            resource.description = description
            resource.type = rtype
        topic.set_resource(resource)
        return await self._save(topic, "set_topic_resource")

    # -----------------------------------------------------------------------------

    async def remove_topic_resource(self, topic_id: str) -> Optional[Topic]:
        """Detach the resource; None when the topic or its resource is absent."""
        existing = await self.get_topic_by_id(topic_id)
        if existing is None or existing.resource is None:
            return None

        topic = existing.create_new_version()
        topic.remove_resource()
        return await self._save(topic, "remove_topic_resource")

    # -----------------------------------------------------------------------------

    async def move_topic(self, topic_id: str, new_parent_id: Optional[str]) -> Optional[Topic]:
        """Re-parent a topic (``None`` makes it a root).

        Refuses parents that do not exist and parents inside the topic's own
        subtree, which would close a cycle.
        """
        existing = await self.get_topic_by_id(topic_id)
        if existing is None:
            return None
        new_parent_id = new_parent_id or None
        if new_parent_id == existing.parent_topic_id:
            return existing

        if new_parent_id is not None:
            if new_parent_id == topic_id:
                raise TopicCycleError("A topic cannot be its own parent")
            parent = await self.get_topic_by_id(new_parent_id)
            if parent is None:
                raise InvalidTopicData(f"Parent topic {new_parent_id} not found")
            async for ancestor in self._walk_up(parent):
                if ancestor.id == topic_id:
                    raise TopicCycleError(
                        f"Topic {new_parent_id} is a descendant of {topic_id}; move would create a cycle"
                    )

        topic = existing.create_new_version()
        topic.parent_topic_id = new_parent_id
        return await self._save(topic, "move_topic")

    # ── Delete ─────────────────────────────────────────────────────────────

    async def delete_topic(self, topic_id: str, cascade: bool = False) -> DeleteResult:
        topic = await self.get_topic_by_id(topic_id)
        if topic is None:
            return DeleteResult(False, "Topic not found", DELETE_NOT_FOUND)

        children = await self._children(topic_id)
        if children and not cascade:
            return DeleteResult(
                False,
                f"Cannot delete topic with {len(children)} child topic(s). "
                "Use cascade=true to delete all descendants.",
                DELETE_HAS_CHILDREN,
            )

        deleted = await self._delete_subtree(topic, set())
        logger.info("Deleted topic %s (%d topic(s) removed, cascade=%s)", topic_id, deleted, cascade)
        return DeleteResult(True, deleted=deleted)

    async def _delete_subtree(self, topic: Topic, seen: set[str]) -> int:
        seen.add(topic.id)
        count = 0
        for child in await self._children(topic.id):
            if child.id not in seen:
                count += await self._delete_subtree(child, seen)
        await self.versions.delete(lambda v: v.topic_id == topic.id)
        await self.topics.delete(lambda t: t.id == topic.id)
        return count + 1

    # ── Hierarchy ──────────────────────────────────────────────────────────

    async def get_topic_hierarchy(self, root_id: str) -> Optional[TopicNode]:
        root = await self.get_topic_by_id(root_id)
        if root is None:
            return None
        return await self._build_node(root, {root.id})

    async def _build_node(self, topic: Topic, seen: set[str]) -> TopicNode:
        node = TopicNode(topic=topic)
        for child in await self._children(topic.id):
            if child.id in seen:
                logger.warning("Cycle in hierarchy: %s already visited under %s", child.id, topic.id)
                continue
            seen.add(child.id)
            node.children.append(await self._build_node(child, seen))
        return node

    # ── Graph queries ──────────────────────────────────────────────────────

    async def _neighbours(self, topic: Topic) -> list[Topic]:
        """Parent first, then children: this order breaks BFS ties."""
        out: list[Topic] = []
        if topic.parent_topic_id:
            parent = await self.topics.find_by_id(topic.parent_topic_id)
            if parent is not None:
                out.append(parent)
        out.extend(await self._children(topic.id))
        return out

    async def find_shortest_path(self, from_id: str, to_id: str) -> Optional[ShortestPath]:
        start = await self.get_topic_by_id(from_id)
        if start is None:
            return None
        if from_id == to_id:
            return ShortestPath(path=[start], distance=0)
        if await self.get_topic_by_id(to_id) is None:
            return None

        queue: deque[tuple[Topic, int, list[Topic]]] = deque([(start, 0, [start])])
        visited = {start.id}
        while queue:
            topic, distance, path = queue.popleft()
            for neighbour in await self._neighbours(topic):
                if neighbour.id in visited:
                    continue
                if neighbour.id == to_id:
                    return ShortestPath(path=path + [neighbour], distance=distance + 1)
                visited.add(neighbour.id)
                queue.append((neighbour, distance + 1, path + [neighbour]))
        return None

    # -----------------------------------------------------------------------------

    async def find_lowest_common_ancestor(self, id1: str, id2: str) -> Optional[Topic]:
        first = await self.get_topic_by_id(id1)
        second = await self.get_topic_by_id(id2)
        if first is None or second is None:
            return None

        ancestors = {t.id async for t in self._walk_up(first)}
        async for candidate in self._walk_up(second):
            if candidate.id in ancestors:
                return candidate
        return None


# -----------------------------------------------------------------------------
