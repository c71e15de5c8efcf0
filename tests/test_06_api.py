"""
HTTP API Test Suite
===================
Tests for:
  - Auth: login, /me, missing and bad tokens
  - Topic CRUD and versions over HTTP
  - Permission mapping: 403 with role details, ownership override
  - Delete: 204 / 404 / 409 and cascade
  - Hierarchy, path and ancestor endpoints
  - Storage failures → 500

Run with:  pytest tests/test_06_api.py -v
"""

from __future__ import annotations

import logging

import pytest
from httpx import AsyncClient

from knowledge_base.core.security import create_access_token
from knowledge_base.models import Role
from knowledge_base.store import StoreError
from tests.conftest import auth_headers

pytestmark = pytest.mark.asyncio

API = "/api/v1"
ADMIN = auth_headers("admin1")
EDITOR = auth_headers("editor1")
VIEWER = auth_headers("viewer1")
VIEWER2 = auth_headers("viewer2")


async def create_topic(client: AsyncClient, name: str, headers=EDITOR, **extra) -> dict:
    body = {"name": name, "content": f"{name} content", **extra}
    r = await client.post(f"{API}/topics", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 1. Auth
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestAuth:
    async def test_login_success(self, client: AsyncClient):
        await client.users.create_user("Login", "login@example.com", Role.EDITOR, password="pw-123456")
        r = await client.post(f"{API}/auth/login", json={"email": "login@example.com", "password": "pw-123456"})
        assert r.status_code == 200
        data = r.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["role"] == "editor"
        assert "password_hash" not in data["user"]

        me = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.json()["email"] == "login@example.com"

    async def test_login_wrong_password(self, client: AsyncClient):
        await client.users.create_user("Login", "login@example.com", Role.EDITOR, password="pw-123456")
        r = await client.post(f"{API}/auth/login", json={"email": "login@example.com", "password": "nope"})
        assert r.status_code == 401

    async def test_me(self, client: AsyncClient):
        r = await client.get(f"{API}/auth/me", headers=VIEWER)
        assert r.status_code == 200
        assert r.json()["id"] == "viewer1"

    async def test_no_token(self, client: AsyncClient):
        r = await client.get(f"{API}/topics")
        assert r.status_code == 401

    async def test_bad_token(self, client: AsyncClient):
        r = await client.get(f"{API}/topics", headers={"Authorization": "Bearer garbage"})
        assert r.status_code == 401

    async def test_token_for_unknown_user(self, client: AsyncClient):
        r = await client.get(f"{API}/topics", headers=auth_headers("ghost"))
        assert r.status_code == 401
        assert r.json()["detail"] == "Invalid token"

    async def test_expired_token(self, client: AsyncClient):
        from datetime import timedelta
        token = create_access_token("admin1", expires_delta=timedelta(seconds=-1))
        r = await client.get(f"{API}/topics", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
        assert r.json()["detail"] == "Token expired"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 2. Topics
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestTopics:
    async def test_create_and_get(self, client: AsyncClient):
        t = await create_topic(client, "Python")
        assert t["version"] == 1
        assert t["owner_id"] == "editor1"

        r = await client.get(f"{API}/topics/{t['id']}", headers=VIEWER)
        assert r.status_code == 200
        assert r.json()["name"] == "Python"

    async def test_list(self, client: AsyncClient):
        await create_topic(client, "A")
        await create_topic(client, "B")
        r = await client.get(f"{API}/topics", headers=VIEWER)
        assert sorted(t["name"] for t in r.json()) == ["A", "B"]

    async def test_get_missing(self, client: AsyncClient):
        r = await client.get(f"{API}/topics/nope", headers=VIEWER)
        assert r.status_code == 404

    async def test_create_with_resource(self, client: AsyncClient):
        t = await create_topic(client, "Vid", resource={
            "url": "https://example.com/v", "description": "Intro", "type": "video",
        })
        assert t["resource"]["type"] == "video"
        assert t["resource"]["topic_id"] == t["id"]

    async def test_create_bad_resource_type(self, client: AsyncClient):
        r = await client.post(f"{API}/topics", headers=EDITOR, json={
            "name": "X", "content": "x",
            "resource": {"url": "u", "description": "d", "type": "hologram"},
        })
        assert r.status_code == 422

    async def test_create_blank_name(self, client: AsyncClient):
        r = await client.post(f"{API}/topics", headers=EDITOR, json={"name": "   ", "content": "x"})
        assert r.status_code == 400

    async def test_create_missing_parent(self, client: AsyncClient):
        r = await client.post(f"{API}/topics", headers=EDITOR,
                              json={"name": "X", "content": "x", "parent_topic_id": "nope"})
        assert r.status_code == 400

    async def test_viewer_cannot_create(self, client: AsyncClient):
        r = await client.post(f"{API}/topics", headers=VIEWER, json={"name": "X", "content": "x"})
        assert r.status_code == 403
        detail = r.json()["detail"]
        assert detail["message"] == "You do not have permission to create this topic"
        assert detail["details"] == {"role": "viewer", "action": "create", "is_owner": False}

    async def test_update_creates_version(self, client: AsyncClient):
        t = await create_topic(client, "T")
        r = await client.put(f"{API}/topics/{t['id']}", headers=EDITOR,
                             json={"name": "T", "content": "second"})
        assert r.status_code == 200
        assert r.json()["version"] == 2

        versions = await client.get(f"{API}/topics/{t['id']}/versions", headers=VIEWER)
        assert [v["version"] for v in versions.json()] == [1, 2]

        v1 = await client.get(f"{API}/topics/{t['id']}/versions/1", headers=VIEWER)
        assert v1.json()["content"] == "T content"

    async def test_version_not_found(self, client: AsyncClient):
        t = await create_topic(client, "T")
        r = await client.get(f"{API}/topics/{t['id']}/versions/9", headers=VIEWER)
        assert r.status_code == 404
        r = await client.get(f"{API}/topics/{t['id']}/versions/0", headers=VIEWER)
        assert r.status_code == 422

    async def test_update_logged_only_on_success(self, client: AsyncClient, caplog):
        t = await create_topic(client, "T")
        with caplog.at_level(logging.INFO, logger="knowledge_base.routes.topics"):
            r = await client.put(f"{API}/topics/{t['id']}", headers=EDITOR,
                                 json={"name": "   ", "content": "c"})
            assert r.status_code == 400
            assert not [rec for rec in caplog.records if rec.name == "knowledge_base.routes.topics"]

            r = await client.put(f"{API}/topics/{t['id']}", headers=EDITOR,
                                 json={"name": "T", "content": "second"})
            assert r.status_code == 200
        messages = [rec.getMessage() for rec in caplog.records if rec.name == "knowledge_base.routes.topics"]
        assert messages == [f"Topic {t['id']} updated by user editor1 (role=editor)"]

    async def test_update_missing(self, client: AsyncClient):
        r = await client.put(f"{API}/topics/nope", headers=ADMIN, json={"name": "n", "content": "c"})
        assert r.status_code == 404

    async def test_viewer_cannot_update_others_topic(self, client: AsyncClient):
        t = await create_topic(client, "T")
        r = await client.put(f"{API}/topics/{t['id']}", headers=VIEWER, json={"name": "n", "content": "c"})
        assert r.status_code == 403
        assert r.json()["detail"]["details"]["is_owner"] is False

    async def test_owner_override(self, client: AsyncClient):
        t = await client.topics.create_topic("Mine", "mine", None, "viewer1")
        r = await client.put(f"{API}/topics/{t.id}", headers=VIEWER, json={"name": "Mine", "content": "edited"})
        assert r.status_code == 200
        assert r.json()["version"] == 2

        r = await client.put(f"{API}/topics/{t.id}", headers=VIEWER2, json={"name": "Mine", "content": "x"})
        assert r.status_code == 403

    async def test_move(self, client: AsyncClient):
        a = await create_topic(client, "A")
        b = await create_topic(client, "B")
        r = await client.put(f"{API}/topics/{b['id']}/parent", headers=EDITOR,
                             json={"parent_topic_id": a["id"]})
        assert r.status_code == 200
        assert r.json()["parent_topic_id"] == a["id"]

        r = await client.put(f"{API}/topics/{a['id']}/parent", headers=EDITOR,
                             json={"parent_topic_id": b["id"]})
        assert r.status_code == 400


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 3. Resources
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestResources:
    async def test_attach_and_detach(self, client: AsyncClient):
        t = await create_topic(client, "T")
        r = await client.put(f"{API}/topics/{t['id']}/resource", headers=EDITOR, json={
            "url": "https://example.com/a", "description": "An article", "type": "article",
        })
        assert r.status_code == 200
        assert r.json()["resource"]["type"] == "article"
        assert r.json()["version"] == 2

        r = await client.delete(f"{API}/topics/{t['id']}/resource", headers=EDITOR)
        assert r.status_code == 200
        assert r.json()["resource"] is None
        assert r.json()["version"] == 3

    async def test_detach_when_none(self, client: AsyncClient):
        t = await create_topic(client, "T")
        r = await client.delete(f"{API}/topics/{t['id']}/resource", headers=EDITOR)
        assert r.status_code == 404

    async def test_invalid_type(self, client: AsyncClient):
        t = await create_topic(client, "T")
        r = await client.put(f"{API}/topics/{t['id']}/resource", headers=EDITOR, json={
            "url": "u", "description": "d", "type": "hologram",
        })
        assert r.status_code == 422


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 4. Delete
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestDelete:
    async def test_admin_deletes(self, client: AsyncClient):
        t = await create_topic(client, "T")
        r = await client.delete(f"{API}/topics/{t['id']}", headers=ADMIN)
        assert r.status_code == 204
        r = await client.get(f"{API}/topics/{t['id']}", headers=ADMIN)
        assert r.status_code == 404

    async def test_editor_cannot_delete_others(self, client: AsyncClient):
        t = await create_topic(client, "T", headers=ADMIN)
        r = await client.delete(f"{API}/topics/{t['id']}", headers=EDITOR)
        assert r.status_code == 403

    async def test_editor_deletes_own(self, client: AsyncClient):
        t = await create_topic(client, "T", headers=EDITOR)
        r = await client.delete(f"{API}/topics/{t['id']}", headers=EDITOR)
        assert r.status_code == 204

    async def test_delete_missing(self, client: AsyncClient):
        r = await client.delete(f"{API}/topics/nope", headers=ADMIN)
        assert r.status_code == 404

    async def test_delete_with_children(self, client: AsyncClient):
        root = await create_topic(client, "Root")
        await create_topic(client, "Child", parent_topic_id=root["id"])

        r = await client.delete(f"{API}/topics/{root['id']}", headers=ADMIN)
        assert r.status_code == 409
        assert "1 child topic(s)" in r.json()["detail"]

        r = await client.delete(f"{API}/topics/{root['id']}?cascade=true", headers=ADMIN)
        assert r.status_code == 204
        r = await client.get(f"{API}/topics", headers=ADMIN)
        assert r.json() == []

    async def test_cascade_flag_parsing(self, client: AsyncClient):
        root = await create_topic(client, "Root")
        await create_topic(client, "Child", parent_topic_id=root["id"])

        r = await client.delete(f"{API}/topics/{root['id']}?cascade=maybe", headers=ADMIN)
        assert r.status_code == 422
        r = await client.delete(f"{API}/topics/{root['id']}?cascade=0", headers=ADMIN)
        assert r.status_code == 409

        r = await client.delete(f"{API}/topics/{root['id']}?cascade=1", headers=ADMIN)
        assert r.status_code == 204
        r = await client.get(f"{API}/topics", headers=ADMIN)
        assert r.json() == []


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 5. Graph queries
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestGraph:
    async def _chain(self, client):
        a = await create_topic(client, "A")
        b = await create_topic(client, "B", parent_topic_id=a["id"])
        c = await create_topic(client, "C", parent_topic_id=b["id"])
        return a, b, c

    async def test_hierarchy(self, client: AsyncClient):
        a, b, c = await self._chain(client)
        r = await client.get(f"{API}/topics/{a['id']}/hierarchy", headers=VIEWER)
        assert r.status_code == 200
        node = r.json()
        assert node["topic"]["id"] == a["id"]
        assert node["children"][0]["topic"]["id"] == b["id"]
        assert node["children"][0]["children"][0]["topic"]["id"] == c["id"]

    async def test_hierarchy_missing(self, client: AsyncClient):
        r = await client.get(f"{API}/topics/nope/hierarchy", headers=VIEWER)
        assert r.status_code == 404

    async def test_path(self, client: AsyncClient):
        a, b, c = await self._chain(client)
        r = await client.get(f"{API}/topics/path/{a['id']}/{c['id']}", headers=VIEWER)
        assert r.status_code == 200
        assert [t["name"] for t in r.json()["path"]] == ["A", "B", "C"]
        assert r.json()["distance"] == 2

    async def test_path_none(self, client: AsyncClient):
        a, _, _ = await self._chain(client)
        x = await create_topic(client, "X")
        r = await client.get(f"{API}/topics/path/{a['id']}/{x['id']}", headers=VIEWER)
        assert r.status_code == 404

    async def test_ancestor(self, client: AsyncClient):
        a, b, c = await self._chain(client)
        r = await client.get(f"{API}/topics/ancestor/{c['id']}/{b['id']}", headers=VIEWER)
        assert r.status_code == 200
        assert r.json()["ancestor"]["id"] == b["id"]

    async def test_ancestor_none(self, client: AsyncClient):
        a, _, _ = await self._chain(client)
        x = await create_topic(client, "X")
        r = await client.get(f"{API}/topics/ancestor/{a['id']}/{x['id']}", headers=VIEWER)
        assert r.status_code == 404


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 6. System
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestSystem:
    async def test_health(self, client: AsyncClient):
        r = await client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}

    async def test_store_failure_is_500(self, client: AsyncClient, monkeypatch):
        async def boom():
            raise StoreError("topics", "read", OSError("disk gone"))

        monkeypatch.setattr(client.topics.topics, "find_all", boom)
        r = await client.get(f"{API}/topics", headers=VIEWER)
        assert r.status_code == 500
        assert r.json() == {"detail": "Storage failure"}
