"""Integration tests for the collection CRUD endpoints over in-memory storage."""

import pytest
from httpx import ASGITransport, AsyncClient

from edgestore.application.services import SiteDatabase
from edgestore.config import Settings
from edgestore.infrastructure.storage import SharedMemoryArea
from edgestore.main import create_app


def _database(capacity_bytes: int | None = None) -> SiteDatabase:
    area = SharedMemoryArea(capacity_bytes=capacity_bytes)
    storage = area.attach()
    return SiteDatabase(storage, change_source=storage, settings=Settings(_env_file=None))


def _client(database: SiteDatabase) -> AsyncClient:
    transport = ASGITransport(app=create_app(database=database))
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.asyncio
async def test_create_then_list_and_fetch():
    database = _database()
    async with _client(database) as client:
        created = await client.post(
            "/api/v1/collections/services",
            json={"id": "s1", "title": "Web Development", "googleFormUrl": "https://f"},
        )
        listed = await client.get("/api/v1/collections/services")
        fetched = await client.get("/api/v1/collections/services/s1")

    assert created.status_code == 201
    assert created.json()["googleFormUrl"] == "https://f"
    assert [s["id"] for s in listed.json()] == ["s1"]
    assert fetched.json()["title"] == "Web Development"
    assert database.activity.entries()[-1].entity_name == "Web Development"


@pytest.mark.asyncio
async def test_missing_id_is_generated():
    async with _client(_database()) as client:
        response = await client.post("/api/v1/collections/contacts", json={"name": "Ann"})

    assert response.status_code == 201
    body = response.json()
    assert body["id"].startswith("contact")
    assert body["status"] == "new"
    assert "submittedAt" in body


@pytest.mark.asyncio
async def test_duplicate_id_is_a_conflict():
    async with _client(_database()) as client:
        await client.post("/api/v1/collections/jobs", json={"id": "j1", "title": "Dev"})
        response = await client.post("/api/v1/collections/jobs", json={"id": "j1", "title": "Dev"})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_unknown_collection_is_not_found():
    async with _client(_database()) as client:
        response = await client.get("/api/v1/collections/widgets")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_record_is_unprocessable():
    async with _client(_database()) as client:
        response = await client.post("/api/v1/collections/contacts", json={"name": ["Ann"]})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_patch_merges_and_rejects_unknown_fields():
    async with _client(_database()) as client:
        await client.post(
            "/api/v1/collections/team", json={"id": "t1", "name": "Sam", "role": "Lead"}
        )
        patched = await client.patch("/api/v1/collections/team/t1", json={"role": "CTO"})
        rejected = await client.patch("/api/v1/collections/team/t1", json={"salary": 1})
        missing = await client.patch("/api/v1/collections/team/nope", json={"role": "CTO"})

    assert patched.status_code == 200
    assert patched.json() == {"id": "t1", "name": "Sam", "role": "CTO"}
    assert rejected.status_code == 422
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_removes_the_record():
    async with _client(_database()) as client:
        await client.post("/api/v1/collections/testimonials", json={"id": "x", "quote": "Great"})
        deleted = await client.delete("/api/v1/collections/testimonials/x")
        again = await client.delete("/api/v1/collections/testimonials/x")
        listed = await client.get("/api/v1/collections/testimonials")

    assert deleted.status_code == 204
    assert again.status_code == 404
    assert listed.json() == []


@pytest.mark.asyncio
async def test_activate_and_deactivate_content_records():
    async with _client(_database()) as client:
        await client.post("/api/v1/collections/services", json={"id": "s1", "title": "Web"})
        off = await client.post("/api/v1/collections/services/s1/deactivate")
        on = await client.post("/api/v1/collections/services/s1/activate")
        await client.post("/api/v1/collections/contacts", json={"id": "c1"})
        not_toggleable = await client.post("/api/v1/collections/contacts/c1/activate")

    assert off.json()["active"] is False
    assert on.json()["active"] is True
    assert not_toggleable.status_code == 400


@pytest.mark.asyncio
async def test_patch_with_null_fields_succeeds():
    async with _client(_database()) as client:
        await client.post(
            "/api/v1/collections/contacts", json={"id": "c1", "name": "Ann", "phone": "555"}
        )
        response = await client.patch(
            "/api/v1/collections/contacts/c1", json={"name": None, "status": None}
        )

    assert response.status_code == 200
    body = response.json()
    assert "name" not in body
    assert body["phone"] == "555"
    assert body["status"] == "new"


@pytest.mark.asyncio
async def test_put_then_get_returns_the_records_as_written():
    records = [{"id": "s1", "title": "Cleaning"}, {"id": "s2", "title": "Repairs", "active": False}]
    async with _client(_database()) as client:
        await client.put("/api/v1/collections/services", json=records)
        listed = await client.get("/api/v1/collections/services")

    assert listed.json() == records


@pytest.mark.asyncio
async def test_put_replaces_the_whole_collection():
    async with _client(_database()) as client:
        await client.post("/api/v1/collections/jobs", json={"id": "old", "title": "Old"})
        response = await client.put(
            "/api/v1/collections/jobs",
            json=[{"id": "a", "title": "A"}, {"id": "b", "title": "B"}],
        )
        listed = await client.get("/api/v1/collections/jobs")

    assert response.status_code == 200
    assert [j["id"] for j in listed.json()] == ["a", "b"]


@pytest.mark.asyncio
async def test_refused_write_reports_insufficient_storage():
    database = _database(capacity_bytes=400)
    refusals: list = []
    database.subscribe_quota_errors(refusals.append)

    async with _client(database) as client:
        response = await client.post(
            "/api/v1/collections/services", json={"id": "big", "title": "x" * 500}
        )

    assert response.status_code == 507
    body = response.json()
    assert "Storage quota exceeded" in body["detail"]
    assert body["quota"]["quotaBytes"] == database.settings.quota_bytes
    assert len(refusals) == 1
    assert database.services.all() == []
