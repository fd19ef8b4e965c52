"""Integration tests for backup, exports, storage status and site settings endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from edgestore.application.schemas import Contact, NewsletterSubscriber, Service
from edgestore.application.services import SiteDatabase
from edgestore.config import Settings
from edgestore.infrastructure.storage import InMemoryKeyValueStorage
from edgestore.main import create_app


def _backup(**overrides) -> dict:
    data = {
        "version": "1.0.0",
        "appVersion": "0.1.0",
        "backupId": "backup-1",
        "exportedAt": "2024-03-05T14:07:09.000Z",
        "services": [{"id": "s1", "title": "Web"}],
        "team": [],
        "testimonials": [],
        "jobs": [],
        "users": [],
        "contacts": [{"id": "c1", "name": "Ann", "email": "ann@example.com"}],
        "newsletter": [],
        "applications": [],
    }
    data.update(overrides)
    return data


@pytest.fixture
def database() -> SiteDatabase:
    return SiteDatabase(InMemoryKeyValueStorage(), settings=Settings(_env_file=None))


@pytest.fixture
def client(database) -> AsyncClient:
    transport = ASGITransport(app=create_app(database=database))
    return AsyncClient(transport=transport, base_url="http://test")


# ── Backup ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_export_downloads_a_named_snapshot(database, client):
    database.services.add(Service(id="s1", title="Web"))

    async with client:
        response = await client.get("/api/v1/backup/export", params={"description": "nightly"})

    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="edgemakers-backup-')
    body = response.json()
    assert body["version"] == "1.0.0"
    assert body["description"] == "nightly"
    assert [s["id"] for s in body["services"]] == ["s1"]
    assert "activityLogs" in body


@pytest.mark.asyncio
async def test_validate_reports_errors_without_applying(database, client):
    async with client:
        response = await client.post("/api/v1/backup/validate", json={"services": []})

    body = response.json()
    assert response.status_code == 200
    assert body["isValid"] is False
    assert "Missing required field: exportedAt" in body["errors"]
    assert database.services.all() == []


@pytest.mark.asyncio
async def test_import_replace_restores_the_snapshot(database, client):
    database.contacts.add(Contact(id="old", name="Gone"))

    async with client:
        response = await client.post("/api/v1/backup/import", json=_backup())

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "imported"
    assert body["strategy"] == "replace"
    assert body["recordCounts"]["services"] == 1
    assert [c.id for c in database.contacts.all()] == ["c1"]
    assert [e.entity_id for e in database.activity.entries()] == ["restore"]


@pytest.mark.asyncio
async def test_import_merge_keeps_local_only_records(database, client):
    database.contacts.add(Contact(id="local", name="Kept"))

    async with client:
        response = await client.post(
            "/api/v1/backup/import", params={"strategy": "merge"}, json=_backup()
        )

    assert response.status_code == 200
    assert {c.id for c in database.contacts.all()} == {"c1", "local"}


@pytest.mark.asyncio
async def test_import_rejects_an_incompatible_backup(database, client):
    async with client:
        response = await client.post("/api/v1/backup/import", json=_backup(version="2.0.0"))

    assert response.status_code == 422
    assert "Major version mismatch" in response.json()["detail"]["errors"][0]
    assert database.services.all() == []


@pytest.mark.asyncio
async def test_import_rejects_malformed_records_before_writing(database, client):
    database.services.add(Service(id="s0", title="Existing"))

    async with client:
        response = await client.post(
            "/api/v1/backup/import", json=_backup(contacts=[{"id": "c1", "name": ["bad"]}])
        )

    assert response.status_code == 422
    assert [s.id for s in database.services.all()] == ["s0"]


# ── Exports ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_contacts_csv_download(database, client):
    database.contacts.add(Contact(id="c1", name='Ann "A"', email="ann@example.com"))

    async with client:
        response = await client.get("/api/v1/exports/contacts.csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.splitlines()
    assert lines[0] == "ID,Name,Email,Phone,Service,Message,Submitted At,Status"
    assert lines[1].startswith('"c1","Ann ""A""","ann@example.com"')


@pytest.mark.asyncio
async def test_empty_export_has_no_content(client):
    async with client:
        response = await client.get("/api/v1/exports/newsletter-emails.csv")

    assert response.status_code == 204


@pytest.mark.asyncio
async def test_whatsapp_export_skips_email_only_subscribers(database, client):
    database.newsletter.add(NewsletterSubscriber(id="n1", email="a@example.com"))
    database.newsletter.add(NewsletterSubscriber(id="n2", whatsapp="+111"))

    async with client:
        response = await client.get("/api/v1/exports/newsletter-whatsapp.csv")

    lines = response.text.splitlines()
    assert len(lines) == 2
    assert lines[1].startswith('"+111"')


@pytest.mark.asyncio
async def test_json_export_only_for_submission_collections(client):
    async with client:
        contacts = await client.get("/api/v1/exports/contacts.json")
        services = await client.get("/api/v1/exports/services.json")

    assert contacts.status_code == 200
    assert contacts.json() == []
    assert services.status_code == 404


# ── Storage, activity logs and site settings ────────────────────────


@pytest.mark.asyncio
async def test_storage_status_and_stats(database, client):
    database.contacts.add(Contact(id="c1", name="Ann"))
    database.estimator.invalidate()

    async with client:
        status_response = await client.get("/api/v1/storage")
        stats_response = await client.get("/api/v1/storage/stats")

    status_body = status_response.json()
    assert status_body["quotaBytes"] == 5 * 1024 * 1024
    assert status_body["usageBytes"] > 0
    assert status_body["nearCapacity"] is False
    stats = stats_response.json()
    assert stats["totalContacts"] == 1
    assert stats["newContacts"] == 1


@pytest.mark.asyncio
async def test_clearing_storage_removes_everything(database, client):
    database.services.add(Service(id="s1", title="Web"))

    async with client:
        response = await client.delete("/api/v1/storage")

    assert response.status_code == 204
    assert database.services.all() == []
    assert database.store.storage.keys() == []


@pytest.mark.asyncio
async def test_activity_logs_newest_first_with_filters(database, client):
    database.services.add(Service(id="s1", title="Web"))
    database.contacts.add(Contact(id="c1", name="Ann"))

    async with client:
        everything = await client.get("/api/v1/activity-logs")
        contacts = await client.get("/api/v1/activity-logs", params={"entityType": "contact"})
        cleared = await client.delete("/api/v1/activity-logs")

    assert [e["entityId"] for e in everything.json()] == ["c1", "s1"]
    assert [e["entityId"] for e in contacts.json()] == ["c1"]
    assert cleared.json() == {"removed": 2}


@pytest.mark.asyncio
async def test_site_settings_are_merged(client):
    async with client:
        await client.patch("/api/v1/site-settings", json={"theme": "dark", "title": "Edge"})
        await client.patch("/api/v1/site-settings", json={"theme": "light"})
        response = await client.get("/api/v1/site-settings")

    assert response.json() == {"theme": "light", "title": "Edge"}
