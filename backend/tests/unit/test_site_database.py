"""Unit tests for the SiteDatabase facade: seeding, reset, settings and startup."""

import json

import pytest

from edgestore.application.schemas import Contact, Job, Service, TeamMember
from edgestore.application.services import SiteDatabase
from edgestore.config import Settings
from edgestore.domain.entities import ALL_COLLECTIONS, ActivityAction, Topic
from edgestore.domain.exceptions import EntityNotFoundError
from edgestore.infrastructure.storage import InMemoryKeyValueStorage


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def db(storage) -> SiteDatabase:
    return SiteDatabase(storage, settings=Settings(_env_file=None))


def test_initialize_seeds_only_empty_collections(db):
    db.services.add(Service(id="existing", title="Kept"))

    seeded = db.initialize(
        services=[Service(id="default-service", title="Default")],
        team=[TeamMember(id="t1", name="Sam")],
    )

    assert seeded == ["team"]
    assert [s.id for s in db.services.all()] == ["existing"]
    assert [t.id for t in db.team.all()] == ["t1"]


def test_initialize_is_idempotent(db):
    db.initialize(jobs=[Job(id="j1", title="Engineer")])
    db.initialize(jobs=[Job(id="j2", title="Designer")])

    assert [j.id for j in db.jobs.all()] == ["j1"]


def test_seeding_is_not_audited(db):
    db.initialize(services=[Service(id="s1", title="Web")])

    assert db.activity.entries() == []


def test_clear_all_removes_every_key_and_notifies_everyone(db, storage):
    db.services.add(Service(id="s1", title="Web"))
    db.contacts.add(Contact(id="c1", name="Ann"))
    db.update_site_settings({"theme": "dark"})
    storage.set_item("edgemakers_contacts", "[]")
    notified: list[Topic] = []
    for topic in [spec.topic for spec in ALL_COLLECTIONS] + [Topic.SETTINGS]:
        db.subscribe(topic, lambda topic=topic: notified.append(topic))

    db.clear_all()

    assert storage.keys() == []
    assert set(notified) >= {spec.topic for spec in ALL_COLLECTIONS} | {Topic.SETTINGS}


def test_clear_all_logs_before_wiping(db, storage):
    seen: list[list] = []
    db.subscribe(
        Topic.ACTIVITY_LOGS,
        lambda: seen.append([(e.action, e.entity_name) for e in db.activity.entries()]),
    )

    db.clear_all()

    assert (ActivityAction.DELETE, "Clear All Data") in seen[0]
    assert db.activity.entries() == []


def test_site_settings_are_shallow_merged(db):
    notified: list[int] = []
    db.subscribe(Topic.SETTINGS, lambda: notified.append(1))

    db.update_site_settings({"siteName": "EdgeMakers", "theme": "light"})
    result = db.update_site_settings({"theme": "dark"})

    assert result == {"siteName": "EdgeMakers", "theme": "dark"}
    assert db.get_site_settings() == result
    assert notified == [1, 1]


def test_corrupt_site_settings_read_as_empty(db, storage):
    storage.set_item("edgemakers_db_settings", "[1, 2]")

    assert db.get_site_settings() == {}


def test_start_migrates_legacy_keys(db, storage):
    storage.set_item("edgemakers_contacts", json.dumps([{"id": "c1", "name": "Legacy"}]))

    report = db.start()

    assert report.migrated == ["edgemakers_contacts"]
    assert [c.name for c in db.contacts.all()] == ["Legacy"]


def test_unknown_collection_name_is_not_found(db):
    with pytest.raises(EntityNotFoundError):
        db.collection("invoices")


def test_collections_are_addressable_by_name(db):
    assert set(db.collections) == {
        "services",
        "team",
        "testimonials",
        "jobs",
        "users",
        "contacts",
        "newsletter",
        "applications",
    }
    assert db.collection("contacts") is db.contacts


def test_storage_status_reports_against_the_configured_quota(storage):
    db = SiteDatabase(storage, settings=Settings(_env_file=None, quota_bytes=1000))
    storage.set_item("k", "v" * 99)

    status = db.storage_status()

    assert status.quota_bytes == 1000
    assert status.usage_bytes == 200
    assert status.usage_percentage == 20.0
    assert status.near_capacity is False
