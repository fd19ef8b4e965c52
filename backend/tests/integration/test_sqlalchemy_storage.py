"""Integration tests for the SQLAlchemy-backed host storage on a temporary sqlite file."""

import pytest

from edgestore.application.schemas import Contact, Service
from edgestore.application.services import SiteDatabase
from edgestore.config import Settings
from edgestore.domain.entities import Topic
from edgestore.domain.exceptions import StorageFullError
from edgestore.infrastructure.database import (
    create_session_factory,
    create_storage_engine,
    init_schema,
)
from edgestore.infrastructure.database.repositories import SQLAlchemyKeyValueStorage


@pytest.fixture
def session_factory(tmp_path):
    engine = create_storage_engine(f"sqlite:///{tmp_path / 'data' / 'store.db'}")
    init_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()


def test_set_get_remove(session_factory):
    storage = SQLAlchemyKeyValueStorage(session_factory)

    storage.set_item("a", "1")
    storage.set_item("a", "2")
    storage.set_item("b", "3")
    storage.remove_item("b")
    storage.remove_item("missing")

    assert storage.get_item("a") == "2"
    assert storage.get_item("b") is None
    assert storage.keys() == ["a"]


def test_capacity_is_enforced_with_replacement_accounting(session_factory):
    storage = SQLAlchemyKeyValueStorage(session_factory, capacity_bytes=20, bytes_per_char=2)
    storage.set_item("k", "123456789")

    storage.set_item("k", "987654321")
    with pytest.raises(StorageFullError):
        storage.set_item("j", "x")

    assert storage.get_item("k") == "987654321"
    assert storage.get_item("j") is None


def test_poll_reports_only_changes_made_elsewhere(session_factory):
    writer = SQLAlchemyKeyValueStorage(session_factory)
    reader = SQLAlchemyKeyValueStorage(session_factory)
    seen: list = []
    reader.subscribe(seen.append)

    reader.set_item("own", "1")
    writer.set_item("theirs", "1")
    assert reader.poll_changes() == ["theirs"]

    writer.remove_item("theirs")
    writer.set_item("own", "2")
    changed = reader.poll_changes()

    assert sorted(changed) == ["own", "theirs"]
    assert seen == ["theirs"] + changed
    assert reader.poll_changes() == []


def test_database_survives_a_restart(session_factory):
    settings = Settings(_env_file=None)
    first = SiteDatabase(SQLAlchemyKeyValueStorage(session_factory), settings=settings)
    first.services.add(Service(id="s1", title="Web"))
    first.update_site_settings({"theme": "dark"})

    second = SiteDatabase(SQLAlchemyKeyValueStorage(session_factory), settings=settings)

    assert [s.title for s in second.services.all()] == ["Web"]
    assert second.get_site_settings() == {"theme": "dark"}
    assert len(second.activity.entries()) == 1


def test_external_writes_reach_subscribers_through_sync(session_factory):
    settings = Settings(_env_file=None)
    local_storage = SQLAlchemyKeyValueStorage(session_factory)
    local = SiteDatabase(local_storage, change_source=local_storage, settings=settings)
    remote = SiteDatabase(SQLAlchemyKeyValueStorage(session_factory), settings=settings)
    local.start()
    notified: list = []
    local.subscribe(Topic.CONTACTS, lambda: notified.append("contacts"))

    remote.contacts.add(Contact(id="c1", name="Ann"))
    local_storage.poll_changes()
    local.close()

    assert "contacts" in notified
    assert [c.id for c in local.contacts.all()] == ["c1"]
