"""Unit tests for the EvictionPolicy."""

import json
import math

import pytest

from edgestore.application.services import EvictionPolicy, NotificationBus, StorageSizeEstimator
from edgestore.domain.entities import APPLICATIONS, CONTACTS, NEWSLETTER, SERVICES, Topic
from edgestore.infrastructure.storage import InMemoryKeyValueStorage


def _contact(index: int, submitted_at: str) -> dict:
    return {
        "id": f"contact-{index}",
        "name": f"Visitor {index}",
        "email": f"visitor{index}@example.com",
        "message": "Hello there " * 5,
        "submittedAt": submitted_at,
        "status": "new",
    }


def _stored(storage: InMemoryKeyValueStorage, key: str) -> list[dict]:
    return json.loads(storage.get_item(key))


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def bus() -> NotificationBus:
    return NotificationBus()


@pytest.fixture
def policy(storage, bus) -> EvictionPolicy:
    return EvictionPolicy(storage, bus, StorageSizeEstimator(storage))


def test_removes_the_oldest_fifth_of_each_submission_collection(storage, policy):
    # Stored out of chronological order on purpose
    days = [5, 1, 9, 3, 7, 2, 10, 4, 8, 6]
    contacts = [_contact(i, f"2024-01-{day:02d}T00:00:00.000Z") for i, day in enumerate(days)]
    storage.set_item(CONTACTS.storage_key, json.dumps(contacts))
    subscribers = [
        {"id": f"subscriber-{i}", "email": f"s{i}@example.com", "subscribedAt": f"2024-02-0{i + 1}T00:00:00Z"}
        for i in range(3)
    ]
    storage.set_item(NEWSLETTER.storage_key, json.dumps(subscribers))

    report = policy.evict(100)

    remaining = _stored(storage, CONTACTS.storage_key)
    assert len(remaining) == 8
    remaining_days = sorted(int(c["submittedAt"][8:10]) for c in remaining)
    assert remaining_days == [3, 4, 5, 6, 7, 8, 9, 10]
    assert [s["id"] for s in _stored(storage, NEWSLETTER.storage_key)] == ["subscriber-1", "subscriber-2"]
    assert report.removed == {"contacts": 2, "newsletter": 1, "applications": 0}
    assert report.total_removed == 3


def test_content_collections_are_never_touched(storage, policy):
    services = json.dumps([{"id": "service-1", "title": "Web"}])
    storage.set_item(SERVICES.storage_key, services)
    storage.set_item(CONTACTS.storage_key, json.dumps([_contact(1, "2024-01-01T00:00:00Z")]))

    policy.evict(10_000)

    assert storage.get_item(SERVICES.storage_key) == services


def test_emits_topics_only_for_trimmed_collections(storage, bus, policy):
    storage.set_item(CONTACTS.storage_key, json.dumps([_contact(1, "2024-01-01T00:00:00Z")]))
    emitted: list[Topic] = []
    for topic in (Topic.CONTACTS, Topic.NEWSLETTER, Topic.APPLICATIONS):
        bus.subscribe(topic, lambda topic=topic: emitted.append(topic))

    policy.evict(10)

    assert emitted == [Topic.CONTACTS]


def test_reports_bytes_freed_from_fresh_measurements(storage, policy):
    contacts = [_contact(i, f"2024-01-0{i + 1}T00:00:00Z") for i in range(5)]
    storage.set_item(CONTACTS.storage_key, json.dumps(contacts))
    before = (len(CONTACTS.storage_key) + len(storage.get_item(CONTACTS.storage_key))) * 2

    report = policy.evict(50)

    after = (len(CONTACTS.storage_key) + len(storage.get_item(CONTACTS.storage_key))) * 2
    assert report.bytes_freed == before - after
    assert report.bytes_freed > 0
    assert report.success is True


def test_insufficient_eviction_is_reported_as_failure(storage, policy):
    storage.set_item(CONTACTS.storage_key, json.dumps([_contact(1, "2024-01-01T00:00:00Z")]))

    report = policy.evict(10_000_000)

    assert report.success is False
    assert report.bytes_freed > 0


def test_unreadable_timestamps_are_evicted_first(storage, policy):
    contacts = [
        _contact(1, "2024-01-01T00:00:00Z"),
        _contact(2, "not a date"),
        _contact(3, "2024-01-03T00:00:00Z"),
    ]
    storage.set_item(CONTACTS.storage_key, json.dumps(contacts))

    policy.evict(1)

    assert [c["id"] for c in _stored(storage, CONTACTS.storage_key)] == ["contact-1", "contact-3"]


def test_corrupt_collection_is_skipped_and_others_still_trimmed(storage, policy):
    storage.set_item(CONTACTS.storage_key, "{not json")
    applications = [
        {"id": f"application-{i}", "name": "A", "submittedAt": f"2024-03-0{i + 1}T00:00:00Z"}
        for i in range(2)
    ]
    storage.set_item(APPLICATIONS.storage_key, json.dumps(applications))

    report = policy.evict(1)

    assert "contacts" in report.failed
    assert [a["id"] for a in _stored(storage, APPLICATIONS.storage_key)] == ["application-1"]
    assert storage.get_item(CONTACTS.storage_key) == "{not json"


@pytest.mark.parametrize("count", [0, 1, 4, 5, 6, 11])
def test_never_removes_more_than_the_configured_fraction(storage, policy, count):
    contacts = [_contact(i, f"2024-01-01T00:00:{i:02d}Z") for i in range(count)]
    storage.set_item(CONTACTS.storage_key, json.dumps(contacts))

    report = policy.evict(1)

    expected_removed = math.ceil(count * 0.2)
    assert report.removed["contacts"] == expected_removed
    assert len(_stored(storage, CONTACTS.storage_key)) == count - expected_removed
