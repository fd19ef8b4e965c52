"""Unit tests for the in-memory host storage and its shared area."""

import pytest

from edgestore.domain.exceptions import StorageFullError
from edgestore.infrastructure.storage import InMemoryKeyValueStorage, SharedMemoryArea


def test_basic_key_value_operations():
    storage = InMemoryKeyValueStorage()

    storage.set_item("a", "1")
    storage.set_item("b", "2")
    storage.remove_item("a")
    storage.remove_item("missing")

    assert storage.get_item("a") is None
    assert storage.get_item("b") == "2"
    assert storage.keys() == ["b"]


def test_writes_beyond_capacity_are_refused():
    area = SharedMemoryArea(capacity_bytes=20, bytes_per_char=2)
    storage = area.attach()
    storage.set_item("k", "123456789")  # 20 bytes

    with pytest.raises(StorageFullError) as excinfo:
        storage.set_item("j", "x")

    assert excinfo.value.capacity_bytes == 20
    assert storage.get_item("j") is None


def test_replacing_a_value_only_counts_the_difference():
    area = SharedMemoryArea(capacity_bytes=20, bytes_per_char=2)
    storage = area.attach()
    storage.set_item("k", "123456789")

    storage.set_item("k", "987654321")

    assert storage.get_item("k") == "987654321"
    assert area.usage_bytes() == 20


def test_changes_are_announced_to_other_instances_only():
    area = SharedMemoryArea()
    first, second = area.attach(), area.attach()
    first_seen: list = []
    second_seen: list = []
    first.subscribe(first_seen.append)
    second.subscribe(second_seen.append)

    first.set_item("k", "v")
    first.remove_item("k")

    assert first_seen == []
    assert second_seen == ["k", "k"]


def test_removing_an_absent_key_is_silent():
    area = SharedMemoryArea()
    first, second = area.attach(), area.attach()
    seen: list = []
    second.subscribe(seen.append)

    first.remove_item("never-written")

    assert seen == []


def test_clear_announces_a_full_reset():
    area = SharedMemoryArea()
    storage = area.attach()
    storage.set_item("k", "v")
    seen: list = []
    storage.subscribe(seen.append)

    area.clear()

    assert storage.keys() == []
    assert seen == [None]


def test_unsubscribe_stops_notifications():
    area = SharedMemoryArea()
    first, second = area.attach(), area.attach()
    seen: list = []
    unsubscribe = second.subscribe(seen.append)

    unsubscribe()
    unsubscribe()
    first.set_item("k", "v")

    assert seen == []
