"""
Tests for cache/ - Property store and TTL cache
"""

import json
import os
import stat

import pytest
from unittest.mock import Mock

from contacts_report.cache.property_store import PropertyStore
from contacts_report.cache.ttl_cache import Cache


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def store(tmp_path):
    return PropertyStore(str(tmp_path / "store" / "properties.json"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(store, clock):
    return Cache(store, default_ttl=60, clock=clock)


class TestPropertyStore:
    """Tests for the JSON file store."""

    def test_missing_file_reads_empty(self, store):
        assert store.get_property("anything") is None
        assert store.get_properties() == {}

    def test_set_get_delete(self, store):
        store.set_property("a", "1")
        store.set_property("b", "2")
        store.delete_property("a")

        assert store.get_property("a") is None
        assert store.get_properties() == {"b": "2"}

    def test_file_permissions(self, store):
        store.set_property("a", "1")

        mode = stat.S_IMODE(os.stat(store.path).st_mode)
        assert mode == 0o600

    def test_values_must_be_strings(self, store):
        with pytest.raises(TypeError):
            store.set_property("a", 1)

    def test_delete_all(self, store):
        store.set_property("a", "1")
        store.delete_all_properties()
        assert store.get_properties() == {}


class TestCache:
    """Tests for expiry and statistics."""

    def test_set_and_get(self, cache):
        cache.set("contacts_", [{"name": "John Doe"}])
        assert cache.get("contacts_") == [{"name": "John Doe"}]

    def test_record_format(self, cache, store, clock):
        cache.set("key", {"x": 1}, ttl=10)

        record = json.loads(store.get_property("key"))

        assert record["value"] == {"x": 1}
        assert record["created"] == int(clock.now * 1000)
        assert record["expires"] == record["created"] + 10_000

    def test_expired_entry_is_removed(self, cache, store, clock):
        cache.set("key", "value", ttl=10)
        clock.now += 11

        assert cache.get("key") is None
        assert store.get_property("key") is None

    def test_entry_valid_until_expiry(self, cache, clock):
        cache.set("key", "value", ttl=10)
        clock.now += 10

        assert cache.get("key") == "value"

    def test_default_ttl(self, cache, clock):
        cache.set("key", "value")
        clock.now += 61
        assert cache.get("key") is None

    def test_missing_key(self, cache):
        assert cache.get("missing") is None

    def test_corrupt_entry_is_a_miss(self, cache, store):
        store.set_property("key", "not json")
        assert cache.get("key") is None

    def test_store_error_is_a_miss(self, clock):
        broken = Mock()
        broken.get_property.side_effect = OSError("disk gone")

        assert Cache(broken, clock=clock).get("key") is None

    def test_stats(self, cache, store, clock):
        cache.set("old", "v", ttl=5)
        cache.set("new", "v", ttl=100)
        store.set_property("foreign", "plain text")
        clock.now += 10

        assert cache.get_stats() == {"total_entries": 3, "valid_entries": 1, "expired_entries": 1}

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.clear()
        assert cache.get_stats()["total_entries"] == 0

    def test_delete_prefix(self, cache, store):
        cache.set("contacts_", [1])
        cache.set("contacts_Work", [2])
        cache.set("labels", [3])

        assert cache.delete_prefix("contacts_") == 2
        assert cache.get("contacts_") is None
        assert cache.get("contacts_Work") is None
        assert cache.get("labels") == [3]

    def test_delete_prefix_store_error(self, clock):
        broken = Mock()
        broken.get_properties.side_effect = OSError("disk gone")

        assert Cache(broken, clock=clock).delete_prefix("contacts_") == 0
