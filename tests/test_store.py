"""
Tests for the JSON file store.
"""
import json
import os

import pytest

from recordvault.errors import StoreError
from recordvault.record import Record
from recordvault.store import JsonFileStore, serialize_records


def _records():
    return [
        Record(1, "wifi", "secret1", "2025-01-01T12:00:00+00:00"),
        Record(2, "Bank PIN", "1234", "2025-01-02T12:00:00+00:00", "2025-01-03T12:00:00+00:00"),
    ]


class TestJsonFileStore:

    def test_load_missing_file_is_empty(self, store):
        assert store.load() == []

    def test_save_then_load(self, store):
        store.save(_records())
        assert store.load() == _records()

    def test_save_load_round_trip_is_byte_identical(self, store):
        store.save(_records())
        before = store.path.read_bytes()

        store.save(store.load())

        assert store.path.read_bytes() == before

    def test_file_is_a_json_array_of_records(self, store):
        store.save(_records())
        data = json.loads(store.path.read_text(encoding="utf-8"))

        assert isinstance(data, list)
        assert data[1]["updatedAt"] == "2025-01-03T12:00:00+00:00"

    def test_creates_parent_directories(self, temp_dir):
        store = JsonFileStore(temp_dir / "nested" / "deeper" / "records.json")
        store.save(_records())
        assert store.path.exists()

    def test_no_temp_files_left_behind(self, store):
        store.save(_records())
        assert [p.name for p in store.path.parent.iterdir()] == ["records.json"]

    def test_failed_replace_keeps_previous_file(self, store, monkeypatch):
        store.save(_records())
        before = store.path.read_bytes()

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)

        with pytest.raises(StoreError):
            store.save([])

        assert store.path.read_bytes() == before
        assert [p.name for p in store.path.parent.iterdir()] == ["records.json"]

    def test_corrupt_file_raises_store_error(self, store):
        store.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            store.load()

    def test_non_array_raises_store_error(self, store):
        store.path.write_text('{"id": 1}', encoding="utf-8")
        with pytest.raises(StoreError):
            store.load()

    @pytest.mark.parametrize("field, bad", [
        ("createdAt", "garbage"),
        ("updatedAt", "not-a-date"),
        ("createdAt", 12345),
        ("id", 1.5),
        ("id", True),
        ("id", "1"),
        ("name", None),
        ("value", 42),
    ])
    def test_malformed_record_raises_store_error(self, store, field, bad):
        data = [r.to_dict() for r in _records()]
        data[0][field] = bad
        store.path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(StoreError):
            store.load()

    def test_each_load_rereads_the_file(self, store):
        store.save(_records())
        store.path.write_text(serialize_records(_records()[:1]), encoding="utf-8")

        assert len(store.load()) == 1
