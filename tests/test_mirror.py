"""
Tests for the MongoDB mirror, using a mocked pymongo client.
"""
import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock

from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from recordvault.mirror import COLLECTION_NAME, MongoMirror, to_document
from recordvault.record import Record

RECORD = Record(1, "wifi", "secret1", "2025-01-01T12:00:00+00:00")


def _connected_mirror():
    client = MagicMock()
    collection = MagicMock()
    client.get_default_database.return_value.__getitem__.return_value = collection
    factory = MagicMock(return_value=client)

    mirror = MongoMirror("mongodb://example:27017/vault", timeout_ms=50, client_factory=factory)
    assert mirror.connect() is True
    return mirror, client, collection, factory


class TestConnect:

    def test_connect_pings_and_selects_collection(self):
        mirror, client, _, factory = _connected_mirror()

        factory.assert_called_once_with("mongodb://example:27017/vault", serverSelectionTimeoutMS=50)
        client.admin.command.assert_called_once_with("ping")
        client.get_default_database.return_value.__getitem__.assert_called_once_with(COLLECTION_NAME)
        assert mirror.connected
        mirror.close()

    def test_unreachable_server_falls_back_silently(self):
        client = MagicMock()
        client.admin.command.side_effect = ServerSelectionTimeoutError("no server")
        mirror = MongoMirror("mongodb://nowhere", client_factory=MagicMock(return_value=client))

        assert mirror.connect() is False
        assert not mirror.connected
        client.close.assert_called_once()

    def test_writes_are_noops_when_disconnected(self):
        mirror = MongoMirror("mongodb://nowhere", client_factory=MagicMock())

        assert mirror.insert(RECORD) is None
        assert mirror.update(RECORD) is None
        assert mirror.delete(RECORD.id) is None
        mirror.close()


class TestWrites:

    def test_documents_store_dates(self):
        document = to_document(RECORD)

        assert document["createdAt"] == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert isinstance(document["updatedAt"], datetime)
        assert document["name"] == "wifi"

    def test_insert_update_delete(self):
        mirror, client, collection, _ = _connected_mirror()

        mirror.insert(RECORD)
        mirror.update(RECORD)
        mirror.delete(RECORD.id)
        mirror.close()

        collection.insert_one.assert_called_once_with(to_document(RECORD))
        collection.replace_one.assert_called_once_with({"id": 1}, to_document(RECORD), upsert=True)
        collection.delete_one.assert_called_once_with({"id": 1})
        client.close.assert_called_once()
        assert not mirror.connected

    def test_failed_write_is_swallowed(self):
        mirror, _, collection, _ = _connected_mirror()
        collection.insert_one.side_effect = PyMongoError("write failed")

        future = mirror.insert(RECORD)

        assert future.result(timeout=5) is None
        mirror.close()

    def test_writes_do_not_block_the_caller(self):
        mirror, _, collection, _ = _connected_mirror()
        release = threading.Event()
        collection.insert_one.side_effect = lambda doc: release.wait(5)

        future = mirror.insert(RECORD)

        assert not future.done()
        release.set()
        mirror.close()
        assert future.done()

    def test_write_after_close_is_dropped(self):
        mirror, _, collection, _ = _connected_mirror()
        mirror.close()

        assert mirror.insert(RECORD) is None
        collection.insert_one.assert_not_called()
