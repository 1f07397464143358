"""
Tests for backup snapshots.
"""
import logging
from datetime import datetime, timezone

from recordvault.backup import BackupWriter, snapshot_name
from recordvault.record import Record
from recordvault.store import serialize_records

FIXED = datetime(2025, 6, 1, 9, 30, 15, 123456, tzinfo=timezone.utc)


def _records():
    return [Record(1, "wifi", "secret1", "2025-01-01T12:00:00+00:00")]


class TestSnapshotName:

    def test_no_colons_or_dots_in_timestamp(self):
        name = snapshot_name(FIXED)
        stamp = name[len("backup_"):-len(".json")]

        assert name == "backup_2025-06-01T09-30-15-123456.json"
        assert ":" not in stamp and "." not in stamp

    def test_collision_suffix(self):
        assert snapshot_name(FIXED, 2) == "backup_2025-06-01T09-30-15-123456-2.json"


class TestBackupWriter:

    def test_creates_directory_on_first_use(self, temp_dir):
        writer = BackupWriter(temp_dir / "backups")
        assert not writer.directory.exists()

        path = writer.snapshot(_records())

        assert path is not None
        assert path.parent == writer.directory

    def test_contents_match_store_serialization(self, backup_writer):
        path = backup_writer.snapshot(_records())
        assert path.read_text(encoding="utf-8") == serialize_records(_records())

    def test_same_timestamp_never_overwrites(self, temp_dir):
        writer = BackupWriter(temp_dir / "backups", clock=lambda: FIXED)

        first = writer.snapshot(_records())
        second = writer.snapshot([])

        assert first != second
        assert first.read_text(encoding="utf-8") == serialize_records(_records())
        assert second.read_text(encoding="utf-8") == serialize_records([])
        assert len(writer.list_snapshots()) == 2

    def test_failure_is_logged_not_raised(self, temp_dir, caplog):
        blocker = temp_dir / "backups"
        blocker.write_text("not a directory", encoding="utf-8")
        writer = BackupWriter(blocker)

        with caplog.at_level(logging.ERROR, logger="recordvault.backup"):
            assert writer.snapshot(_records()) is None

        assert "Backup failed" in caplog.text

    def test_list_snapshots_without_directory(self, temp_dir):
        assert BackupWriter(temp_dir / "missing").list_snapshots() == []
