"""
Record operations and queries over the vault.

Every call loads the whole collection from the store, works on it in memory
and, for mutations, writes it back before taking a backup snapshot, mirroring
the change and notifying listeners:

    load -> compute -> save -> snapshot -> mirror -> emit

Only the save is allowed to fail the operation. Snapshots and the MongoDB
mirror are best-effort and log their own failures.

Nothing is cached between calls; concurrent writers are not supported and
the last save wins.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from functools import lru_cache
from typing import Callable, Iterator, List, Optional, Tuple

from pyuca import Collator

from recordvault.backup import BackupWriter
from recordvault.config import VaultSettings
from recordvault.events import (
    EVENT_NAMES,
    RECORD_ADDED,
    RECORD_DELETED,
    RECORD_UPDATED,
    VaultEvents,
    log_event,
)
from recordvault.mirror import MongoMirror
from recordvault.record import Record, next_id, validate_record
from recordvault.reports import VaultStatistics, build_export, compute_statistics
from recordvault.store import JsonFileStore, RecordStore

logger = logging.getLogger(__name__)

def _local_now() -> datetime:
    return datetime.now().astimezone()


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # One collation table per process
    return Collator()


def name_sort_key(name: str) -> Tuple[Tuple[int, ...], str]:
    """Unicode collation key for a name, with the raw text as a tiebreak."""
    return _collator().sort_key(name), name


class RecordVault:
    """
    Record store with backup-on-write, an optional mirror and change events.

    Holds the process-local state the operations share: the mirror handle
    and the last id handed out.
    """

    def __init__(
        self,
        store: RecordStore,
        backups: Optional[BackupWriter] = None,
        mirror: Optional[MongoMirror] = None,
        events: Optional[VaultEvents] = None,
        clock: Optional[Callable[[], datetime]] = None,
        export_path: Optional[Path] = None
    ):
        """
        Args:
            store: Durable store for the collection
            backups: Snapshot writer; no snapshots are taken if omitted
            mirror: Connected (or not) MongoDB mirror
            events: Observer registry; a private one is created if omitted
            clock: Returns "now" for record timestamps
            export_path: Default target for export()
        """
        self.store = store
        self.backups = backups
        self.mirror = mirror
        self.events = events or VaultEvents()
        self.export_path = Path(export_path) if export_path else Path("export.txt")
        self._clock = clock or _local_now
        self._last_id = 0

    def __enter__(self) -> "RecordVault":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        """Release the mirror connection (flushing queued writes)."""
        if self.mirror is not None:
            self.mirror.close()

    # -------------------------------------------------------------------------
    # Record operations
    # -------------------------------------------------------------------------

    def add(self, name: str, value: str) -> Record:
        """
        Create a record.

        Args:
            name: Non-empty label
            value: Text payload

        Returns:
            The new record

        Raises:
            ValidationError: before any I/O, if name or value is invalid
            StoreError: if the collection cannot be loaded or saved
        """
        validate_record(name, value)
        records = self.store.load()

        record_id = next_id(records, self._last_id)
        now = self._clock().isoformat()
        record = Record(record_id=record_id, name=name, value=value, created_at=now, updated_at=now)
        records.append(record)

        self._commit(records)
        self._last_id = record_id
        if self.mirror is not None:
            self.mirror.insert(record)
        self.events.emit(RECORD_ADDED, record)

        logger.info(f"Added record {record.id}")
        return record

    def list(self) -> List[Record]:
        """All records in stored order."""
        return self.store.load()

    def get(self, record_id: int) -> Optional[Record]:
        """Look up a single record; None if absent."""
        return _find(self.store.load(), record_id)

    def update(self, record_id: int, name: str, value: str) -> Optional[Record]:
        """
        Replace a record's name and value.

        Returns:
            The updated record, or None if no record has this id
            (nothing is written in that case)
        """
        validate_record(name, value)
        records = self.store.load()
        record = _find(records, record_id)
        if record is None:
            return None

        moment = self._clock()
        previous = record.updated
        if moment <= previous:
            moment = previous + timedelta(microseconds=1)

        record.name = name
        record.value = value
        record.updated_at = moment.isoformat()

        self._commit(records)
        if self.mirror is not None:
            self.mirror.update(record)
        self.events.emit(RECORD_UPDATED, record)

        logger.info(f"Updated record {record.id}")
        return record

    def delete(self, record_id: int) -> Optional[Record]:
        """
        Remove a record, keeping the order of the others.

        Returns:
            The removed record, or None if no record has this id
        """
        records = self.store.load()
        record = _find(records, record_id)
        if record is None:
            return None

        remaining = [r for r in records if r.id != record_id]
        self._commit(remaining)
        if self.mirror is not None:
            self.mirror.delete(record.id)
        self.events.emit(RECORD_DELETED, record)

        logger.info(f"Deleted record {record.id}")
        return record

    def _commit(self, records: List[Record]) -> None:
        self.store.save(records)
        if self.backups is not None:
            self.backups.snapshot(records)

    # -------------------------------------------------------------------------
    # Queries and reports
    # -------------------------------------------------------------------------

    def search(self, keyword: str) -> List[Record]:
        """
        Records whose name contains `keyword` (case-insensitive) or whose
        id contains it as text, in stored order.
        """
        term = keyword.lower()
        matches = [
            r for r in self.store.load()
            if term in r.name.lower() or term in str(r.id)
        ]
        logger.info(f"Found {len(matches)} records matching {keyword!r}")
        return matches

    def sort(self, field: str = "name", order: Optional[str] = "asc") -> List[Record]:
        """
        Sorted copy of the collection; the stored file is not touched.

        Args:
            field: "name" (Unicode collation order) or "date" (creation
                time). Any other value keeps stored order.
            order: "desc" reverses; anything else is ascending
        """
        records = list(self.store.load())
        key = (field or "").lower()

        if key == "name":
            records.sort(key=lambda r: name_sort_key(r.name))
        elif key == "date":
            records.sort(key=lambda r: r.created)
        else:
            logger.debug(f"Unsupported sort field {field!r}, keeping stored order")

        if (order or "").lower() == "desc":
            records.reverse()
        return records

    def export(self, path: Optional[Path] = None) -> Path:
        """
        Write a human-readable report of every record, replacing any previous export.

        Returns:
            Path of the export file
        """
        target = Path(path) if path else self.export_path
        records = self.store.load()
        content = build_export(records, self._clock(), target.name)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.info(f"Exported {len(records)} records to {target}")
        return target

    def statistics(self) -> Optional[VaultStatistics]:
        """Collection statistics, or None when the vault is empty."""
        return compute_statistics(self.store.load())


def _find(records: List[Record], record_id: int) -> Optional[Record]:
    for record in records:
        if record.id == record_id:
            return record
    return None


@contextmanager
def open_vault(settings: Optional[VaultSettings] = None) -> Iterator[RecordVault]:
    """
    Wire up a vault from settings and close it on exit.

    The MongoDB connection is attempted once here; if it fails the vault
    runs on the JSON file alone.
    """
    settings = settings or VaultSettings.from_env()

    mirror = None
    if settings.mirror_enabled:
        mirror = MongoMirror(settings.mongodb_uri, timeout_ms=settings.mongo_timeout_ms)
        mirror.connect()

    events = VaultEvents()
    for event in EVENT_NAMES:
        events.on(event, log_event(event))

    vault = RecordVault(
        store=JsonFileStore(settings.data_path),
        backups=BackupWriter(settings.backup_dir),
        mirror=mirror,
        events=events,
        export_path=settings.export_path,
    )
    try:
        yield vault
    finally:
        vault.close()
