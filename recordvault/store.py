"""
Durable store for the record collection.

The whole collection is read and rewritten on every call. Callers only see
the RecordStore interface, so an incremental backend could replace the JSON
file without touching RecordVault.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from recordvault.errors import StoreError
from recordvault.record import Record

logger = logging.getLogger(__name__)


def serialize_records(records: List[Record]) -> str:
    """Serialize a collection the way it is written to disk (and to backups)."""
    return json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False) + "\n"


class RecordStore(ABC):
    """Persists exactly one collection, read and written as a unit."""

    @abstractmethod
    def load(self) -> List[Record]:
        """Return the persisted collection, or [] if nothing is stored yet."""

    @abstractmethod
    def save(self, records: List[Record]) -> None:
        """Replace the persisted collection with `records`."""


class JsonFileStore(RecordStore):
    """Stores the collection as a JSON array in a single file."""

    def __init__(self, path: Path):
        """
        Args:
            path: Path to the JSON data file (created on first save)
        """
        self.path = Path(path)

    def load(self) -> List[Record]:
        """
        Re-read the collection from disk.

        Returns:
            Records in stored order

        Raises:
            StoreError: if the file exists but cannot be read or parsed
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise StoreError(f"Expected a JSON array in {self.path}, got {type(data).__name__}")

        records = [Record.from_dict(item) for item in data]
        logger.debug(f"Loaded {len(records)} records from {self.path}")
        return records

    def save(self, records: List[Record]) -> None:
        """
        Write the collection to a temp file and rename it over the data file.

        Either the whole collection lands on disk or the previous file is
        left untouched.

        Raises:
            StoreError: if the write or rename fails
        """
        payload = serialize_records(records)
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.debug(f"Saved {len(records)} records to {self.path}")
