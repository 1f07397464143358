"""
Timestamped backup snapshots, one per mutation.

Snapshots are append-only: an existing file is never overwritten and
nothing here ever deletes one. A failed snapshot is logged and otherwise
ignored; it must not undo the write that triggered it.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from recordvault.record import Record
from recordvault.store import serialize_records

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "backup_"
BACKUP_SUFFIX = ".json"
# Give up after this many name collisions within the same timestamp
MAX_COLLISIONS = 1000


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def snapshot_name(moment: datetime, attempt: int = 0) -> str:
    """Filesystem-safe snapshot filename for a point in time."""
    stamp = moment.strftime("%Y-%m-%dT%H:%M:%S.%f").replace(":", "-").replace(".", "-")
    if attempt:
        stamp = f"{stamp}-{attempt}"
    return f"{BACKUP_PREFIX}{stamp}{BACKUP_SUFFIX}"


class BackupWriter:
    """Writes snapshots of the collection into a dedicated directory."""

    def __init__(self, directory: Path, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            directory: Backup directory (created on first snapshot)
            clock: Returns the snapshot time; defaults to current UTC time
        """
        self.directory = Path(directory)
        self._clock = clock or _utc_now

    def snapshot(self, records: List[Record]) -> Optional[Path]:
        """
        Write a new snapshot of `records`.

        Returns:
            Path of the snapshot, or None if it could not be written
        """
        payload = serialize_records(records)
        moment = self._clock()

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            for attempt in range(MAX_COLLISIONS):
                path = self.directory / snapshot_name(moment, attempt)
                try:
                    with open(path, "x", encoding="utf-8") as f:
                        f.write(payload)
                except FileExistsError:
                    continue
                logger.debug(f"Backup created: {path.name}")
                return path
            logger.error(f"Backup skipped: too many snapshots named after {moment.isoformat()}")
        except OSError as e:
            logger.error(f"Backup failed in {self.directory}: {e}")
        return None

    def list_snapshots(self) -> List[Path]:
        """Existing snapshots, oldest first."""
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob(f"{BACKUP_PREFIX}*{BACKUP_SUFFIX}"))
