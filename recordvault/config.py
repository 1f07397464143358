"""
RecordVault configuration
"""
from dataclasses import dataclass
from pathlib import Path
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_MONGODB_URI = "mongodb://localhost:27017/recordvault"
DEFAULT_MONGO_TIMEOUT_MS = 2000

DATA_FILENAME = "records.json"
EXPORT_FILENAME = "export.txt"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class VaultSettings:
    """Filesystem locations and mirror connection settings."""
    root: Path
    mongodb_uri: str = DEFAULT_MONGODB_URI
    mirror_enabled: bool = True
    mongo_timeout_ms: int = DEFAULT_MONGO_TIMEOUT_MS

    @property
    def data_dir(self) -> Path:
        return self.root / ".recordvault"

    @property
    def data_path(self) -> Path:
        """Path to the JSON file holding the collection."""
        return self.data_dir / DATA_FILENAME

    @property
    def backup_dir(self) -> Path:
        return self.data_dir / "backups"

    @property
    def export_path(self) -> Path:
        return self.root / EXPORT_FILENAME

    @classmethod
    def from_env(cls) -> "VaultSettings":
        """
        Build settings from the environment.

        RECORDVAULT_ROOT overrides the project root (default: ~/RecordVault),
        MONGODB_URI the mirror connection string. RECORDVAULT_MIRROR=0 turns
        the mirror off entirely.
        """
        root = Path(os.environ.get("RECORDVAULT_ROOT", Path.home() / "RecordVault"))
        mirror_flag = os.environ.get("RECORDVAULT_MIRROR", "1").strip().lower()
        raw_timeout = os.environ.get("RECORDVAULT_MONGO_TIMEOUT_MS", str(DEFAULT_MONGO_TIMEOUT_MS))
        try:
            timeout = int(raw_timeout)
        except ValueError:
            logger.warning(
                f"Ignoring RECORDVAULT_MONGO_TIMEOUT_MS={raw_timeout!r}, using {DEFAULT_MONGO_TIMEOUT_MS}"
            )
            timeout = DEFAULT_MONGO_TIMEOUT_MS
        return cls(
            root=root,
            mongodb_uri=os.environ.get("MONGODB_URI", DEFAULT_MONGODB_URI),
            mirror_enabled=mirror_flag not in _FALSE_VALUES,
            mongo_timeout_ms=timeout,
        )
