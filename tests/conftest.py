"""
Shared fixtures for RecordVault tests.
"""
import shutil
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from recordvault.backup import BackupWriter
from recordvault.events import VaultEvents
from recordvault.store import JsonFileStore
from recordvault.vault import RecordVault


class FakeClock:
    """Deterministic clock that moves forward one second per call."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test data."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(temp_dir):
    return JsonFileStore(temp_dir / "records.json")


@pytest.fixture
def backup_writer(temp_dir):
    return BackupWriter(temp_dir / "backups")


@pytest.fixture
def events():
    return VaultEvents()


@pytest.fixture
def vault(store, backup_writer, events, clock, temp_dir):
    """A file-only vault (no mirror) with a deterministic clock."""
    return RecordVault(
        store=store,
        backups=backup_writer,
        events=events,
        clock=clock,
        export_path=temp_dir / "export.txt",
    )
