"""
RecordVault - Personal Record Keeping

A local-first record store with automatic backups and an optional MongoDB mirror.
"""

__version__ = "0.1.0"

from recordvault.errors import StoreError, ValidationError, VaultError
from recordvault.record import Record
from recordvault.vault import RecordVault, open_vault

__all__ = [
    "Record",
    "RecordVault",
    "StoreError",
    "ValidationError",
    "VaultError",
    "open_vault",
]
