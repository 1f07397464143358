"""
Exceptions raised by RecordVault.

Not-found is not an error here: update/delete/get return None instead.
"""


class VaultError(Exception):
    """Base class for all RecordVault errors."""


class ValidationError(VaultError):
    """Input to a mutating operation was rejected before any I/O happened."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class StoreError(VaultError):
    """The durable store could not be read or written."""
