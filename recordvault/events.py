"""
In-process change notifications.

Listeners are plain callables taking the affected Record. Nothing here
touches the filesystem, so tests can subscribe to a vault directly.
"""
import logging
from collections import defaultdict
from typing import Callable, Dict, List

from recordvault.record import Record

logger = logging.getLogger(__name__)

RECORD_ADDED = "recordAdded"
RECORD_UPDATED = "recordUpdated"
RECORD_DELETED = "recordDeleted"

EVENT_NAMES = (RECORD_ADDED, RECORD_UPDATED, RECORD_DELETED)

Listener = Callable[[Record], None]


class VaultEvents:
    """Observer registry for record mutations."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        """Register `listener` for `event`."""
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        """Unregister `listener`; unknown listeners are ignored."""
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def emit(self, event: str, record: Record) -> None:
        """
        Call every listener registered for `event`.

        A failing listener is logged; the remaining listeners still run.
        """
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(record)
            except Exception:
                logger.exception(f"Listener for {event} failed on record {record.id}")


def log_event(event: str) -> Listener:
    """Build a listener that logs `event` at INFO level."""
    def _listener(record: Record) -> None:
        logger.info(f"{event}: id={record.id} name={record.name!r}")
    return _listener
