"""
Best-effort MongoDB mirror of the record collection.

The JSON file is the source of truth. The mirror connects once, and if
MongoDB is not reachable the vault silently runs on file storage alone.
Writes are queued on a background worker and never block or fail the
operation that produced them.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from recordvault.config import DEFAULT_MONGO_TIMEOUT_MS
from recordvault.record import Record, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "recordvault"
COLLECTION_NAME = "records"


def to_document(record: Record) -> Dict[str, Any]:
    """Mongo document for a record, with timestamps as BSON dates."""
    document = record.to_dict()
    document["createdAt"] = parse_timestamp(record.created_at)
    document["updatedAt"] = parse_timestamp(record.updated_at)
    return document


class MongoMirror:
    """Mirrors record inserts, updates and deletes into a MongoDB collection."""

    def __init__(
        self,
        uri: str,
        timeout_ms: int = DEFAULT_MONGO_TIMEOUT_MS,
        client_factory: Callable[..., Any] = MongoClient
    ):
        """
        Args:
            uri: MongoDB connection string
            timeout_ms: Server selection timeout for the connection attempt
            client_factory: Builds the client (MongoClient unless testing)
        """
        self.uri = uri
        self.timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._client = None
        self._collection = None
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def connected(self) -> bool:
        return self._collection is not None

    def connect(self) -> bool:
        """
        Try to reach MongoDB once.

        Returns:
            True if the mirror is live, False if running file-only
        """
        if self.connected:
            return True

        client = None
        try:
            client = self._client_factory(self.uri, serverSelectionTimeoutMS=self.timeout_ms)
            client.admin.command("ping")
            database = client.get_default_database(default=DEFAULT_DATABASE)
        except PyMongoError as e:
            logger.info(f"MongoDB not available, using file storage only ({e})")
            if client is not None:
                client.close()
            return False

        self._client = client
        self._collection = database[COLLECTION_NAME]
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mongo-mirror")
        logger.info(f"Connected to MongoDB mirror ({database.name}.{COLLECTION_NAME})")
        return True

    def insert(self, record: Record) -> Optional[Future]:
        return self._submit("insert", self._insert, to_document(record))

    def update(self, record: Record) -> Optional[Future]:
        return self._submit("update", self._update, to_document(record))

    def delete(self, record_id: int) -> Optional[Future]:
        return self._submit("delete", self._delete, record_id)

    def close(self) -> None:
        """Flush queued writes and close the connection."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._client is not None:
            self._client.close()
            self._client = None
        self._collection = None

    # -------------------------------------------------------------------------
    # Worker side
    # -------------------------------------------------------------------------

    def _submit(self, operation: str, fn: Callable[[Any], None], payload: Any) -> Optional[Future]:
        if not self.connected or self._executor is None:
            return None
        try:
            return self._executor.submit(self._run, operation, fn, payload)
        except RuntimeError as e:
            # Executor already shut down
            logger.warning(f"Mirror {operation} dropped: {e}")
            return None

    def _run(self, operation: str, fn: Callable[[Any], None], payload: Any) -> None:
        try:
            fn(payload)
            logger.debug(f"Mirror {operation} done")
        except Exception as e:
            logger.warning(f"Mirror {operation} failed: {e}")

    def _insert(self, document: Dict[str, Any]) -> None:
        self._collection.insert_one(dict(document))

    def _update(self, document: Dict[str, Any]) -> None:
        self._collection.replace_one({"id": document["id"]}, dict(document), upsert=True)

    def _delete(self, record_id: int) -> None:
        self._collection.delete_one({"id": record_id})
