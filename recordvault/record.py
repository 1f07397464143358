"""
Record model, input validation and id generation.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from recordvault.errors import StoreError, ValidationError


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as local time."""
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment


class Record:
    """Represents a single vault record."""

    def __init__(
        self,
        record_id: int,
        name: str,
        value: str,
        created_at: str,
        updated_at: Optional[str] = None
    ):
        self.id = record_id
        self.name = name
        self.value = value
        self.created_at = created_at
        self.updated_at = updated_at or created_at

    @property
    def created(self) -> datetime:
        return parse_timestamp(self.created_at)

    @property
    def updated(self) -> datetime:
        return parse_timestamp(self.updated_at)

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to its stored (and mirrored) dictionary shape."""
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """
        Create record from its stored dictionary shape.

        Raises:
            StoreError: if a key is missing, the id is not an integer,
                name/value are not text or a timestamp does not parse
        """
        try:
            record_id = data["id"]
            if isinstance(record_id, bool) or not isinstance(record_id, int):
                raise TypeError(f"id must be an integer, got {record_id!r}")
            name, value = data["name"], data["value"]
            if not isinstance(name, str) or not isinstance(value, str):
                raise TypeError("name and value must be text")
            record = cls(
                record_id=record_id,
                name=name,
                value=value,
                created_at=data["createdAt"],
                updated_at=data.get("updatedAt")
            )
            parse_timestamp(record.created_at)
            parse_timestamp(record.updated_at)
            return record
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StoreError(f"Malformed record {data!r}: {e}") from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Record(id={self.id}, name={self.name!r})"


def validate_record(name: Any, value: Any) -> None:
    """
    Check the fields of a record about to be written.

    Raises:
        ValidationError: naming the first offending field
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name", "must be non-empty text")
    if value is None:
        raise ValidationError("value", "is required")
    if not isinstance(value, str):
        raise ValidationError("value", "must be text")


def next_id(records: Iterable[Record], last_issued: int = 0) -> int:
    """Return an id above every existing id and above the last one handed out."""
    highest = max((r.id for r in records), default=0)
    return max(highest, last_issued) + 1
