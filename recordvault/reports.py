"""
Plain-text export and collection statistics.
"""
from datetime import datetime
from typing import List, Optional

from recordvault.record import Record

EXPORT_TITLE = "RecordVault Data Export"


class VaultStatistics:
    """Aggregate figures over a non-empty collection."""

    def __init__(
        self,
        total: int,
        longest_name: Record,
        earliest: Record,
        latest: Record,
        last_modified: Record
    ):
        self.total = total
        self.longest_name = longest_name
        self.earliest = earliest
        self.latest = latest
        self.last_modified = last_modified

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "longest_name": self.longest_name.to_dict(),
            "earliest": self.earliest.to_dict(),
            "latest": self.latest.to_dict(),
            "last_modified": self.last_modified.to_dict()
        }


def compute_statistics(records: List[Record]) -> Optional[VaultStatistics]:
    """
    Summarise a collection.

    Ties go to the record stored first (max/min keep the first extreme).

    Returns:
        VaultStatistics, or None for an empty collection
    """
    if not records:
        return None

    return VaultStatistics(
        total=len(records),
        longest_name=max(records, key=lambda r: len(r.name)),
        earliest=min(records, key=lambda r: r.created),
        latest=max(records, key=lambda r: r.created),
        last_modified=max(records, key=lambda r: r.updated)
    )


def format_record_line(index: int, record: Record, include_value: bool = True) -> str:
    """One numbered line describing a record, dated to the day."""
    parts = [f"{index}. ID: {record.id}", f"Name: {record.name}"]
    if include_value:
        parts.append(f"Value: {record.value}")
    parts.append(f"Created: {record.created.date().isoformat()}")
    return " | ".join(parts)


def build_export(records: List[Record], exported_at: datetime, filename: str) -> str:
    """Render the full export report."""
    lines = [
        EXPORT_TITLE,
        "=" * len(EXPORT_TITLE),
        f"Export Date: {exported_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Total Records: {len(records)}",
        f"File: {filename}",
        "",
        "Records:",
    ]
    lines.extend(format_record_line(i, r) for i, r in enumerate(records, start=1))
    return "\n".join(lines) + "\n"
