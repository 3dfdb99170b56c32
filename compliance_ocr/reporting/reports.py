"""Summary counts and CSV export over stored documents.

Pure projections of persisted data; nothing here re-runs the pipeline.
"""

import csv
import io
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import TextIO

from compliance_ocr.extraction.fields import FieldName
from compliance_ocr.storage.models import DocumentRecord
from compliance_ocr.storage.repository import DocumentRepository

EXPORT_COLUMNS = ["id", "filename", "type", "createdAt", "gstin", "amount", "issues"]


@dataclass
class Summary:
    """Aggregate counts across all stored documents."""

    total_docs: int
    bills_missing_gst: int
    total_issues: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def build_summary(repo: DocumentRepository) -> Summary:
    """Count documents, bills flagged GST_MISSING, and issues."""
    return Summary(
        total_docs=repo.count_documents(),
        bills_missing_gst=repo.count_bills_missing_gst(),
        total_issues=repo.count_issues(),
    )


def isoformat_utc(value: datetime) -> str:
    """Format a timestamp as ISO-8601, treating naive values as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def export_rows(records: Iterable[DocumentRecord]) -> list[dict[str, object]]:
    """Flatten documents into export rows; absent fields become ``""``."""
    rows: list[dict[str, object]] = []
    for record in records:
        fields = record.field_map
        rows.append(
            {
                "id": record.id,
                "filename": record.filename,
                "type": record.type,
                "createdAt": isoformat_utc(record.created_at),
                "gstin": fields.get(FieldName.GSTIN) or "",
                "amount": fields.get(FieldName.AMOUNT) or "",
                "issues": len(record.issues),
            }
        )
    return rows


def write_csv(rows: Iterable[dict[str, object]], stream: TextIO) -> None:
    """Write export rows with a header line to ``stream``."""
    writer = csv.DictWriter(stream, fieldnames=EXPORT_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)


def export_csv(records: Iterable[DocumentRecord]) -> str:
    """Render documents as CSV text."""
    buf = io.StringIO()
    write_csv(export_rows(records), buf)
    return buf.getvalue()
