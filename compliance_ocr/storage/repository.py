"""Read and write access to processed documents."""

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from compliance_ocr.extraction.fields import DocumentType
from compliance_ocr.ocr.document_processor import ProcessingResult
from compliance_ocr.utils.logger import get_logger

from .models import DocumentRecord, FieldRecord, IssueRecord

logger = get_logger(__name__)

GST_MISSING = "GST_MISSING"


class DocumentRepository:
    """Persists pipeline results and serves them back for listing and reports.

    Args:
        session: An open SQLAlchemy session.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def save(
        self,
        result: ProcessingResult,
        *,
        storage_path: str,
        filename: str | None = None,
        mime_type: str | None = None,
        size_bytes: int | None = None,
    ) -> DocumentRecord:
        """Store a document with its fields and issues in a single commit.

        Returns:
            The persisted record, with its generated id.
        """
        record = DocumentRecord(
            filename=filename or result.source_file,
            mime_type=mime_type,
            size_bytes=size_bytes,
            storage_path=storage_path,
            text=result.ocr.text,
            ocr_confidence=result.ocr.confidence,
            type=result.document_type.value,
            fields=[
                FieldRecord(name=str(f.name), value=f.value, confidence=f.confidence)
                for f in result.fields
            ],
            issues=[
                IssueRecord(
                    code=i.code, description=i.description, severity=i.severity.value
                )
                for i in result.issues
            ],
        )
        self.session.add(record)
        self.session.commit()
        logger.info(
            "Stored document %s (%s) with %d issue(s)",
            record.id,
            record.filename,
            len(record.issues),
        )
        return record

    def get(self, document_id: str) -> DocumentRecord | None:
        """Return a document with its fields and issues, or ``None``."""
        stmt = (
            select(DocumentRecord)
            .where(DocumentRecord.id == document_id)
            .options(
                selectinload(DocumentRecord.fields),
                selectinload(DocumentRecord.issues),
            )
        )
        return self.session.scalars(stmt).first()

    def list_documents(
        self,
        page: int = 1,
        limit: int = 20,
        document_type: DocumentType | None = None,
        missing_gst: bool = False,
    ) -> tuple[list[DocumentRecord], int]:
        """Return one page of documents, newest first, and the filtered total.

        Args:
            page: 1-based page number.
            limit: Page size.
            document_type: Only documents of this type.
            missing_gst: Only documents carrying a GST_MISSING issue.

        Returns:
            Tuple of (records, total matching records).
        """
        conditions = []
        if document_type is not None:
            conditions.append(DocumentRecord.type == DocumentType(document_type).value)
        if missing_gst:
            conditions.append(DocumentRecord.issues.any(IssueRecord.code == GST_MISSING))

        stmt = (
            select(DocumentRecord)
            .where(*conditions)
            .options(selectinload(DocumentRecord.issues))
            .order_by(DocumentRecord.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        total_stmt = select(func.count()).select_from(DocumentRecord).where(*conditions)

        records = list(self.session.scalars(stmt))
        total = self.session.scalar(total_stmt) or 0
        return records, total

    def all_with_details(self) -> list[DocumentRecord]:
        """Return every document with fields and issues, newest first."""
        stmt = (
            select(DocumentRecord)
            .options(
                selectinload(DocumentRecord.fields),
                selectinload(DocumentRecord.issues),
            )
            .order_by(DocumentRecord.created_at.desc())
        )
        return list(self.session.scalars(stmt))

    def count_documents(self) -> int:
        return self.session.scalar(select(func.count()).select_from(DocumentRecord)) or 0

    def count_bills_missing_gst(self) -> int:
        stmt = (
            select(func.count())
            .select_from(DocumentRecord)
            .where(
                DocumentRecord.type == DocumentType.BILL.value,
                DocumentRecord.issues.any(IssueRecord.code == GST_MISSING),
            )
        )
        return self.session.scalar(stmt) or 0

    def count_issues(self) -> int:
        return self.session.scalar(select(func.count()).select_from(IssueRecord)) or 0
