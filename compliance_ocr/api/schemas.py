"""Pydantic request/response schemas for the FastAPI endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ExtractedFieldResponse(BaseModel):
    """Response schema for a stored extracted field."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    value: str
    confidence: float | None = None


class ComplianceIssueResponse(BaseModel):
    """Response schema for a stored compliance issue."""

    model_config = ConfigDict(from_attributes=True)

    code: str
    description: str
    severity: str


class UploadResponse(BaseModel):
    """Response schema for a processed upload."""

    id: str
    issues_count: int
    type: str


class DocumentListItem(BaseModel):
    """Summary row for the document listing."""

    id: str
    filename: str
    type: str
    created_at: datetime
    issues_count: int


class DocumentListResponse(BaseModel):
    """Paginated document listing."""

    items: list[DocumentListItem]
    total: int
    page: int
    limit: int


class DocumentDetailResponse(BaseModel):
    """A stored document with its fields and issues."""

    id: str
    filename: str
    mime_type: str | None = None
    size_bytes: int | None = None
    type: str
    text: str
    ocr_confidence: float | None = None
    created_at: datetime
    file_url: str
    fields: list[ExtractedFieldResponse]
    issues: list[ComplianceIssueResponse]


class SummaryResponse(BaseModel):
    """Aggregate counts over stored documents."""

    total_docs: int
    bills_missing_gst: int
    total_issues: int


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
