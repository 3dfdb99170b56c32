"""FastAPI application for the Compliance OCR API.

Provides REST endpoints for document upload, listing, detail,
summary reporting, CSV export, and health checks.
"""

import re
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session
from starlette.datastructures import State

from compliance_ocr import __version__
from compliance_ocr.exceptions import PipelineError, UnsupportedFormatError
from compliance_ocr.extraction.fields import DocumentType
from compliance_ocr.ocr.document_processor import DocumentProcessor
from compliance_ocr.ocr.tesseract_engine import TesseractEngine
from compliance_ocr.reporting.reports import build_summary, export_csv
from compliance_ocr.storage.database import Database
from compliance_ocr.storage.models import DocumentRecord
from compliance_ocr.storage.repository import DocumentRepository
from compliance_ocr.utils.config import AppConfig, load_config
from compliance_ocr.utils.logger import get_logger

from .schemas import (
    ComplianceIssueResponse,
    DocumentDetailResponse,
    DocumentListItem,
    DocumentListResponse,
    ExtractedFieldResponse,
    HealthResponse,
    SummaryResponse,
    UploadResponse,
)

logger = get_logger(__name__)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "image/webp",
    "application/octet-stream",
}


def stored_filename(original: str) -> str:
    """Build a timestamped, filesystem-safe name for an upload."""
    safe_name = re.sub(r"[^a-zA-Z0-9._-]", "_", original)
    return f"{time.time_ns() // 1_000_000}-{safe_name}"


def get_session(request: Request) -> Iterator[Session]:
    with request.app.state.database.session() as session:
        yield session


def get_repository(session: Annotated[Session, Depends(get_session)]) -> DocumentRepository:
    return DocumentRepository(session)


Repository = Annotated[DocumentRepository, Depends(get_repository)]

router = APIRouter(prefix="/api")


@router.get("")
async def api_root() -> dict[str, str]:
    return {"message": "OCR Compliance API"}


def _store_and_process(
    state: State,
    repo: DocumentRepository,
    content: bytes,
    original_name: str,
    content_type: str | None,
) -> DocumentRecord:
    """Write an upload to disk, run the pipeline, and persist the result.

    The stored file is removed again if any step fails.
    """
    storage_path = Path(state.config.storage.upload_dir) / stored_filename(original_name)
    storage_path.write_bytes(content)
    try:
        result = state.processor.process(storage_path, original_name)
        return repo.save(
            result,
            storage_path=str(storage_path),
            filename=original_name,
            mime_type=content_type,
            size_bytes=len(content),
        )
    except Exception:
        storage_path.unlink(missing_ok=True)
        raise


@router.post("/documents/upload", response_model=UploadResponse, status_code=201)
async def upload_document(
    request: Request,
    repo: Repository,
    file: Annotated[UploadFile | None, File()] = None,
) -> UploadResponse:
    """Store an uploaded image, run the pipeline on it, and persist the result.

    Args:
        file: Uploaded document image.

    Returns:
        The new document id, its type, and how many issues were raised.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    original_name = file.filename or "document"
    content = await file.read()

    try:
        # disk, OCR and database work all block; keep them off the event loop
        record = await run_in_threadpool(
            _store_and_process,
            request.app.state,
            repo,
            content,
            original_name,
            file.content_type,
        )
    except UnsupportedFormatError as exc:
        logger.error("Rejected %s: %s", original_name, exc)
        raise HTTPException(status_code=415, detail=str(exc)) from exc
    except PipelineError as exc:
        logger.error("Processing failed for %s: %s", original_name, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Storing %s failed", original_name)
        raise HTTPException(status_code=500, detail="Document could not be stored") from exc

    return UploadResponse(
        id=record.id, issues_count=len(record.issues), type=record.type
    )


@router.get("/documents", response_model=DocumentListResponse)
def list_documents(
    repo: Repository,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    missing_gst: bool = False,
    document_type: Annotated[DocumentType | None, Query(alias="type")] = None,
) -> DocumentListResponse:
    """List stored documents, newest first."""
    records, total = repo.list_documents(
        page=page, limit=limit, document_type=document_type, missing_gst=missing_gst
    )
    items = [
        DocumentListItem(
            id=r.id,
            filename=r.filename,
            type=r.type,
            created_at=r.created_at,
            issues_count=len(r.issues),
        )
        for r in records
    ]
    return DocumentListResponse(items=items, total=total, page=page, limit=limit)


@router.get("/documents/{document_id}", response_model=DocumentDetailResponse)
def get_document(
    document_id: str, request: Request, repo: Repository
) -> DocumentDetailResponse:
    """Return one document with its extracted fields and issues."""
    record = repo.get(document_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Not found")

    base_url = request.app.state.config.storage.base_url.rstrip("/")
    return DocumentDetailResponse(
        id=record.id,
        filename=record.filename,
        mime_type=record.mime_type,
        size_bytes=record.size_bytes,
        type=record.type,
        text=record.text,
        ocr_confidence=record.ocr_confidence,
        created_at=record.created_at,
        file_url=f"{base_url}/static/{Path(record.storage_path).name}",
        fields=[ExtractedFieldResponse.model_validate(f) for f in record.fields],
        issues=[ComplianceIssueResponse.model_validate(i) for i in record.issues],
    )


@router.get("/reports/summary", response_model=SummaryResponse)
def report_summary(repo: Repository) -> SummaryResponse:
    """Return total documents, bills missing a GSTIN, and total issues."""
    return SummaryResponse(**build_summary(repo).to_dict())


@router.get("/reports/export.csv")
def report_export(repo: Repository) -> Response:
    """Download every stored document as a CSV attachment."""
    return Response(
        content=export_csv(repo.all_with_details()),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="export.csv"'},
    )


def create_app(
    config: AppConfig | None = None,
    processor: DocumentProcessor | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        config: Application configuration; loaded from YAML when omitted.
        processor: Document pipeline; built from ``config`` when omitted.
        database: Document store; built from ``config.storage`` when omitted.

    Returns:
        Configured FastAPI application.
    """
    config = config or load_config()
    database = database or Database(config.storage.database_url)
    database.create_all()

    upload_dir = Path(config.storage.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    app = FastAPI(
        title="Compliance OCR API",
        description="OCR, field extraction, and compliance checks for bills and cheques",
        version=__version__,
    )
    app.state.config = config
    app.state.database = database
    app.state.processor = processor or DocumentProcessor(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Return system health status."""
        return HealthResponse(
            status="ok",
            version=__version__,
            tesseract_available=TesseractEngine.is_available(),
        )

    app.include_router(router)
    app.mount("/static", StaticFiles(directory=str(upload_dir)), name="static")
    return app
