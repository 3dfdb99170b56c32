"""Unified document processing pipeline.

Runs image normalization, OCR, field extraction, and compliance
evaluation for a single scanned document.
"""

from dataclasses import dataclass, field
from pathlib import Path

from compliance_ocr.compliance.rules_engine import ComplianceEvaluator, ComplianceIssue
from compliance_ocr.extraction.fields import DocumentType, ExtractedField, FieldMap
from compliance_ocr.extraction.rule_extractor import RuleExtractor
from compliance_ocr.preprocessing.normalizer import ImageNormalizer
from compliance_ocr.utils.config import AppConfig
from compliance_ocr.utils.logger import get_logger

from .tesseract_engine import OCRResult, TesseractEngine

logger = get_logger(__name__)


@dataclass
class ProcessingResult:
    """Everything the pipeline derives from one document."""

    source_file: str
    ocr: OCRResult
    document_type: DocumentType
    fields: list[ExtractedField] = field(default_factory=list)
    issues: list[ComplianceIssue] = field(default_factory=list)

    @property
    def field_map(self) -> FieldMap:
        return FieldMap(self.fields)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable view of the result."""
        return {
            "filename": self.source_file,
            "type": self.document_type.value,
            "confidence": self.ocr.confidence,
            "fields": [
                {"name": str(f.name), "value": f.value, "confidence": f.confidence}
                for f in self.fields
            ],
            "issues": [
                {
                    "code": i.code,
                    "description": i.description,
                    "severity": i.severity.value,
                }
                for i in self.issues
            ],
            "text": self.ocr.text,
        }


class DocumentProcessor:
    """End-to-end pipeline for a scanned bill or cheque.

    Holds no per-document state, so one instance may serve concurrent
    calls for different files.

    Args:
        config: Application configuration object.
        engine: OCR engine; built from ``config.ocr`` when omitted.
    """

    def __init__(
        self, config: AppConfig | None = None, engine: TesseractEngine | None = None
    ) -> None:
        self.config = config or AppConfig()
        self.normalizer = ImageNormalizer(self.config.preprocessing)
        self.ocr_engine = engine or TesseractEngine(
            tesseract_cmd=self.config.ocr.tesseract_cmd,
            lang=self.config.ocr.lang,
            psm=self.config.ocr.psm,
            timeout=self.config.ocr.timeout_s,
        )
        self.extractor = RuleExtractor()
        self.evaluator = ComplianceEvaluator(config=self.config.compliance)

    def process(self, path: Path, filename: str | None = None) -> ProcessingResult:
        """Process a document image from disk.

        Args:
            path: Path to the stored document image.
            filename: Display name; defaults to the file name of ``path``.

        Returns:
            OCR text, document type, extracted fields, and compliance issues.

        Raises:
            IoError: If the image cannot be read or the transient copy written.
            UnsupportedFormatError: If the image cannot be decoded.
            OcrEngineError: If Tesseract fails.
        """
        path = Path(path)
        filename = filename or path.name
        logger.info("Processing document: %s", filename)

        with self.normalizer.normalized(path) as normalized_path:
            ocr_result = self.ocr_engine.recognize(normalized_path)

        result = self.analyze(ocr_result, filename)
        logger.info(
            "Processed %s as %s with %d field(s) and %d issue(s)",
            filename,
            result.document_type,
            len(result.fields),
            len(result.issues),
        )
        return result

    def analyze(self, ocr_result: OCRResult, filename: str = "document") -> ProcessingResult:
        """Run extraction and compliance on already-recognized text."""
        fields = self.extractor.extract(ocr_result.text)
        document_type = self.extractor.document_type(fields)
        issues = self.evaluator.evaluate(ocr_result.text, fields, document_type)
        return ProcessingResult(
            source_file=filename,
            ocr=ocr_result,
            document_type=document_type,
            fields=fields,
            issues=issues,
        )
