"""Rule-based field extraction using regex patterns.

Detects GSTINs, monetary amounts, and dates in OCR text and classifies
the document as a bill or a cheque. Each matcher is an independent
pure function; ``RuleExtractor`` runs them in a fixed order.
"""

import math
import re
from collections.abc import Callable, Sequence
from decimal import Decimal

from compliance_ocr.utils.logger import get_logger

from .fields import DocumentType, ExtractedField, FieldMap, FieldName

logger = get_logger(__name__)

Matcher = Callable[[str], list[ExtractedField]]

# 2 digits, 5 letters, 4 digits, letter, alphanumeric, Z/z, alphanumeric
GSTIN_PATTERN = re.compile(
    r"\b[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][A-Z0-9][Zz][A-Z0-9]\b", re.ASCII
)

# Grouped thousands require decimals; otherwise a plain digit run.
AMOUNT_PATTERN = re.compile(
    r"(?:INR|Rs\.?|₹)?\s*"
    r"([0-9]{1,3}(?:,[0-9]{3})*(?:\.[0-9]{1,2})|[0-9]+(?:\.[0-9]{1,2})?)"
)

DATE_PATTERN = re.compile(
    r"\b([0-9]{1,2}[/-][0-9]{1,2}[/-][0-9]{2,4}|[0-9]{4}-[0-9]{2}-[0-9]{2})\b",
    re.ASCII,
)

CHEQUE_MARKERS: tuple[str, ...] = ("cheque", "check no", "micr")


def format_amount(value: float) -> str:
    """Render a parsed amount the way a JavaScript number prints.

    Integral values drop the decimal point (``100.0`` -> ``"100"``) and are
    written out in full below ``1e21``, padded with zeros past the 17
    significant digits a float holds. Larger values use exponent form
    (``1.2345e+22``), overflow renders as ``"Infinity"``, and fractions use
    the shortest round-trip form (``12345.5``).
    """
    if math.isinf(value):
        return "Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return format(Decimal(repr(value)).normalize(), "f")
    return repr(value)


def parse_amount(raw: str) -> float | None:
    """Parse an amount literal, ignoring thousands separators."""
    try:
        value = float(raw.replace(",", ""))
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def match_gstin(text: str) -> list[ExtractedField]:
    """Return the first GSTIN-shaped token, without checksum validation."""
    match = GSTIN_PATTERN.search(text)
    if not match:
        return []
    return [ExtractedField(FieldName.GSTIN, match.group(0))]


def match_amount(text: str) -> list[ExtractedField]:
    """Return the numerically largest amount as AMOUNT and AMOUNT_RAW.

    The earliest candidate wins ties since replacement requires a
    strictly greater value.
    """
    best: float | None = None
    best_raw: str | None = None

    for match in AMOUNT_PATTERN.finditer(text):
        raw = match.group(1)
        if not raw:
            continue
        value = parse_amount(raw)
        if value is not None and (best is None or value > best):
            best = value
            best_raw = raw

    if best is None:
        return []

    logger.debug("Selected amount %s from %r", best, best_raw)
    return [
        ExtractedField(FieldName.AMOUNT, format_amount(best)),
        ExtractedField(FieldName.AMOUNT_RAW, best_raw or ""),
    ]


def match_date(text: str) -> list[ExtractedField]:
    """Return the first date-shaped token. No calendar validation."""
    match = DATE_PATTERN.search(text)
    if not match:
        return []
    return [ExtractedField(FieldName.DATE, match.group(1))]


def classify_document_type(text: str) -> DocumentType:
    """Classify text as a cheque when it mentions a cheque marker, else a bill."""
    lowered = text.lower()
    if any(marker in lowered for marker in CHEQUE_MARKERS):
        return DocumentType.CHECK
    return DocumentType.BILL


def match_document_type(text: str) -> list[ExtractedField]:
    """Emit the DOC_TYPE_HINT field for ``text``."""
    return [
        ExtractedField(FieldName.DOC_TYPE_HINT, classify_document_type(text).value)
    ]


DEFAULT_MATCHERS: tuple[Matcher, ...] = (
    match_gstin,
    match_amount,
    match_date,
    match_document_type,
)


class RuleExtractor:
    """Regex-based field extractor for bills and cheques.

    Args:
        matchers: Matchers to run, in output order.
    """

    def __init__(self, matchers: Sequence[Matcher] = DEFAULT_MATCHERS) -> None:
        self.matchers = tuple(matchers)

    def extract(self, text: str) -> list[ExtractedField]:
        """Extract fields from OCR text.

        Args:
            text: OCR text to search.

        Returns:
            Extracted fields in matcher order. Missing patterns simply
            produce no field.
        """
        results: list[ExtractedField] = []
        for matcher in self.matchers:
            results.extend(matcher(text))

        logger.info("Rule extraction found %d fields", len(results))
        return results

    @staticmethod
    def document_type(fields: Sequence[ExtractedField]) -> DocumentType:
        """Resolve the document type from the DOC_TYPE_HINT field.

        Missing or unrecognized hints fall back to BILL.
        """
        hint = FieldMap(fields).get(FieldName.DOC_TYPE_HINT)
        if hint in DocumentType.__members__:
            return DocumentType[hint]
        return DocumentType.BILL
