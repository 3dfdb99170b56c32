"""Compliance rules engine for extracted document fields.

Each rule is an independent predicate over the document text, its
extracted fields, and its type. A violated rule yields one
``ComplianceIssue``; rules never suppress each other.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from compliance_ocr.extraction.fields import DocumentType, ExtractedField, FieldMap, FieldName
from compliance_ocr.utils.config import ComplianceConfig
from compliance_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class Severity(StrEnum):
    """How strongly an issue flags a document.

    ERROR marks the document non-compliant; WARNING asks for review.
    """

    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class ComplianceIssue:
    """A finding raised against a document."""

    code: str
    description: str
    severity: Severity


@dataclass(frozen=True)
class RuleContext:
    """Inputs available to every rule predicate."""

    text: str
    fields: FieldMap
    document_type: DocumentType
    config: ComplianceConfig


@dataclass(frozen=True)
class ComplianceRule:
    """A single compliance check.

    ``document_types`` limits the rule to those types; ``None`` applies it
    to every document. ``violated`` returns True when the issue must be
    raised.
    """

    code: str
    description: str
    severity: Severity
    violated: Callable[[RuleContext], bool]
    document_types: frozenset[DocumentType] | None = None

    def applies_to(self, document_type: DocumentType) -> bool:
        return self.document_types is None or document_type in self.document_types

    def issue(self) -> ComplianceIssue:
        return ComplianceIssue(self.code, self.description, self.severity)


def _missing(name: FieldName) -> Callable[[RuleContext], bool]:
    def check(ctx: RuleContext) -> bool:
        return not ctx.fields.present(name)

    return check


def _amount_outlier(ctx: RuleContext) -> bool:
    raw = ctx.fields.get(FieldName.AMOUNT)
    if not raw:
        return False
    try:
        amount = float(raw)
    except ValueError:
        return False
    return amount > ctx.config.amount_outlier_threshold


def _payee_missing(ctx: RuleContext) -> bool:
    return "pay" not in ctx.text.lower()


DEFAULT_RULES: tuple[ComplianceRule, ...] = (
    ComplianceRule(
        code="GST_MISSING",
        description="No GSTIN found on bill text",
        severity=Severity.ERROR,
        violated=_missing(FieldName.GSTIN),
        document_types=frozenset({DocumentType.BILL}),
    ),
    ComplianceRule(
        code="AMOUNT_MISSING",
        description="Amount not detected",
        severity=Severity.WARNING,
        violated=_missing(FieldName.AMOUNT),
    ),
    ComplianceRule(
        code="DATE_MISSING",
        description="Date not detected",
        severity=Severity.WARNING,
        violated=_missing(FieldName.DATE),
    ),
    ComplianceRule(
        code="AMOUNT_OUTLIER",
        description="Unusually large amount detected",
        severity=Severity.WARNING,
        violated=_amount_outlier,
    ),
    ComplianceRule(
        code="PAYEE_MISSING",
        description="Possible missing payee line",
        severity=Severity.WARNING,
        violated=_payee_missing,
        document_types=frozenset({DocumentType.CHECK}),
    ),
)


class ComplianceEvaluator:
    """Applies compliance rules to an extracted document.

    Args:
        rules: Rules to evaluate, in output order.
        config: Thresholds and the set of disabled rule codes.
    """

    def __init__(
        self,
        rules: Sequence[ComplianceRule] = DEFAULT_RULES,
        config: ComplianceConfig | None = None,
    ) -> None:
        self.config = config or ComplianceConfig()
        disabled = set(self.config.disabled_rules)
        self.rules = tuple(r for r in rules if r.code not in disabled)
        if disabled:
            logger.info("Compliance rules disabled: %s", ", ".join(sorted(disabled)))

    def evaluate(
        self,
        text: str,
        fields: Sequence[ExtractedField],
        document_type: DocumentType,
    ) -> list[ComplianceIssue]:
        """Evaluate every applicable rule.

        Args:
            text: Raw OCR text of the document.
            fields: Fields extracted from ``text``.
            document_type: Declared type used to select rules.

        Returns:
            Issues for violated rules, in rule order.
        """
        ctx = RuleContext(
            text=text,
            fields=FieldMap(fields),
            document_type=document_type,
            config=self.config,
        )
        issues = [
            rule.issue()
            for rule in self.rules
            if rule.applies_to(document_type) and rule.violated(ctx)
        ]

        logger.info(
            "Compliance for %s: %d issue(s)%s",
            document_type,
            len(issues),
            f" ({', '.join(i.code for i in issues)})" if issues else "",
        )
        return issues
