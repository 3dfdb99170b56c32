"""Field and document-type vocabulary shared by extraction and compliance."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum


class FieldName(StrEnum):
    """Names of fields produced by the rule extractor."""

    GSTIN = "GSTIN"
    AMOUNT = "AMOUNT"
    AMOUNT_RAW = "AMOUNT_RAW"
    DATE = "DATE"
    DOC_TYPE_HINT = "DOC_TYPE_HINT"


class DocumentType(StrEnum):
    """Kinds of financial document the pipeline distinguishes."""

    BILL = "BILL"
    CHECK = "CHECK"


@dataclass(frozen=True)
class ExtractedField:
    """A named value detected in OCR text."""

    name: str
    value: str
    confidence: float | None = None


class FieldMap(Mapping[str, str]):
    """Read-only name -> value view over a list of extracted fields.

    When a name occurs more than once the first occurrence wins, so
    lookups agree with the extraction order.
    """

    def __init__(self, fields: Iterable[ExtractedField]) -> None:
        self._values: dict[str, str] = {}
        for field in fields:
            self._values.setdefault(str(field.name), field.value)

    def __getitem__(self, name: str) -> str:
        return self._values[str(name)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"FieldMap({self._values!r})"

    def present(self, name: str) -> bool:
        """Return whether ``name`` has a non-empty value."""
        return bool(self._values.get(str(name)))
