"""Tests for regex field extraction and document classification."""

import pytest

from compliance_ocr.extraction.fields import DocumentType, ExtractedField, FieldMap, FieldName
from compliance_ocr.extraction.rule_extractor import (
    DEFAULT_MATCHERS,
    RuleExtractor,
    classify_document_type,
    format_amount,
    match_amount,
    match_date,
    match_gstin,
    parse_amount,
)


def _values(fields: list[ExtractedField]) -> dict[str, str]:
    return {str(f.name): f.value for f in fields}


class TestGstinMatcher:
    """Tests for GSTIN detection."""

    def test_detects_gstin_in_noisy_text(self) -> None:
        fields = match_gstin("Seller ## GST:29ABCDE1234F1Z5 // thank you")
        assert fields == [ExtractedField(FieldName.GSTIN, "29ABCDE1234F1Z5")]

    def test_first_match_wins(self) -> None:
        fields = match_gstin("29ABCDE1234F1Z5 and 07PQRST6789K2Z3")
        assert len(fields) == 1
        assert fields[0].value == "29ABCDE1234F1Z5"

    def test_lowercase_z_allowed(self) -> None:
        assert match_gstin("GSTIN 29ABCDE1234F1z5")[0].value == "29ABCDE1234F1z5"

    def test_fourteen_characters_rejected(self) -> None:
        assert match_gstin("GSTIN 29ABCDE1234F1Z") == []

    def test_lowercase_letters_rejected(self) -> None:
        assert match_gstin("GSTIN 29abcde1234F1Z5") == []
        assert match_gstin("GSTIN 29ABCDE1234f1Z5") == []

    def test_embedded_in_longer_token_rejected(self) -> None:
        assert match_gstin("X29ABCDE1234F1Z5") == []


class TestAmountMatcher:
    """Tests for largest-amount selection."""

    def test_largest_amount_wins(self) -> None:
        values = _values(match_amount("Item 50 Total 100"))
        assert values["AMOUNT"] == "100"
        assert values["AMOUNT_RAW"] == "100"

    def test_tie_keeps_first_literal(self) -> None:
        values = _values(match_amount("Subtotal Rs. 100 Total 100.00"))
        assert values["AMOUNT"] == "100"
        assert values["AMOUNT_RAW"] == "100"

    def test_thousands_separator_normalized(self) -> None:
        values = _values(match_amount("Total INR 1,234,567.89"))
        assert values["AMOUNT"] == "1234567.89"
        assert values["AMOUNT_RAW"] == "1,234,567.89"

    def test_lakh_grouping_splits_on_three_digit_groups(self) -> None:
        # only western thousands grouping is recognized
        values = _values(match_amount("Total INR 1,23,456.78"))
        assert values["AMOUNT_RAW"] == "23,456.78"

    def test_grouped_amount_with_decimals(self) -> None:
        values = _values(match_amount("Total Rs. 12,345.50"))
        assert values["AMOUNT"] == "12345.5"
        assert values["AMOUNT_RAW"] == "12,345.50"

    def test_rupee_symbol_prefix(self) -> None:
        values = _values(match_amount("Paid ₹ 2,500.00"))
        assert values["AMOUNT"] == "2500"
        assert values["AMOUNT_RAW"] == "2,500.00"

    def test_long_digit_run_keeps_float_precision(self) -> None:
        values = _values(match_amount("Ref 98765432101234567890"))
        assert values["AMOUNT"] == "98765432101234570000"
        assert values["AMOUNT_RAW"] == "98765432101234567890"

    def test_output_order(self) -> None:
        names = [f.name for f in match_amount("Total 10")]
        assert names == [FieldName.AMOUNT, FieldName.AMOUNT_RAW]

    def test_no_digits_no_fields(self) -> None:
        assert match_amount("No numbers here") == []

    def test_empty_text(self) -> None:
        assert match_amount("") == []


class TestAmountHelpers:
    """Tests for amount parsing and formatting."""

    def test_parse_strips_commas(self) -> None:
        assert parse_amount("1,000,000.01") == pytest.approx(1_000_000.01)

    def test_parse_invalid(self) -> None:
        assert parse_amount("abc") is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (100.0, "100"),
            (0.0, "0"),
            (12345.5, "12345.5"),
            (0.1, "0.1"),
            (1000000.01, "1000000.01"),
            (98765432101234567890.0, "98765432101234570000"),
            (1.2345e22, "1.2345e+22"),
            (float("inf"), "Infinity"),
        ],
    )
    def test_format(self, value: float, expected: str) -> None:
        assert format_amount(value) == expected


class TestDateMatcher:
    """Tests for lexical date detection."""

    def test_day_month_year(self) -> None:
        assert match_date("Date: 15/08/2024")[0].value == "15/08/2024"

    def test_two_digit_year_with_dashes(self) -> None:
        assert match_date("on 1-2-24 we paid")[0].value == "1-2-24"

    def test_iso_date(self) -> None:
        assert match_date("dated 2024-03-01,")[0].value == "2024-03-01"

    def test_first_match_only(self) -> None:
        fields = match_date("01/01/2024 then 02/02/2024")
        assert len(fields) == 1
        assert fields[0].value == "01/01/2024"

    def test_no_semantic_validation(self) -> None:
        assert match_date("99/99/2024")[0].value == "99/99/2024"

    def test_no_date(self) -> None:
        assert match_date("Total 500") == []


class TestClassification:
    """Tests for the bill/cheque heuristic."""

    @pytest.mark.parametrize(
        "text",
        ["CHEQUE No 123", "Check No: 000451", "MICR code 400002", "micr", "Micr band"],
    )
    def test_cheque_markers(self, text: str) -> None:
        assert classify_document_type(text) == DocumentType.CHECK

    def test_default_is_bill(self) -> None:
        assert classify_document_type("Tax Invoice, Total 500") == DocumentType.BILL

    def test_check_without_no_is_bill(self) -> None:
        assert classify_document_type("Please check the totals") == DocumentType.BILL


class TestFieldMap:
    """Tests for name-keyed field lookup."""

    def test_first_occurrence_wins(self) -> None:
        fields = [
            ExtractedField("AMOUNT", "10"),
            ExtractedField("AMOUNT", "20"),
        ]
        assert FieldMap(fields)["AMOUNT"] == "10"

    def test_enum_and_string_keys_agree(self) -> None:
        fields = [ExtractedField(FieldName.DATE, "2024-01-01")]
        fm = FieldMap(fields)
        assert fm["DATE"] == fm[FieldName.DATE]
        assert FieldName.DATE in fm

    def test_present_treats_empty_as_absent(self) -> None:
        fm = FieldMap([ExtractedField("GSTIN", "")])
        assert "GSTIN" in fm
        assert fm.present("GSTIN") is False
        assert fm.present("DATE") is False


class TestRuleExtractor:
    """Tests for the composed extractor."""

    def setup_method(self) -> None:
        self.extractor = RuleExtractor()

    def test_end_to_end_fields(self, invoice_text: str) -> None:
        fields = self.extractor.extract(invoice_text)
        assert [str(f.name) for f in fields] == [
            "GSTIN",
            "AMOUNT",
            "AMOUNT_RAW",
            "DATE",
            "DOC_TYPE_HINT",
        ]
        assert _values(fields) == {
            "GSTIN": "29ABCDE1234F1Z5",
            "AMOUNT": "12345.5",
            "AMOUNT_RAW": "12,345.50",
            "DATE": "2024-03-01",
            "DOC_TYPE_HINT": "BILL",
        }

    def test_empty_text_only_type_hint(self) -> None:
        fields = self.extractor.extract("")
        assert fields == [ExtractedField(FieldName.DOC_TYPE_HINT, "BILL")]

    def test_idempotent(self) -> None:
        text = "Cheque no 42 Pay Rs. 1,500.00 on 12/03/2024"
        assert self.extractor.extract(text) == self.extractor.extract(text)

    def test_custom_matchers(self) -> None:
        def match_merchant(text: str) -> list[ExtractedField]:
            return [ExtractedField("MERCHANT", text.split()[0])] if text else []

        extractor = RuleExtractor([*DEFAULT_MATCHERS, match_merchant])
        fields = extractor.extract("ACME Total 10")
        assert fields[-1] == ExtractedField("MERCHANT", "ACME")

    def test_document_type_from_hint(self) -> None:
        fields = self.extractor.extract("MICR 123456")
        assert RuleExtractor.document_type(fields) == DocumentType.CHECK

    def test_document_type_defaults_to_bill(self) -> None:
        assert RuleExtractor.document_type([]) == DocumentType.BILL
        unknown = [ExtractedField(FieldName.DOC_TYPE_HINT, "RECEIPT")]
        assert RuleExtractor.document_type(unknown) == DocumentType.BILL
