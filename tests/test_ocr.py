"""Tests for the Tesseract OCR engine wrapper."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytesseract
import pytest
from PIL import Image

from compliance_ocr.exceptions import IoError, OcrEngineError, UnsupportedFormatError
from compliance_ocr.ocr.tesseract_engine import OCRResult, TesseractEngine, _mean_confidence


def _mock_tesseract_data() -> dict:
    """Create mock pytesseract output data."""
    return {
        "text": ["", "Invoice", "Total", "", "500.00"],
        "conf": [-1, 95, 85.5, -1, "72"],
    }


def _configure(mock_pt: MagicMock, text: str = "Invoice Total 500.00", data: dict | None = None) -> None:
    mock_pt.image_to_string.return_value = text
    mock_pt.image_to_data.return_value = data if data is not None else _mock_tesseract_data()
    mock_pt.Output.DICT = "dict"
    mock_pt.TesseractNotFoundError = pytesseract.TesseractNotFoundError
    mock_pt.TesseractError = pytesseract.TesseractError


class TestMeanConfidence:
    """Tests for word confidence aggregation."""

    def test_ignores_unscored_words(self) -> None:
        assert _mean_confidence(_mock_tesseract_data()) == pytest.approx((95 + 85.5 + 72) / 3)

    def test_no_words_returns_none(self) -> None:
        assert _mean_confidence({"text": [], "conf": []}) is None

    def test_blank_words_ignored(self) -> None:
        assert _mean_confidence({"text": ["  "], "conf": [90]}) is None


class TestTesseractEngine:
    """Tests for the TesseractEngine class (mocked)."""

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_recognize(self, mock_pt: MagicMock, image_file: Path) -> None:
        _configure(mock_pt)
        result = TesseractEngine(lang="eng", psm=6).recognize(image_file)

        assert isinstance(result, OCRResult)
        assert result.text == "Invoice Total 500.00"
        assert result.confidence == pytest.approx(84.1666, rel=1e-3)
        _, kwargs = mock_pt.image_to_string.call_args
        assert kwargs["lang"] == "eng"
        assert kwargs["config"] == "--psm 6"

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_recognize_empty_text(self, mock_pt: MagicMock, image_file: Path) -> None:
        _configure(mock_pt, text=None, data={"text": [], "conf": []})
        result = TesseractEngine().recognize(image_file)
        assert result.text == ""
        assert result.confidence is None

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_timeout_passed_through(self, mock_pt: MagicMock, image_file: Path) -> None:
        _configure(mock_pt)
        TesseractEngine(timeout=15).recognize(image_file)
        assert mock_pt.image_to_data.call_args.kwargs["timeout"] == 15

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_missing_binary_raises_engine_error(self, mock_pt: MagicMock, image_file: Path) -> None:
        _configure(mock_pt)
        mock_pt.image_to_string.side_effect = pytesseract.TesseractNotFoundError()
        with pytest.raises(OcrEngineError, match="not installed"):
            TesseractEngine().recognize(image_file)

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_engine_crash_raises_engine_error(self, mock_pt: MagicMock, image_file: Path) -> None:
        _configure(mock_pt)
        mock_pt.image_to_string.side_effect = pytesseract.TesseractError(1, "crash")
        with pytest.raises(OcrEngineError):
            TesseractEngine().recognize(image_file)

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_timeout_raises_engine_error(self, mock_pt: MagicMock, image_file: Path) -> None:
        _configure(mock_pt)
        mock_pt.image_to_data.side_effect = RuntimeError("Tesseract process timeout")
        with pytest.raises(OcrEngineError):
            TesseractEngine().recognize(image_file)

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_missing_image_raises_io_error(self, mock_pt: MagicMock, tmp_path: Path) -> None:
        _configure(mock_pt)
        with pytest.raises(IoError):
            TesseractEngine().recognize(tmp_path / "missing.png")

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_garbage_image_raises_unsupported(self, mock_pt: MagicMock, tmp_path: Path) -> None:
        _configure(mock_pt)
        path = tmp_path / "garbage.png"
        path.write_bytes(b"not an image")
        with pytest.raises(UnsupportedFormatError):
            TesseractEngine().recognize(path)

    @patch("compliance_ocr.ocr.tesseract_engine.pytesseract")
    def test_oversized_image_raises_unsupported(self, mock_pt: MagicMock, image_file: Path) -> None:
        _configure(mock_pt)
        # 300x200 is more than twice a 100 pixel limit
        with patch.object(Image, "MAX_IMAGE_PIXELS", 100):
            with pytest.raises(UnsupportedFormatError, match="pixel limit"):
                TesseractEngine().recognize(image_file)
        mock_pt.image_to_string.assert_not_called()

    def test_custom_tesseract_cmd(self) -> None:
        with patch("compliance_ocr.ocr.tesseract_engine.pytesseract") as mock_pt:
            TesseractEngine(tesseract_cmd="/usr/bin/tesseract")
            assert mock_pt.pytesseract.tesseract_cmd == "/usr/bin/tesseract"

    def test_is_available_uses_which(self) -> None:
        with patch("compliance_ocr.ocr.tesseract_engine.shutil.which", return_value=None):
            assert TesseractEngine.is_available() is False
        with patch(
            "compliance_ocr.ocr.tesseract_engine.shutil.which",
            return_value="/usr/bin/tesseract",
        ):
            assert TesseractEngine.is_available() is True
