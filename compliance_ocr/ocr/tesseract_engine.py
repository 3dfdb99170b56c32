"""Tesseract OCR engine wrapper.

Runs Tesseract against a normalized document image and reports the
recognized text together with the mean word confidence.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path

import pytesseract
from PIL import Image, UnidentifiedImageError

from compliance_ocr.exceptions import IoError, OcrEngineError, UnsupportedFormatError
from compliance_ocr.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class OCRResult:
    """Recognized text for a document image.

    ``confidence`` is on the 0-100 scale reported by Tesseract, or
    ``None`` when no word was scored.
    """

    text: str
    confidence: float | None = None


def _mean_confidence(data: dict) -> float | None:
    scores = []
    for conf, word in zip(data.get("conf", []), data.get("text", [])):
        try:
            value = float(conf)
        except (TypeError, ValueError):
            continue
        if value >= 0 and str(word).strip():
            scores.append(value)
    if not scores:
        return None
    return sum(scores) / len(scores)


class TesseractEngine:
    """Wrapper around Tesseract OCR for document text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        lang: OCR language code.
        psm: Tesseract page segmentation mode.
        timeout: Seconds before Tesseract is killed; ``0`` disables it.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        lang: str = "eng",
        psm: int = 3,
        timeout: float = 0,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.lang = lang
        self.psm = psm
        self.timeout = timeout

    @staticmethod
    def is_available() -> bool:
        """Return whether a tesseract binary can be found."""
        cmd = pytesseract.pytesseract.tesseract_cmd or "tesseract"
        return shutil.which(cmd) is not None

    def recognize(self, image_path: Path) -> OCRResult:
        """Run OCR on an image file.

        Args:
            image_path: Path to a (normalized) document image.

        Returns:
            OCRResult with the full text and mean word confidence.

        Raises:
            IoError: If the image file cannot be opened.
            UnsupportedFormatError: If Pillow cannot decode the image or it
                exceeds the decompression bomb limit.
            OcrEngineError: If Tesseract is missing, crashes, or times out.
        """
        config = f"--psm {self.psm}"

        try:
            with Image.open(image_path) as pil_image:
                pil_image.load()
                text = pytesseract.image_to_string(
                    pil_image, lang=self.lang, config=config, timeout=self.timeout
                )
                data = pytesseract.image_to_data(
                    pil_image,
                    lang=self.lang,
                    config=config,
                    timeout=self.timeout,
                    output_type=pytesseract.Output.DICT,
                )
        except UnidentifiedImageError as exc:
            raise UnsupportedFormatError(f"Cannot decode image {image_path}") from exc
        except Image.DecompressionBombError as exc:
            raise UnsupportedFormatError(
                f"Image {image_path} exceeds the decodable pixel limit"
            ) from exc
        except pytesseract.TesseractNotFoundError as exc:
            raise OcrEngineError("Tesseract is not installed or not on PATH") from exc
        except pytesseract.TesseractError as exc:
            raise OcrEngineError(f"Tesseract failed: {exc}") from exc
        except RuntimeError as exc:
            # pytesseract signals a timeout with a bare RuntimeError
            raise OcrEngineError(f"Tesseract did not finish: {exc}") from exc
        except OSError as exc:
            raise IoError(f"Cannot open image {image_path}: {exc}") from exc

        confidence = _mean_confidence(data)
        logger.info(
            "OCR extracted %d characters (confidence %s)",
            len(text or ""),
            "n/a" if confidence is None else f"{confidence:.1f}",
        )
        return OCRResult(text=text or "", confidence=confidence)
