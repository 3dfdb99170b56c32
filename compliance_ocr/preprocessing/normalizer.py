"""Image normalization ahead of OCR.

Reads a scanned document, caps its width, converts it to grayscale,
normalizes contrast, and writes a transient PNG next to the source.
The source file is never modified.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import cv2
import numpy as np

from compliance_ocr.exceptions import IoError, UnsupportedFormatError
from compliance_ocr.utils.config import PreprocessingConfig
from compliance_ocr.utils.logger import get_logger

from .contrast import apply_clahe, resize_to_max_width, stretch_contrast, to_gray

logger = get_logger(__name__)

NORMALIZED_SUFFIX = ".pre.png"


def default_target(source: Path) -> Path:
    """Return the transient output path used for ``source``."""
    return source.with_name(source.name + NORMALIZED_SUFFIX)


def remove_artifact(path: Path) -> None:
    """Delete a transient file, logging instead of raising on failure."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove transient image %s: %s", path, exc)


class ImageNormalizer:
    """Prepares document images for OCR.

    Args:
        config: Preprocessing configuration (width cap, contrast options).
    """

    def __init__(self, config: PreprocessingConfig | None = None) -> None:
        self.config = config or PreprocessingConfig()

    def prepare(self, image: np.ndarray) -> np.ndarray:
        """Apply resize, grayscale, and contrast steps to a decoded image.

        Args:
            image: Decoded image (BGR, BGRA, or grayscale).

        Returns:
            Grayscale image ready for OCR.
        """
        result = resize_to_max_width(image, self.config.max_width)
        result = to_gray(result)

        if self.config.contrast_enabled:
            result = stretch_contrast(result)

        if self.config.clahe_enabled:
            result = apply_clahe(
                result,
                clip_limit=self.config.clahe_clip_limit,
                tile_size=self.config.clahe_tile_size,
            )
        return result

    def normalize(self, source: Path, target: Path | None = None) -> Path:
        """Normalize ``source`` and write the result as PNG.

        Args:
            source: Path to the original document image.
            target: Output path. Defaults to ``<source>.pre.png``.

        Returns:
            Path of the written image.

        Raises:
            IoError: If the source cannot be read or the target cannot be written.
            UnsupportedFormatError: If the image cannot be decoded.
        """
        source = Path(source)
        target = Path(target) if target is not None else default_target(source)

        try:
            data = source.read_bytes()
        except OSError as exc:
            raise IoError(f"Cannot read image {source}: {exc}") from exc

        image = self._decode(data, source)
        height, width = image.shape[:2]
        result = self.prepare(image)

        ok, encoded = cv2.imencode(".png", result)
        if not ok:
            raise IoError(f"Cannot encode normalized image for {source}")

        try:
            target.write_bytes(encoded.tobytes())
        except OSError as exc:
            remove_artifact(target)
            raise IoError(f"Cannot write normalized image {target}: {exc}") from exc

        logger.info(
            "Normalized %s (%dx%d -> %dx%d)",
            source.name,
            width,
            height,
            result.shape[1],
            result.shape[0],
        )
        return target

    @contextmanager
    def normalized(self, source: Path) -> Iterator[Path]:
        """Yield a normalized copy of ``source`` and delete it afterwards.

        Cleanup runs on both success and failure; a failed deletion is
        logged and never replaces the caller's result or exception.
        """
        target = self.normalize(source)
        try:
            yield target
        finally:
            remove_artifact(target)

    @staticmethod
    def _decode(data: bytes, source: Path) -> np.ndarray:
        if not data:
            raise UnsupportedFormatError(f"Empty image file: {source}")
        try:
            image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        except cv2.error as exc:
            raise UnsupportedFormatError(f"Cannot decode image {source}: {exc}") from exc
        if image is None:
            raise UnsupportedFormatError(f"Unsupported image format: {source}")
        return image
