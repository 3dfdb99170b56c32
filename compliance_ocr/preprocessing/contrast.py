"""Grayscale, resize, and contrast helpers for document images.

Thin wrappers over OpenCV used by the image normalizer to improve
text readability for OCR.
"""

import cv2
import numpy as np

from compliance_ocr.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an image to grayscale if it has color channels.

    Args:
        image: Input image (BGR, BGRA, or grayscale).

    Returns:
        Grayscale image.
    """
    if len(image.shape) == 3:
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


def resize_to_max_width(image: np.ndarray, max_width: int) -> np.ndarray:
    """Scale an image down so its width does not exceed ``max_width``.

    Narrower images are returned unchanged; the aspect ratio is kept.

    Args:
        image: Input image.
        max_width: Largest allowed width in pixels.

    Returns:
        The resized (or original) image.
    """
    height, width = image.shape[:2]
    if width <= max_width:
        return image

    scale = max_width / width
    new_height = max(1, round(height * scale))
    result = cv2.resize(image, (max_width, new_height), interpolation=cv2.INTER_AREA)
    logger.debug("Resized image %dx%d -> %dx%d", width, height, max_width, new_height)
    return result


def stretch_contrast(image: np.ndarray) -> np.ndarray:
    """Stretch pixel intensities to span the full 0-255 range.

    Args:
        image: Input image (BGR or grayscale).

    Returns:
        Contrast-normalized grayscale image. Uniform images are
        returned as-is.
    """
    gray = to_gray(image)
    low, high = int(gray.min()), int(gray.max())
    if low == high:
        return gray
    result = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX)
    logger.debug("Stretched contrast from [%d, %d] to [0, 255]", low, high)
    return result


def apply_clahe(
    image: np.ndarray,
    clip_limit: float = 2.0,
    tile_size: int = 8,
) -> np.ndarray:
    """Enhance contrast using CLAHE (Contrast Limited Adaptive Histogram Equalization).

    Args:
        image: Input image (BGR or grayscale).
        clip_limit: Threshold for contrast limiting.
        tile_size: Size of the grid for histogram equalization.

    Returns:
        Contrast-enhanced grayscale image.
    """
    gray = to_gray(image)
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    result = clahe.apply(gray)
    logger.debug("Applied CLAHE (clip=%.1f, tile=%d)", clip_limit, tile_size)
    return result
