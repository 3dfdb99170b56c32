"""Shared test fixtures for the compliance OCR test suite."""

from pathlib import Path

import cv2
import numpy as np
import pytest

from compliance_ocr.utils.config import AppConfig, StorageConfig


@pytest.fixture
def invoice_text() -> str:
    """OCR text of a compliant bill."""
    return "Invoice Total Rs. 12,345.50 dated 2024-03-01, GSTIN 29ABCDE1234F1Z5"


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.full((200, 300), 100, dtype=np.uint8)
    image[50:150, 50:250] = 160
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic BGR test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (40, 120, 200)
    return image


@pytest.fixture
def image_file(tmp_path: Path, sample_color_image: np.ndarray) -> Path:
    """Write the color sample image to a PNG file."""
    path = tmp_path / "scan.png"
    cv2.imwrite(str(path), sample_color_image)
    return path


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Configuration pointing storage at a temporary directory."""
    return AppConfig(
        storage=StorageConfig(
            database_url=f"sqlite:///{tmp_path / 'test.db'}",
            upload_dir=str(tmp_path / "uploads"),
        )
    )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
