"""Configuration management for the compliance OCR system.

Loads and validates YAML configuration with sensible defaults
for preprocessing, OCR, compliance rules, and storage settings.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class PreprocessingConfig(BaseModel):
    """Configuration for image normalization before OCR."""

    max_width: int = Field(default=2000, gt=0)
    contrast_enabled: bool = True
    clahe_enabled: bool = False
    clahe_clip_limit: float = 2.0
    clahe_tile_size: int = 8


class OCRConfig(BaseModel):
    """Configuration for Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    lang: str = "eng"
    psm: int = 3
    timeout_s: float = Field(default=0.0, ge=0.0)


class ComplianceConfig(BaseModel):
    """Configuration for the compliance rules engine."""

    amount_outlier_threshold: float = 1_000_000
    disabled_rules: list[str] = Field(default_factory=list)


class StorageConfig(BaseModel):
    """Configuration for persisted documents and uploaded files."""

    database_url: str = "sqlite:///./compliance.db"
    upload_dir: str = "storage"
    base_url: str = ""


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    compliance: ComplianceConfig = Field(default_factory=ComplianceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
