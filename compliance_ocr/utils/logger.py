"""Logging setup shared by the CLI, the API server, and the pipeline.

Records go to stderr so that ``compliance-ocr extract`` can print its JSON
result on stdout. Modules create their logger once at import time with
``logger = get_logger(__name__)``.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Attach a stderr handler to the root logger.

    Only the first call installs a handler; uvicorn or pytest may already
    have configured logging, in which case nothing changes. Unknown level
    names fall back to INFO.

    Args:
        level: Level name from ``AppConfig.log_level``.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a ``compliance_ocr`` module."""
    return logging.getLogger(name)
