"""Application entry point for the Compliance OCR API server."""

import uvicorn

from compliance_ocr.api.app import create_app
from compliance_ocr.utils.config import load_config
from compliance_ocr.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(create_app(config), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
