"""Command-line interface for document processing and CSV export.

Provides subcommands for checking a single document and for processing
folders of scanned bills and cheques into the document store and a CSV.
"""

import argparse
import json
import sys
from pathlib import Path

from compliance_ocr.exceptions import PipelineError
from compliance_ocr.ocr.document_processor import DocumentProcessor
from compliance_ocr.preprocessing.normalizer import NORMALIZED_SUFFIX
from compliance_ocr.reporting.reports import export_rows, write_csv
from compliance_ocr.storage.database import Database
from compliance_ocr.storage.models import DocumentRecord
from compliance_ocr.storage.repository import DocumentRepository
from compliance_ocr.utils.config import AppConfig, load_config
from compliance_ocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.bmp", "*.webp")


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Leftover normalized copies (``*.pre.png``) are skipped.

    Args:
        input_dir: Directory to scan for documents.

    Returns:
        Sorted list of document file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(f for f in set(files) if not f.name.endswith(NORMALIZED_SUFFIX))


def process_folder(
    input_dir: Path,
    output_csv: Path,
    config: AppConfig | None = None,
    processor: DocumentProcessor | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Process all documents in a folder, store them, and export a CSV.

    A failure on one file is logged and counted; the batch continues.

    Args:
        input_dir: Directory containing document images.
        output_csv: Path for the output CSV file.
        config: Application configuration; loaded from YAML when omitted.
        processor: Pipeline to use; built from ``config`` when omitted.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    config = config or load_config()
    processor = processor or DocumentProcessor(config)

    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d documents to process", len(files))

    database = Database(config.storage.database_url)
    database.create_all()
    stored: list[DocumentRecord] = []
    failed = 0

    with database.session() as session:
        repo = DocumentRepository(session)
        for i, file_path in enumerate(files, 1):
            if verbose:
                print(f"Processing [{i}/{len(files)}]: {file_path.name}")
            try:
                result = processor.process(file_path, file_path.name)
                record = repo.save(
                    result,
                    storage_path=str(file_path),
                    size_bytes=file_path.stat().st_size,
                )
            except PipelineError as exc:
                logger.error("Failed to process %s: %s", file_path.name, exc)
                failed += 1
                continue
            except Exception:
                logger.exception("Unexpected error on %s", file_path.name)
                session.rollback()
                failed += 1
                continue
            stored.append(record)

        output_csv.parent.mkdir(parents=True, exist_ok=True)
        with open(output_csv, "w", newline="") as f:
            write_csv(export_rows(stored), f)

    database.dispose()
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": len(stored), "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout.

    Args:
        summary: Counts of total, successful, and failed documents.
        output_csv: Path to the output CSV.
    """
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def extract_single(
    file_path: Path,
    config: AppConfig | None = None,
    processor: DocumentProcessor | None = None,
) -> dict[str, object]:
    """Process a single document and return its result as a dict.

    Args:
        file_path: Path to the document image.
        config: Application configuration; loaded from YAML when omitted.
        processor: Pipeline to use; built from ``config`` when omitted.

    Returns:
        Dictionary with filename, type, fields, issues, and raw text.
    """
    processor = processor or DocumentProcessor(config or load_config())
    return processor.process(file_path, file_path.name).to_dict()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Bill and cheque compliance checker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="YAML configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of documents")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with documents"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    single_parser = subparsers.add_parser("extract", help="Process a single document")
    single_parser.add_argument("file", type=Path, help="Document image to process")
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, config, verbose=args.verbose)
    elif args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = extract_single(args.file, config)
        except PipelineError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)


if __name__ == "__main__":
    main()
