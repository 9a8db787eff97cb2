#!/usr/bin/env python
"""
Command-line interface for the PDF to Word converter.

Usage:
    pdfword --input <pdf> [--output <docx_or_dir>] [options]

Examples:
    # Convert a PDF next to the original
    pdfword --input lecture.pdf

    # Plain line-per-paragraph conversion (no math formatting)
    pdfword --input lecture.pdf --output ./out --mode legacy

    # Preview the reconstructed paragraphs without writing a document
    pdfword --input lecture.pdf --text
"""

import sys
from pathlib import Path

# Add src directory to path for imports when running as script
_src_dir = Path(__file__).parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import argparse
import logging
from typing import Optional

logger = logging.getLogger("pdfword")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    from pdfword import __version__

    parser = argparse.ArgumentParser(
        prog="pdfword",
        description="Convert a PDF into an editable Word document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Convert a PDF next to the original:
    pdfword --input lecture.pdf

  Write into a directory, skipping OCR for scanned pages:
    pdfword --input lecture.pdf --output ./out --no-ocr

  Preview the reconstructed paragraphs:
    pdfword --input lecture.pdf --text
        """
    )

    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input PDF file"
    )

    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output .docx file or directory (default: next to the input)"
    )

    parser.add_argument(
        "--mode",
        choices=["math", "legacy"],
        default=None,
        help="math: reconstruct and format formulas (default); legacy: one paragraph per line"
    )

    parser.add_argument(
        "--no-ocr",
        action="store_true",
        help="Do not fall back to OCR when the PDF has no text layer"
    )

    parser.add_argument(
        "--dpi",
        type=int,
        default=None,
        help="DPI for rendering pages before OCR (default: 300)"
    )

    parser.add_argument(
        "--lang",
        default=None,
        help="Tesseract language code (default: eng)"
    )

    parser.add_argument(
        "--exact-spacing",
        action="store_true",
        help="Collapse only the first run of spaces per paragraph, like the first release"
    )

    parser.add_argument(
        "--text",
        action="store_true",
        help="Print the formatted paragraphs instead of writing a document"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show internal error details"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def check_dependencies() -> bool:
    """Check if required dependencies are available."""
    missing = []
    optional_missing = []

    try:
        import pdfplumber
    except ImportError:
        missing.append("pdfplumber")

    try:
        import docx
    except ImportError:
        missing.append("python-docx")

    # OCR fallback
    try:
        import pytesseract
        try:
            pytesseract.get_tesseract_version()
        except Exception:
            optional_missing.append("tesseract-ocr (system package, for scanned PDFs)")
    except ImportError:
        optional_missing.append("pytesseract (for scanned PDFs)")

    try:
        import pdf2image
    except ImportError:
        optional_missing.append("pdf2image (for scanned PDFs)")

    try:
        import cv2
    except ImportError:
        optional_missing.append("opencv-python (for scanned PDFs)")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    if optional_missing:
        logger.warning("Missing optional dependencies (OCR fallback may be unavailable):")
        for dep in optional_missing:
            logger.warning(f"  - {dep}")

    return True


def build_config(args):
    """Apply command-line overrides on top of the environment configuration."""
    from pdfword.config import get_config

    config = get_config()
    if args.mode:
        config.mode = args.mode
    if args.no_ocr:
        config.ocr.enabled = False
    if args.dpi:
        config.ocr.dpi = args.dpi
    if args.lang:
        config.ocr.tesseract_lang = args.lang
    if args.exact_spacing:
        config.formatter.collapse_all_spaces = False
    if args.debug:
        config.debug_mode = True
    return config


def resolve_output_path(input_path: Path, output: Optional[str], filename: str) -> Path:
    """Pick the .docx path: explicit file, file inside a directory, or next to the input."""
    if output is None:
        return input_path.with_name(filename)

    output_path = Path(output)
    if output_path.is_dir() or output_path.suffix.lower() != ".docx":
        return output_path / filename
    return output_path


def print_paragraphs(pipeline, input_path: Path) -> int:
    """Extract and format the text, then print one paragraph per line."""
    from pdfword.utils.errors import ConversionError
    from pdfword.utils.io import read_upload

    try:
        raw = pipeline.text_source.extract(read_upload(input_path))
    except ConversionError as e:
        logger.error(e.user_message)
        return 1

    for paragraph in pipeline.build_paragraphs(raw.text):
        print(paragraph.text)
    return 0


def run_pipeline(args) -> int:
    """Run the conversion."""
    from pdfword.utils.pipeline import ConversionPipeline

    input_path = Path(args.input)
    if not input_path.is_file():
        logger.error(f"Input file not found: {input_path}")
        return 1

    pipeline = ConversionPipeline(build_config(args))

    if args.text:
        return print_paragraphs(pipeline, input_path)

    result = pipeline.convert(input_path, filename=input_path.name)
    if not result.ok:
        logger.error(result.message)
        if args.debug:
            logger.error(f"{result.reason}: {result.error}")
        return 1

    output_path = resolve_output_path(input_path, args.output, result.filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.data)

    if not args.quiet:
        print(f"Source: {input_path} ({result.source.value})")
        print(f"Paragraphs: {result.paragraph_count}")
        print(f"Output: {output_path}")

    return 0


def main():
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args()

    from pdfword import config  # noqa: F401  (configures logging)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if not check_dependencies():
        sys.exit(1)

    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
