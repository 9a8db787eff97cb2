"""
I/O utilities for the conversion pipeline.

Handles:
- Upload reading and PDF validation
- PDF rasterization for OCR
- Output filename derivation
- Temporary directory management
"""

import logging
from pathlib import Path
from typing import BinaryIO, List, Optional, Union
import tempfile
import shutil

from PIL import Image

from .errors import FormParsingFailure

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"
TEMP_PREFIX = "pdfword_"
DEFAULT_OUTPUT_NAME = "converted_document.docx"


# ============================================================================
# Upload Handling
# ============================================================================

def is_pdf(data: bytes) -> bool:
    """Check for the %PDF- header (readers accept it within the first 1 KB)."""
    return PDF_SIGNATURE in data[:1024]


def read_upload(source: Union[bytes, bytearray, str, Path, BinaryIO, None]) -> bytes:
    """
    Read an uploaded PDF into memory.

    Args:
        source: Raw bytes, a file path, or a binary file-like object

    Returns:
        The PDF bytes

    Raises:
        FormParsingFailure: If nothing was uploaded, the upload is empty or
            it is not a PDF
    """
    if source is None:
        raise FormParsingFailure("No file uploaded")

    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    elif isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            raise FormParsingFailure(f"File not found: {path}")
        data = path.read_bytes()
    elif hasattr(source, "read"):
        data = source.read()
        if isinstance(data, str):
            raise FormParsingFailure("Upload must be opened in binary mode")
    else:
        raise FormParsingFailure(f"Unsupported upload type: {type(source).__name__}")

    if not data:
        raise FormParsingFailure("Uploaded file is empty")
    if not is_pdf(data):
        raise FormParsingFailure("Uploaded file is not a PDF")

    logger.debug(f"Read upload: {len(data)} bytes")
    return data


def output_filename(original_name: Optional[str], suffix: str = ".docx") -> str:
    """
    Derive the download filename from the uploaded file name.

    Example: "notes/lecture 3.pdf" -> "lecture 3.docx"
    """
    if not original_name:
        return DEFAULT_OUTPUT_NAME

    stem = Path(original_name).stem.strip()
    if not stem or stem.startswith("."):
        return DEFAULT_OUTPUT_NAME
    return f"{stem}{suffix}"


# ============================================================================
# PDF to Image Conversion
# ============================================================================

def load_pdf(
    data: bytes,
    dpi: int = 300,
    output_dir: Optional[Union[str, Path]] = None
) -> List[Image.Image]:
    """
    Render PDF pages to images using pdf2image (poppler backend).

    Args:
        data: PDF bytes
        dpi: Resolution for rendering (300-400 recommended for OCR)
        output_dir: Directory for poppler's intermediate page files; keeps
            page images on disk instead of in memory

    Returns:
        One PIL image per page. The caller closes them.

    Raises:
        ImportError: If pdf2image is not installed
        RuntimeError: If the PDF cannot be parsed or poppler is missing
    """
    try:
        from pdf2image import convert_from_bytes
        from pdf2image.exceptions import PDFPageCountError, PDFSyntaxError
    except ImportError:
        raise ImportError(
            "pdf2image is required. Install with: pip install pdf2image\n"
            "Also ensure poppler is installed on your system."
        )

    try:
        logger.info(f"Rendering PDF pages at {dpi} DPI")
        images = convert_from_bytes(
            data,
            dpi=dpi,
            output_folder=str(output_dir) if output_dir else None,
            fmt='png',
            thread_count=4
        )
        logger.info(f"Rendered {len(images)} pages from PDF")
        return images

    except (PDFPageCountError, PDFSyntaxError) as e:
        raise RuntimeError(f"Failed to parse PDF: {e}")
    except Exception as e:
        if "poppler" in str(e).lower():
            raise RuntimeError(
                "Poppler is not installed. Install with:\n"
                "  Windows: Download from https://github.com/oschwartz10612/poppler-windows\n"
                "  macOS: brew install poppler\n"
                "  Linux: sudo apt-get install poppler-utils"
            )
        raise


# ============================================================================
# Directory Management
# ============================================================================

def create_temp_dir(prefix: str = TEMP_PREFIX) -> Path:
    """Create a temporary working directory."""
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))
    logger.debug(f"Created temp directory: {temp_dir}")
    return temp_dir


def cleanup_dir(path: Union[str, Path], force: bool = False) -> bool:
    """
    Remove a directory and its contents.

    Args:
        path: Path to the directory
        force: If True, remove even if not a pdfword temp directory

    Returns:
        True if the directory is gone afterwards
    """
    path = Path(path)
    if not path.exists():
        return True

    if not force and not path.name.startswith(TEMP_PREFIX):
        logger.warning(f"Refusing to delete non-temp directory: {path}")
        return False

    try:
        shutil.rmtree(path)
        logger.debug(f"Removed directory: {path}")
        return True
    except OSError as e:
        logger.error(f"Failed to remove directory {path}: {e}")
        return False
