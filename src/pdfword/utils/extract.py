"""
Text source adapter.

Tries the PDF's embedded text layer first (pdfplumber) and falls back to
OCR only when that yields nothing. Each strategy is attempted once per
request.
"""

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .errors import NoTextFound
from .ocr_text import ocr_pdf

logger = logging.getLogger(__name__)


class SourceKind(Enum):
    """Where the raw text came from."""
    EMBEDDED_TEXT = "embedded-text"
    OCR = "ocr"


@dataclass(frozen=True)
class RawPage:
    """Text extracted for the whole document in one pass."""
    source: SourceKind
    text: str


def extract_text_layer(data: bytes, x_tolerance: float = 3, y_tolerance: float = 3) -> str:
    """
    Read the embedded text layer of a PDF with pdfplumber.

    Args:
        data: PDF bytes
        x_tolerance: Horizontal gap (pt) under which characters join a word
        y_tolerance: Vertical gap (pt) under which characters share a line

    Returns:
        Text of all pages joined by newlines (may be empty for scanned PDFs)
    """
    import pdfplumber

    pages = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            text = page.extract_text(x_tolerance=x_tolerance, y_tolerance=y_tolerance) or ""
            pages.append(text)
    return "\n".join(pages)


class TextSource:
    """
    Embedded text first, OCR as fallback.

    The two strategies are injectable so that the fallback behaviour can be
    exercised without pdfplumber or Tesseract being present.
    """

    def __init__(
        self,
        extraction_config=None,
        ocr_config=None,
        text_layer: Optional[Callable[[bytes], str]] = None,
        ocr: Optional[Callable[[bytes], str]] = None
    ):
        self.extraction_config = extraction_config
        self.ocr_config = ocr_config
        self._text_layer = text_layer or self._default_text_layer
        self._ocr = ocr or self._default_ocr

    def _default_text_layer(self, data: bytes) -> str:
        if self.extraction_config is None:
            return extract_text_layer(data)
        return extract_text_layer(
            data,
            x_tolerance=self.extraction_config.x_tolerance,
            y_tolerance=self.extraction_config.y_tolerance,
        )

    def _default_ocr(self, data: bytes) -> str:
        return ocr_pdf(data, self.ocr_config).text

    @property
    def text_layer_enabled(self) -> bool:
        return self.extraction_config is None or self.extraction_config.use_text_layer

    @property
    def ocr_enabled(self) -> bool:
        return self.ocr_config is None or self.ocr_config.enabled

    def extract(self, data: bytes) -> RawPage:
        """
        Extract the raw text of a PDF.

        Args:
            data: PDF bytes

        Returns:
            RawPage carrying the trimmed text and where it came from

        Raises:
            NoTextFound: If neither strategy produced non-empty text
        """
        if self.text_layer_enabled:
            try:
                text = (self._text_layer(data) or "").strip()
            except Exception as e:
                logger.warning(f"Embedded text extraction failed: {e}")
                text = ""

            if text:
                logger.info(f"Extracted {len(text)} characters from the text layer")
                return RawPage(source=SourceKind.EMBEDDED_TEXT, text=text)

        if not self.ocr_enabled:
            raise NoTextFound("No embedded text and OCR is disabled")

        logger.info("No text found, attempting OCR...")
        try:
            text = (self._ocr(data) or "").strip()
        except Exception as e:
            logger.error(f"OCR failed: {e}")
            raise NoTextFound(f"OCR failed: {e}") from e

        if not text:
            raise NoTextFound("OCR produced no text")

        logger.info(f"Extracted {len(text)} characters with OCR")
        return RawPage(source=SourceKind.OCR, text=text)


def extract(data: bytes, extraction_config=None, ocr_config=None) -> RawPage:
    """Extract raw text with a default TextSource."""
    return TextSource(extraction_config, ocr_config).extract(data)
