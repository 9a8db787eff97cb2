"""
Conversion pipeline: PDF bytes in, DOCX bytes out.

Stages:
    upload -> TextSource -> normalize -> reconstruct -> MathFormatter -> DocxAssembler

Every call builds its own values; nothing is shared between requests.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .assembler import DOCX_MIME_TYPE, DocxAssembler
from .errors import ConversionError
from .extract import RawPage, SourceKind, TextSource
from .io import output_filename, read_upload
from .math_format import MathFormatter, Paragraph
from .reconstruct import reconstruct
from .text_normalize import normalize

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one conversion request."""
    data: Optional[bytes] = None
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    error: Optional[ConversionError] = None
    source: Optional[SourceKind] = None
    paragraph_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None

    @property
    def status_code(self) -> int:
        return 200 if self.error is None else self.error.status_code

    @property
    def message(self) -> str:
        """User-facing message; never contains exception details."""
        if self.error is None:
            return "Document converted successfully"
        return self.error.user_message

    @property
    def reason(self) -> Optional[str]:
        return None if self.error is None else self.error.reason

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "status": self.status_code,
            "message": self.message,
            "reason": self.reason,
            "filename": self.filename,
            "mime_type": self.mime_type,
            "source": self.source.value if self.source else None,
            "paragraphs": self.paragraph_count,
        }


# ============================================================================
# Pipeline
# ============================================================================

class ConversionPipeline:
    """
    Orchestrates the conversion of one PDF into a Word document.

    Components are created lazily so that a pipeline used only for text
    formatting never touches pdfplumber, Tesseract or python-docx.
    """

    def __init__(self, config=None, text_source: Optional[TextSource] = None):
        if config is None:
            from ..config import get_config
            config = get_config()
        self.config = config

        self._text_source = text_source
        self._formatter = None
        self._assembler = None

    @property
    def text_source(self) -> TextSource:
        if self._text_source is None:
            self._text_source = TextSource(
                extraction_config=self.config.extraction,
                ocr_config=self.config.ocr,
            )
        return self._text_source

    @property
    def formatter(self) -> MathFormatter:
        if self._formatter is None:
            self._formatter = MathFormatter.from_config(self.config.formatter)
        return self._formatter

    @property
    def assembler(self) -> DocxAssembler:
        if self._assembler is None:
            self._assembler = DocxAssembler(template_path=self.config.export.docx_template)
        return self._assembler

    def build_paragraphs(self, raw_text: str) -> List[Paragraph]:
        """
        Turn raw extracted text into formatted paragraphs.

        In ``math`` mode lines are normalized, reconstructed into blocks and
        run through the math-aware formatter. ``legacy`` mode keeps the first
        release's behaviour: one paragraph per normalized line, empty lines
        included, no reconstruction.
        """
        lines = normalize(raw_text)

        if self.config.mode == "legacy":
            return [self.formatter.make_paragraph(line) for line in lines]

        blocks = reconstruct(lines)
        logger.info(f"Reconstructed {len(blocks)} blocks from {len(lines)} lines")
        return self.formatter.format(blocks)

    def _fail(self, error: ConversionError, source: Optional[SourceKind] = None) -> ConversionResult:
        logger.error(f"Conversion failed ({error.reason}): {error}")
        if self.config.debug_mode:
            logger.debug("Failure details", exc_info=error)
        return ConversionResult(error=error, source=source)

    def convert(self, upload, filename: Optional[str] = None) -> ConversionResult:
        """
        Convert an uploaded PDF into DOCX bytes.

        Args:
            upload: PDF bytes, a path, or a binary file object
            filename: Original upload name, used for the download name

        Returns:
            ConversionResult; failures carry a ConversionError instead of data
        """
        start_time = time.time()
        raw: Optional[RawPage] = None

        try:
            data = read_upload(upload)
            raw = self.text_source.extract(data)
            paragraphs = self.build_paragraphs(raw.text)
            document = self.assembler.assemble(paragraphs)
        except ConversionError as e:
            return self._fail(e, raw.source if raw else None)

        if not filename and isinstance(upload, (str, Path)):
            filename = str(upload)
        name = output_filename(filename) if filename else self.config.export.default_filename

        elapsed = time.time() - start_time
        logger.info(
            f"Converted {name} from {raw.source.value} text: "
            f"{len(paragraphs)} paragraphs in {elapsed:.2f}s"
        )

        return ConversionResult(
            data=document,
            filename=name,
            mime_type=DOCX_MIME_TYPE,
            source=raw.source,
            paragraph_count=len(paragraphs),
        )


def convert(upload, filename: Optional[str] = None, config=None) -> ConversionResult:
    """Convert a PDF with a fresh pipeline."""
    return ConversionPipeline(config).convert(upload, filename)
