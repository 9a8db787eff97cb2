"""
DOCX assembly for converted documents.

Maps the ordered list of formatted paragraphs onto a python-docx document and
serializes it to bytes. Anything that goes wrong while building or saving is
reported as a DocumentBuildFailure.
"""

import io
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import DocumentBuildFailure
from .math_format import Paragraph

logger = logging.getLogger(__name__)

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class DocxAssembler:
    """Build a Word document from formatted paragraphs using python-docx."""

    def __init__(self, template_path: Optional[str] = None):
        self.template_path = template_path

    def _new_document(self):
        try:
            from docx import Document as DocxDocument
        except ImportError:
            raise ImportError(
                "python-docx is required for DOCX export. "
                "Install with: pip install python-docx"
            )

        if self.template_path and Path(self.template_path).exists():
            return DocxDocument(self.template_path)
        return DocxDocument()

    def _add_paragraph(self, doc, paragraph: Paragraph):
        from docx.shared import Pt, Twips

        p = doc.add_paragraph()
        run = p.add_run(paragraph.text)
        run.font.size = Pt(paragraph.size / 2)
        p.paragraph_format.space_after = Twips(paragraph.space_after)

    def assemble(self, paragraphs: Sequence[Paragraph]) -> bytes:
        """
        Serialize paragraphs into DOCX bytes.

        Args:
            paragraphs: Paragraphs in document order

        Returns:
            The .docx file content

        Raises:
            DocumentBuildFailure: If the document could not be built or saved
        """
        try:
            doc = self._new_document()
            for paragraph in paragraphs:
                self._add_paragraph(doc, paragraph)

            file_stream = io.BytesIO()
            doc.save(file_stream)
            data = file_stream.getvalue()
        except Exception as e:
            logger.error(f"DOCX generation failed: {e}")
            raise DocumentBuildFailure(str(e)) from e

        logger.info(f"Built DOCX with {len(paragraphs)} paragraphs ({len(data)} bytes)")
        return data


def assemble(paragraphs: List[Paragraph], template_path: Optional[str] = None) -> bytes:
    """Serialize paragraphs with a default DocxAssembler."""
    return DocxAssembler(template_path).assemble(paragraphs)
