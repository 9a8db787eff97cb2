"""
PDF to Word Conversion
======================

Converts PDF documents into editable Word (.docx) files.

Main components:
- Text source (embedded text layer, OCR fallback)
- Line normalization (control characters, Unicode NFC)
- Paragraph reconstruction (re-joins formulas split across lines)
- Math-aware formatting (operator spacing, identifier rejoining, bullets)
- DOCX assembly
"""

__version__ = "1.0.0"
__author__ = "pdfword contributors"
