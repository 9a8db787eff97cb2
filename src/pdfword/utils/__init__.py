"""
Utility modules for the conversion pipeline.
"""

from .errors import (
    ConversionError, FormParsingFailure, ExtractionFailure, NoTextFound,
    OCRUnavailable, DocumentBuildFailure,
)
from .io import read_upload, output_filename, load_pdf
from .text_normalize import normalize, clean_text
from .reconstruct import reconstruct, classify, Block, TokenClass
from .math_format import MathFormatter, Paragraph, MATH_SYMBOLS, MARKERS, format_segment
from .ocr_text import OCRSession, OCRResult
from .extract import TextSource, RawPage, SourceKind
from .assembler import DocxAssembler, DOCX_MIME_TYPE
from .pipeline import ConversionPipeline, ConversionResult, convert

__all__ = [
    # Errors
    "ConversionError", "FormParsingFailure", "ExtractionFailure", "NoTextFound",
    "OCRUnavailable", "DocumentBuildFailure",
    # IO
    "read_upload", "output_filename", "load_pdf",
    # Text
    "normalize", "clean_text", "reconstruct", "classify", "Block", "TokenClass",
    "MathFormatter", "Paragraph", "MATH_SYMBOLS", "MARKERS", "format_segment",
    # Extraction
    "OCRSession", "OCRResult", "TextSource", "RawPage", "SourceKind",
    # Assembly
    "DocxAssembler", "DOCX_MIME_TYPE",
    # Pipeline
    "ConversionPipeline", "ConversionResult", "convert",
]
