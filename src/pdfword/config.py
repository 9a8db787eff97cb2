"""
Configuration and constants for the PDF to Word conversion pipeline.

This module provides:
- Global logging configuration
- Processing parameters for extraction, OCR, formatting and export
- Environment variable overrides
"""

import os
from dataclasses import dataclass, field
from typing import Optional
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("pdfword")


# ============================================================================
# Processing Configuration
# ============================================================================

MODES = ("math", "legacy")


@dataclass
class ExtractionConfig:
    """Embedded text (text layer) extraction configuration."""
    use_text_layer: bool = True
    # pdfplumber character grouping tolerances
    x_tolerance: float = 3
    y_tolerance: float = 3


@dataclass
class OCRConfig:
    """OCR fallback configuration."""
    enabled: bool = True
    tesseract_lang: str = "eng"
    tesseract_config: str = "--oem 3 --psm 6"
    tesseract_cmd: Optional[str] = None  # None = tesseract on PATH
    dpi: int = 300
    preprocess: bool = True


@dataclass
class FormatterConfig:
    """Paragraph formatting configuration."""
    font_size_half_points: int = 24  # 12pt
    space_after_twips: int = 200
    # False reproduces the single-shot space collapse of the first release
    collapse_all_spaces: bool = True


@dataclass
class ExportConfig:
    """DOCX export configuration."""
    docx_template: Optional[str] = None
    default_filename: str = "converted_document.docx"


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    formatter: FormatterConfig = field(default_factory=FormatterConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Global settings
    mode: str = "math"  # math, legacy
    debug_mode: bool = False

    def __post_init__(self):
        if self.mode not in MODES:
            raise ValueError(f"Unknown pipeline mode: {self.mode} (expected one of {MODES})")


# ============================================================================
# Default Configuration Instance
# ============================================================================

def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    mode = os.environ.get("PDFWORD_MODE")
    if mode:
        if mode not in MODES:
            logger.warning(f"Ignoring unknown PDFWORD_MODE={mode!r}")
        else:
            config.mode = mode

    dpi = os.environ.get("PDFWORD_OCR_DPI")
    if dpi:
        try:
            config.ocr.dpi = int(dpi)
        except ValueError:
            logger.warning(f"Ignoring non-integer PDFWORD_OCR_DPI={dpi!r}")

    if os.environ.get("PDFWORD_OCR_LANG"):
        config.ocr.tesseract_lang = os.environ["PDFWORD_OCR_LANG"]

    config.ocr.tesseract_cmd = os.environ.get("PDFWORD_TESSERACT_CMD")

    if _env_flag("PDFWORD_NO_OCR"):
        config.ocr.enabled = False

    if _env_flag("PDFWORD_EXACT_SPACING"):
        config.formatter.collapse_all_spaces = False

    if _env_flag("PDFWORD_DEBUG"):
        config.debug_mode = True

    return config
