"""
Text OCR module for image-based PDFs.

Provides:
- Page preprocessing for Tesseract (grayscale, upscale, threshold, denoise)
- A scoped OCR session: load, set language, initialize, recognize, terminate
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import numpy as np

from .errors import OCRUnavailable
from .io import cleanup_dir, create_temp_dir, load_pdf

logger = logging.getLogger(__name__)

# pytesseract keeps the binary path in module state; it is the only
# process-wide setting OCR sessions touch.
_TESSERACT_CMD_LOCK = threading.Lock()


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class OCRResult:
    """OCR result for a whole document."""
    text: str
    page_texts: List[str] = field(default_factory=list)
    language: str = "eng"

    @property
    def page_count(self) -> int:
        return len(self.page_texts)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


# ============================================================================
# Preprocessing
# ============================================================================

def preprocess_page(image) -> np.ndarray:
    """
    Prepare a rendered page for Tesseract.

    Args:
        image: PIL image or numpy array (RGB or grayscale)

    Returns:
        Binarized grayscale page
    """
    import cv2

    page = np.array(image)

    if len(page.shape) == 3:
        channels = page.shape[2]
        code = cv2.COLOR_RGBA2GRAY if channels == 4 else cv2.COLOR_RGB2GRAY
        gray = cv2.cvtColor(page, code)
    else:
        gray = page.copy()

    # Resize if too small (helps OCR accuracy)
    h, w = gray.shape
    if h < 30:
        scale = 30.0 / h
        gray = cv2.resize(gray, None, fx=scale, fy=scale, interpolation=cv2.INTER_CUBIC)

    gray = cv2.adaptiveThreshold(
        gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, 11, 2
    )
    gray = cv2.medianBlur(gray, 3)

    return gray


# ============================================================================
# Tesseract Binary
# ============================================================================

def configure_tesseract(pytesseract, tesseract_cmd: str) -> bool:
    """
    Point pytesseract at a Tesseract binary.

    The path is written at most once per distinct value, so sessions that
    share a configuration never rewrite it while another one is recognizing.

    Returns:
        True if the path changed
    """
    with _TESSERACT_CMD_LOCK:
        if pytesseract.pytesseract.tesseract_cmd == tesseract_cmd:
            return False
        logger.info(f"Using Tesseract binary {tesseract_cmd}")
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        return True


# ============================================================================
# OCR Session
# ============================================================================

class OCRSession:
    """
    Tesseract OCR scoped to a single conversion request.

    Use as a context manager. Entering loads pytesseract, checks the
    language and creates a private working directory for rendered pages;
    leaving always closes page images and removes the directory, whether
    recognition succeeded, found nothing or raised.

        with OCRSession(language="eng") as ocr:
            result = ocr.recognize(pdf_bytes)
    """

    def __init__(
        self,
        language: str = "eng",
        config: str = "--oem 3 --psm 6",
        dpi: int = 300,
        preprocess: bool = True,
        tesseract_cmd: Optional[str] = None
    ):
        self.language = language
        self.config = config
        self.dpi = dpi
        self.preprocess = preprocess
        self.tesseract_cmd = tesseract_cmd

        self.pytesseract = None
        self.work_dir: Optional[Path] = None
        self._images = []

    @classmethod
    def from_config(cls, config) -> "OCRSession":
        return cls(
            language=config.tesseract_lang,
            config=config.tesseract_config,
            dpi=config.dpi,
            preprocess=config.preprocess,
            tesseract_cmd=config.tesseract_cmd,
        )

    # -- lifecycle -----------------------------------------------------------

    def _load(self):
        try:
            import pytesseract
        except ImportError as e:
            raise OCRUnavailable(
                "pytesseract not available. Install with: pip install pytesseract"
            ) from e

        if self.tesseract_cmd:
            configure_tesseract(pytesseract, self.tesseract_cmd)

        try:
            version = pytesseract.get_tesseract_version()
        except Exception as e:
            raise OCRUnavailable(
                f"Tesseract not available: {e}\n"
                "Install Tesseract: https://github.com/tesseract-ocr/tesseract"
            ) from e

        self.pytesseract = pytesseract
        logger.debug(f"Loaded Tesseract {version}")

    def _set_language(self):
        installed = set(self.pytesseract.get_languages(config=""))
        missing = [lang for lang in self.language.split("+") if lang not in installed]
        if missing:
            raise OCRUnavailable(f"Tesseract language data not installed: {', '.join(missing)}")

    def _initialize(self):
        self.work_dir = create_temp_dir()

    def open(self) -> "OCRSession":
        try:
            self._load()
            self._set_language()
            self._initialize()
        except BaseException:
            self.close()
            raise
        logger.info(f"OCR session ready (lang={self.language})")
        return self

    def close(self):
        for image in self._images:
            try:
                image.close()
            except Exception as e:
                logger.warning(f"Could not close page image: {e}")
        self._images = []

        if self.work_dir is not None:
            cleanup_dir(self.work_dir)
            self.work_dir = None

    def __enter__(self) -> "OCRSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # -- recognition ---------------------------------------------------------

    def recognize_page(self, image) -> str:
        page = preprocess_page(image) if self.preprocess else image
        return self.pytesseract.image_to_string(page, lang=self.language, config=self.config)

    def recognize(self, data: bytes) -> OCRResult:
        """
        Recognize the text of every page of a PDF.

        Args:
            data: PDF bytes

        Returns:
            OCRResult with the page texts joined by newlines
        """
        if self.pytesseract is None or self.work_dir is None:
            raise RuntimeError("OCRSession used outside of its context")

        self._images = load_pdf(data, dpi=self.dpi, output_dir=self.work_dir)

        page_texts = []
        for i, image in enumerate(self._images, 1):
            text = self.recognize_page(image)
            logger.debug(f"OCR page {i}: {len(text)} characters")
            page_texts.append(text)

        return OCRResult(
            text="\n".join(page_texts),
            page_texts=page_texts,
            language=self.language,
        )


def ocr_pdf(data: bytes, config=None) -> OCRResult:
    """Run OCR over a PDF in a one-shot session."""
    session = OCRSession.from_config(config) if config is not None else OCRSession()
    with session as ocr:
        return ocr.recognize(data)
