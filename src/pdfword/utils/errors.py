"""
Failure taxonomy for the conversion pipeline.

Every failure a caller can see is a ``ConversionError`` subclass carrying a
fixed, human-readable ``user_message`` and an HTTP-equivalent
``status_code``. The exception text itself is diagnostic detail for the logs
and is never shown to the caller.
"""


class ConversionError(Exception):
    """Base class for all conversion failures."""
    user_message = "Error processing the PDF file"
    status_code = 500
    reason = "ConversionError"


class FormParsingFailure(ConversionError):
    """Upload missing, empty or not a PDF."""
    user_message = "No file uploaded or invalid file format"
    status_code = 400
    reason = "FormParsingFailure"


class ExtractionFailure(ConversionError):
    """No usable text could be recovered from the PDF."""
    user_message = "Unable to extract text from the PDF"
    status_code = 422
    reason = "ExtractionFailure"


class NoTextFound(ExtractionFailure):
    """Neither the text layer nor OCR produced non-empty text."""
    reason = "NoTextFound"


class OCRUnavailable(ExtractionFailure):
    """Tesseract (or the configured language) could not be initialised."""
    reason = "OCRUnavailable"


class DocumentBuildFailure(ConversionError):
    """Serialising the paragraphs into a Word document failed."""
    user_message = "Error processing the PDF file"
    status_code = 500
    reason = "DocumentBuildFailure"
