"""
Line normalization for raw extracted text.

Splits the raw text of a RawPage into lines and cleans each one:
- C0/C1 control characters removed
- Code points XML cannot carry (surrogates, U+FFFE, U+FFFF) removed
- Unicode canonical composition (NFC)
- Leading/trailing whitespace trimmed

Cleaning happens before reconstruction so that stray control bytes from the
text layer or OCR never reach the token classifiers.
"""

import re
import unicodedata
from typing import List

# C0 (U+0000-U+001F), DEL and C1 (U+007F-U+009F)
CONTROL_CHARS_RE = re.compile(r'[\u0000-\u001F\u007F-\u009F]')
# Lone surrogates and the U+FFFE/U+FFFF noncharacters are not valid in XML
XML_ILLEGAL_RE = re.compile(r'[\ud800-\udfff\ufffe\uffff]')
LINE_BREAK_RE = re.compile(r'\r\n|\r|\n')


def clean_text(text: str) -> str:
    """Strip control and XML-illegal characters, then apply NFC. Does not trim."""
    text = XML_ILLEGAL_RE.sub("", CONTROL_CHARS_RE.sub("", text))
    return unicodedata.normalize("NFC", text)


def split_lines(raw_text: str) -> List[str]:
    """Split on CRLF, CR or LF only."""
    return LINE_BREAK_RE.split(raw_text)


def normalize(raw_text: str) -> List[str]:
    """
    Turn raw extracted text into an ordered list of cleaned lines.

    Controls are stripped and NFC applied before trimming, so a line such as
    ``"\\x01 abc"`` is fully trimmed in one pass and the function is
    idempotent over its own output.

    Args:
        raw_text: Text as returned by the text layer or OCR

    Returns:
        Cleaned lines in source order; empty lines are kept
    """
    return [clean_text(line).strip() for line in split_lines(raw_text)]
