"""
Math-aware paragraph formatter.

Provides:
- Named mathematical symbol sets (shared with the reconstructor)
- Marker/bullet splitting
- Operator spacing and identifier rejoining rules
- Paragraph value objects handed to the DOCX assembler
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from .text_normalize import clean_text

logger = logging.getLogger(__name__)


# ============================================================================
# Symbol Sets
# ============================================================================

ARITHMETIC = frozenset("+-*/×÷±∓·−")
COMPARISON = frozenset("=≠<>≤≥≈≡≅∼")
SET_OPERATORS = frozenset("∈∉∋⊂⊃⊆⊇∪∩∅∖")
LOGIC = frozenset("∧∨¬∀∃⊕⊢⊨")
ARROWS = frozenset("→←↔⇒⇐⇔↦↑↓")
PARALLEL_ORTHOGONAL = frozenset("∥∦⊥")
BRACKETS = frozenset("()[]{}")

MATH_SYMBOLS = frozenset().union(
    ARITHMETIC,
    COMPARISON,
    SET_OPERATORS,
    LOGIC,
    ARROWS,
    PARALLEL_ORTHOGONAL,
    BRACKETS,
)

MARKERS = ("●", "►", "•", "◦")


def char_class(chars: Iterable[str]) -> str:
    """Build a regex character class body from a set of characters."""
    return "".join(re.escape(c) for c in sorted(chars))


_SYMBOL = char_class(MATH_SYMBOLS)
_LETTER = r'[^\W\d_]'

MARKER_SPLIT_RE = re.compile(f"([{char_class(MARKERS)}])")
SYMBOL_RE = re.compile(f"([{_SYMBOL}])")
BASIC_OPERATOR_RE = re.compile(r'\s*([-+=])\s*')
MULTI_SPACE_RE = re.compile(r'\s{2,}')
LETTER_DIGIT_RE = re.compile(f"({_LETTER})\\s+(\\d)")
DIGIT_LETTER_RE = re.compile(f"(\\d)\\s+({_LETTER})")
OPEN_PAREN_RE = re.compile(r'\(\s+')
CLOSE_PAREN_RE = re.compile(r'\s+\)')
LETTER_PAREN_RE = re.compile(f"({_LETTER})\\s+\\(")
PAREN_ALNUM_RE = re.compile(r'\)\s*([^\W_])')
GROUP_MINUS_RE = re.compile(r'\)\s*-\s*\(')


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Paragraph:
    """One output paragraph with its display attributes."""
    text: str
    size: int = 24  # half-points (12pt)
    space_after: int = 200  # twips


# ============================================================================
# Formatting Rules
# ============================================================================

def split_markers(text: str) -> List[str]:
    """
    Split text on bullet markers, keeping each marker as its own segment.

    Example: "intro ● item" -> ["intro", "●", "item"]
    """
    return [seg.strip() for seg in MARKER_SPLIT_RE.split(text) if seg.strip()]


def format_segment(text: str, collapse_all_spaces: bool = True) -> str:
    """
    Apply the operator spacing and joining rules to one segment.

    Args:
        text: Segment produced by split_markers
        collapse_all_spaces: Collapse every run of whitespace. When False only
            the first run is collapsed, matching the first release.

    Returns:
        Formatted segment text, trimmed
    """
    text = clean_text(text)

    text = SYMBOL_RE.sub(r' \1 ', text)
    text = BASIC_OPERATOR_RE.sub(r' \1 ', text)
    text = MULTI_SPACE_RE.sub(' ', text, count=0 if collapse_all_spaces else 1)

    text = LETTER_DIGIT_RE.sub(r'\1\2', text)
    text = DIGIT_LETTER_RE.sub(r'\1\2', text)

    text = OPEN_PAREN_RE.sub('(', text)
    text = CLOSE_PAREN_RE.sub(')', text)

    text = LETTER_PAREN_RE.sub(r'\1(', text)
    text = PAREN_ALNUM_RE.sub(r') \1', text)

    text = GROUP_MINUS_RE.sub(') - (', text)

    return text.strip()


# ============================================================================
# Formatter
# ============================================================================

class MathFormatter:
    """Turn reconstructed blocks into formatted paragraphs."""

    def __init__(
        self,
        font_size_half_points: int = 24,
        space_after_twips: int = 200,
        collapse_all_spaces: bool = True
    ):
        self.font_size_half_points = font_size_half_points
        self.space_after_twips = space_after_twips
        self.collapse_all_spaces = collapse_all_spaces

    @classmethod
    def from_config(cls, config) -> "MathFormatter":
        return cls(
            font_size_half_points=config.font_size_half_points,
            space_after_twips=config.space_after_twips,
            collapse_all_spaces=config.collapse_all_spaces,
        )

    def make_paragraph(self, text: str) -> Paragraph:
        return Paragraph(
            text=text,
            size=self.font_size_half_points,
            space_after=self.space_after_twips,
        )

    def format(self, blocks: Iterable[Union[str, object]]) -> List[Paragraph]:
        """
        Format reconstructed blocks into paragraphs.

        Blocks are joined into one stream with single spaces and re-split on
        bullet markers, so paragraph boundaries in the output come from the
        markers only.

        Args:
            blocks: Block objects (anything with a ``text`` attribute) or strings

        Returns:
            One Paragraph per non-empty formatted segment
        """
        stream = " ".join(getattr(block, "text", block) for block in blocks)

        paragraphs = []
        for segment in split_markers(stream):
            text = format_segment(segment, self.collapse_all_spaces)
            if text:
                paragraphs.append(self.make_paragraph(text))

        logger.debug(f"Formatted {len(paragraphs)} paragraphs")
        return paragraphs


def format_blocks(
    blocks: Iterable[Union[str, object]],
    formatter: Optional[MathFormatter] = None
) -> List[Paragraph]:
    """Format blocks with a default (or given) MathFormatter."""
    return (formatter or MathFormatter()).format(blocks)
