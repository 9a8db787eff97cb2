"""
Paragraph reconstruction from normalized lines.

PDF text layers and OCR both break formulas across lines ("f", "=", "x",
"+ 1"). A single greedy pass re-attaches such fragments to the block before
them. The heuristic is lossy: a genuine new paragraph that happens to look
like a fragment is merged too.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .math_format import MATH_SYMBOLS, char_class

logger = logging.getLogger(__name__)


class TokenClass(Enum):
    """Merge classification of a line relative to the text before it."""
    IDENTIFIER_ONLY = "identifier-only"
    SYMBOL_ONLY = "symbol-only"
    ALNUM_CONTINUATION = "alnum-continuation"
    ORDINARY = "ordinary"


IDENTIFIER_ONLY_RE = re.compile(r'^[^\W\d_]+\s*$')
# Symbols only, optionally followed by numeric operands ("=", "+ 1", "≤ 0.5")
SYMBOL_ONLY_RE = re.compile(
    f"^[{char_class(MATH_SYMBOLS)}][{char_class(MATH_SYMBOLS)}\\s\\d.,]*$"
)


@dataclass
class Block:
    """One or more merged lines forming a logical text run."""
    lines: List[str]

    def __post_init__(self):
        if not self.lines:
            raise ValueError("A block needs at least one line")

    @property
    def text(self) -> str:
        return " ".join(self.lines)

    @property
    def last_line(self) -> str:
        return self.lines[-1]

    def append(self, line: str):
        self.lines.append(line)


def is_identifier_only(line: str) -> bool:
    return bool(IDENTIFIER_ONLY_RE.match(line))


def is_symbol_only(line: str) -> bool:
    return bool(SYMBOL_ONLY_RE.match(line))


def is_alnum_continuation(previous: str, line: str) -> bool:
    return bool(previous) and bool(line) and previous[-1].isalnum() and line[0].isalnum()


def classify(line: str, previous: Optional[str] = None) -> TokenClass:
    """
    Classify a line against the text before it.

    Only the last character of ``previous`` is inspected, so callers may
    pass the last merged line instead of the whole accumulated block.

    Predicates are checked in precedence order: identifier-only,
    symbol-only, alnum-continuation. With no previous text nothing can
    merge and the line is ORDINARY.
    """
    if previous is None:
        return TokenClass.ORDINARY
    if is_identifier_only(line):
        return TokenClass.IDENTIFIER_ONLY
    if is_symbol_only(line):
        return TokenClass.SYMBOL_ONLY
    if is_alnum_continuation(previous, line):
        return TokenClass.ALNUM_CONTINUATION
    return TokenClass.ORDINARY


def reconstruct(lines: Iterable[str]) -> List[Block]:
    """
    Merge line fragments into blocks in a single left-to-right pass.

    Args:
        lines: Normalized lines (see text_normalize.normalize)

    Returns:
        Blocks in source order; none of them is empty
    """
    blocks: List[Block] = []

    for line in lines:
        if not line:
            continue

        # Only the tail of the previous text matters to the classifier
        previous = blocks[-1].last_line if blocks else None
        token_class = classify(line, previous)

        if token_class is TokenClass.ORDINARY:
            blocks.append(Block([line]))
        else:
            blocks[-1].append(line)

    logger.debug(f"Reconstructed {len(blocks)} blocks")
    return blocks
