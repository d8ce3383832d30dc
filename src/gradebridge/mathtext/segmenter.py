"""
Module: mathtext.segmenter

Purpose:
    Split a content string into ordered plain-text and math segments with
    an explicit left-to-right scanner.

Algorithm:
    At each "$":
    1. If "$$" starts here, look for the next "$$" leaving a non-empty
       body (may span newlines). Found -> block math segment.
    2. Otherwise try inline: "$", one or more non-"$" characters, "$".
       Found -> inline math segment.
    3. Otherwise the dollar is ordinary text.
    Everything between math segments is one plain segment, kept verbatim.

    Block takes precedence over inline at the same position. Unterminated
    delimiters never produce math. Joining the text of all segments
    reproduces the input exactly.

Key Functions:
    - segment(): Content string -> list of Segments

Key Classes:
    - SegmentKind: PLAIN / MATH
    - Segment: One contiguous run

Dependencies:
    - dataclasses (std)

Used By:
    - mathtext.richtext: HTML rich text
    - output.pdf_renderer: PDF text drawing
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

DOLLAR = "$"
DOUBLE_DOLLAR = "$$"


class SegmentKind(str, Enum):
    """Segment tag."""
    PLAIN = "plain"
    MATH = "math"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Segment:
    """
    Contiguous run of a content string.

    Attributes:
        kind: PLAIN or MATH
        text: Raw text; for math this includes the delimiters
        block: True for "$$...$$" math (always False for plain)
    """
    kind: SegmentKind
    text: str
    block: bool = False

    @classmethod
    def plain(cls, text: str) -> Segment:
        return cls(SegmentKind.PLAIN, text, False)

    @classmethod
    def math(cls, text: str, block: bool) -> Segment:
        return cls(SegmentKind.MATH, text, block)

    @property
    def is_math(self) -> bool:
        return self.kind is SegmentKind.MATH


def segment(content: Optional[str]) -> List[Segment]:
    """
    Split content into plain and math segments.

    Args:
        content: Source string; None or "" yields no segments

    Returns:
        Segments in left-to-right order

    Example:
        >>> [(s.kind.value, s.text) for s in segment("$$a$$ and $b$")]
        [('math', '$$a$$'), ('plain', ' and '), ('math', '$b$')]
    """
    if not content:
        return []

    segments: List[Segment] = []
    plain_start = 0
    i = 0
    n = len(content)

    while i < n:
        if content[i] != DOLLAR:
            i += 1
            continue

        block = False
        end = None
        if content.startswith(DOUBLE_DOLLAR, i):
            end = _close_block(content, i)
            block = end is not None
        if end is None:
            end = _close_inline(content, i)

        if end is None:
            i += 1
            continue

        if plain_start < i:
            segments.append(Segment.plain(content[plain_start:i]))
        segments.append(Segment.math(content[i:end], block))
        i = end
        plain_start = end

    if plain_start < n:
        segments.append(Segment.plain(content[plain_start:]))
    return segments


def _close_block(content: str, start: int) -> Optional[int]:
    """End index (exclusive) of a block starting at ``start``, or None."""
    # Body needs at least one character: search from start + 3
    close = content.find(DOUBLE_DOLLAR, start + len(DOUBLE_DOLLAR) + 1)
    if close == -1:
        return None
    return close + len(DOUBLE_DOLLAR)


def _close_inline(content: str, start: int) -> Optional[int]:
    """End index (exclusive) of an inline span starting at ``start``, or None."""
    j = start + 1
    n = len(content)
    while j < n and content[j] != DOLLAR:
        j += 1
    if j == start + 1 or j >= n:
        return None
    return j + 1
