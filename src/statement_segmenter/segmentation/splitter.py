"""Size-bounded text splitting with natural breakpoints."""
from __future__ import annotations

import logging
from typing import List

LOGGER = logging.getLogger(__name__)

# A breakpoint closer than this to the start of the window would produce a
# near-empty segment, so the hard boundary is used instead.
MIN_BREAK_OFFSET = 200
_BREAKPOINTS = ("\n\n", ". ")


def split_text(text: str, max_chars: int) -> List[str]:
    """Split *text* into trimmed segments of at most ``max_chars`` characters.

    The input is stripped first, so text that fits in one segment comes back
    trimmed rather than verbatim, and surrounding whitespace never changes the
    result.

    Inside every window the last paragraph break or sentence end is preferred
    over the hard boundary. The splitter knows nothing about tables, so callers
    only hand it content where mid-content breaks are acceptable.
    """

    if max_chars < 1:
        raise ValueError("max_chars must be a positive integer")
    text = text.strip()
    if not text:
        return []
    if len(text) <= max_chars:
        return [text]

    segments: List[str] = []
    text_length = len(text)
    start = 0
    while start < text_length:
        end = min(start + max_chars, text_length)
        if end < text_length:
            end = _find_break(text, start, end)
        segment = text[start:end].strip()
        if segment:
            segments.append(segment)
        start = end

    LOGGER.debug("Split %s characters into %s segments (max %s)", text_length, len(segments), max_chars)
    return segments


def _find_break(text: str, start: int, end: int) -> int:
    window = text[start:end]
    last_break = max(window.rfind(marker) for marker in _BREAKPOINTS)
    if last_break > MIN_BREAK_OFFSET:
        # Keep the period (or first newline) with the preceding segment.
        return start + last_break + 1
    return end
