"""Line-level classification of text into table-like and prose runs."""
from __future__ import annotations

import re
from typing import List, Optional

from .models import Block, BlockType

MERGE_LIMIT = 2000

_LEADING_DATE_RE = re.compile(r"^\s*\d{2}[/-]\d{2}(?:[/-]\d{2,4})?\s+")
_COLUMN_GAPS_RE = re.compile(r"\s{2,}\S+\s{2,}\S+")
_HEADER_WORD_RE = re.compile(r"^\s*(DATE|DESCRIPTION|AMOUNT)\b", re.IGNORECASE)


def is_table_line(line: str) -> bool:
    """Return ``True`` when *line* looks like a row of a table."""

    if _LEADING_DATE_RE.search(line):
        return True
    if "\t" in line:
        return True
    if _COLUMN_GAPS_RE.search(line):
        return True
    return bool(_HEADER_WORD_RE.search(line))


def classify_blocks(text: str) -> List[Block]:
    """Partition *text* into alternating runs of table and text lines."""

    blocks: List[Block] = []
    current_type: Optional[BlockType] = None
    buffer: List[str] = []

    def flush() -> None:
        content = "\n".join(buffer).strip()
        buffer.clear()
        if content and current_type is not None:
            blocks.append(Block(type=current_type, content=content))

    for line in re.split(r"\r?\n", text):
        line_type = BlockType.TABLE if is_table_line(line) else BlockType.TEXT
        if current_type is not None and line_type is not current_type:
            flush()
        current_type = line_type
        buffer.append(line)
    flush()

    return _merge_adjacent(blocks)


def _merge_adjacent(blocks: List[Block]) -> List[Block]:
    merged: List[Block] = []
    for block in blocks:
        previous = merged[-1] if merged else None
        if (
            previous is not None
            and previous.type is block.type
            and len(previous.content) + len(block.content) < MERGE_LIMIT
        ):
            previous.content = f"{previous.content}\n{block.content}"
        else:
            merged.append(Block(type=block.type, content=block.content))
    return merged
