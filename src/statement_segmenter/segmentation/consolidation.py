"""Greedy packing of parsed pages into page-spanning chunks."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .models import Chunk, Fragment, FragmentType, Page, SourceChunk, TableMetadata, finalize_chunks
from .splitter import split_text
from .tables import analyze_table, count_transaction_lines

LOGGER = logging.getLogger(__name__)

TABLE_MARKER = "### TABLE ###"
PAGE_BREAK = "\n\n--- PAGE BREAK ---\n\n"
MAX_HEADER_FOOTER_LINES = 3

_HEADER_FOOTER_PATTERNS = (
    re.compile(r"page \d+ of \d+", re.IGNORECASE),
    re.compile(r"^\d+ of \d+$", re.IGNORECASE),
    re.compile(r"member fdic", re.IGNORECASE),
    re.compile(r"continued on next page", re.IGNORECASE),
    re.compile(r"^statement date:", re.IGNORECASE),
    re.compile(r"^account number:", re.IGNORECASE),
    re.compile(r"^\d{4} \d{7} \d{4}-\d{4}"),
)
_TABLE_ROW_RE = re.compile(r"\|.*\|")


@dataclass(slots=True)
class PageExtraction:
    page_number: int
    content: str
    metadata: TableMetadata


def is_page_header_or_footer(text: str) -> bool:
    """Return ``True`` for short running headers, footers and disclosures."""

    stripped = text.strip()
    if len(stripped.split("\n")) > MAX_HEADER_FOOTER_LINES:
        return False
    return any(pattern.search(stripped) for pattern in _HEADER_FOOTER_PATTERNS)


def _cell_rows(fragment: Fragment) -> Dict[int, List[str]]:
    rows: Dict[int, List[tuple]] = {}
    for cell in fragment.cells:
        if cell.row_index is None:
            continue
        column = cell.column_index if cell.column_index is not None else len(rows.get(cell.row_index, []))
        rows.setdefault(cell.row_index, []).append((column, cell.text.strip()))
    return {row: [text for _, text in sorted(cells, key=lambda item: item[0])] for row, cells in rows.items()}


def fragment_table_text(fragment: Fragment) -> str:
    """Text of a table fragment: cell rows, then markdown, then raw content."""

    rows = _cell_rows(fragment)
    if rows:
        lines = ["\t".join(rows[index]) for index in sorted(rows)]
        text = "\n".join(line for line in lines if line.strip())
        if text:
            return text
    return fragment.markdown or fragment.content or ""


def header_cells(fragment: Fragment) -> List[str]:
    rows = _cell_rows(fragment)
    if rows:
        return rows[min(rows)]
    return [cell.text for cell in fragment.cells if cell.text]


def extract_page(page: Page, position: int) -> PageExtraction:
    """Flatten one page's fragments in reading order and collect table metadata."""

    page_number = page.page_number if page.page_number is not None else position
    metadata = TableMetadata()
    parts: List[str] = []

    for fragment in sorted(page.fragments, key=lambda item: item.reading_order):
        if fragment.type is FragmentType.TABLE:
            table_text = fragment_table_text(fragment)
            table_meta = analyze_table(header_cells(fragment), table_text)
            if table_meta.has_transactions:
                metadata = metadata.merge(table_meta.with_transaction_count(count_transaction_lines(table_text)))
            parts.append(f"\n\n{TABLE_MARKER}\n{table_text}")
        else:
            text = fragment.content
            if text.strip() and not is_page_header_or_footer(text):
                parts.append(f"\n{text}")
            elif text.strip():
                LOGGER.debug("Dropped header/footer fragment on page %s", page_number)

    return PageExtraction(page_number=page_number, content="".join(parts).strip(), metadata=metadata)


def _page_range(start: int, end: int) -> str:
    return f"{start}" if start == end else f"{start}-{end}"


class PageConsolidator:
    """Pack consecutive pages into chunks of at most ``max_chars`` characters.

    Pages are never cut. A single page larger than the budget becomes an
    oversized chunk unless ``strict_page_bound`` is set, in which case that
    page alone is split with :func:`split_text`.
    """

    def __init__(self, max_chars: int, strict_page_bound: bool = False) -> None:
        self.max_chars = max_chars
        self.strict_page_bound = strict_page_bound

    def consolidate(self, pages: Iterable[Page], bank_name: Optional[str] = None) -> List[Chunk]:
        chunks: List[Chunk] = []
        buffer = ""
        buffer_meta = TableMetadata()
        start_page = end_page = 0

        def flush() -> None:
            if buffer.strip():
                chunks.extend(self._emit(buffer, buffer_meta, start_page, end_page, bank_name))

        for position, page in enumerate(pages, start=1):
            if not page.fragments:
                continue
            extraction = extract_page(page, position)
            if not extraction.content:
                continue

            if not buffer:
                buffer, buffer_meta = extraction.content, extraction.metadata
                start_page = end_page = extraction.page_number
            elif len(buffer) + len(PAGE_BREAK) + len(extraction.content) <= self.max_chars:
                buffer = f"{buffer}{PAGE_BREAK}{extraction.content}"
                buffer_meta = buffer_meta.merge(extraction.metadata)
                end_page = extraction.page_number
            else:
                flush()
                buffer, buffer_meta = extraction.content, extraction.metadata
                start_page = end_page = extraction.page_number
        flush()

        LOGGER.debug("Consolidated pages into %s chunks", len(chunks))
        return finalize_chunks(chunks)

    def _emit(
        self,
        content: str,
        metadata: TableMetadata,
        start_page: int,
        end_page: int,
        bank_name: Optional[str],
    ) -> List[Chunk]:
        pieces = [content]
        if self.strict_page_bound and len(content) > self.max_chars:
            LOGGER.info(
                "Page range %s exceeds %s characters; splitting", _page_range(start_page, end_page), self.max_chars
            )
            pieces = split_text(content, self.max_chars)
        return [
            Chunk(
                index=0,
                text=piece,
                has_table=metadata.has_transactions,
                page_range=_page_range(start_page, end_page),
                bank_name=bank_name,
                metadata=metadata,
            )
            for piece in pieces
            if piece.strip()
        ]


def fallback_chunks(source_chunks: Iterable[SourceChunk], max_chars: int, bank_name: Optional[str] = None) -> List[Chunk]:
    """Concatenate pre-chunked content and split it without table awareness."""

    consolidated = "".join(f"\n\n{chunk.content or ''}" for chunk in source_chunks).strip()
    chunks = [
        Chunk(
            index=0,
            text=segment,
            has_table=bool(_TABLE_ROW_RE.search(segment)) or "\t" in segment,
            bank_name=bank_name,
        )
        for segment in split_text(consolidated, max_chars)
    ]
    return finalize_chunks(chunks)
