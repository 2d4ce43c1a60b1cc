"""Transaction-aware chunking of pre-chunked statement content.

Each source chunk is cut at markdown table boundaries. Transaction tables are
parsed, and a table too large for one chunk is re-packed row by row with its
header repeated, so a transaction always lives in exactly one chunk.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .banks import BankDetector
from .models import Chunk, ParsedDocument, SectionMetadata, Transaction, finalize_chunks
from .transactions import parse_transactions

LOGGER = logging.getLogger(__name__)

HEADER_SCAN_CHARS = 200

_TABLE_START_RE = re.compile(r"(?=\n\|[^\n]+\|\n\|[\s\-|]+\|)")
_TABLE_HEADER_RE = re.compile(r"^[\s\S]*?\n\|[\s\-|]+\|\n")
_DATE_COLUMN_RE = re.compile(r"\b(?:date|fecha)\b", re.IGNORECASE)
_AMOUNT_COLUMN_RE = re.compile(r"\b(?:amount|monto|debit|credit|balance)\b", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"\b(?:summary|resumen|balance|total)\b", re.IGNORECASE)
_HEADER_RE = re.compile(r"\b(?:account|statement|date)\b", re.IGNORECASE)


@dataclass(slots=True)
class LogicalChunk:
    text: str
    is_table: bool
    transactions: List[Transaction] = field(default_factory=list)


def is_transaction_table(text: str) -> bool:
    has_columns = bool(_DATE_COLUMN_RE.search(text) or _AMOUNT_COLUMN_RE.search(text))
    has_rows = len(text.split("\n")) >= 3
    is_tabular = "|" in text or "\t" in text or "---" in text
    return has_columns and has_rows and is_tabular


def _split_by_transactions(section: str, transactions: List[Transaction], max_chars: int) -> List[LogicalChunk]:
    header_match = _TABLE_HEADER_RE.match(section)
    header = header_match.group(0) if header_match else ""

    pieces: List[LogicalChunk] = []
    rows = ""
    batch: List[Transaction] = []
    for transaction in transactions:
        row = transaction.raw_text + "\n"
        if rows and len(rows) + len(row) > max_chars:
            pieces.append(LogicalChunk(text=header + rows.strip(), is_table=True, transactions=batch))
            rows, batch = "", []
        rows += row
        batch.append(transaction)
    if rows.strip():
        pieces.append(LogicalChunk(text=header + rows.strip(), is_table=True, transactions=batch))
    return pieces


def create_logical_chunks(content: str, max_chars: int) -> List[LogicalChunk]:
    chunks: List[LogicalChunk] = []
    for section in _TABLE_START_RE.split(content):
        section = section.strip()
        if not section:
            continue
        is_table = is_transaction_table(section)
        transactions = parse_transactions(section) if is_table else []
        if len(section) > max_chars and transactions:
            chunks.extend(_split_by_transactions(section, transactions, max_chars))
        else:
            chunks.append(LogicalChunk(text=section, is_table=is_table, transactions=transactions))
    return chunks


def process_document(
    document: ParsedDocument,
    max_chars: int,
    bank_name: Optional[str] = None,
) -> List[Chunk]:
    """Build chunks with parsed transactions from a document's source chunks."""

    chunks: List[Chunk] = []
    for source in document.chunks:
        for logical in create_logical_chunks(source.content or "", max_chars):
            chunks.append(
                Chunk(
                    index=0,
                    text=logical.text,
                    has_table=logical.is_table,
                    bank_name=bank_name,
                    transactions=logical.transactions or None,
                    metadata=SectionMetadata(
                        page_number=source.page_number,
                        contains_summary=bool(_SUMMARY_RE.search(logical.text)),
                        contains_header=bool(_HEADER_RE.search(logical.text[:HEADER_SCAN_CHARS])),
                    ),
                )
            )

    LOGGER.debug(
        "Processed %s source chunks into %s chunks with %s transactions",
        len(document.chunks),
        len(chunks),
        sum(len(chunk.transactions or []) for chunk in chunks),
    )
    return finalize_chunks(chunks)


def document_bank_name(document: ParsedDocument, bank_detector: BankDetector) -> str:
    """Labelled bank, else the bank named in the first source chunk."""
    first_content = document.chunks[0].content if document.chunks else ""
    return document.bank_label or bank_detector.detect(first_content)
