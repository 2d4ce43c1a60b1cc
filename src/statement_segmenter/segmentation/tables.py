"""Column-role inference for extracted tables."""
from __future__ import annotations

import re
from typing import List, Optional, Sequence

from .models import TableMetadata

_DATE_HEADER_RE = re.compile(r"date", re.IGNORECASE)
_DESCRIPTION_HEADER_RE = re.compile(r"description|concept|detail", re.IGNORECASE)
_DEBIT_HEADER_RE = re.compile(r"debit|withdrawal|\bout\b|payment", re.IGNORECASE)
_CREDIT_HEADER_RE = re.compile(r"credit|deposit|\bin\b|income", re.IGNORECASE)
_PAIRED_COLUMNS_RE = re.compile(r"debits.*credits|withdrawals.*deposits", re.IGNORECASE)
_TRANSACTION_LINE_RE = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec|\d{1,2}[/-]\d{1,2})", re.IGNORECASE
)


def analyze_table(header_cells: Sequence[str], body_text: str) -> TableMetadata:
    """Infer date, description, debit and credit columns of a table.

    Header cells are matched case-insensitively. When the body mentions paired
    debit/credit (or withdrawal/deposit) columns the table is treated as
    transactional even without usable headers.
    """

    has_transactions = False
    date_column: Optional[str] = None
    description_column: Optional[str] = None
    debit_columns: List[str] = []
    credit_columns: List[str] = []

    for cell in header_cells:
        header = (cell or "").strip().lower()
        if not header:
            continue
        if _DATE_HEADER_RE.search(header):
            date_column = header
            has_transactions = True
        if _DESCRIPTION_HEADER_RE.search(header):
            description_column = header
        if _DEBIT_HEADER_RE.search(header):
            debit_columns.append(header)
            has_transactions = True
        if _CREDIT_HEADER_RE.search(header):
            credit_columns.append(header)
            has_transactions = True

    if body_text and _PAIRED_COLUMNS_RE.search(body_text):
        has_transactions = True

    return TableMetadata(
        has_transactions=has_transactions,
        debit_columns=tuple(debit_columns),
        credit_columns=tuple(credit_columns),
        date_column=date_column,
        description_column=description_column,
    )


def count_transaction_lines(body_text: str) -> int:
    """Cheap row-count proxy: lines carrying a month name or a numeric date."""
    return sum(1 for line in body_text.split("\n") if _TRANSACTION_LINE_RE.search(line))
