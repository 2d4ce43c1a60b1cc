"""Heuristic extraction of ledger lines from statement tables.

The parser is a best-effort approximation. Statement layouts that mix several
amount columns on one line (amount, fee and balance, for instance) are
resolved with simple positional rules and may be misread.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from .models import Transaction, TransactionType

LOGGER = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Transaction"
HEADER_SCAN_LINES = 3

_MONTH_DATE_RE = re.compile(
    r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?\s+\d{1,2}\b",
    re.IGNORECASE,
)
# Rejects digits glued to other date parts so ISO dates are left to _ISO_DATE_RE.
_NUMERIC_DATE_RE = re.compile(r"(?<![\d/-])\d{1,2}[/-]\d{1,2}(?:[/-]\d{2,4})?(?![\d/-])")
_ISO_DATE_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_DATE_PATTERNS: Tuple[Pattern[str], ...] = (_MONTH_DATE_RE, _NUMERIC_DATE_RE, _ISO_DATE_RE)

_DEBIT_CREDIT_RE = re.compile(r"\b(?:debits?|credits?)\b", re.IGNORECASE)
_SIGNED_AMOUNT_RE = re.compile(r"-\$[\d,]+\.?\d*")
_HEADER_LINE_RE = re.compile(r"\b(?:date|description|amount|debit|credit|balance)\b", re.IGNORECASE)
_SUMMARY_LINE_RE = re.compile(r"\b(?:total|subtotal|ending balance|beginning balance)\b", re.IGNORECASE)
_AMOUNT_TOKEN_RE = re.compile(r"-?\$?\d[\d,]*(?:\.\d+)?")
_CREDIT_KEYWORDS_RE = re.compile(r"\b(?:deposit|credit|incoming|wire in)\b", re.IGNORECASE)
_DEBIT_KEYWORDS_RE = re.compile(
    r"\b(?:withdrawal|debit|outgoing|wire out|payment|fee|charge)\b", re.IGNORECASE
)
_WHITESPACE_RE = re.compile(r"\s+")


class TransactionLayout(str, Enum):
    """How a table signals the direction of money movement."""

    DEBIT_CREDIT_COLUMNS = "debit_credit_columns"
    SIGNED_AMOUNTS = "signed_amounts"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True, slots=True)
class TransactionFormat:
    layout: TransactionLayout
    date_pattern: Optional[Pattern[str]]


@dataclass(frozen=True, slots=True)
class _Resolution:
    type: TransactionType
    amount: float
    amount_position: Optional[int]


def detect_format(text: str) -> TransactionFormat:
    """Decide once per table which amount-resolution strategy applies."""

    if _DEBIT_CREDIT_RE.search(text):
        layout = TransactionLayout.DEBIT_CREDIT_COLUMNS
    elif _SIGNED_AMOUNT_RE.search(text):
        layout = TransactionLayout.SIGNED_AMOUNTS
    else:
        layout = TransactionLayout.AMBIGUOUS

    date_pattern = next((pattern for pattern in _DATE_PATTERNS if pattern.search(text)), None)
    return TransactionFormat(layout=layout, date_pattern=date_pattern)


def extract_amounts(text: str) -> List[float]:
    """Return the non-zero currency-like numbers found in *text*."""

    amounts: List[float] = []
    for token in _AMOUNT_TOKEN_RE.findall(text):
        try:
            value = float(token.replace("$", "").replace(",", ""))
        except ValueError:
            continue
        if value != value or value == 0:  # NaN or zero
            continue
        amounts.append(value)
    return amounts


def classify_by_keywords(line: str) -> TransactionType:
    if _CREDIT_KEYWORDS_RE.search(line):
        return TransactionType.CREDIT
    if _DEBIT_KEYWORDS_RE.search(line):
        return TransactionType.DEBIT
    return TransactionType.UNKNOWN


def _resolve_debit_credit(amounts: List[float], line: str) -> _Resolution:
    # Debit columns print negative amounts; anything else sits in the credit column.
    for position, value in enumerate(amounts):
        if value < 0:
            return _Resolution(TransactionType.DEBIT, abs(value), position)
    return _Resolution(TransactionType.CREDIT, amounts[0], 0)


def _resolve_signed(amounts: List[float], line: str) -> _Resolution:
    negative = next((position for position, value in enumerate(amounts) if value < 0), None)
    if negative is not None:
        return _Resolution(TransactionType.DEBIT, abs(amounts[negative]), negative)
    return _Resolution(TransactionType.CREDIT, amounts[0], 0)


def _resolve_ambiguous(amounts: List[float], line: str) -> _Resolution:
    return _Resolution(classify_by_keywords(line), abs(amounts[0]), 0)


_RESOLVERS: Dict[TransactionLayout, Callable[[List[float], str], _Resolution]] = {
    TransactionLayout.DEBIT_CREDIT_COLUMNS: _resolve_debit_credit,
    TransactionLayout.SIGNED_AMOUNTS: _resolve_signed,
    TransactionLayout.AMBIGUOUS: _resolve_ambiguous,
}


def parse_transactions(table_text: str) -> List[Transaction]:
    """Extract transactions from the text of one table."""

    fmt = detect_format(table_text)
    if fmt.date_pattern is None:
        return []

    lines = [line for line in table_text.split("\n") if line.strip()]
    start = 0
    for position in range(min(HEADER_SCAN_LINES, len(lines))):
        if _HEADER_LINE_RE.search(lines[position]):
            start = position + 1

    resolve = _RESOLVERS[fmt.layout]
    transactions: List[Transaction] = []
    for raw_line in lines[start:]:
        line = raw_line.strip()
        if _SUMMARY_LINE_RE.search(line):
            continue
        date_match = fmt.date_pattern.search(line)
        if date_match is None:
            continue

        remainder = line[: date_match.start()] + " " + line[date_match.end() :]
        amounts = extract_amounts(remainder)
        if not amounts:
            continue

        resolution = resolve(amounts, line)
        balance: Optional[float] = None
        if len(amounts) >= 2 and resolution.amount_position != len(amounts) - 1:
            balance = amounts[-1]

        description = _WHITESPACE_RE.sub(" ", _AMOUNT_TOKEN_RE.sub("", remainder)).strip()
        transactions.append(
            Transaction(
                date=date_match.group(0),
                description=description or DEFAULT_DESCRIPTION,
                amount=resolution.amount,
                type=resolution.type,
                raw_text=line,
                balance=balance,
            )
        )

    LOGGER.debug("Parsed %s transactions using %s layout", len(transactions), fmt.layout.value)
    return transactions
