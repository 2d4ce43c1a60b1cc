"""Data models shared by the segmentation engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union


class BlockType(str, Enum):
    """Kind of a classified run of lines."""

    TABLE = "table"
    TEXT = "text"


class FragmentType(str, Enum):
    """Kind of a layout fragment on a parsed page."""

    TABLE = "table"
    TEXT = "text"


class TransactionType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"
    UNKNOWN = "unknown"


class InputKind(str, Enum):
    """Entry path selected for a request payload."""

    PARSED_DOCUMENT = "parsed_document"
    HTML = "html"
    TEXT = "text"


def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    seen: Dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return tuple(seen)


@dataclass(frozen=True, slots=True)
class TableMetadata:
    """Column roles inferred for one or more tables.

    Values are immutable; combining the metadata of several tables or pages
    goes through :meth:`merge`, which always returns a new instance.
    """

    has_transactions: bool = False
    debit_columns: Tuple[str, ...] = ()
    credit_columns: Tuple[str, ...] = ()
    date_column: Optional[str] = None
    description_column: Optional[str] = None
    transaction_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "debit_columns", _dedupe(self.debit_columns))
        object.__setattr__(self, "credit_columns", _dedupe(self.credit_columns))

    def merge(self, other: "TableMetadata") -> "TableMetadata":
        return TableMetadata(
            has_transactions=self.has_transactions or other.has_transactions,
            debit_columns=self.debit_columns + other.debit_columns,
            credit_columns=self.credit_columns + other.credit_columns,
            date_column=self.date_column or other.date_column,
            description_column=self.description_column or other.description_column,
            transaction_count=self.transaction_count + other.transaction_count,
        )

    def with_transaction_count(self, count: int) -> "TableMetadata":
        return TableMetadata(
            has_transactions=self.has_transactions,
            debit_columns=self.debit_columns,
            credit_columns=self.credit_columns,
            date_column=self.date_column,
            description_column=self.description_column,
            transaction_count=count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_transactions": self.has_transactions,
            "debit_columns": list(self.debit_columns),
            "credit_columns": list(self.credit_columns),
            "date_column": self.date_column,
            "description_column": self.description_column,
            "transaction_count": self.transaction_count,
        }


@dataclass(frozen=True, slots=True)
class SectionMetadata:
    """Metadata attached to chunks built by the transaction-aware processor."""

    page_number: Optional[int] = None
    contains_summary: bool = False
    contains_header: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_number": self.page_number,
            "contains_summary": self.contains_summary,
            "contains_header": self.contains_header,
        }


@dataclass(frozen=True, slots=True)
class Transaction:
    """One inferred ledger line."""

    date: str
    description: str
    amount: float
    type: TransactionType
    raw_text: str
    balance: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "date": self.date,
            "description": self.description,
            "amount": self.amount,
            "type": self.type.value,
            "raw_text": self.raw_text,
        }
        if self.balance is not None:
            payload["balance"] = self.balance
        return payload


@dataclass(slots=True)
class Block:
    type: BlockType
    content: str


@dataclass(slots=True)
class TableCell:
    text: str
    row_index: Optional[int] = None
    column_index: Optional[int] = None


@dataclass(slots=True)
class Fragment:
    """A layout-extracted piece of a page."""

    reading_order: float
    type: FragmentType
    content: str = ""
    markdown: str = ""
    cells: List[TableCell] = field(default_factory=list)


@dataclass(slots=True)
class Page:
    page_number: Optional[int]
    fragments: List[Fragment] = field(default_factory=list)


@dataclass(slots=True)
class SourceChunk:
    """Pre-chunked content shipped with a parsed document."""

    content: str
    page_number: Optional[int] = None


@dataclass(slots=True)
class ParsedDocument:
    pages: List[Page] = field(default_factory=list)
    chunks: List[SourceChunk] = field(default_factory=list)
    bank_label: Optional[str] = None

    @property
    def table_fragment_count(self) -> int:
        return sum(
            1 for page in self.pages for fragment in page.fragments if fragment.type is FragmentType.TABLE
        )


ChunkMetadata = Union[TableMetadata, SectionMetadata]


@dataclass(slots=True)
class Chunk:
    """One unit of segmentation output."""

    index: int
    text: str
    has_table: bool
    total_count: int = 0
    page_range: Optional[str] = None
    bank_name: Optional[str] = None
    metadata: Optional[ChunkMetadata] = None
    transactions: Optional[List[Transaction]] = None

    def __post_init__(self) -> None:
        self.text = self.text.strip()
        if not self.text:
            raise ValueError("Chunk text must not be empty")

    @property
    def chunk_id(self) -> str:
        return f"chunk_{self.index}"

    @property
    def char_length(self) -> int:
        return len(self.text)

    def to_dict(self) -> Dict[str, Any]:
        """Render the chunk using the wire field names."""
        payload: Dict[str, Any] = {
            "chunk_id": self.chunk_id,
            "chunk_number": self.index,
            "total_chunks": self.total_count,
            "char_len": self.char_length,
            "has_table": self.has_table,
            "chunk_text": self.text,
        }
        if self.bank_name is not None:
            payload["bank_name"] = self.bank_name
        if self.page_range is not None:
            payload["page_range"] = self.page_range
        if self.metadata is not None:
            payload["metadata"] = self.metadata.to_dict()
        if self.transactions:
            payload["transactions"] = [transaction.to_dict() for transaction in self.transactions]
        return payload


@dataclass(slots=True)
class SegmentationStats:
    total_chunks: int
    total_chars: int
    avg_chunk_size: int
    tables_detected: int

    @classmethod
    def from_chunks(cls, chunks: List[Chunk], tables_detected: int) -> "SegmentationStats":
        total_chars = sum(chunk.char_length for chunk in chunks)
        # Half-up rounding, matching how the averages were always reported.
        average = int(total_chars / max(len(chunks), 1) + 0.5)
        return cls(
            total_chunks=len(chunks),
            total_chars=total_chars,
            avg_chunk_size=average,
            tables_detected=tables_detected,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_chunks": self.total_chunks,
            "total_chars": self.total_chars,
            "avg_chunk_size": self.avg_chunk_size,
            "tables_detected": self.tables_detected,
        }


@dataclass(slots=True)
class SegmentationResult:
    """Chunks produced for one document plus document-level stats."""

    input_kind: InputKind
    bank_name: str
    chunks: List[Chunk]
    stats: SegmentationStats


def finalize_chunks(chunks: List[Chunk]) -> List[Chunk]:
    """Number chunks 1..N in emission order and stamp the final count."""
    total = len(chunks)
    for position, chunk in enumerate(chunks, start=1):
        chunk.index = position
        chunk.total_count = total
    return chunks
