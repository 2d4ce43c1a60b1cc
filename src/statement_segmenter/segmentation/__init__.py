"""Segmentation engine: splitting, classification, table and page analysis."""
from .banks import DEFAULT_BANK_NAMES, UNKNOWN_BANK, BankDetector
from .blocks import classify_blocks, is_table_line
from .consolidation import PageConsolidator, fallback_chunks, is_page_header_or_footer
from .documents import create_logical_chunks, process_document
from .models import (
    Block,
    BlockType,
    Chunk,
    Fragment,
    FragmentType,
    InputKind,
    Page,
    ParsedDocument,
    SegmentationResult,
    SegmentationStats,
    SourceChunk,
    TableCell,
    TableMetadata,
    Transaction,
    TransactionType,
)
from .pipeline import SegmentationPipeline
from .splitter import split_text
from .tables import analyze_table, count_transaction_lines
from .transactions import TransactionLayout, detect_format, parse_transactions

__all__ = [
    "DEFAULT_BANK_NAMES",
    "UNKNOWN_BANK",
    "BankDetector",
    "Block",
    "BlockType",
    "Chunk",
    "Fragment",
    "FragmentType",
    "InputKind",
    "Page",
    "PageConsolidator",
    "ParsedDocument",
    "SegmentationPipeline",
    "SegmentationResult",
    "SegmentationStats",
    "SourceChunk",
    "TableCell",
    "TableMetadata",
    "Transaction",
    "TransactionLayout",
    "TransactionType",
    "analyze_table",
    "classify_blocks",
    "count_transaction_lines",
    "create_logical_chunks",
    "detect_format",
    "fallback_chunks",
    "is_page_header_or_footer",
    "is_table_line",
    "parse_transactions",
    "process_document",
    "split_text",
]
