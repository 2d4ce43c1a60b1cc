"""High level segmentation entry points."""
from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

from ..config import SegmenterSettings, get_settings
from ..errors import InvalidInputError
from .banks import BankDetector
from .blocks import classify_blocks
from .consolidation import PageConsolidator, fallback_chunks
from .documents import document_bank_name, process_document
from .html import extract_html
from .models import (
    BlockType,
    Chunk,
    InputKind,
    ParsedDocument,
    SegmentationResult,
    SegmentationStats,
    finalize_chunks,
)
from .payload import SegmentPayload, parse_payload
from .splitter import split_text

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger("statement_segmenter.audit")

BANK_SCAN_CHARS = 5000


class SegmentationPipeline:
    """Route a payload through the HTML, text or parsed-document path."""

    def __init__(
        self,
        settings: Optional[SegmenterSettings] = None,
        bank_detector: Optional[BankDetector] = None,
    ) -> None:
        self.settings = settings or get_settings()
        if bank_detector is None:
            bank_detector = (
                BankDetector.from_file(self.settings.bank_names_file)
                if self.settings.bank_names_file
                else BankDetector()
            )
        self.bank_detector = bank_detector

    def segment(self, payload: Any) -> SegmentationResult:
        """Classify *payload* and return its chunks plus document stats."""

        started = time.perf_counter()
        request = parse_payload(payload, self.settings)
        result = self.segment_request(request)
        self._audit("segment", result, time.perf_counter() - started)
        return result

    def segment_request(self, request: SegmentPayload) -> SegmentationResult:
        if request.kind is InputKind.PARSED_DOCUMENT and request.document is not None:
            return self.segment_parsed_document(request.document, request.max_chars)
        if request.kind is InputKind.HTML:
            return self.segment_html(request.html, request.max_chars)
        return self.segment_text(request.text, request.max_chars)

    def segment_html(self, html: str, max_chars: int) -> SegmentationResult:
        extraction = extract_html(html)
        chunks: List[Chunk] = [
            Chunk(index=0, text=segment, has_table=False) for segment in split_text(extraction.prose, max_chars)
        ]
        for table in extraction.tables:
            chunks.extend(Chunk(index=0, text=segment, has_table=True) for segment in split_text(table, max_chars))
        finalize_chunks(chunks)

        bank_name = self.bank_detector.detect(extraction.full_text)
        LOGGER.info("HTML input produced %s chunks from %s tables", len(chunks), len(extraction.tables))
        return SegmentationResult(
            input_kind=InputKind.HTML,
            bank_name=bank_name,
            chunks=chunks,
            stats=SegmentationStats.from_chunks(chunks, tables_detected=len(extraction.tables)),
        )

    def segment_text(self, text: str, max_chars: int) -> SegmentationResult:
        blocks = classify_blocks(text)
        chunks: List[Chunk] = []
        for block in blocks:
            has_table = block.type is BlockType.TABLE
            chunks.extend(
                Chunk(index=0, text=segment, has_table=has_table) for segment in split_text(block.content, max_chars)
            )
        finalize_chunks(chunks)

        tables_detected = sum(1 for block in blocks if block.type is BlockType.TABLE)
        LOGGER.info("Text input produced %s chunks from %s blocks", len(chunks), len(blocks))
        return SegmentationResult(
            input_kind=InputKind.TEXT,
            bank_name=self.bank_detector.detect(text),
            chunks=chunks,
            stats=SegmentationStats.from_chunks(chunks, tables_detected=tables_detected),
        )

    def segment_parsed_document(self, document: ParsedDocument, max_chars: int) -> SegmentationResult:
        bank_name = document.bank_label or self.bank_detector.detect(_document_text(document)[:BANK_SCAN_CHARS])

        consolidator = PageConsolidator(max_chars, strict_page_bound=self.settings.strict_page_bound)
        chunks = consolidator.consolidate(document.pages, bank_name=bank_name)
        if not chunks and document.chunks:
            LOGGER.info("No page fragments found; splitting %s source chunks", len(document.chunks))
            chunks = fallback_chunks(document.chunks, max_chars, bank_name=bank_name)

        LOGGER.info("Parsed document with %s pages produced %s chunks", len(document.pages), len(chunks))
        return SegmentationResult(
            input_kind=InputKind.PARSED_DOCUMENT,
            bank_name=bank_name,
            chunks=chunks,
            stats=SegmentationStats.from_chunks(chunks, tables_detected=document.table_fragment_count),
        )

    def process(self, payload: Any) -> SegmentationResult:
        """Transaction-aware chunking of a parsed document's source chunks."""

        started = time.perf_counter()
        request = parse_payload(payload, self.settings)
        if request.document is None or not request.document.chunks:
            raise InvalidInputError("Document processing requires a parsed document with `chunks`.")

        document = request.document
        bank_name = document_bank_name(document, self.bank_detector)
        chunks = process_document(document, request.max_chars, bank_name=bank_name)
        tables_detected = sum(1 for chunk in chunks if chunk.has_table)
        result = SegmentationResult(
            input_kind=InputKind.PARSED_DOCUMENT,
            bank_name=bank_name,
            chunks=chunks,
            stats=SegmentationStats.from_chunks(chunks, tables_detected=tables_detected),
        )
        self._audit("process", result, time.perf_counter() - started)
        return result

    def _audit(self, event: str, result: SegmentationResult, duration: float) -> None:
        AUDIT_LOGGER.info(
            {
                "event": event,
                "input_kind": result.input_kind.value,
                "bank_name": result.bank_name,
                "total_chunks": result.stats.total_chunks,
                "total_chars": result.stats.total_chars,
                "tables_detected": result.stats.tables_detected,
                "duration_seconds": round(duration, 4),
            }
        )


def _document_text(document: ParsedDocument) -> str:
    parts: List[str] = []
    for page in document.pages:
        for fragment in page.fragments:
            parts.append(fragment.content or fragment.markdown or " ".join(cell.text for cell in fragment.cells))
    parts.extend(chunk.content for chunk in document.chunks)
    return "\n".join(part for part in parts if part)
