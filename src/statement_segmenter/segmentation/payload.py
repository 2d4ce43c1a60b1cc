"""Classify request payloads and coerce parsed documents into models."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from ..config import SegmenterSettings, get_settings
from ..errors import InvalidInputError
from .models import Fragment, FragmentType, InputKind, Page, ParsedDocument, SourceChunk, TableCell

LOGGER = logging.getLogger(__name__)

EMPTY_PAYLOAD_MESSAGE = "Empty payload: provide `html`, `text`, or `parsed_document`."


@dataclass(slots=True)
class SegmentPayload:
    kind: InputKind
    max_chars: int
    html: str = ""
    text: str = ""
    document: Optional[ParsedDocument] = None


def _as_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _find_document(payload: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    for candidate in (payload.get("parsed_document"), payload.get("document"), payload):
        if isinstance(candidate, Mapping) and (candidate.get("pages") or candidate.get("chunks")):
            return candidate
    return None


def parse_payload(payload: Any, settings: Optional[SegmenterSettings] = None) -> SegmentPayload:
    """Select the entry path for *payload*: parsed document, then HTML, then text."""

    settings = settings or get_settings()
    if not isinstance(payload, Mapping):
        raise InvalidInputError(EMPTY_PAYLOAD_MESSAGE)

    max_chars = settings.sanitize_max_chars(payload.get("max_chars_per_chunk"))
    html = _as_str(payload.get("html"))
    text = _as_str(payload.get("text"))

    raw_document = _find_document(payload)
    if raw_document is not None:
        return SegmentPayload(
            kind=InputKind.PARSED_DOCUMENT,
            max_chars=max_chars,
            html=html,
            text=text,
            document=coerce_document(raw_document),
        )
    if html:
        return SegmentPayload(kind=InputKind.HTML, max_chars=max_chars, html=html, text=text)
    if text:
        return SegmentPayload(kind=InputKind.TEXT, max_chars=max_chars, text=text)
    raise InvalidInputError(EMPTY_PAYLOAD_MESSAGE)


def _coerce_cells(raw_cells: Any) -> List[TableCell]:
    cells: List[TableCell] = []
    if not isinstance(raw_cells, list):
        return cells
    for raw in raw_cells:
        if not isinstance(raw, Mapping) or not isinstance(raw.get("text"), str):
            continue
        row = raw.get("row_index", raw.get("row"))
        column = raw.get("column_index", raw.get("col"))
        cells.append(TableCell(text=raw["text"], row_index=_as_int(row), column_index=_as_int(column)))
    return cells


def _coerce_fragment(raw: Any, position: int) -> Optional[Fragment]:
    if not isinstance(raw, Mapping):
        return None
    try:
        fragment_type = FragmentType(str(raw.get("fragment_type", raw.get("type", ""))).lower())
    except ValueError:
        LOGGER.debug("Skipping fragment with unsupported type: %r", raw.get("fragment_type"))
        return None

    body = raw.get("content")
    if isinstance(body, Mapping):
        content = body.get("content") if isinstance(body.get("content"), str) else ""
        markdown = body.get("markdown") if isinstance(body.get("markdown"), str) else ""
        cells = _coerce_cells(body.get("cells"))
    else:
        content = body if isinstance(body, str) else ""
        markdown = ""
        cells = []

    return Fragment(
        reading_order=_as_float(raw.get("reading_order"), float(position)),
        type=fragment_type,
        content=content,
        markdown=markdown,
        cells=cells,
    )


def _coerce_page(raw: Any) -> Optional[Page]:
    if not isinstance(raw, Mapping):
        return None
    raw_fragments = raw.get("page_fragments", raw.get("fragments"))
    fragments: List[Fragment] = []
    if isinstance(raw_fragments, list):
        for position, raw_fragment in enumerate(raw_fragments):
            fragment = _coerce_fragment(raw_fragment, position)
            if fragment is not None:
                fragments.append(fragment)
    return Page(page_number=_as_int(raw.get("page_number")), fragments=fragments)


def coerce_document(raw: Mapping[str, Any]) -> ParsedDocument:
    """Build a :class:`ParsedDocument`, skipping anything malformed."""

    pages: List[Page] = []
    if isinstance(raw.get("pages"), list):
        for raw_page in raw["pages"]:
            page = _coerce_page(raw_page)
            if page is not None:
                pages.append(page)

    chunks: List[SourceChunk] = []
    if isinstance(raw.get("chunks"), list):
        for raw_chunk in raw["chunks"]:
            if not isinstance(raw_chunk, Mapping):
                continue
            content = raw_chunk.get("content")
            chunks.append(
                SourceChunk(
                    content=content if isinstance(content, str) else "",
                    page_number=_as_int(raw_chunk.get("page_number")),
                )
            )

    labels = raw.get("labels")
    bank_label = _as_str(labels.get("bank")) if isinstance(labels, Mapping) else ""
    return ParsedDocument(pages=pages, chunks=chunks, bank_label=bank_label or None)
