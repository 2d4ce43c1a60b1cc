import math

import pytest

from statement_segmenter.config import SegmenterSettings, sanitize_max_chars
from statement_segmenter.errors import InvalidInputError
from statement_segmenter.segmentation import FragmentType, InputKind
from statement_segmenter.segmentation.payload import EMPTY_PAYLOAD_MESSAGE, coerce_document, parse_payload

from factories import page, table_fragment, text_fragment


def test_text_payload(settings: SegmenterSettings) -> None:
    request = parse_payload({"text": "  Account summary  "}, settings)

    assert request.kind is InputKind.TEXT
    assert request.text == "Account summary"
    assert request.max_chars == settings.default_max_chars


def test_html_wins_over_text(settings: SegmenterSettings) -> None:
    request = parse_payload({"html": "<p>x</p>", "text": "y", "max_chars_per_chunk": 500}, settings)

    assert request.kind is InputKind.HTML
    assert request.max_chars == 500


def test_parsed_document_wins_over_html(settings: SegmenterSettings) -> None:
    payload = {
        "html": "<p>x</p>",
        "parsed_document": {"pages": [page(1, text_fragment("Hello"))]},
    }

    request = parse_payload(payload, settings)

    assert request.kind is InputKind.PARSED_DOCUMENT
    assert request.document is not None
    assert request.document.pages[0].fragments[0].content == "Hello"


@pytest.mark.parametrize("key", ["parsed_document", "document"])
def test_document_aliases(settings: SegmenterSettings, key: str) -> None:
    request = parse_payload({key: {"chunks": [{"content": "abc"}]}}, settings)

    assert request.kind is InputKind.PARSED_DOCUMENT


def test_bare_document_payload(settings: SegmenterSettings) -> None:
    request = parse_payload({"pages": [page(1, text_fragment("Hello"))]}, settings)

    assert request.kind is InputKind.PARSED_DOCUMENT


def test_empty_document_falls_through_to_text(settings: SegmenterSettings) -> None:
    request = parse_payload({"parsed_document": {"pages": [], "chunks": []}, "text": "fallback"}, settings)

    assert request.kind is InputKind.TEXT


@pytest.mark.parametrize("payload", [{}, {"text": "   ", "html": ""}, {"html": 42}, [], "text", None])
def test_empty_payload_is_rejected(settings: SegmenterSettings, payload) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        parse_payload(payload, settings)

    assert str(excinfo.value) == EMPTY_PAYLOAD_MESSAGE
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, 12000),
        ("abc", 12000),
        (True, 12000),
        (0, 12000),
        (-5, 12000),
        (math.inf, 12000),
        (math.nan, 12000),
        (500.7, 500),
        ("2500", 2500),
        (0.5, 1),
        (10**9, 60000),
    ],
)
def test_sanitize_max_chars(value, expected: int) -> None:
    assert sanitize_max_chars(value) == expected


def test_settings_bound_the_chunk_size() -> None:
    settings = SegmenterSettings(default_max_chars=800, max_chars_ceiling=1000)

    assert settings.sanitize_max_chars(None) == 800
    assert settings.sanitize_max_chars(5000) == 1000


def test_coercion_tolerates_malformed_items() -> None:
    raw = {
        "pages": [
            "not a page",
            {
                "page_number": "3",
                "fragments": [
                    {"type": "TABLE", "content": {"cells": [{"text": "Date", "row": 0, "col": 0}, {"row": 0}]}},
                    {"fragment_type": "image", "content": {"content": "logo"}},
                    "junk",
                    {"fragment_type": "text", "content": "plain string body", "reading_order": "bad"},
                ],
            },
            page(None, table_fragment(markdown="| a |")),
        ],
        "chunks": [{"content": "abc", "page_number": 2}, {"content": None}, 7],
        "labels": {"bank": " Credit Union One "},
    }

    document = coerce_document(raw)

    assert [p.page_number for p in document.pages] == [3, None]
    table, text = document.pages[0].fragments
    assert table.type is FragmentType.TABLE
    assert [(cell.text, cell.row_index, cell.column_index) for cell in table.cells] == [("Date", 0, 0)]
    assert text.type is FragmentType.TEXT
    assert text.content == "plain string body"
    assert text.reading_order == 3.0
    assert document.pages[1].fragments[0].markdown == "| a |"
    assert [(chunk.content, chunk.page_number) for chunk in document.chunks] == [("abc", 2), ("", None)]
    assert document.bank_label == "Credit Union One"
    assert document.table_fragment_count == 2
