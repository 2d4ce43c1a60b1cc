from statement_segmenter.segmentation import PageConsolidator, SourceChunk, fallback_chunks, is_page_header_or_footer
from statement_segmenter.segmentation.consolidation import PAGE_BREAK, TABLE_MARKER, extract_page
from statement_segmenter.segmentation.payload import coerce_document

from factories import page, table_fragment, text_fragment


def _pages(*raw_pages):
    return coerce_document({"pages": list(raw_pages)}).pages


def _cells(rows):
    return [
        {"text": text, "row_index": row, "column_index": column}
        for row, values in enumerate(rows)
        for column, text in enumerate(values)
    ]


def test_pages_are_packed_greedily_without_splitting() -> None:
    pages = _pages(
        page(1, text_fragment("a" * 5000)),
        page(2, text_fragment("b" * 5000)),
        page(3, text_fragment("c" * 5000)),
    )

    chunks = PageConsolidator(12000).consolidate(pages, bank_name="Chase")

    assert [chunk.page_range for chunk in chunks] == ["1-2", "3"]
    assert chunks[0].text == "a" * 5000 + PAGE_BREAK + "b" * 5000
    assert chunks[1].text == "c" * 5000
    assert [(chunk.index, chunk.total_count) for chunk in chunks] == [(1, 2), (2, 2)]
    assert {chunk.bank_name for chunk in chunks} == {"Chase"}


def test_oversized_page_stays_whole_by_default() -> None:
    pages = _pages(page(1, text_fragment("word " * 600)))

    chunks = PageConsolidator(1000).consolidate(pages)

    assert len(chunks) == 1
    assert chunks[0].char_length > 1000
    assert chunks[0].page_range == "1"


def test_strict_page_bound_splits_an_oversized_page() -> None:
    pages = _pages(page(4, text_fragment("word " * 600)))

    chunks = PageConsolidator(1000, strict_page_bound=True).consolidate(pages)

    assert len(chunks) > 1
    assert all(chunk.char_length <= 1000 for chunk in chunks)
    assert {chunk.page_range for chunk in chunks} == {"4"}


def test_empty_pages_are_skipped() -> None:
    pages = _pages(
        page(1, text_fragment("Opening balance")),
        page(2),
        page(3, text_fragment("   ")),
        page(4, text_fragment("Closing balance")),
    )

    chunks = PageConsolidator(12000).consolidate(pages)

    assert len(chunks) == 1
    assert chunks[0].page_range == "1-4"
    assert chunks[0].text == f"Opening balance{PAGE_BREAK}Closing balance"


def test_headers_and_footers_are_dropped() -> None:
    extraction = extract_page(
        _pages(
            page(
                2,
                text_fragment("Page 2 of 5", reading_order=0),
                text_fragment("Checking summary", reading_order=1),
                text_fragment("Member FDIC", reading_order=2),
            )
        )[0],
        1,
    )

    assert extraction.content == "Checking summary"
    assert extraction.page_number == 2


def test_header_footer_heuristic() -> None:
    assert is_page_header_or_footer("Page 1 of 3")
    assert is_page_header_or_footer("Statement Date: 01/31/2024")
    assert is_page_header_or_footer("Continued on next page")
    assert not is_page_header_or_footer("Deposits and additions")
    assert not is_page_header_or_footer("Page 1 of 3\nline\nline\nline")


def test_fragments_follow_reading_order_and_mark_tables() -> None:
    raw = page(
        1,
        table_fragment(content="Date Amount\n01/02 5.00", reading_order=2),
        text_fragment("Account activity", reading_order=1),
    )

    extraction = extract_page(_pages(raw)[0], 1)

    assert extraction.content == f"Account activity\n\n{TABLE_MARKER}\nDate Amount\n01/02 5.00"


def test_table_text_prefers_cell_rows() -> None:
    raw = page(
        1,
        table_fragment(
            content="raw fallback",
            markdown="| md |",
            cells=_cells([["Date", "Description", "Debits", "Credits"], ["01/03", "Payroll", "", "2,000.00"]]),
        ),
    )

    extraction = extract_page(_pages(raw)[0], 1)

    assert "Date\tDescription\tDebits\tCredits\n01/03\tPayroll\t\t2,000.00" in extraction.content
    assert "raw fallback" not in extraction.content
    assert extraction.metadata.has_transactions is True
    assert extraction.metadata.date_column == "date"
    assert extraction.metadata.debit_columns == ("debits",)
    assert extraction.metadata.credit_columns == ("credits",)
    assert extraction.metadata.transaction_count == 1


def test_table_text_falls_back_to_markdown() -> None:
    raw = page(1, table_fragment(content="raw", markdown="| Balance |\n| 10.00 |"))

    extraction = extract_page(_pages(raw)[0], 1)

    assert extraction.content.endswith("| Balance |\n| 10.00 |")
    assert extraction.metadata.has_transactions is False


def test_page_metadata_is_merged_across_a_chunk() -> None:
    pages = _pages(
        page(1, table_fragment(cells=_cells([["Date", "Withdrawals"], ["01/04", "20.00"], ["01/05", "7.50"]]))),
        page(2, table_fragment(cells=_cells([["Posting date", "Deposits"], ["Jan 9", "100.00"]]))),
    )

    chunks = PageConsolidator(12000).consolidate(pages)

    assert len(chunks) == 1
    metadata = chunks[0].metadata
    assert chunks[0].has_table is True
    assert metadata.debit_columns == ("withdrawals",)
    assert metadata.credit_columns == ("deposits",)
    assert metadata.date_column == "date"
    assert metadata.transaction_count == 3


def test_fallback_chunks_split_source_content() -> None:
    sources = [
        SourceChunk(content="Account summary for January."),
        SourceChunk(content="| Date | Amount |\n| 01/02 | 5.00 |"),
        SourceChunk(content=""),
    ]

    chunks = fallback_chunks(sources, 12000, bank_name="Chase")

    assert len(chunks) == 1
    assert chunks[0].text.startswith("Account summary")
    assert chunks[0].has_table is True
    assert chunks[0].bank_name == "Chase"
    assert chunks[0].total_count == 1


def test_fallback_chunks_without_content_yield_nothing() -> None:
    assert fallback_chunks([SourceChunk(content="  ")], 100) == []
