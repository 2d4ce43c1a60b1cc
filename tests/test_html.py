from statement_segmenter.segmentation.html import extract_html


def test_tables_become_tab_joined_rows() -> None:
    html = (
        "<html><head><style>td { color: red; }</style></head><body>"
        "<h1>Monthly   statement</h1><p>Thanks for banking with us.</p>"
        "<table><tr><th>Date</th><th>Amount</th></tr>"
        "<tr><td>01/02</td><td> 5.00 </td></tr></table>"
        "<script>window.tracking = true;</script>"
        "</body></html>"
    )

    extraction = extract_html(html)

    assert extraction.tables == ["Date\tAmount\n01/02\t5.00"]
    assert extraction.prose == "Monthly statement Thanks for banking with us."
    assert "tracking" not in extraction.full_text
    assert "color" not in extraction.full_text


def test_nested_tables_leave_no_table_text_in_prose() -> None:
    html = (
        "<p>Intro</p><table><tr><td>Outer"
        "<table><tr><td>Inner</td><td>1.00</td></tr></table>"
        "</td></tr></table><p>Outro</p>"
    )

    extraction = extract_html(html)

    assert len(extraction.tables) == 2
    assert extraction.tables[1] == "Inner\t1.00"
    assert extraction.prose == "Intro Outro"


def test_markup_without_tables() -> None:
    extraction = extract_html("<div>Only <b>prose</b> here</div>")

    assert extraction.tables == []
    assert extraction.prose == "Only prose here"
    assert extraction.full_text == "Only prose here"
