from statement_segmenter.segmentation import analyze_table, count_transaction_lines


def test_header_cells_assign_column_roles() -> None:
    metadata = analyze_table(["Date", "Description", "Withdrawals", "Deposits", "Balance"], "")

    assert metadata.has_transactions is True
    assert metadata.date_column == "date"
    assert metadata.description_column == "description"
    assert metadata.debit_columns == ("withdrawals",)
    assert metadata.credit_columns == ("deposits",)


def test_short_direction_words_match_whole_words() -> None:
    metadata = analyze_table(["Money In", "Money Out", "Opening balance"], "")

    assert metadata.credit_columns == ("money in",)
    assert metadata.debit_columns == ("money out",)


def test_description_alone_does_not_imply_transactions() -> None:
    metadata = analyze_table(["Concept", "Reference"], "")

    assert metadata.description_column == "concept"
    assert metadata.has_transactions is False


def test_paired_columns_in_body_force_transactions() -> None:
    metadata = analyze_table([], "Checking summary\nDebits and Credits this period\n")

    assert metadata.has_transactions is True
    assert metadata.debit_columns == ()
    assert metadata.credit_columns == ()


def test_missing_cells_degrade_to_no_transactions() -> None:
    metadata = analyze_table(["", "   "], "Account holder: Jane Doe")

    assert metadata.has_transactions is False
    assert metadata.date_column is None


def test_count_transaction_lines_uses_dates_and_month_names() -> None:
    body = "\n".join(
        [
            "Date\tDescription\tAmount",
            "01/05\tCoffee\t-4.50",
            "Jan 07\tPayroll\t2,000.00",
            "Total\t\t1,995.50",
        ]
    )

    assert count_transaction_lines(body) == 2
