"""
Unit tests for line classification.
"""
from conftest import make_statement

from fsledger.classifier import (
    classify,
    column_currency,
    find_table_bounds,
    is_column_label,
    is_noise,
    to_raw_lines,
)


def blocks_of(text):
    return list(classify(to_raw_lines(text)))


def test_to_raw_lines_numbers_from_one():
    lines = to_raw_lines("a\r\nb\n")
    assert [(line.number, line.text) for line in lines] == [(1, "a"), (2, "b"), (3, "")]


def test_classify_groups_rows(statement_text):
    blocks = blocks_of(statement_text)

    assert len(blocks) == 6
    assert blocks[0].text == "2020-01-03 Deposit (0.00) 100.00 100.00"
    # Wrapped row keeps its continuation line
    assert blocks[1].text == "2020-01-05 Auto invested into SME-1234 Kedai Runcit Sdn Bhd (80.00) 0.00 20.00"
    assert len(blocks[1].lines) == 2
    assert all(block.currency == "RM" for block in blocks)


def test_classify_drops_page_furniture(statement_text):
    texts = [line.text for block in blocks_of(statement_text) for line in block.lines]
    assert not any(text.startswith("Page") for text in texts)
    assert "Date" not in texts
    assert "(RM)" not in texts


def test_classify_stops_at_important_notice(statement_text):
    blocks = blocks_of(statement_text)
    assert not any("999.00" in block.text for block in blocks)


def test_classify_line_numbers(statement_text):
    lines = to_raw_lines(statement_text)
    block = blocks_of(statement_text)[0]
    assert lines[block.first_line - 1].text == "2020-01-03 Deposit (0.00) 100.00 100.00"
    assert block.first_line == block.last_line == 13


def test_no_dated_rows_yields_nothing():
    assert blocks_of("Statement of Account\nNo transactions this period\n") == []
    assert blocks_of("") == []


def test_truncated_trailing_block_is_passed_through():
    blocks = blocks_of(make_statement("2020-01-03 Deposit (0.00) 100.00 100.00\n", "2020-01-04 Deposit\n"))
    assert blocks[-1].text == "2020-01-04 Deposit"


def test_malformed_date_still_opens_block():
    blocks = blocks_of(make_statement("1-03 Deposit (0.00) 100.00 100.00\n"))
    assert len(blocks) == 1
    assert blocks[0].text.startswith("1-03")


def test_without_table_header_scans_everything():
    blocks = blocks_of("2020-01-03 Deposit (RM 0.00) RM 100.00 RM 100.00\n")
    assert len(blocks) == 1
    assert blocks[0].currency is None


def test_classify_is_restartable(statement_text):
    lines = to_raw_lines(statement_text)
    assert list(classify(lines)) == list(classify(lines))


def test_find_table_bounds_single_line_header():
    lines = to_raw_lines("Header\nBalance (RM)\n2020-01-03 Deposit (0.00) 1.00 1.00\nImportant!\nfooter")
    assert find_table_bounds(lines) == (2, 3)


def test_column_labels():
    assert is_column_label("Balance")
    assert is_column_label("(RM)")
    assert is_column_label("Date Description Debit (RM) Credit (RM) Balance (RM)")
    assert not is_column_label("(80.00) 0.00 20.00")
    assert not is_column_label("Bengkel Maju")
    assert column_currency("Credit (SGD)") == "SGD"
    assert column_currency("Kedai (ABC) Sdn Bhd") is None


def test_noise_lines():
    assert is_noise("")
    assert is_noise("Page 3 of 4")
    assert is_noise("2 / 4")
    assert is_noise("2020-01-01 - 2020-01-31")
    assert is_noise("Statement of Account")
    assert not is_noise("2020-01-03 Deposit (0.00) 100.00 100.00")
    assert not is_noise("(80.00) 0.00 20.00")
