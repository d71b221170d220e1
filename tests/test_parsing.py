"""
Tests for end-to-end statement parsing.
"""
from decimal import Decimal

import pytest
from conftest import make_statement

from fsledger.builder import TransactionBuilder
from fsledger.classifier import classify, to_raw_lines
from fsledger.config import LedgerConfig
from fsledger.exceptions import MalformedAmountError, UnrecognizedKindError
from fsledger.exporters import render
from fsledger.parsing import group_entries, parse
from fsledger.schema import EntryKind


def test_parse_statement(statement_text):
    result = parse(statement_text)

    kinds = [txn.kind for txn in result.ledger.transactions]
    assert kinds == [EntryKind.DEPOSIT, EntryKind.AUTO_INVESTMENT, EntryKind.REPAYMENT, EntryKind.WITHDRAWAL]
    assert result.warnings == []
    assert result.ok


def test_every_transaction_balances_exactly(statement_text):
    for txn in parse(statement_text).ledger.transactions:
        assert sum(p.amount.quantity for p in txn.postings) == Decimal("0")


def test_render_matches_expected_ledger(statement_text, expected_ledger):
    assert render(parse(statement_text).ledger) == expected_ledger


def test_parse_and_render_are_idempotent(statement_text):
    first = parse(statement_text)
    second = parse(statement_text)
    assert first == second
    assert render(first.ledger) == render(second.ledger)


def test_no_dated_rows_is_an_empty_ledger():
    result = parse("Statement of Account\nNo transactions for this period\n")
    assert result.ledger.transactions == []
    assert result.warnings == []
    assert render(result.ledger) == ""


def test_bad_block_is_skipped_and_reported():
    text = make_statement(
        "2020-01-03 Deposit (0.00) 100.00 100.00\n",
        "2020-01-04 Deposit (0.00) 50.005 150.00\n",
        "2020-01-05 Deposit (0.00) 50.00 150.00\n",
    )
    result = parse(text, check_running_balance=False)

    assert len(result.ledger.transactions) == 2
    (warning,) = result.warnings
    assert warning.code == "MalformedAmount"
    assert warning.action == "skipped"
    assert (warning.first_line, warning.last_line) == (14, 14)


def test_skipped_block_restarts_balance_chain():
    text = make_statement(
        "2020-01-03 Deposit (0.00) 100.00 100.00\n",
        "2020-01-04 Deposit (0.00) 50.005 150.00\n",
        "2020-01-05 Deposit (0.00) 50.00 200.00\n",
    )
    result = parse(text)

    assert len(result.ledger.transactions) == 2
    assert [w.code for w in result.warnings] == ["MalformedAmount"]


def test_oversized_amount_is_a_block_warning():
    text = make_statement(
        "2020-01-03 Deposit (0.00) 100.00 100.00\n",
        "2020-01-04 Deposit (0.00) 12345678901234567890123456789.00 150.00\n",
    )
    result = parse(text)

    assert len(result.ledger.transactions) == 1
    (warning,) = result.warnings
    assert warning.code == "MalformedAmount"
    assert (warning.first_line, warning.last_line) == (14, 14)


def test_strict_mode_raises_first_error():
    text = make_statement("2020-01-04 Deposit (0.00) 50.005 150.00\n")
    with pytest.raises(MalformedAmountError):
        parse(text, strict=True)


def test_unrecognized_entry_emitted_to_suspense():
    text = make_statement("2020-01-10 Promotional Cashback (0.00) 5.00 5.00\n")
    result = parse(text)

    (txn,) = result.ledger.transactions
    assert txn.kind == EntryKind.OTHER
    assert txn.postings[1].account == "equity:suspense"
    (warning,) = result.warnings
    assert warning.code == "UnrecognizedKind"
    assert warning.action == "emitted"


def test_unrecognized_entry_dropped():
    text = make_statement("2020-01-10 Promotional Cashback (0.00) 5.00 5.00\n")
    result = parse(text, emit_unrecognized=False)

    assert result.ledger.transactions == []
    (warning,) = result.warnings
    assert warning.code == "UnrecognizedKind"
    assert warning.action == "skipped"


def test_unknown_repayment_component_keeps_known_legs():
    text = make_statement(
        "2020-01-20 SME-1001 Bengkel Maju || Principal (0.00) 40.00 40.00\n",
        "2020-01-20 SME-1001 Bengkel Maju || Late Charges (0.00) 1.00 41.00\n",
    )
    result = parse(text)

    (txn,) = result.ledger.transactions
    legs = [(p.account, p.amount.quantity, p.memo) for p in txn.postings[1:]]
    assert legs == [
        ("assets:funds:fundingsocieties", Decimal("-40.00"), "Principal"),
        ("equity:suspense", Decimal("-1.00"), "Late Charges"),
    ]
    assert txn.postings[0].amount.quantity == Decimal("41.00")
    assert txn.memo == "unrecognized statement entry"
    (warning,) = result.warnings
    assert warning.code == "UnrecognizedKind"
    assert warning.action == "emitted"


def test_unrecognized_entry_strict():
    text = make_statement("2020-01-10 Promotional Cashback (0.00) 5.00 5.00\n")
    with pytest.raises(UnrecognizedKindError):
        parse(text, strict=True)


def test_unbalanced_entry_is_skipped():
    text = make_statement("2020-01-03 Deposit (1.00) 100.00 99.00\n")
    result = parse(text)

    assert result.ledger.transactions == []
    assert [w.code for w in result.warnings] == ["UnbalancedTransaction"]


def test_running_balance_mismatch_is_reported():
    text = make_statement(
        "2020-01-03 Deposit (0.00) 100.00 100.00\n",
        "2020-01-04 Deposit (0.00) 50.00 175.00\n",
    )
    result = parse(text)

    assert len(result.ledger.transactions) == 2
    (warning,) = result.warnings
    assert warning.code == "RunningBalanceMismatch"
    assert warning.action == "emitted"
    assert parse(text, check_running_balance=False).warnings == []


def test_separate_repayments_are_not_merged():
    text = make_statement(
        "2020-01-20 SME-1001 Bengkel Maju || Principal (0.00) 40.00 40.00\n",
        "2020-01-20 SME-2002 Kilang Jaya || Principal (0.00) 10.00 50.00\n",
        "2020-01-21 SME-2002 Kilang Jaya || Interest (0.00) 1.00 51.00\n",
    )
    result = parse(text)
    assert [len(txn.postings) for txn in result.ledger.transactions] == [2, 2, 2]


def test_group_entries_only_merges_repayments(statement_text):
    builder = TransactionBuilder(LedgerConfig())
    entries = [builder.read_entry(block) for block in classify(to_raw_lines(statement_text))]
    groups = group_entries(entries)
    assert [len(group) for group in groups] == [1, 1, 3, 1]


def test_statement_year_for_short_dates():
    result = parse("Balance (RM)\n03-15 Deposit (0.00) 10.00 10.00\n", config=LedgerConfig(statement_year=2021))
    assert result.ledger.transactions[0].year == 2021
