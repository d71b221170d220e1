"""
End-to-end statement parsing.
Raw statement text in, ledger plus per-block warnings out. No I/O.
"""
from itertools import groupby
from typing import List, Optional, Sequence

from fsledger.builder import TransactionBuilder
from fsledger.classifier import classify, to_raw_lines
from fsledger.config import LedgerConfig
from fsledger.exceptions import BlockError, UnrecognizedKindError
from fsledger.logger import setup_logger
from fsledger.schema import (
    EntryKind,
    Ledger,
    ParseResult,
    ParseWarning,
    StatementEntry,
    Transaction,
)

logger = setup_logger(__name__)


def warning_from_error(error: BlockError, action: str = "skipped") -> ParseWarning:
    """Convert a located block error into a parse warning."""
    first_line = error.first_line or 0
    return ParseWarning(
        code=error.code,
        message=error.message,
        first_line=first_line,
        last_line=error.last_line or first_line,
        action=action,
    )


def group_entries(entries: List[StatementEntry]) -> List[List[StatementEntry]]:
    """
    Group statement entries into transactions.

    The statement prints one row per repayment component (principal,
    interest, service fee); consecutive repayment rows sharing date and
    description form one transaction. Every other row stands alone.
    """
    def key(item):
        idx, entry = item
        if entry.kind != EntryKind.REPAYMENT:
            return ("single", idx)
        return ("repayment", entry.year, entry.month, entry.day, entry.description)

    return [
        [entry for _, entry in group]
        for _, group in groupby(enumerate(entries), key=key)
    ]


def check_balances(entries: Sequence[Optional[StatementEntry]]) -> List[ParseWarning]:
    """
    Compare each row's balance column with the previous balance plus movement.

    A None in place of an entry marks a row that could not be read; the
    chain restarts after it. Mismatches are reported, never fatal: the
    ledger postings do not depend on the balance column.
    """
    warnings = []
    previous = None
    for entry in entries:
        if entry is None:
            previous = None
            continue
        if previous is not None and previous.balance.commodity == entry.balance.commodity:
            expected = previous.balance.quantity + entry.credit.quantity - entry.debit.quantity
            if expected != entry.balance.quantity:
                warnings.append(
                    ParseWarning(
                        code="RunningBalanceMismatch",
                        message=(
                            f"Balance {entry.balance.quantity} does not follow from "
                            f"{previous.balance.quantity} + {entry.credit.quantity} "
                            f"- {entry.debit.quantity} (expected {expected})"
                        ),
                        first_line=entry.first_line,
                        last_line=entry.last_line,
                        action="emitted",
                    )
                )
        previous = entry
    return warnings


def parse(
    raw_text: str,
    config: Optional[LedgerConfig] = None,
    strict: bool = False,
    emit_unrecognized: bool = True,
    check_running_balance: bool = True,
) -> ParseResult:
    """
    Parse statement text into a ledger.

    Args:
        raw_text: Full text of one statement as produced by pdftotext -raw
        config: Builder configuration (defaults to LedgerConfig())
        strict: Raise the first block error instead of collecting warnings
        emit_unrecognized: Emit unrecognized entries against the suspense
            account (warning action "emitted") instead of skipping them
        check_running_balance: Warn when balance columns do not chain

    Returns:
        ParseResult with the ledger in statement order and warnings sorted by line

    Raises:
        BlockError: Only when strict is set
    """
    builder = TransactionBuilder(config or LedgerConfig())
    warnings: List[ParseWarning] = []
    entries: List[StatementEntry] = []
    # Statement order, with None for unreadable rows
    rows: List[Optional[StatementEntry]] = []

    for block in classify(to_raw_lines(raw_text)):
        try:
            entry = builder.read_entry(block)
        except BlockError as e:
            if strict:
                raise
            logger.warning(f"Skipping lines {e.first_line}-{e.last_line}: {e.message}")
            warnings.append(warning_from_error(e))
            rows.append(None)
            continue
        entries.append(entry)
        rows.append(entry)

    if check_running_balance:
        warnings.extend(check_balances(rows))

    transactions: List[Transaction] = []
    for group in group_entries(entries):
        try:
            transactions.append(builder.build(group))
        except UnrecognizedKindError as e:
            if strict:
                raise
            if not emit_unrecognized:
                logger.warning(f"Dropping lines {e.first_line}-{e.last_line}: {e.message}")
                warnings.append(warning_from_error(e, "skipped"))
                continue
            try:
                transactions.append(builder.build_fallback(group))
            except BlockError as fallback_error:
                logger.warning(
                    f"Skipping lines {fallback_error.first_line}-{fallback_error.last_line}: "
                    f"{fallback_error.message}"
                )
                warnings.append(warning_from_error(fallback_error))
                continue
            logger.warning(f"Emitting lines {e.first_line}-{e.last_line} to suspense: {e.message}")
            warnings.append(warning_from_error(e, "emitted"))
        except BlockError as e:
            if strict:
                raise
            logger.warning(f"Skipping lines {e.first_line}-{e.last_line}: {e.message}")
            warnings.append(warning_from_error(e))

    warnings.sort(key=lambda warning: warning.first_line)
    logger.info(f"Parsed {len(transactions)} transactions with {len(warnings)} warnings")

    return ParseResult(ledger=Ledger(transactions=transactions), warnings=warnings)
