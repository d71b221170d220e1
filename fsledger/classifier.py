"""
Line classification for pdftotext -raw statement output.

Drops page furniture and groups the remaining lines into candidate blocks,
one per date-prefixed statement row. Never raises on content: a statement
without any dated rows simply yields no blocks.
"""
import re
from typing import Iterable, Iterator, List, Optional, Pattern, Tuple

from fsledger.logger import setup_logger
from fsledger.schema import CandidateBlock, RawLine

logger = setup_logger(__name__)

# Loose on purpose: malformed dates still open a block so the builder can report them
DATE_PREFIX = re.compile(r"^(?:\d{4}-)?\d{1,2}-\d{1,2}(?=\s|$)")

CURRENCY_LABEL = re.compile(r"\((?P<currency>[A-Z]{2,3})\)")

COLUMN_LABELS = {"date", "description", "debit", "credit", "balance", "transaction date"}

NOISE_PATTERNS: List[Pattern] = [
    # Page numbers
    re.compile(r"^page\s+\d+(?:\s+of\s+\d+)?$", re.IGNORECASE),
    re.compile(r"^\d+\s*(?:/|of)\s*\d+$", re.IGNORECASE),
    re.compile(r"^\d{1,3}$"),
    # Statement period, e.g. "2020-01-01 - 2020-01-31"
    re.compile(r"^\d{4}-\d{2}-\d{2}\s*(?:-|to)\s*\d{4}-\d{2}-\d{2}$", re.IGNORECASE),
    # Header and footer boilerplate
    re.compile(r"^(?:investor\s+)?(?:account\s+)?statement(?:\s+of\s+account)?\b.*$", re.IGNORECASE),
    re.compile(r"^(?:statement\s+)?(?:date|period)\s*:.*$", re.IGNORECASE),
    re.compile(r"^(?:investor|user|account)\s+(?:id|name|no\.?|number)\s*:.*$", re.IGNORECASE),
    re.compile(r"^(?:generated|printed)\s+on\b.*$", re.IGNORECASE),
    re.compile(r"^(?:funding societies|modalku)\b.*\b(?:sdn\.?\s*bhd\.?|statement)$", re.IGNORECASE),
    re.compile(r"^this is a computer[- ]generated\b.*$", re.IGNORECASE),
]

TABLE_END = "Important!"


def to_raw_lines(text: str) -> List[RawLine]:
    """
    Split extracted text into numbered raw lines.

    Args:
        text: Full statement text from the extractor

    Returns:
        List of RawLine with 1-based line numbers
    """
    return [
        RawLine(number=number, text=line.rstrip("\r"))
        for number, line in enumerate(text.split("\n"), start=1)
    ]


def is_column_label(text: str) -> bool:
    """
    Check whether a line is part of the transaction table header.

    Handles both the split form pdftotext -raw produces ("Balance", "(RM)")
    and a single combined label row.
    """
    stripped = CURRENCY_LABEL.sub(" ", text).strip().lower()
    if not stripped:
        return bool(CURRENCY_LABEL.search(text))
    words = stripped.split()
    return " ".join(words) in COLUMN_LABELS or all(word in COLUMN_LABELS for word in words)


def is_noise(text: str) -> bool:
    """Check whether a line is non-transactional page furniture."""
    stripped = text.strip()
    if not stripped:
        return True
    if is_column_label(stripped):
        return True
    return any(pattern.match(stripped) for pattern in NOISE_PATTERNS)


def column_currency(text: str) -> Optional[str]:
    """Return the currency declared by a column label line, if any."""
    if not is_column_label(text.strip()):
        return None
    match = CURRENCY_LABEL.search(text)
    return match.group("currency") if match else None


def find_table_bounds(lines: List[RawLine]) -> Tuple[int, int]:
    """
    Locate the transaction table inside the statement.

    The table starts right after the Balance column header and ends before
    the last "Important!" notice. Missing markers widen the bounds to the
    whole input.

    Returns:
        Half-open (start, end) index range into lines
    """
    start = 0
    for idx, line in enumerate(lines):
        text = line.text.strip()
        if not text.lower().startswith("balance"):
            continue
        if CURRENCY_LABEL.search(text):
            start = idx + 1
            break
        if idx + 1 < len(lines) and CURRENCY_LABEL.fullmatch(lines[idx + 1].text.strip()):
            start = idx + 2
            break
    else:
        logger.debug("No table header found, scanning whole statement")

    end = len(lines)
    for idx in range(len(lines) - 1, start - 1, -1):
        if lines[idx].text.strip().startswith(TABLE_END):
            end = idx
            break

    return start, end


def classify(lines: Iterable[RawLine]) -> Iterator[CandidateBlock]:
    """
    Group statement lines into candidate transaction blocks.

    A block opens at every date-prefixed line and collects the following
    lines until the next date-prefixed line or end of the table. Lines before
    the first dated row are dropped.

    Args:
        lines: Ordered raw lines of one statement

    Yields:
        CandidateBlock per statement row
    """
    lines = list(lines)
    start, end = find_table_bounds(lines)

    # The header before the table start declares the column currency too
    currency = None
    for line in lines[:start]:
        currency = column_currency(line.text) or currency

    current: List[RawLine] = []
    current_currency = currency
    dropped = 0

    for line in lines[start:end]:
        text = line.text.strip()

        label_currency = column_currency(text) if text else None
        if label_currency:
            currency = label_currency

        if DATE_PREFIX.match(text) and not is_noise(text):
            if current:
                yield CandidateBlock(lines=current, currency=current_currency)
            current = [line]
            current_currency = currency
            continue

        if is_noise(text):
            continue

        if current:
            current.append(line)
        else:
            dropped += 1

    if current:
        yield CandidateBlock(lines=current, currency=current_currency)

    if dropped:
        logger.debug(f"Dropped {dropped} lines before the first dated row")
