"""
Date and amount normalization.
Amounts are parsed straight into Decimal; no value passes through float.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from pydantic import ValidationError

from fsledger.exceptions import MalformedAmountError, MalformedDateError
from fsledger.schema import Amount

DATE_TOKEN = re.compile(r"^(?:(?P<year>\d{4})-)?(?P<month>\d{2})-(?P<day>\d{2})$")

AMOUNT_TOKEN = re.compile(
    r"^(?P<lead_sign>-)?"
    r"(?:(?P<currency>[A-Z]{2,3})\s?)?"
    r"(?P<sign>-)?"
    r"(?P<digits>\d{1,3}(?:,\d{3})+|\d+)"
    r"\.(?P<cents>\d{2})$"
)

# Any year works for validating month/day; 2000 accepts 02-29
_LEAP_YEAR = 2000


def clean_text(value: str) -> str:
    """
    Normalize text by trimming and collapsing whitespace.

    Args:
        value: Raw text string

    Returns:
        Cleaned text string
    """
    if not value:
        return ""
    return re.sub(r"\s+", " ", value.strip())


def parse_date_token(token: str, year: Optional[int] = None) -> Tuple[Optional[int], int, int]:
    """
    Parse a statement date token into (year, month, day).

    Accepts YYYY-MM-DD or MM-DD with two-digit month and day. A year in the
    token wins over the supplied statement year.

    Args:
        token: Raw date token
        year: Statement year used when the token carries none

    Returns:
        Tuple of (year or None, month, day)

    Raises:
        MalformedDateError: If the token is not a calendar-valid date
    """
    match = DATE_TOKEN.match(token.strip())
    if not match:
        raise MalformedDateError(
            f"Date token does not match [YYYY-]MM-DD: {token!r}",
            details={"token": token}
        )

    if match.group("year"):
        year = int(match.group("year"))
    month = int(match.group("month"))
    day = int(match.group("day"))

    try:
        date(year or _LEAP_YEAR, month, day)
    except ValueError as e:
        raise MalformedDateError(
            f"Invalid calendar date: {token!r}",
            details={"token": token, "error": str(e)}
        )

    return year, month, day


def parse_amount(token: str, currency: Optional[str] = None) -> Amount:
    """
    Parse a monetary token into an exact two-decimal Amount.

    The currency comes from an inline prefix (``RM 1,234.56``) or, for bare
    column values, from the table header currency passed in.

    Args:
        token: Raw amount token
        currency: Currency declared by the column header, if any

    Returns:
        Amount with the resolved commodity

    Raises:
        MalformedAmountError: On missing currency, wrong decimal places or
            any other shape
    """
    cleaned = clean_text(token)
    match = AMOUNT_TOKEN.match(cleaned)
    if not match:
        raise MalformedAmountError(
            f"Amount token is not a two-decimal number: {token!r}",
            details={"token": token}
        )

    if match.group("lead_sign") and match.group("sign"):
        raise MalformedAmountError(
            f"Amount token has two signs: {token!r}",
            details={"token": token}
        )

    commodity = match.group("currency") or currency
    if not commodity:
        raise MalformedAmountError(
            f"Amount token has no currency: {token!r}",
            details={"token": token}
        )

    negative = bool(match.group("lead_sign") or match.group("sign"))
    quantity = Decimal(f"{match.group('digits').replace(',', '')}.{match.group('cents')}")
    if negative:
        quantity = -quantity

    # Quantizing fails once the figure exceeds the decimal context precision
    try:
        return Amount(commodity=commodity, quantity=quantity)
    except (InvalidOperation, ValidationError) as e:
        raise MalformedAmountError(
            f"Amount token is out of range: {token!r}",
            details={"token": token, "error": str(e)}
        )


def format_quantity(quantity: Decimal) -> str:
    """Format a quantity with a leading minus, thousands separators and two decimals."""
    sign = "-" if quantity < 0 else ""
    return f"{sign}{abs(quantity):,.2f}"
