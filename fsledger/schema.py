"""
Pydantic models for statement lines, parsed entries and ledger output.
All models are immutable once built.
"""
from decimal import Decimal
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TWO_PLACES = Decimal("0.01")


class FrozenModel(BaseModel):
    """Base for immutable models."""
    model_config = ConfigDict(frozen=True)


class RawLine(FrozenModel):
    """A single line of extracted statement text."""
    number: int = Field(..., ge=1, description="1-based line number in the extracted text")
    text: str


class CandidateBlock(FrozenModel):
    """Contiguous statement lines believed to encode one statement row."""
    lines: List[RawLine] = Field(..., min_length=1)
    currency: Optional[str] = Field(None, description="Currency declared by the table column header")

    @property
    def first_line(self) -> int:
        return self.lines[0].number

    @property
    def last_line(self) -> int:
        return self.lines[-1].number

    @property
    def text(self) -> str:
        """Block text joined into a single line."""
        return " ".join(line.text.strip() for line in self.lines)


class EntryKind(str, Enum):
    """Recognized statement entry types."""
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    AUTO_INVESTMENT = "AutoInvestment"
    REPAYMENT = "Repayment"
    OTHER = "Other"


class Amount(FrozenModel):
    """Exact two-decimal monetary amount."""
    commodity: str
    quantity: Decimal

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        """Reject anything that is not exactly representable in cents."""
        if v != v.quantize(TWO_PLACES):
            raise ValueError(f"Amount must have at most two decimal places: {v}")
        return v.quantize(TWO_PLACES)

    def is_zero(self) -> bool:
        return self.quantity == 0

    def __neg__(self) -> "Amount":
        return Amount(commodity=self.commodity, quantity=-self.quantity)


class StatementEntry(FrozenModel):
    """One parsed statement row: date, description and the three amount columns."""
    year: Optional[int] = None
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)
    description: str
    memo: Optional[str] = None
    debit: Amount
    credit: Amount
    balance: Amount
    kind: EntryKind
    first_line: int
    last_line: int


class Posting(FrozenModel):
    """One leg of a transaction."""
    account: str
    amount: Amount
    memo: Optional[str] = None
    elided: bool = Field(False, description="Amount is implied by balance and omitted when rendered")


class Transaction(FrozenModel):
    """A dated, balanced group of postings."""
    year: Optional[int] = None
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)
    description: str
    memo: Optional[str] = None
    kind: EntryKind
    postings: List[Posting] = Field(..., min_length=2)
    first_line: int
    last_line: int

    def total(self) -> Decimal:
        """Exact sum of all posting quantities."""
        return sum((posting.amount.quantity for posting in self.postings), Decimal("0.00"))


class Ledger(FrozenModel):
    """Transactions in statement order."""
    transactions: List[Transaction] = Field(default_factory=list)


WarningCode = Literal[
    "MalformedDate",
    "MalformedAmount",
    "UnrecognizedKind",
    "UnbalancedTransaction",
    "RunningBalanceMismatch",
]


class ParseWarning(FrozenModel):
    """A per-block problem reported alongside the parsed ledger."""
    code: WarningCode
    message: str
    first_line: int
    last_line: int
    action: Literal["skipped", "emitted"] = "skipped"


class ParseResult(FrozenModel):
    """Parsed ledger plus warnings for blocks that failed or were approximated."""
    ledger: Ledger
    warnings: List[ParseWarning] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings
