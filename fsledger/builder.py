"""
Transaction construction from classified statement blocks.

A block is first read into a StatementEntry (date, description, amount
columns, kind), then one entry, or a run of repayment entries, is turned
into a balanced Transaction using fixed account tables.
"""
import re
from contextlib import contextmanager
from decimal import Decimal
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from fsledger.config import LedgerConfig
from fsledger.exceptions import (
    BlockError,
    MalformedAmountError,
    UnbalancedTransactionError,
    UnrecognizedKindError,
)
from fsledger.logger import setup_logger
from fsledger.normalize import clean_text, parse_amount, parse_date_token
from fsledger.schema import (
    Amount,
    CandidateBlock,
    EntryKind,
    Posting,
    StatementEntry,
    Transaction,
)

logger = setup_logger(__name__)

DATE_FIELD = re.compile(r"^(?P<token>\S+)\s*(?P<rest>.*)$")

# Numeric-ish token: strict parsing happens in parse_amount
_AMOUNTISH = r"-?(?:[A-Z]{2,3}\s?)?-?\d[\d,]*(?:\.\d+)?"

AMOUNT_COLUMNS = re.compile(
    r"(?:^|\s)\(\s*(?P<debit>" + _AMOUNTISH + r")\s*\)"
    r"\s+(?P<credit>" + _AMOUNTISH + r")"
    r"\s+(?P<balance>" + _AMOUNTISH + r")(?=\s|$)"
)

MEMO_DELIMITER = re.compile(r"\s*\|\|\s*")

INVESTED_INTO = re.compile(r"\binto\s+", re.IGNORECASE)

UNRECOGNIZED_MEMO = "unrecognized statement entry"


class KindRule(NamedTuple):
    """Predicate deciding whether an entry belongs to a kind."""
    kind: EntryKind
    matches: Callable[[str, Optional[str], Amount, Amount], bool]


# Ordered: the first matching rule wins, so specific rules come first
KIND_RULES: List[KindRule] = [
    KindRule(
        EntryKind.WITHDRAWAL,
        lambda description, memo, debit, credit: "withdrawal" in description.lower(),
    ),
    KindRule(
        EntryKind.DEPOSIT,
        lambda description, memo, debit, credit: description.lower() == "deposit",
    ),
    KindRule(
        EntryKind.AUTO_INVESTMENT,
        lambda description, memo, debit, credit: "invested" in description.lower() and credit.is_zero(),
    ),
    KindRule(
        EntryKind.REPAYMENT,
        lambda description, memo, debit, credit: bool(memo),
    ),
]


class PostingRule(NamedTuple):
    """Where a statement column is posted: config account field, column and sign."""
    account: str
    column: str
    sign: int


ACCOUNT_RULES: Dict[EntryKind, PostingRule] = {
    EntryKind.DEPOSIT: PostingRule("bank_account", "credit", -1),
    EntryKind.WITHDRAWAL: PostingRule("bank_account", "debit", 1),
    EntryKind.AUTO_INVESTMENT: PostingRule("funds_account", "debit", 1),
}

# Repayment rows are split by the memo after the "||" delimiter
REPAYMENT_LEGS: Dict[str, PostingRule] = {
    "principal": PostingRule("funds_account", "credit", -1),
    "interest": PostingRule("interest_account", "credit", -1),
    "service fee": PostingRule("fee_account", "debit", 1),
}


def detect_kind(description: str, memo: Optional[str], debit: Amount, credit: Amount) -> EntryKind:
    """Return the kind of the first matching rule, or Other."""
    for rule in KIND_RULES:
        if rule.matches(description, memo, debit, credit):
            return rule.kind
    return EntryKind.OTHER


@contextmanager
def located(first_line: int, last_line: int):
    """Attach a line range to block errors raised inside the context."""
    try:
        yield
    except BlockError as e:
        e.details.setdefault("first_line", first_line)
        e.details.setdefault("last_line", last_line)
        raise


class TransactionBuilder:
    """Turns candidate blocks into balanced transactions."""

    def __init__(self, config: LedgerConfig):
        """
        Initialize builder.

        Args:
            config: Accounts, payee and commodity settings
        """
        self.config = config

    def read_entry(self, block: CandidateBlock) -> StatementEntry:
        """
        Parse one candidate block into a statement entry.

        Args:
            block: Lines of one statement row

        Returns:
            StatementEntry with date, description, amount columns and kind

        Raises:
            MalformedDateError: If the leading date token is invalid
            MalformedAmountError: If the amount columns are missing or invalid
        """
        with located(block.first_line, block.last_line):
            text = clean_text(block.text)
            match = DATE_FIELD.match(text)
            year, month, day = parse_date_token(match.group("token"), self.config.statement_year)
            rest = match.group("rest")

            columns = AMOUNT_COLUMNS.search(rest)
            if not columns:
                raise MalformedAmountError(
                    "Statement row has no (debit) credit balance columns",
                    details={"text": text}
                )

            currency = block.currency or self.config.default_commodity
            debit = parse_amount(columns.group("debit"), currency)
            credit = parse_amount(columns.group("credit"), currency)
            balance = parse_amount(columns.group("balance"), currency)

            head = rest[:columns.start()].strip()
            tail = rest[columns.end():].strip()
            if tail:
                head = f"{head} {tail}".strip()

            parts = MEMO_DELIMITER.split(head, maxsplit=1)
            description = parts[0].strip()
            memo = parts[1].strip() if len(parts) > 1 and parts[1].strip() else None

            kind = detect_kind(description, memo, debit, credit)
            logger.debug(
                f"Lines {block.first_line}-{block.last_line}: {kind.value} "
                f"{month:02d}-{day:02d} {description!r}"
            )

            return StatementEntry(
                year=year,
                month=month,
                day=day,
                description=description,
                memo=memo,
                debit=debit,
                credit=credit,
                balance=balance,
                kind=kind,
                first_line=block.first_line,
                last_line=block.last_line,
            )

    def payee(self, entry: StatementEntry) -> str:
        """Transaction description shown on the ledger header line."""
        if entry.kind in (EntryKind.DEPOSIT, EntryKind.WITHDRAWAL):
            return self.config.payee
        if entry.kind == EntryKind.AUTO_INVESTMENT:
            return INVESTED_INTO.split(entry.description)[-1].strip() or entry.description
        return entry.description

    def counter_posting(self, entry: StatementEntry) -> Posting:
        """Build the non-asset leg for one statement entry."""
        if entry.kind == EntryKind.REPAYMENT:
            rule = REPAYMENT_LEGS.get(entry.memo.lower())
            if rule is None:
                raise UnrecognizedKindError(
                    f"Unknown repayment component: {entry.memo!r}",
                    details={"description": entry.description, "memo": entry.memo}
                )
            memo = entry.memo
        else:
            rule = ACCOUNT_RULES.get(entry.kind)
            if rule is None:
                raise UnrecognizedKindError(
                    f"Unrecognized statement entry: {entry.description!r}",
                    details={"description": entry.description, "memo": entry.memo}
                )
            # Deposits and withdrawals lose their statement wording to the payee
            memo = entry.description if entry.kind != EntryKind.AUTO_INVESTMENT else entry.memo

        column = getattr(entry, rule.column)
        amount = column if rule.sign > 0 else -column
        return Posting(account=getattr(self.config, rule.account), amount=amount, memo=memo)

    def suspense_posting(self, entry: StatementEntry, commodity: str) -> Posting:
        """Park the movement of an entry no rule covers."""
        return Posting(
            account=self.config.suspense_account,
            amount=Amount(commodity=commodity, quantity=entry.debit.quantity - entry.credit.quantity),
            memo=entry.memo,
        )

    def asset_posting(self, entries: Sequence[StatementEntry]) -> Posting:
        """The Funding Societies cash leg: net statement movement, rendered without a figure."""
        commodity = self._commodity(entries)
        net = sum((entry.credit.quantity - entry.debit.quantity for entry in entries), Decimal("0.00"))
        return Posting(
            account=self.config.asset_account,
            amount=Amount(commodity=commodity, quantity=net),
            elided=True,
        )

    def build(self, entries: Sequence[StatementEntry]) -> Transaction:
        """
        Build a balanced transaction from one entry or a run of repayment entries.

        Args:
            entries: Statement entries sharing date and description

        Returns:
            Transaction with the asset leg first

        Raises:
            UnrecognizedKindError: If no account rule covers an entry
            UnbalancedTransactionError: If postings do not sum to zero
        """
        first, last = entries[0], entries[-1]
        with located(first.first_line, last.last_line):
            postings = [self.asset_posting(entries)]
            postings.extend(self.counter_posting(entry) for entry in entries)
            return self._balanced(
                Transaction(
                    year=first.year,
                    month=first.month,
                    day=first.day,
                    description=self.payee(first),
                    kind=first.kind,
                    postings=postings,
                    first_line=first.first_line,
                    last_line=last.last_line,
                )
            )

    def build_fallback(self, entries: Sequence[StatementEntry]) -> Transaction:
        """
        Best-effort transaction for entries no rule recognizes.

        Legs a rule covers, such as the principal of a repayment with an
        unknown extra component, keep their accounts. Only the unknown legs
        go to the suspense account, so the entry can be fixed up by hand.
        """
        first, last = entries[0], entries[-1]
        with located(first.first_line, last.last_line):
            asset = self.asset_posting(entries)
            postings = [asset]
            for entry in entries:
                try:
                    postings.append(self.counter_posting(entry))
                except UnrecognizedKindError:
                    postings.append(self.suspense_posting(entry, asset.amount.commodity))
            return self._balanced(
                Transaction(
                    year=first.year,
                    month=first.month,
                    day=first.day,
                    description=first.description or self.config.payee,
                    memo=UNRECOGNIZED_MEMO,
                    kind=EntryKind.OTHER,
                    postings=postings,
                    first_line=first.first_line,
                    last_line=last.last_line,
                )
            )

    def _commodity(self, entries: Sequence[StatementEntry]) -> str:
        commodities = {
            amount.commodity
            for entry in entries
            for amount in (entry.debit, entry.credit)
        }
        if len(commodities) != 1:
            raise UnbalancedTransactionError(
                f"Postings mix commodities: {sorted(commodities)}",
                details={"commodities": sorted(commodities)}
            )
        return commodities.pop()

    def _balanced(self, transaction: Transaction) -> Transaction:
        commodities = {posting.amount.commodity for posting in transaction.postings}
        total = transaction.total()
        if len(commodities) != 1 or total != 0:
            raise UnbalancedTransactionError(
                f"Transaction {transaction.month:02d}-{transaction.day:02d} "
                f"{transaction.description!r} is off by {total}",
                details={"total": str(total), "commodities": sorted(commodities)}
            )
        return transaction
