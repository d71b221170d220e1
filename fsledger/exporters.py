"""
Ledger text rendering and spreadsheet register export.

Rendered layout, one blank line between transactions:

    MM-DD * <description>[  ; <memo>]
    <tab><account>
    <tab><account><padding><CUR> <amount>[  ; <memo>]

Amounts are right-aligned so every posting line with a figure spans the
configured line width, counting a tab as tab_width columns.
"""
from pathlib import Path
from typing import List, Optional

import pandas as pd

from fsledger.config import LedgerConfig
from fsledger.exceptions import ExportError
from fsledger.logger import setup_logger
from fsledger.normalize import format_quantity
from fsledger.schema import Ledger, Posting, Transaction

logger = setup_logger(__name__)

MIN_GAP = 2

REGISTER_COLUMNS = ["date", "description", "kind", "account", "commodity", "amount", "memo"]


def format_date(transaction: Transaction, full_dates: bool = False) -> str:
    """Format the transaction date as MM-DD, or YYYY-MM-DD when requested and known."""
    month_day = f"{transaction.month:02d}-{transaction.day:02d}"
    if full_dates and transaction.year:
        return f"{transaction.year:04d}-{month_day}"
    return month_day


def render_posting(posting: Posting, config: LedgerConfig) -> str:
    """
    Render one posting line.

    Args:
        posting: Posting to render
        config: Indent and width settings

    Returns:
        Posting line without trailing newline
    """
    line = f"{config.indent}{posting.account}"
    if not posting.elided:
        amount = f"{posting.amount.commodity} {format_quantity(posting.amount.quantity)}"
        pad = config.line_width - config.indent_width - len(posting.account) - len(amount)
        line += " " * max(pad, MIN_GAP) + amount
    if posting.memo:
        line += f"  ; {posting.memo}"
    return line


def render_transaction(
    transaction: Transaction,
    config: Optional[LedgerConfig] = None,
    full_dates: bool = False,
) -> str:
    """
    Render one transaction as ledger text.

    Args:
        transaction: Transaction to render
        config: Indent and width settings (defaults to LedgerConfig())
        full_dates: Include the year when known

    Returns:
        Header and posting lines, each terminated by a newline
    """
    config = config or LedgerConfig()
    header = f"{format_date(transaction, full_dates)} * {transaction.description}"
    if transaction.memo:
        header += f"  ; {transaction.memo}"
    lines = [header] + [render_posting(posting, config) for posting in transaction.postings]
    return "\n".join(lines) + "\n"


def render(ledger: Ledger, config: Optional[LedgerConfig] = None, full_dates: bool = False) -> str:
    """
    Render a ledger as journal text.

    Args:
        ledger: Parsed ledger
        config: Indent and width settings (defaults to LedgerConfig())
        full_dates: Include the year when known

    Returns:
        Journal text; empty string for an empty ledger
    """
    config = config or LedgerConfig()
    return "\n".join(
        render_transaction(transaction, config, full_dates)
        for transaction in ledger.transactions
    )


def register_rows(ledger: Ledger) -> List[dict]:
    """Flatten a ledger into one row per posting."""
    rows = []
    for transaction in ledger.transactions:
        for posting in transaction.postings:
            rows.append({
                "date": format_date(transaction, full_dates=True),
                "description": transaction.description,
                "kind": transaction.kind.value,
                "account": posting.account,
                "commodity": posting.amount.commodity,
                # Excel stores numbers as doubles
                "amount": float(posting.amount.quantity),
                "memo": posting.memo or "",
            })
    return rows


def export_register(ledger: Ledger, output_path: str, sheet_name: str = "Register") -> str:
    """
    Export every posting of the ledger to an Excel register.

    Args:
        ledger: Parsed ledger
        output_path: Output .xlsx path
        sheet_name: Worksheet name

    Returns:
        Path to created file

    Raises:
        ExportError: If export fails
    """
    df = pd.DataFrame(register_rows(ledger), columns=REGISTER_COLUMNS)
    logger.info(f"Exporting {len(df)} postings to {output_path}")

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
            df.to_excel(writer, sheet_name=sheet_name, index=False)

            workbook = writer.book
            worksheet = writer.sheets[sheet_name]

            money_format = workbook.add_format({"num_format": "#,##0.00"})
            amount_idx = REGISTER_COLUMNS.index("amount")
            for idx, col in enumerate(REGISTER_COLUMNS):
                max_len = max([len(col)] + [len(str(value)) for value in df[col]])
                width = min(max_len + 2, 50)
                if idx == amount_idx:
                    worksheet.set_column(idx, idx, width, money_format)
                else:
                    worksheet.set_column(idx, idx, width)

        logger.info(f"Successfully exported to {output_path}")
        return output_path

    except Exception as e:
        logger.error(f"Failed to export register: {e}")
        raise ExportError(
            "Failed to export register to Excel",
            details={"output_path": output_path, "error": str(e)}
        )
