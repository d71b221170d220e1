"""
Shared fixtures: a pdftotext -raw style Funding Societies statement.
"""
import pytest

from fsledger.config import LedgerConfig, reset_settings

STATEMENT_HEADER = """Funding Societies Sdn Bhd
Statement of Account
Investor ID: 12345
2020-01-01 - 2020-01-31
Date
Description
Debit
(RM)
Credit
(RM)
Balance
(RM)
"""

PAGE_BREAK = """Page 1 of 2
Date
Description
Debit
(RM)
Credit
(RM)
Balance
(RM)
"""

STATEMENT_FOOTER = """Page 2 of 2
Important!
Please report any discrepancy within 14 days.
2020-02-01 Deposit (0.00) 999.00 999.00
"""

STATEMENT_ROWS = [
    "2020-01-03 Deposit (0.00) 100.00 100.00\n",
    "2020-01-05 Auto invested into SME-1234 Kedai Runcit Sdn Bhd\n(80.00) 0.00 20.00\n",
    PAGE_BREAK,
    "2020-01-20 SME-1001 Bengkel Maju || Principal (0.00) 40.00 60.00\n",
    "2020-01-20 SME-1001 Bengkel Maju || Interest (0.00) 2.00 62.00\n",
    "2020-01-20 SME-1001 Bengkel Maju || Service Fee (0.36) 0.00 61.64\n",
    "2020-01-25 Withdrawal For Bank Transfer (50.00) 0.00 11.64\n",
]


def make_statement(*rows: str) -> str:
    """Wrap statement rows in the page furniture pdftotext produces."""
    return STATEMENT_HEADER + "".join(rows) + STATEMENT_FOOTER


@pytest.fixture
def config():
    return LedgerConfig()


@pytest.fixture
def statement_text():
    return make_statement(*STATEMENT_ROWS)


@pytest.fixture
def expected_ledger():
    return (
        "01-03 * Funding Societies\n"
        "\tassets:fundingsocieties\n"
        "\tassets:bank:pbe" + " " * 29 + "RM -100.00  ; Deposit\n"
        "\n"
        "01-05 * SME-1234 Kedai Runcit Sdn Bhd\n"
        "\tassets:fundingsocieties\n"
        "\tassets:funds:fundingsocieties" + " " * 17 + "RM 80.00\n"
        "\n"
        "01-20 * SME-1001 Bengkel Maju\n"
        "\tassets:fundingsocieties\n"
        "\tassets:funds:fundingsocieties" + " " * 16 + "RM -40.00  ; Principal\n"
        "\tincome:interest" + " " * 31 + "RM -2.00  ; Interest\n"
        "\texpenses:service" + " " * 31 + "RM 0.36  ; Service Fee\n"
        "\n"
        "01-25 * Funding Societies\n"
        "\tassets:fundingsocieties\n"
        "\tassets:bank:pbe" + " " * 31 + "RM 50.00  ; Withdrawal For Bank Transfer\n"
    )


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are a process-wide singleton; isolate each test."""
    reset_settings()
    yield
    reset_settings()
