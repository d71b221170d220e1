"""
Centralized configuration management.
All environment variables and settings are defined here.
"""
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ACCOUNT_PATTERN = re.compile(r"^[a-z0-9_-]+(?::[a-z0-9_-]+)*$", re.IGNORECASE)


def validate_account_path(v: str) -> str:
    """Validate a colon-separated ledger account path."""
    v = v.strip()
    if not ACCOUNT_PATTERN.match(v):
        raise ValueError(f"Invalid account path: {v!r}")
    return v


class LedgerConfig(BaseModel):
    """
    Explicit configuration handed to the transaction builder and renderer.

    Account paths follow the statement kinds: deposits and withdrawals move
    money between the bank and the Funding Societies cash account, investments
    move it into the funds account, and repayments split into principal,
    interest and service fee legs.
    """
    model_config = ConfigDict(frozen=True)

    asset_account: str = "assets:fundingsocieties"
    funds_account: str = "assets:funds:fundingsocieties"
    bank_account: str = "assets:bank:pbe"
    interest_account: str = "income:interest"
    fee_account: str = "expenses:service"
    suspense_account: str = "equity:suspense"
    payee: str = "Funding Societies"
    default_commodity: Optional[str] = None
    statement_year: Optional[int] = None
    indent: str = "\t"
    tab_width: int = 8
    line_width: int = 62

    @field_validator(
        "asset_account",
        "funds_account",
        "bank_account",
        "interest_account",
        "fee_account",
        "suspense_account",
    )
    @classmethod
    def validate_accounts(cls, v):
        return validate_account_path(v)

    @property
    def indent_width(self) -> int:
        """Display width of the posting indent, counting a tab as tab_width."""
        return sum(self.tab_width if char == "\t" else 1 for char in self.indent)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="Funding Societies Ledger Converter", alias="APP_NAME")
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Accounts
    asset_account: str = Field(default="assets:fundingsocieties", alias="ASSET_ACCOUNT")
    funds_account: str = Field(default="assets:funds:fundingsocieties", alias="FUNDS_ACCOUNT")
    bank_account: str = Field(default="assets:bank:pbe", alias="BANK_ACCOUNT")
    interest_account: str = Field(default="income:interest", alias="INTEREST_ACCOUNT")
    fee_account: str = Field(default="expenses:service", alias="FEE_ACCOUNT")
    suspense_account: str = Field(default="equity:suspense", alias="SUSPENSE_ACCOUNT")
    payee: str = Field(default="Funding Societies", alias="PAYEE")

    # Statement
    default_commodity: Optional[str] = Field(default=None, alias="DEFAULT_COMMODITY")
    statement_year: Optional[int] = Field(default=None, alias="STATEMENT_YEAR")
    line_width: int = Field(default=62, alias="LINE_WIDTH")

    # Processing
    pdftotext_path: str = Field(default="pdftotext", alias="PDFTOTEXT_PATH")
    fail_fast: bool = Field(default=False, alias="FAIL_FAST")
    emit_unrecognized: bool = Field(default=True, alias="EMIT_UNRECOGNIZED")
    check_running_balance: bool = Field(default=True, alias="CHECK_RUNNING_BALANCE")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator(
        "asset_account",
        "funds_account",
        "bank_account",
        "interest_account",
        "fee_account",
        "suspense_account",
    )
    @classmethod
    def validate_accounts(cls, v):
        """Validate account paths are colon-separated names."""
        return validate_account_path(v)

    @field_validator("default_commodity")
    @classmethod
    def validate_commodity(cls, v):
        if v is None or not v.strip():
            return None
        return v.strip().upper()

    @field_validator("line_width")
    @classmethod
    def validate_line_width(cls, v):
        """Posting lines need room for an indent, an account and an amount."""
        if v < 40:
            raise ValueError("Line width must be at least 40")
        return v

    def ledger_config(self) -> LedgerConfig:
        """Build the explicit builder/renderer configuration from settings."""
        return LedgerConfig(
            asset_account=self.asset_account,
            funds_account=self.funds_account,
            bank_account=self.bank_account,
            interest_account=self.interest_account,
            fee_account=self.fee_account,
            suspense_account=self.suspense_account,
            payee=self.payee,
            default_commodity=self.default_commodity,
            statement_year=self.statement_year,
            line_width=self.line_width,
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
