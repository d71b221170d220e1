"""
Custom exceptions for statement conversion.

Block-level errors carry the line range of the offending statement block so
callers can report them and move on to the next block.
"""
from typing import Any, Dict, Optional


class FsLedgerException(Exception):
    """Base exception for all statement conversion errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.
        
        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BlockError(FsLedgerException):
    """Raised when a single statement block cannot become a transaction."""
    
    code = "BlockError"
    
    @property
    def first_line(self) -> Optional[int]:
        return self.details.get("first_line")
    
    @property
    def last_line(self) -> Optional[int]:
        return self.details.get("last_line")


class MalformedDateError(BlockError):
    """Raised when a date token is not a valid [YYYY-]MM-DD date."""
    code = "MalformedDate"


class MalformedAmountError(BlockError):
    """Raised when an amount token fails strict fixed-point parsing."""
    code = "MalformedAmount"


class UnrecognizedKindError(BlockError):
    """Raised when no statement entry rule matches a block."""
    code = "UnrecognizedKind"


class UnbalancedTransactionError(BlockError):
    """Raised when transaction postings do not sum to zero."""
    code = "UnbalancedTransaction"


class ExtractionError(FsLedgerException):
    """Raised when PDF text extraction fails."""
    pass


class FileProcessingError(FsLedgerException):
    """Raised when converting a statement file fails."""
    pass


class ExportError(FsLedgerException):
    """Raised when ledger or register export fails."""
    pass


class ConfigurationError(FsLedgerException):
    """Raised when configuration is invalid."""
    pass


class DataNotFoundError(FsLedgerException):
    """Raised when required data is not found."""
    pass
