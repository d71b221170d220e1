"""
Statement conversion service.
Wires extraction, parsing and rendering to files and applies the error policy.
"""
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from fsledger.config import Settings, get_settings
from fsledger.exceptions import BlockError, FileProcessingError, FsLedgerException
from fsledger.exporters import export_register, render
from fsledger.extractor import extract_text
from fsledger.logger import setup_logger
from fsledger.parsing import parse
from fsledger.schema import ParseResult

logger = setup_logger(__name__)


class ConversionService:
    """Service converting statement files into ledger journals."""
    
    def __init__(self, settings: Optional[Settings] = None, full_dates: bool = False):
        """
        Initialize conversion service.
        
        Args:
            settings: Application settings (defaults to the global settings)
            full_dates: Render YYYY-MM-DD dates instead of MM-DD
        """
        self.settings = settings or get_settings()
        self.config = self.settings.ledger_config()
        self.full_dates = full_dates
    
    def load_text(self, input_path: str) -> str:
        """
        Load statement text from a PDF or an already extracted text file.
        
        Args:
            input_path: Path to .pdf or text file
        
        Returns:
            Statement text
        """
        path = Path(input_path)
        if path.suffix.lower() == ".pdf":
            return extract_text(str(path), self.settings.pdftotext_path)
        
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileProcessingError(
                f"Cannot read statement text: {input_path}",
                details={"file_path": input_path, "error": str(e)}
            )
    
    def convert_text(self, raw_text: str) -> Tuple[str, ParseResult]:
        """
        Parse and render statement text.
        
        Args:
            raw_text: Statement text
        
        Returns:
            Tuple of (ledger text, parse result)
        
        Raises:
            FileProcessingError: On the first block error when fail_fast is set,
                or when warnings exist but nothing parsed
        """
        try:
            result = parse(
                raw_text,
                config=self.config,
                strict=self.settings.fail_fast,
                emit_unrecognized=self.settings.emit_unrecognized,
                check_running_balance=self.settings.check_running_balance,
            )
        except BlockError as e:
            raise FileProcessingError(
                f"{e.code} at lines {e.first_line}-{e.last_line}: {e.message}",
                details={"code": e.code, **e.details}
            )
        
        for warning in result.warnings:
            logger.warning(
                f"{warning.code} at lines {warning.first_line}-{warning.last_line} "
                f"({warning.action}): {warning.message}"
            )
        
        if not result.ledger.transactions and result.warnings:
            raise FileProcessingError(
                "No transactions could be parsed from the statement",
                details={"warnings": [warning.model_dump() for warning in result.warnings]}
            )
        
        return render(result.ledger, self.config, self.full_dates), result
    
    def convert_file(
        self,
        input_path: str,
        output_path: Optional[str] = None,
        register_path: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Convert a statement file into a ledger journal.
        
        Args:
            input_path: Statement .pdf or text file
            output_path: Journal output path (None leaves writing to the caller)
            register_path: Optional .xlsx posting register path
        
        Returns:
            Dictionary with ledger text, counts and output paths
        
        Raises:
            FileProcessingError: If the statement cannot be converted
        """
        logger.info(f"Converting statement: {input_path}")
        
        try:
            raw_text = self.load_text(input_path)
        except FileProcessingError:
            raise
        except FsLedgerException as e:
            raise FileProcessingError(
                f"Failed to read statement: {e.message}",
                details={"file_path": input_path, **e.details}
            )
        
        ledger_text, result = self.convert_text(raw_text)
        
        if output_path:
            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(ledger_text, encoding="utf-8")
            logger.info(f"Wrote {len(result.ledger.transactions)} transactions to {output_path}")
        
        if register_path:
            export_register(result.ledger, register_path)
        
        return {
            "ledger": ledger_text,
            "output_path": output_path,
            "register_path": register_path,
            "transactions": len(result.ledger.transactions),
            "warnings": result.warnings,
        }
