"""
pdftotext wrapper.
The converter only reads text; the PDF itself is handled by poppler's pdftotext.
"""
import subprocess
from pathlib import Path

from fsledger.exceptions import DataNotFoundError, ExtractionError
from fsledger.logger import setup_logger

logger = setup_logger(__name__)

# -raw keeps content stream order, -nopgbrk drops form feeds between pages
PDFTOTEXT_ARGS = ["-nopgbrk", "-raw"]


def extract_text(pdf_path: str, executable: str = "pdftotext") -> str:
    """
    Extract layout text from a statement PDF.

    Args:
        pdf_path: Path to the statement PDF
        executable: pdftotext binary name or path

    Returns:
        Extracted text

    Raises:
        DataNotFoundError: If the PDF does not exist
        ExtractionError: If pdftotext is missing or fails
    """
    path = Path(pdf_path)
    if not path.exists():
        raise DataNotFoundError(
            f"File not found: {pdf_path}",
            details={"file_path": pdf_path}
        )

    command = [executable, *PDFTOTEXT_ARGS, str(path), "-"]
    logger.info(f"Extracting text from {path.name}")

    try:
        completed = subprocess.run(command, capture_output=True, check=False)
    except OSError as e:
        raise ExtractionError(
            f"Cannot run {executable}",
            details={"command": command, "error": str(e)}
        )

    if completed.returncode != 0:
        raise ExtractionError(
            f"{executable} exited with status {completed.returncode}",
            details={
                "command": command,
                "stderr": completed.stderr.decode("utf-8", errors="replace").strip(),
            }
        )

    try:
        text = completed.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError(
            "pdftotext output is not valid UTF-8",
            details={"file_path": pdf_path, "error": str(e)}
        )

    logger.debug(f"Extracted {len(text.splitlines())} lines from {path.name}")
    return text
