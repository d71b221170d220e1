"""
FastAPI routes for statement upload and conversion.
Thin HTTP layer over ConversionService.
"""
import tempfile
from pathlib import Path

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response

from fsledger.config import get_settings
from fsledger.exceptions import FsLedgerException
from fsledger.logger import setup_logger
from services.conversion_service import ConversionService

logger = setup_logger(__name__)
settings = get_settings()

# Initialize FastAPI app
app = FastAPI(
    title="Funding Societies Ledger Converter",
    description="Convert Funding Societies account statements into ledger journals",
    version="1.0.0"
)

SUPPORTED_EXTENSIONS = (".pdf", ".txt")

# Service instance
conversion_service = ConversionService(settings)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "fsledger",
        "version": "1.0.0"
    }


@app.get("/favicon.ico")
async def favicon():
    """Return empty response for favicon to avoid 404 errors."""
    return Response(status_code=204)


def validate_file_extension(filename: str) -> None:
    """
    Validate file has a supported extension.
    
    Args:
        filename: Name of file to validate
    
    Raises:
        HTTPException: If file extension is invalid
    """
    if not filename or not filename.lower().endswith(SUPPORTED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type: {filename}. Only .pdf and .txt are supported."
        )


@app.post("/convert")
def convert_statement(file: UploadFile = File(...)):
    """
    Convert an uploaded statement into ledger text.
    
    PDFs go through pdftotext; .txt uploads are taken as already extracted text.
    
    Args:
        file: Statement upload
    
    Returns:
        Ledger text, transaction count and per-block warnings
    """
    logger.info(f"Received statement: {file.filename}")
    validate_file_extension(file.filename)
    
    content = file.file.read()
    
    try:
        if file.filename.lower().endswith(".pdf"):
            with tempfile.TemporaryDirectory() as tmp_dir:
                pdf_path = Path(tmp_dir) / "statement.pdf"
                pdf_path.write_bytes(content)
                raw_text = conversion_service.load_text(str(pdf_path))
        else:
            raw_text = content.decode("utf-8")
        
        ledger_text, result = conversion_service.convert_text(raw_text)
    
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Statement text must be UTF-8")
    
    except FsLedgerException as e:
        logger.error(f"Conversion failed for {file.filename}: {e.message}")
        raise HTTPException(
            status_code=422,
            detail={"message": e.message, "details": e.details}
        )
    
    return {
        "filename": file.filename,
        "ledger": ledger_text,
        "transactions": len(result.ledger.transactions),
        "warnings": [warning.model_dump() for warning in result.warnings],
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
