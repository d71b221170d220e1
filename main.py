"""
Main entry point for the Funding Societies ledger converter.

    python main.py convert statement.pdf [journal.ledger] [--register postings.xlsx]
    python main.py serve
"""
import argparse
import sys
from pathlib import Path

# Add project root to Python path for module imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

from fsledger.config import get_settings
from fsledger.exceptions import FsLedgerException
from fsledger.logger import setup_logger

# Load environment variables from .env file
_env_file = PROJECT_ROOT / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

logger = setup_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="fsledger",
        description="Convert Funding Societies statements into ledger journals",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert a statement file")
    convert.add_argument("input", help="Statement PDF or pdftotext -raw output")
    convert.add_argument("output", nargs="?", help="Journal output path (default: stdout)")
    convert.add_argument("--register", help="Also write an .xlsx posting register")
    convert.add_argument("--fail-fast", action="store_true", help="Abort on the first bad statement row")
    convert.add_argument(
        "--drop-unrecognized",
        action="store_true",
        help="Skip unrecognized rows instead of posting them to the suspense account",
    )
    convert.add_argument("--full-dates", action="store_true", help="Write YYYY-MM-DD dates")

    subparsers.add_parser("serve", help="Start the HTTP API")
    return parser


def run_convert(args: argparse.Namespace) -> int:
    """Convert one statement; returns the process exit status."""
    from services.conversion_service import ConversionService

    settings = get_settings()
    overrides = {}
    if args.fail_fast:
        overrides["fail_fast"] = True
    if args.drop_unrecognized:
        overrides["emit_unrecognized"] = False
    if overrides:
        settings = settings.model_copy(update=overrides)

    service = ConversionService(settings, full_dates=args.full_dates)
    result = service.convert_file(args.input, args.output, args.register)

    if not args.output:
        sys.stdout.write(result["ledger"])

    logger.info(
        f"Converted {result['transactions']} transactions "
        f"with {len(result['warnings'])} warnings"
    )
    return 0


def run_server() -> int:
    """Start the FastAPI server."""
    import uvicorn
    from app.api import app

    settings = get_settings()
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    logger.info(f"Log Level: {settings.log_level}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
    return 0


def main(argv=None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    try:
        if args.command == "serve":
            return run_server()
        return run_convert(args)

    except FsLedgerException as e:
        logger.error(f"Conversion failed: {e.message}")
        if e.details:
            logger.error(f"Details: {e.details}")
        return 1

    except Exception as e:
        logger.error(f"Unexpected failure: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
