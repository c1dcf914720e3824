import argparse
import logging
import sys
from typing import Optional, Sequence

from vicissicalc.config import configure_logging, load_settings
from vicissicalc.engine import Spreadsheet
from vicissicalc.tui.session import Session

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vicissicalc", description="Terminal spreadsheet")
    parser.add_argument("filename", nargs="?", help="Spreadsheet file to load and save")
    return parser


def _no_prompt(initial: str) -> Optional[str]:
    return None


def build_session(filename: Optional[str] = None, settings=None) -> Session:
    """Spreadsheet and session per *settings*, with *filename* loaded if given."""
    settings = settings or load_settings()
    sheet = Spreadsheet(settings.rows, settings.cols)
    # The terminal replaces the prompt once it owns the screen.
    session = Session(sheet, _no_prompt, filename, col_width=settings.col_width)
    if filename:
        session.load_file(filename)
    return session


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)
    if extra:
        parser.print_usage(sys.stderr)
        return 1
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"vicissicalc: {e}", file=sys.stderr)
        return 1
    configure_logging(settings)
    session = build_session(args.filename, settings)

    from vicissicalc.tui.terminal import run_terminal
    try:
        run_terminal(session)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
