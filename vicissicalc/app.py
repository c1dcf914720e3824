"""HTTP surface over one in-process spreadsheet.

Every endpoint is async and runs on the event-loop thread, so requests are
served one at a time against the same grid.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from vicissicalc.config import configure_logging, load_settings
from vicissicalc.engine import Spreadsheet
from vicissicalc.lexer import find_formula
from vicissicalc.models import CellSnapshot, CellUpdate, GridImport, GridSnapshot, LoadReport, Settings
from vicissicalc.persistence import dump_grid, load_grid, parse_grid

logger = logging.getLogger(__name__)


def snapshot(sheet: Spreadsheet, row: int, col: int) -> CellSnapshot:
    """Current state of a cell, computing it first."""
    text = sheet.text_of(row, col)
    result = sheet.lookup(row, col)
    return CellSnapshot(
        row=row,
        col=col,
        text=text,
        is_formula=find_formula(text) is not None,
        status=sheet.status_of(row, col),
        value=result.value,
        error=result.error,
        message=result.error.message if result.error else "",
    )


def create_app(sheet: Optional[Spreadsheet] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    sheet = sheet if sheet is not None else Spreadsheet(settings.rows, settings.cols)

    app = FastAPI(title="Vicissicalc")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.sheet = sheet

    def _check_bounds(row: int, col: int):
        if not sheet.in_bounds(row, col):
            raise HTTPException(status_code=404, detail="Cell out of range")

    @app.get("/grid", response_model=GridSnapshot)
    async def get_grid():
        cells = [snapshot(sheet, r, c) for r, c, _ in sheet.store.nonblank()]
        return GridSnapshot(rows=sheet.rows, cols=sheet.cols, cells=cells)

    @app.get("/cells/{row}/{col}", response_model=CellSnapshot)
    async def get_cell(row: int, col: int):
        _check_bounds(row, col)
        return snapshot(sheet, row, col)

    @app.put("/cells/{row}/{col}", response_model=CellSnapshot)
    async def update_cell(row: int, col: int, req: CellUpdate):
        _check_bounds(row, col)
        if "\n" in req.text or "\r" in req.text:
            raise HTTPException(status_code=400, detail="Cell text must be a single line")
        sheet.set_text(row, col, req.text)
        logger.info("Cell (%d, %d) set to %r", row, col, req.text)
        return snapshot(sheet, row, col)

    @app.get("/grid/export", response_class=PlainTextResponse)
    async def export_grid():
        return dump_grid(sheet)

    @app.put("/grid/import", response_model=LoadReport)
    async def import_grid(req: GridImport):
        report = parse_grid(sheet, req.content, replace=req.replace)
        logger.info("Imported %d cells, %d bad lines", report.loaded, len(report.problems))
        return report

    return app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vicissicalc-server", description="Serve a spreadsheet over HTTP")
    parser.add_argument("filename", nargs="?", help="Spreadsheet file to load at startup")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    import uvicorn

    parser = build_parser()
    args, extra = parser.parse_known_args(argv)
    if extra:
        parser.print_usage(sys.stderr)
        return 1
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"vicissicalc-server: {e}", file=sys.stderr)
        return 1
    configure_logging(settings, console=True)
    sheet = Spreadsheet(settings.rows, settings.cols)
    if args.filename:
        try:
            report = load_grid(sheet, args.filename)
        except (OSError, UnicodeDecodeError) as e:
            print(f"vicissicalc-server: {args.filename}: {getattr(e, 'strerror', None) or e}", file=sys.stderr)
            return 1
        print(f"[STARTUP] Loaded {report.loaded} cells from {args.filename}"
              + (" (fresh file)" if report.fresh else ""))
    app = create_app(sheet, settings)
    uvicorn.run(app, host=settings.host, port=settings.port, timeout_keep_alive=5, loop="asyncio")
    return 0


if __name__ == "__main__":
    sys.exit(main())
