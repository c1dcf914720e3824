"""Plain-text spreadsheet files.

One line per non-blank cell, row-major::

    <row> <col> <text>

Exactly one space separates the column number from the text, so text with
leading blanks survives a save/load round trip.
"""

import logging
import os
import re

from vicissicalc.engine import Spreadsheet
from vicissicalc.models import LoadProblem, LoadReport

logger = logging.getLogger(__name__)

BAD_LINE = "Bad line in file"
OUT_OF_RANGE = "Row or column number out of range in file"
FRESH_FILE = "Fresh file"

_LINE_RE = re.compile(r'^[ \t]*([0-9]+)[ \t]+([0-9]+) (.+)$')


def dump_grid(sheet: Spreadsheet) -> str:
    return "".join(f"{r} {c} {text}\n" for r, c, text in sheet.store.nonblank())


def parse_grid(sheet: Spreadsheet, content: str, *, replace: bool = False) -> LoadReport:
    """Load *content* into *sheet*, invalidating once at the end.

    Bad lines are skipped and reported; they never abort the load.
    """
    report = LoadReport()
    if replace:
        for r, c in sheet.store.positions():
            sheet.set_text_batch(r, c, "")
    for number, raw in enumerate(content.split("\n"), start=1):
        line = raw.rstrip("\r")
        if not line.strip():
            continue
        m = _LINE_RE.match(line)
        if not m:
            report.problems.append(LoadProblem(line_number=number, line=line, message=BAD_LINE))
            continue
        r, c = int(m.group(1)), int(m.group(2))
        if not sheet.in_bounds(r, c):
            report.problems.append(LoadProblem(line_number=number, line=line, message=OUT_OF_RANGE))
            continue
        sheet.set_text_batch(r, c, m.group(3))
        report.loaded += 1
    sheet.invalidate_all()
    for problem in report.problems:
        logger.warning("Line %d: %s: %r", problem.line_number, problem.message, problem.line)
    return report


def load_grid(sheet: Spreadsheet, path: str) -> LoadReport:
    """Read the file at *path*. A missing file is a fresh sheet, reported as such."""
    if not os.path.exists(path):
        logger.info("No file at %r, starting fresh", path)
        return LoadReport(fresh=True)
    with open(path, "r", encoding="utf-8", newline="") as f:
        content = f.read()
    return parse_grid(sheet, content)


def save_grid(sheet: Spreadsheet, path: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(dump_grid(sheet))
    logger.info("Wrote %r", path)
