"""curses front end: key decoding, painting and the line-edit prompt."""

import curses
import logging
from typing import Any, Optional, TypeAlias, Union

from vicissicalc.tui.editor import EditOutcome, LineEditor
from vicissicalc.tui.render import Frame, Segment, Style
from vicissicalc.tui.session import Session

logger = logging.getLogger(__name__)

CursesWindow: TypeAlias = Any  # Represents a curses window object

_SPECIAL_KEYS = {
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_ENTER: "enter",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_RESIZE: "resize",
}

# keyname()s terminfo gives ctrl+arrow chords
_CTRL_ARROWS = {
    "kLFT5": "ctrl+left",
    "kRIT5": "ctrl+right",
    "kUP5": "ctrl+up",
    "kDN5": "ctrl+down",
}

_CONTROL_CHARS = {
    "\n": "enter",
    "\r": "enter",
    "\x07": "ctrl+g",
    "\x08": "backspace",
    "\x7f": "backspace",
    "\x04": "eof",
}


def decode_key(key: Union[int, str]) -> str:
    """Turn a get_wch() result into the key names Session and LineEditor use."""
    if isinstance(key, str):
        if key in _CONTROL_CHARS:
            return _CONTROL_CHARS[key]
        return key if key.isprintable() else "unknown"
    if key in _SPECIAL_KEYS:
        return _SPECIAL_KEYS[key]
    try:
        name = curses.keyname(key).decode("ascii", errors="replace")
    except ValueError:
        return "unknown"
    return _CTRL_ARROWS.get(name, "unknown")


# ── Colors ────────────────────────────────────────────────────────

_PAIRS = {
    (Style.OK, False): 1,
    (Style.OK, True): 2,
    (Style.ERROR, False): 3,
    (Style.ERROR, True): 4,
    (Style.BORDER, False): 5,
}


def init_colors() -> None:
    if not curses.has_colors():
        return
    curses.start_color()

    def bright(color: int) -> int:
        return color + 8 if curses.COLORS >= 16 else color

    curses.init_pair(1, curses.COLOR_BLACK, curses.COLOR_WHITE)
    curses.init_pair(2, bright(curses.COLOR_WHITE), bright(curses.COLOR_BLUE))
    curses.init_pair(3, curses.COLOR_BLACK, bright(curses.COLOR_CYAN))
    curses.init_pair(4, bright(curses.COLOR_WHITE), bright(curses.COLOR_RED))
    curses.init_pair(5, curses.COLOR_BLUE, bright(curses.COLOR_YELLOW))


def attr_for(style: Style, highlighted: bool = False) -> int:
    if curses.has_colors():
        return curses.color_pair(_PAIRS.get((style, highlighted), 1))
    attr = curses.A_BOLD if style == Style.ERROR else curses.A_NORMAL
    return attr | curses.A_REVERSE if highlighted else attr


# ── Painting ──────────────────────────────────────────────────────

def _put(stdscr: CursesWindow, y: int, x: int, text: str, attr: int) -> int:
    """addstr clipped to the window; the bottom-right cell is never written."""
    height, width = stdscr.getmaxyx()
    room = width - x - (1 if y == height - 1 else 0)
    if y >= height or room <= 0:
        return x
    text = text[:room]
    stdscr.addstr(y, x, text, attr)
    return x + len(text)


def _put_line(stdscr: CursesWindow, y: int, segments: list[Segment]) -> None:
    x = 0
    for seg in segments:
        x = _put(stdscr, y, x, seg.text, attr_for(seg.style, seg.highlighted))


def paint(stdscr: CursesWindow, frame: Frame) -> None:
    stdscr.erase()
    _put(stdscr, 0, 0, frame.header, attr_for(Style.OK))
    _put_line(stdscr, 1, frame.ruler)
    for i, row in enumerate(frame.rows):
        _put_line(stdscr, 2 + i, row)
    _put(stdscr, 2 + len(frame.rows), 0, frame.status, curses.A_NORMAL)
    stdscr.refresh()


class CursesPrompt:
    """Session prompt that edits on the status line."""

    def __init__(self, stdscr: CursesWindow, line: int):
        self.stdscr = stdscr
        self.line = line

    def __call__(self, initial: str) -> Optional[str]:
        editor = LineEditor(initial)
        while True:
            self.stdscr.move(min(self.line, self.stdscr.getmaxyx()[0] - 1), 0)
            self.stdscr.clrtoeol()
            _put(self.stdscr, self.line, 0, editor.prompt_line, curses.A_NORMAL)
            curses.curs_set(1)
            key = decode_key(self.stdscr.get_wch())
            curses.curs_set(0)
            outcome = editor.feed(key)
            if outcome == EditOutcome.COMMIT:
                return editor.buffer
            if outcome == EditOutcome.ABORT:
                return None


def _main(stdscr: CursesWindow, session: Session) -> None:
    init_colors()
    curses.curs_set(0)
    stdscr.keypad(True)
    session.prompt = CursesPrompt(stdscr, 2 + session.sheet.rows)
    session.run(lambda: decode_key(stdscr.get_wch()), lambda frame: paint(stdscr, frame))


def run_terminal(session: Session) -> None:
    """Take over the terminal until the user quits."""
    logger.info("Starting terminal session on %dx%d grid", session.sheet.rows, session.sheet.cols)
    curses.wrapper(_main, session)
