from enum import Enum
from typing import Optional

MAX_INPUT = 80

COMMIT_KEYS = {"enter", "eof"}
ABORT_KEYS = {"ctrl+g"}
BACKSPACE_KEYS = {"backspace"}


class EditOutcome(str, Enum):
    COMMIT = "commit"
    ABORT = "abort"


class LineEditor:
    """Single-line text buffer fed one decoded key at a time.

    Enter (or end of input) commits, ctrl-G aborts, backspace deletes the last
    character, printable characters append while the buffer has room.
    """

    def __init__(self, initial: str = "", max_length: int = MAX_INPUT):
        self.max_length = max_length
        self.buffer = initial[:max_length]

    def feed(self, key: str) -> Optional[EditOutcome]:
        if key in COMMIT_KEYS:
            return EditOutcome.COMMIT
        if key in ABORT_KEYS:
            return EditOutcome.ABORT
        if key in BACKSPACE_KEYS:
            self.buffer = self.buffer[:-1]
        elif len(key) == 1 and key.isprintable() and len(self.buffer) < self.max_length:
            self.buffer += key
        return None

    @property
    def prompt_line(self) -> str:
        return f"? {self.buffer}"


def edit_line(initial: str, keys) -> Optional[str]:
    """Run a LineEditor over an iterable of keys. Returns the text, or None on abort.

    Running out of keys counts as end of input, which commits.
    """
    editor = LineEditor(initial)
    for key in keys:
        outcome = editor.feed(key)
        if outcome == EditOutcome.COMMIT:
            break
        if outcome == EditOutcome.ABORT:
            return None
    return editor.buffer
