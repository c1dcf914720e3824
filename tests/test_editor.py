from vicissicalc.tui.editor import MAX_INPUT, EditOutcome, LineEditor, edit_line


class TestLineEditor:
    def test_typing_and_commit(self):
        editor = LineEditor()
        for key in "= 1":
            assert editor.feed(key) is None
        assert editor.feed("enter") == EditOutcome.COMMIT
        assert editor.buffer == "= 1"

    def test_starts_from_initial_text(self):
        editor = LineEditor("abc")
        editor.feed("backspace")
        editor.feed("d")
        assert editor.buffer == "abd"
        assert editor.prompt_line == "? abd"

    def test_backspace_on_empty(self):
        editor = LineEditor()
        editor.feed("backspace")
        assert editor.buffer == ""

    def test_abort(self):
        assert LineEditor("x").feed("ctrl+g") == EditOutcome.ABORT

    def test_length_limit(self):
        editor = LineEditor("x" * MAX_INPUT)
        editor.feed("y")
        assert editor.buffer == "x" * MAX_INPUT

    def test_ignores_named_keys(self):
        editor = LineEditor("a")
        editor.feed("left")
        editor.feed("unknown")
        assert editor.buffer == "a"


class TestEditLine:
    def test_commit(self):
        assert edit_line("", ["4", "2", "enter", "9"]) == "42"

    def test_abort(self):
        assert edit_line("keep", ["x", "ctrl+g"]) is None

    def test_end_of_input_commits(self):
        assert edit_line("a", ["b"]) == "ab"
        assert edit_line("a", ["b", "eof"]) == "ab"
