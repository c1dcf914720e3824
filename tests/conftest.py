import pytest

from vicissicalc.engine import Spreadsheet


@pytest.fixture
def sheet():
    return Spreadsheet()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("VICISSICALC_ROWS", "VICISSICALC_COLS", "VICISSICALC_COL_WIDTH",
                 "VICISSICALC_LOG_LEVEL", "VICISSICALC_LOG_FILE",
                 "VICISSICALC_HOST", "VICISSICALC_PORT"):
        monkeypatch.delenv(name, raising=False)
