from typing import List, Optional
from pydantic import BaseModel, Field

from vicissicalc.errors import ErrorKind
from vicissicalc.storage import CellStatus

class CellSnapshot(BaseModel):
    row: int
    col: int
    text: str = ""
    is_formula: bool = False
    status: CellStatus = CellStatus.STALE
    value: Optional[float] = None
    error: Optional[ErrorKind] = None
    message: str = ""

class GridSnapshot(BaseModel):
    rows: int
    cols: int
    cells: List[CellSnapshot] = Field(default_factory=list)  # non-blank cells only

class CellUpdate(BaseModel):
    text: str

class GridImport(BaseModel):
    content: str  # persistence format, one "<row> <col> <text>" per line
    replace: bool = True  # clear every cell first

class LoadProblem(BaseModel):
    line_number: int
    line: str
    message: str

class LoadReport(BaseModel):
    loaded: int = 0
    fresh: bool = False  # no file existed yet
    problems: List[LoadProblem] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems

class Settings(BaseModel):
    rows: int = 20
    cols: int = 4
    col_width: int = 18
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 8000
