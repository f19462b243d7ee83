"""cellsheet - the formula and cell-model engine behind a grid spreadsheet.

Usage::

    from cellsheet import Direction, Position, empty, insert_formula, next_position, raw, render

    sheet = empty()
    sheet = insert_formula(Position.from_a1("A1"), "5", sheet)
    sheet = insert_formula(Position.from_a1("B1"), "=A1*2+1", sheet)
    render(Position.from_a1("B1"), sheet)  # "11"
    raw(Position.from_a1("B1"), sheet)  # "=A1*2+1"

    next_position(Direction.UP, Position(1, 1))  # Position(row=1, column=1)
"""

from cellsheet._position import Direction, GridSize, Position, next_position
from cellsheet._sheet import (
    DISPLAY_PRECISION,
    Sheet,
    empty,
    format_number,
    format_value,
    insert_formula,
    raw,
    render,
    render_all,
)
from cellsheet._utils import a1_to_rowcol, column_index, column_letters, rowcol_to_a1
from cellsheet.calc import CellError, evaluate, parse_cell

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CellError",
    "DISPLAY_PRECISION",
    "Direction",
    "GridSize",
    "Position",
    "Sheet",
    "a1_to_rowcol",
    "column_index",
    "column_letters",
    "empty",
    "evaluate",
    "format_number",
    "format_value",
    "insert_formula",
    "next_position",
    "parse_cell",
    "raw",
    "render",
    "render_all",
    "rowcol_to_a1",
]
