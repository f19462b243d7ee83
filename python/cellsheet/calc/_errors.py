"""Cell error values: evaluation failures carried as data, never raised."""

from __future__ import annotations

from enum import Enum
from typing import Any


class CellError(Enum):
    """Error value that propagates through formula chains.

    Members are singletons looked up by tag (``CellError("#CYCLE!")``). An
    error never equals a string, so a text cell that happens to read
    ``#CYCLE!`` stays text.
    """

    PARSE = "#PARSE!"  # malformed formula
    CYCLE = "#CYCLE!"  # circular reference
    VALUE = "#VALUE!"  # text where a number is required
    DIV0 = "#DIV/0!"
    NUM = "#NUM!"  # overflow to a non-finite result

    @property
    def code(self) -> str:
        """Display tag, e.g. ``#DIV/0!``."""
        return self.value

    def __str__(self) -> str:
        return self.value


def is_error(val: Any) -> bool:
    return isinstance(val, CellError)


def first_error(*values: Any) -> CellError | None:
    """Return the first CellError found in *values*, or None."""
    for v in values:
        if isinstance(v, CellError):
            return v
    return None
