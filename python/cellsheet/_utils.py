"""A1-style address helpers shared by the store and the formula parser."""

from __future__ import annotations

import re

_A1_RE = re.compile(r"^([A-Za-z]+)(\d+)$")


def column_index(letters: str) -> int:
    """Convert column letters to a 1-based index (A=1, Z=26, AA=27)."""
    if not letters or not letters.isascii() or not letters.isalpha():
        raise ValueError(f"Invalid column letters: {letters!r}")
    index = 0
    for ch in letters.upper():
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index


def column_letters(index: int) -> str:
    """Convert a 1-based column index to letters (1=A, 27=AA)."""
    if index < 1:
        raise ValueError(f"Column index must be >= 1: {index}")
    letters = ""
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def a1_to_rowcol(ref: str) -> tuple[int, int]:
    """Parse ``"B3"`` into 1-based ``(row, column)`` = ``(3, 2)``."""
    m = _A1_RE.match(ref.strip().replace("$", ""))
    if not m:
        raise ValueError(f"Invalid cell reference: {ref!r}")
    row = int(m.group(2))
    if row < 1:
        raise ValueError(f"Row must be >= 1: {ref!r}")
    return row, column_index(m.group(1))


def rowcol_to_a1(row: int, col: int) -> str:
    """Format 1-based ``(row, column)`` as an A1 reference."""
    if row < 1:
        raise ValueError(f"Row must be >= 1: {row}")
    return f"{column_letters(col)}{row}"
