"""cellsheet.calc - Formula parsing and evaluation engine for cellsheet sheets."""

from cellsheet.calc._errors import CellError, first_error, is_error
from cellsheet.calc._evaluator import Value, evaluate, evaluate_expr
from cellsheet.calc._nodes import (
    BinaryOp,
    CellValue,
    Expr,
    Formula,
    Negate,
    Number,
    NumberLiteral,
    ParseFailure,
    Reference,
    TextLiteral,
    iter_references,
)
from cellsheet.calc._parser import FormulaParser, parse_cell, parse_number, parse_references

__all__ = [
    "BinaryOp",
    "CellError",
    "CellValue",
    "Expr",
    "Formula",
    "FormulaParser",
    "Negate",
    "Number",
    "NumberLiteral",
    "ParseFailure",
    "Reference",
    "TextLiteral",
    "Value",
    "evaluate",
    "evaluate_expr",
    "first_error",
    "is_error",
    "iter_references",
    "parse_cell",
    "parse_number",
    "parse_references",
]
