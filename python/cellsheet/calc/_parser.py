"""Formula parser: raw cell text -> literal value or expression tree.

Recursive descent over a regex tokenizer. Precedence (lowest to highest)::

    1. additive        (+, -)
    2. multiplicative  (*, /)
    3. unary sign, number, cell reference, parenthesized expression

Binary levels loop instead of recursing, so ``=1+1+...+1`` builds a
left-deep tree without growing the Python stack; only parentheses and unary
signs nest.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass

from cellsheet._position import Position
from cellsheet._utils import column_index
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

logger = logging.getLogger(__name__)

MAX_NESTING = 100

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"

# Whole-cell numeric literal: optional sign, surrounding whitespace allowed
_LITERAL_RE = re.compile(rf"\s*[+-]?{_NUMBER}\s*", re.ASCII)

_TOKEN_RE = re.compile(
    rf"""
    \s*(?:
        (?P<number>{_NUMBER})
      | (?P<ref>(?P<column>[A-Za-z]+)(?P<row>\d+))
      | (?P<op>[-+*/×÷−])
      | (?P<lparen>\()
      | (?P<rparen>\))
    )
    """,
    re.VERBOSE | re.ASCII,
)

_WS_RE = re.compile(r"\s*")

# Typographic operators accepted as aliases
_OP_ALIASES = {"×": "*", "÷": "/", "−": "-"}


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Token:
    kind: str  # "number", "ref", "op", "lparen", "rparen", "end"
    text: str
    offset: int
    position: Position | None = None  # set on "ref" tokens


class FormulaSyntaxError(Exception):
    """Raised inside the parser; converted to :class:`ParseFailure` at the boundary."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset


def _reference_position(column: str, row: str, offset: int) -> Position:
    if int(row) < 1:
        raise FormulaSyntaxError(f"Invalid cell reference {column + row!r}", offset)
    return Position(int(row), column_index(column))


def tokenize(body: str) -> list[Token]:
    """Split a formula body (no leading ``=``) into tokens, ending with ``end``."""
    tokens: list[Token] = []
    pos = 0
    length = len(body)
    while True:
        pos = _WS_RE.match(body, pos).end()
        if pos >= length:
            break
        m = _TOKEN_RE.match(body, pos)
        if m is None:
            raise FormulaSyntaxError(f"Unexpected character {body[pos]!r}", pos)
        # the outermost alternative closes last, so lastgroup names it
        kind = m.lastgroup or ""
        text = m.group(kind)
        offset = m.start(kind)
        if kind == "op":
            text = _OP_ALIASES.get(text, text)
        if kind == "ref":
            position = _reference_position(m.group("column"), m.group("row"), offset)
            tokens.append(Token(kind, text, offset, position))
        else:
            tokens.append(Token(kind, text, offset))
        pos = m.end()
    tokens.append(Token("end", "", length))
    return tokens


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class FormulaParser:
    """Parses one formula body into an :data:`Expr` tree.

    Usage::

        expr = FormulaParser("A1+B1*2").parse()
    """

    def __init__(self, body: str) -> None:
        self._tokens = tokenize(body)
        self._index = 0
        self._depth = 0

    def parse(self) -> Expr:
        if self._peek().kind == "end":
            raise FormulaSyntaxError("Empty formula", self._peek().offset)
        expr = self._expr()
        tok = self._peek()
        if tok.kind == "rparen":
            raise FormulaSyntaxError("Unmatched ')'", tok.offset)
        if tok.kind != "end":
            raise FormulaSyntaxError(f"Unexpected {tok.text!r}", tok.offset)
        return expr

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        tok = self._tokens[self._index]
        self._index += 1
        return tok

    def _expr(self) -> Expr:
        left = self._term()
        while self._peek().kind == "op" and self._peek().text in "+-":
            op = self._advance().text
            left = BinaryOp(op, left, self._term())
        return left

    def _term(self) -> Expr:
        left = self._factor()
        while self._peek().kind == "op" and self._peek().text in "*/":
            op = self._advance().text
            left = BinaryOp(op, left, self._factor())
        return left

    def _nest(self, tok: Token) -> None:
        """Enter one level of parentheses or unary sign; at most ``MAX_NESTING``."""
        self._depth += 1
        if self._depth > MAX_NESTING:
            raise FormulaSyntaxError("Expression nested too deeply", tok.offset)

    def _factor(self) -> Expr:
        tok = self._peek()

        if tok.kind == "op" and tok.text in "+-":
            self._advance()
            self._nest(tok)
            operand = self._factor()
            self._depth -= 1
            return Negate(operand) if tok.text == "-" else operand

        if tok.kind == "number":
            self._advance()
            value = float(tok.text)
            if not math.isfinite(value):
                raise FormulaSyntaxError(f"Number out of range: {tok.text}", tok.offset)
            return Number(value)

        if tok.kind == "ref" and tok.position is not None:
            self._advance()
            return Reference(tok.position)

        if tok.kind == "lparen":
            self._advance()
            self._nest(tok)
            inner = self._expr()
            self._depth -= 1
            close = self._peek()
            if close.kind != "rparen":
                raise FormulaSyntaxError("Missing ')'", close.offset)
            self._advance()
            return inner

        if tok.kind == "end":
            raise FormulaSyntaxError("Unexpected end of formula", tok.offset)
        raise FormulaSyntaxError(f"Unexpected {tok.text!r}", tok.offset)


# ---------------------------------------------------------------------------
# Cell text interpretation
# ---------------------------------------------------------------------------


def parse_number(text: str) -> float | None:
    """Return the finite number *text* spells, or None."""
    if not _LITERAL_RE.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def parse_cell(raw_text: str) -> CellValue:
    """Interpret a cell's raw text. Never raises on any string input."""
    if raw_text.startswith("="):
        body = raw_text[1:]
        try:
            return Formula(FormulaParser(body).parse())
        except FormulaSyntaxError as e:
            logger.debug("Cannot parse formula %r: %s at %d", raw_text, e.message, e.offset)
            return ParseFailure(e.message, e.offset)
    number = parse_number(raw_text)
    if number is not None:
        return NumberLiteral(number)
    return TextLiteral(raw_text)


def parse_references(raw_text: str) -> list[Position]:
    """Distinct positions a cell's raw text refers to, in formula order.

    Literals and unparseable formulas refer to nothing.
    """
    value = parse_cell(raw_text)
    if not isinstance(value, Formula):
        return []
    refs: list[Position] = []
    seen: set[Position] = set()
    for position in iter_references(value.expr):
        if position not in seen:
            refs.append(position)
            seen.add(position)
    return refs
