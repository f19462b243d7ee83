"""Tests for the cell store and its display rendering."""

from __future__ import annotations

import pytest

from cellsheet import (
    Position,
    Sheet,
    empty,
    format_number,
    format_value,
    insert_formula,
    raw,
    render,
    render_all,
)
from cellsheet.calc import CellError

A1 = Position.from_a1("A1")
B1 = Position.from_a1("B1")
C1 = Position.from_a1("C1")
D1 = Position.from_a1("D1")


def _build(*entries: tuple[str, str]) -> Sheet:
    sheet = empty()
    for ref, text in entries:
        sheet = insert_formula(Position.from_a1(ref), text, sheet)
    return sheet


class TestStore:
    def test_empty(self) -> None:
        sheet = empty()
        assert len(sheet) == 0
        assert raw(A1, sheet) == ""
        assert render(A1, sheet) == ""

    @pytest.mark.parametrize("text", ["5", "=A1+", "hello", "  ", "=B1*2", "#CYCLE!"])
    def test_raw_round_trip(self, text: str) -> None:
        assert raw(A1, insert_formula(A1, text, empty())) == text

    def test_empty_text_removes_entry(self) -> None:
        sheet = _build(("A1", "5"))
        cleared = insert_formula(A1, "", sheet)
        assert A1 not in cleared
        assert len(cleared) == 0
        assert raw(A1, cleared) == ""
        assert render(A1, cleared) == ""

    def test_clearing_absent_cell(self) -> None:
        assert insert_formula(A1, "", empty()) == empty()

    def test_insert_returns_new_sheet(self) -> None:
        before = _build(("A1", "1"))
        after = insert_formula(A1, "2", before)
        assert raw(A1, before) == "1"
        assert raw(A1, after) == "2"

    def test_overwrite(self) -> None:
        sheet = _build(("A1", "1"), ("A1", "=2*3"))
        assert raw(A1, sheet) == "=2*3"
        assert len(sheet) == 1

    def test_insert_does_not_evaluate(self) -> None:
        # storing a broken formula is fine; the error only shows on render
        sheet = _build(("A1", "=(("))
        assert raw(A1, sheet) == "=(("

    def test_non_string_text_rejected(self) -> None:
        with pytest.raises(TypeError, match="Cell text must be str"):
            insert_formula(A1, 5, empty())  # type: ignore[arg-type]

    def test_a1_access(self) -> None:
        sheet = _build(("B2", "x"))
        assert sheet["B2"] == "x"
        assert sheet["A1"] == ""
        assert "B2" in sheet
        assert Position(2, 2) in sheet
        assert 42 not in sheet

    def test_bad_key(self) -> None:
        with pytest.raises(TypeError, match="Cell key"):
            empty()[1]  # type: ignore[index]

    def test_iteration_is_row_major(self) -> None:
        sheet = Sheet.from_cells({"B2": "1", "A2": "2", "C1": "3"})
        assert list(sheet) == [Position(1, 3), Position(2, 1), Position(2, 2)]
        assert list(sheet.items())[0] == (Position(1, 3), "3")

    def test_from_cells_skips_empty(self) -> None:
        sheet = Sheet.from_cells({"A1": "", Position(1, 2): "4"})
        assert list(sheet) == [B1]

    def test_equality(self) -> None:
        assert _build(("A1", "1")) == Sheet.from_cells({"A1": "1"})
        assert _build(("A1", "1")) != _build(("A1", "2"))

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(empty())


class TestRender:
    @pytest.mark.parametrize(
        "text, shown",
        [
            ("5", "5"),
            ("5.0", "5"),
            ("2.50", "2.5"),
            ("007", "7"),
            ("-0", "0"),
            ("1e3", "1000"),
            ("  12 ", "12"),
            ("0.1", "0.1"),
        ],
    )
    def test_number_literal(self, text: str, shown: str) -> None:
        assert render(A1, insert_formula(A1, text, empty())) == shown

    def test_number_literal_matches_format_number(self) -> None:
        for text in ["3.14159", "-42", "1e-7", "123456789"]:
            sheet = insert_formula(A1, text, empty())
            assert render(A1, sheet) == format_number(float(text))

    def test_text_literal_verbatim(self) -> None:
        assert render(A1, _build(("A1", " Hello, world "))) == " Hello, world "

    def test_text_that_looks_like_an_error(self) -> None:
        sheet = _build(("A1", "#DIV/0!"), ("B1", "=A1"))
        assert render(A1, sheet) == "#DIV/0!"
        assert render(B1, sheet) == "#VALUE!"

    def test_precedence(self) -> None:
        sheet = _build(("A1", "2"), ("B1", "3"), ("C1", "4"), ("D1", "=A1+B1*C1"))
        assert render(D1, sheet) == "14"

    def test_fraction_display(self) -> None:
        assert render(A1, _build(("A1", "=1/3"))) == "0.333333333333333"
        assert render(A1, _build(("A1", "=0.1+0.2"))) == "0.3"

    def test_self_reference(self) -> None:
        assert render(A1, _build(("A1", "=A1"))) == "#CYCLE!"

    def test_two_cycle(self) -> None:
        sheet = _build(("A1", "=B1"), ("B1", "=A1"))
        assert render(A1, sheet) == "#CYCLE!"
        assert render(B1, sheet) == "#CYCLE!"

    def test_divide_by_zero(self) -> None:
        sheet = _build(("A1", "10"), ("B1", "0"), ("C1", "=A1/B1"))
        assert render(C1, sheet) == "#DIV/0!"

    def test_parse_error(self) -> None:
        assert render(A1, _build(("A1", "=1+*2"))) == "#PARSE!"

    def test_type_mismatch(self) -> None:
        sheet = _build(("A1", "abc"), ("B1", "=A1*2"))
        assert render(B1, sheet) == "#VALUE!"

    def test_overflow(self) -> None:
        assert render(A1, _build(("A1", "=1e300*1e300"))) == "#NUM!"

    def test_error_tags_distinct(self) -> None:
        tags = {
            render(A1, _build(("A1", "=("))),
            render(A1, _build(("A1", "=A1"))),
            render(B1, _build(("A1", "x"), ("B1", "=A1+1"))),
            render(A1, _build(("A1", "=1/0"))),
            render(A1, _build(("A1", "=1e300*1e300"))),
        }
        assert tags == {"#PARSE!", "#CYCLE!", "#VALUE!", "#DIV/0!", "#NUM!"}

    def test_recomputes_on_demand(self) -> None:
        sheet = _build(("A1", "5"), ("B1", "=A1+1"), ("C1", "=B1*2"))
        assert render(C1, sheet) == "12"
        sheet = insert_formula(A1, "10", sheet)
        assert render(C1, sheet) == "22"

    def test_fixing_a_cycle(self) -> None:
        sheet = _build(("A1", "=B1"), ("B1", "=A1"))
        sheet = insert_formula(B1, "3", sheet)
        assert render(A1, sheet) == "3"

    def test_render_all(self) -> None:
        sheet = _build(("A1", "2"), ("B1", "=A1*A1"), ("C1", "=C1"), ("A2", "note"))
        assert render_all(sheet) == {
            A1: "2",
            B1: "4",
            C1: "#CYCLE!",
            Position(2, 1): "note",
        }

    def test_methods_match_functions(self) -> None:
        sheet = Sheet().insert_formula(A1, "4").insert_formula(B1, "=A1/8")
        assert sheet.render(B1) == render(B1, sheet) == "0.5"
        assert sheet.evaluate(B1) == 0.5


class TestFormatting:
    @pytest.mark.parametrize(
        "value, shown",
        [
            (14.0, "14"),
            (-3.5, "-3.5"),
            (-0.0, "0"),
            (1e20, "1e+20"),
            (123456789012345.0, "123456789012345"),
            (2.0 / 3.0, "0.666666666666667"),
            (1e-7, "1e-07"),
        ],
    )
    def test_format_number(self, value: float, shown: str) -> None:
        assert format_number(value) == shown

    def test_format_value(self) -> None:
        assert format_value(None) == ""
        assert format_value("txt") == "txt"
        assert format_value(CellError.DIV0) == "#DIV/0!"
        assert format_value(7.0) == "7"
