from __future__ import annotations

import json

import pytest

from louistab.diagnostics import caret_snippet, error_record, format_error
from louistab.grammar.assembler import parse_table
from louistab.grammar.ast import Span
from louistab.grammar.errors import ArgumentError, ExpressionSyntaxError, ParseError, UnknownOpcodeError


def _fail(text: str) -> ParseError:
    with pytest.raises(ParseError) as ei:
        parse_table(text)
    return ei.value


def test_unknown_opcode_report() -> None:
    src = "letter a 1\nfrob 1\n"
    err = _fail(src)
    assert isinstance(err, UnknownOpcodeError)

    text = format_error(err, src)
    lines = text.split("\n")
    assert lines[0] == "2:1: UnknownOpcodeError: Unknown opcode 'frob'"
    assert "  found: 'frob'" in lines
    assert lines[-2:] == ["  frob 1", "  ^^^^"]
    assert str(err) == "Unknown opcode 'frob' at 2:1"


def test_missing_argument_report_points_past_end() -> None:
    src = "letter a\n"
    err = _fail(src)
    assert isinstance(err, ArgumentError)

    text = format_error(err, src)
    assert "  expected: dot-pattern, number" in text
    assert "  found: end of line" in text
    assert text.endswith("  letter a\n          ^")


def test_caret_snippet_range() -> None:
    src = "space 20\nalways the 2346\n"
    span = Span(16, 19, 2, 8, 2, 11)
    assert caret_snippet(src, span) == "always the 2346\n       ^^^"


def test_caret_snippet_multiline_span_marks_start() -> None:
    src = "always the \\\n  2346\n"
    span = Span(0, 19, 1, 1, 2, 7)
    assert caret_snippet(src, span) == "always the \\\n^"


def test_format_without_source() -> None:
    err = _fail("frob\n")
    assert "\n  " in format_error(err)
    assert "^" not in format_error(err)


def test_expression_error_mentions_open_paren() -> None:
    err = _fail("context test (_a actions x\n")
    assert isinstance(err, ExpressionSyntaxError)
    assert "  inside '(' opened at 1:14" in format_error(err)


def test_error_record_is_json_ready() -> None:
    err = _fail("lenemphphrase italic 300\n")
    rec = error_record(err)

    assert rec["kind"] == "ArgumentError"
    assert rec["opcode"] == "lenemphphrase"
    assert rec["position"] == 2
    assert rec["expected_kind"] == "number"
    assert rec["span"]["line"] == 1
    assert rec["span"]["col"] == 22
    assert rec["found"] == "300"
    json.dumps(rec)


def test_error_record_extras() -> None:
    assert error_record(_fail("frob\n"))["name"] == "frob"
    rec = error_record(_fail("context test (_a actions x\n"))
    assert rec["kind"] == "SyntaxError"
    assert rec["context"]["col"] == 14


def test_builtin_syntax_error_fields_come_from_span() -> None:
    err = _fail("letter a 1\nfrob 1\n")

    assert (err.lineno, err.offset) == (2, 1)
    assert (err.end_lineno, err.end_offset) == (2, 5)
    assert err.msg == "Unknown opcode 'frob'"
    # a SyntaxError subclass, but not the expression error kind
    assert not isinstance(err, ExpressionSyntaxError)
    assert err.kind != ExpressionSyntaxError.kind
