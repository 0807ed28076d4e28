# louistab/diagnostics.py
"""
오류 보고: ParseError를 사람이 읽는 문자열 / 기계용 dict로 바꾼다.
파싱은 하지 않는다(이미 만들어진 오류 값만 다룬다).

    3:14: ArgumentError: space: argument 2 must be dots: ...
      expected: dot-pattern, number
      found: 'x'
      space x1
            ^
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Tuple

from .grammar.ast import Span
from .grammar.cursor import END_OF_LINE
from .grammar.errors import ArgumentError, ExpressionSyntaxError, ParseError, UnknownOpcodeError


def _line_bounds(src: str, pos: int) -> Tuple[int, int]:
    """pos가 속한 라인의 [시작, 끝) 범위(개행 제외)"""
    start = src.rfind("\n", 0, pos)
    start = 0 if start == -1 else start + 1
    end = src.find("\n", pos)
    if end == -1:
        end = len(src)
    if end > start and src[end - 1] == "\r":
        end -= 1
    return start, end


def caret_snippet(source: str, span: Span) -> str:
    """span 시작 줄을 보여주고 그 아래에 캐럿(같은 줄 안의 범위는 ^^^ 로)"""
    pos = min(span.start, len(source))
    start, end = _line_bounds(source, pos)
    line_text = source[start:end]
    col = (pos - start) + 1
    width = 1
    if span.end_line == span.line and span.end > span.start:
        width = min(span.end, end) - pos
    caret = " " * (col - 1) + "^" * max(width, 1)
    return f"{line_text}\n{caret}"


def format_error(err: ParseError, source: Optional[str] = None) -> str:
    lines = [f"{err.span}: {err.kind}: {err.message}"]
    if err.expected:
        lines.append(f"  expected: {', '.join(err.expected)}")
    lines.append(f"  found: {END_OF_LINE if err.found is None else repr(err.found)}")
    if isinstance(err, ExpressionSyntaxError) and err.context is not None:
        lines.append(f"  inside '(' opened at {err.context}")
    if source is not None:
        for row in caret_snippet(source, err.span).split("\n"):
            lines.append("  " + row)
    return "\n".join(lines)


def _span_record(span: Span) -> Dict[str, int]:
    return {
        "start": span.start, "end": span.end,
        "line": span.line, "col": span.col,
        "end_line": span.end_line, "end_col": span.end_col,
    }


def error_record(err: ParseError) -> Dict[str, Any]:
    """JSON으로 바로 내보낼 수 있는 평범한 dict."""
    rec: Dict[str, Any] = {
        "kind": err.kind,
        "message": err.message,
        "span": _span_record(err.span),
        "expected": list(err.expected),
        "found": err.found,
    }
    if isinstance(err, UnknownOpcodeError):
        rec["name"] = err.name
    elif isinstance(err, ArgumentError):
        rec["opcode"] = err.opcode
        rec["position"] = err.position
        rec["expected_kind"] = err.expected_kind
    elif isinstance(err, ExpressionSyntaxError) and err.context is not None:
        rec["context"] = _span_record(err.context)
    return rec
