# louistab/grammar/errors.py
"""파싱 오류 분류.

모든 오류는 lepta처럼 내장 `SyntaxError`를 상속한다. 그래서 `except SyntaxError`는
UnknownOpcodeError, ArgumentError 등 **모든** 종류를 잡는다. 식 문법 오류만 골라야 하면
`ExpressionSyntaxError`를 잡거나 `kind == "SyntaxError"`로 구분할 것.
내장 필드 `lineno` / `offset` / `end_lineno` / `end_offset`도 span에서 채운다.
각 오류는 다음을 가진다.
  - kind     : 분류 이름("LexError", "UnknownOpcodeError", "ArgumentError", "SyntaxError", ...)
  - message  : 사람이 읽을 설명
  - span     : 실패 지점(가장 멀리 도달한 위치)
  - expected : 그 지점에서 받아들일 수 있었던 토큰 종류 집합(정렬된 tuple)
  - found    : 실제로 만난 텍스트(줄 끝이면 None)
"""

from __future__ import annotations
from typing import Iterable, Optional, Tuple

from .ast import Span


class ParseError(SyntaxError):
    kind = "ParseError"

    def __init__(self, message: str, span: Span, *,
                 expected: Iterable[str] = (), found: Optional[str] = None):
        super().__init__(message, (None, span.line, span.col, None, span.end_line, span.end_col))
        self.message = message
        self.span = span
        self.expected: Tuple[str, ...] = tuple(sorted(set(expected)))
        self.found = found

    def __str__(self) -> str:
        return f"{self.message} at {self.span.line}:{self.span.col}"


class LexError(ParseError):
    """따옴표/이스케이프가 닫히지 않은 토큰 등."""
    kind = "LexError"


class ValueParseError(ParseError):
    """기본 값(점 패턴, 문자 등) 하나를 읽지 못함. opcode 문법에서 ArgumentError로 감싼다."""
    kind = "ValueError"


class UnknownOpcodeError(ParseError):
    kind = "UnknownOpcodeError"

    def __init__(self, name: str, span: Span, *, expected: Iterable[str] = ()):
        super().__init__(f"Unknown opcode {name!r}", span, expected=expected, found=name)
        self.name = name


class ArgumentError(ParseError):
    kind = "ArgumentError"

    def __init__(self, message: str, span: Span, *, opcode: str, position: int,
                 expected_kind: str, expected: Iterable[str] = (), found: Optional[str] = None):
        super().__init__(message, span, expected=expected, found=found)
        self.opcode = opcode
        self.position = position          # 1-based 인자 위치(0 = opcode/접두어 자체)
        self.expected_kind = expected_kind


class ExpressionSyntaxError(ParseError):
    """multipart test/action 식의 구문 오류."""
    kind = "SyntaxError"

    def __init__(self, message: str, span: Span, *, expected: Iterable[str] = (),
                 found: Optional[str] = None, context: Optional[Span] = None):
        super().__init__(message, span, expected=expected, found=found)
        self.context = context            # 닫히지 않은 가장 안쪽 '(' 위치


class ContinuationError(ParseError):
    """파일 마지막 줄에 남은 줄 이음 표시."""
    kind = "ContinuationError"
