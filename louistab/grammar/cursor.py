# louistab/grammar/cursor.py
"""토큰 커서와 최원거리 실패 기록기.

- Cursor는 불변 값이다. 문법 함수는 커서를 받아 (결과, 새 커서)를 돌려주며,
  공유되는 스캔 위치가 없다.
- FailureTracker는 한 번의 파싱 호출이 소유하는 진단 누적기다.
  가장 멀리 도달한 위치와 그 위치에서 기대했던 것들의 합집합을 기록한다.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Set, Tuple

from .ast import Span
from ..lex import Token

END_OF_LINE = "end of line"


@dataclass(frozen=True)
class Cursor:
    tokens: Tuple[Token, ...]
    pos: int
    eol: Span           # 줄 끝 위치(토큰이 더 없을 때의 진단 위치)

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def advance(self, n: int = 1) -> "Cursor":
        return Cursor(self.tokens, min(self.pos + n, len(self.tokens)), self.eol)

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    @property
    def remaining(self) -> int:
        return len(self.tokens) - self.pos

    @property
    def span(self) -> Span:
        t = self.peek()
        return self.eol if t is None else t.span

    @property
    def found(self) -> Optional[str]:
        t = self.peek()
        return None if t is None else t.text

    def describe(self) -> str:
        t = self.peek()
        return END_OF_LINE if t is None else repr(t.text)


class FailureTracker:
    """
    가장 먼 실패 지점을 기록한다.
    - pos      : 토큰 인덱스(-1 = 아직 없음)
    - expected : 그 위치에서 받아들일 수 있었던 것들
    - context  : 그 시점에 열려 있던 가장 안쪽 '(' 의 위치
    """
    def __init__(self) -> None:
        self.cursor: Optional[Cursor] = None
        self.expected: Set[str] = set()
        self.context: Optional[Span] = None

    @property
    def pos(self) -> int:
        return -1 if self.cursor is None else self.cursor.pos

    def miss(self, cursor: Cursor, expected: Iterable[str], context: Optional[Span] = None) -> None:
        if cursor.pos > self.pos:
            self.cursor = cursor
            self.expected = set(expected)
            self.context = context
        elif cursor.pos == self.pos:
            self.expected.update(expected)
            if context is not None and self.context is None:
                self.context = context
