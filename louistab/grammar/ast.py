# louistab/grammar/ast.py
"""점자 테이블 AST
- Span: 원문 위치(진단 전용, 구조 비교에서 제외)
- Value: 규칙 인자 하나(문자/문자 클래스/점 패턴/숫자/식별자/문자열)
- Directive: 규칙 한 줄 = opcode + 인자 + (multipart 식)
- Ruleset: 파일 순서대로 정렬된 Directive 묶음
"""

from __future__     import annotations
from dataclasses    import dataclass, field
from typing         import FrozenSet, Iterator, List, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from ..multipart.ast import TestAction


@dataclass(frozen=True)
class Span:
    """
    원문 위치 범위.
    - start/end : 전체 입력 기준 코드포인트 오프셋 [start, end)
    - line/col  : 시작 위치(1-based)
    - end_line/end_col : 끝 위치(1-based, end_col은 마지막 문자 다음 칸)
    """
    start: int
    end: int
    line: int
    col: int
    end_line: int
    end_col: int

    @classmethod
    def point(cls, offset: int, line: int, col: int) -> "Span":
        """폭이 0인 위치(예: 줄 끝)."""
        return cls(offset, offset, line, col, line, col)

    def merge(self, other: "Span") -> "Span":
        """두 범위를 모두 덮는 범위."""
        first = self if self.start <= other.start else other
        last = self if self.end >= other.end else other
        return Span(first.start, last.end, first.line, first.col, last.end_line, last.end_col)

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"


def _span():
    # 위치는 진단용이므로 ==, hash 에서 빠진다
    return field(default=None, compare=False, repr=False)


# ---- Value (태그드 variant) ----

@dataclass(frozen=True)
class CharacterLiteral:
    char: str
    span: Optional[Span] = _span()

@dataclass(frozen=True)
class CharacterClass:
    """[a-z0] 형태. items는 포함 범위 (lo, hi) 목록, 단일 문자는 lo == hi."""
    items: Tuple[Tuple[str, str], ...]
    span: Optional[Span] = _span()

    def __contains__(self, ch: str) -> bool:
        return any(lo <= ch <= hi for (lo, hi) in self.items)

@dataclass(frozen=True)
class DotPattern:
    """
    점자 셀 목록. cells의 각 원소는 한 셀의 점 번호(원문 순서).
    예: "123-1f" → ((1, 2, 3), (1, 15))
    """
    cells: Tuple[Tuple[int, ...], ...]
    span: Optional[Span] = _span()

    @property
    def masks(self) -> Tuple[int, ...]:
        """셀별 비트 패턴. 점 n → 1 << (n-1), 점 0(빈 셀)은 비트 없음."""
        out: List[int] = []
        for cell in self.cells:
            m = 0
            for d in cell:
                if d:
                    m |= 1 << (d - 1)
            out.append(m)
        return tuple(out)

    def __str__(self) -> str:
        return "-".join("".join(format(d, "x") for d in cell) for cell in self.cells)

@dataclass(frozen=True)
class Number:
    value: int
    span: Optional[Span] = _span()

@dataclass(frozen=True)
class Identifier:
    name: str
    span: Optional[Span] = _span()

@dataclass(frozen=True)
class StringLiteral:
    text: str
    span: Optional[Span] = _span()


Value = Union[CharacterLiteral, CharacterClass, DotPattern, Number, Identifier, StringLiteral]


# ---- Directive / Ruleset ----

@dataclass(frozen=True)
class Directive:
    """
    규칙 한 줄.
    - opcode    : 소문자 정규화된 opcode 이름
    - args      : 인자 Value 목록(선언된 shape 순서)
    - expression: multipart opcode의 test/action 트리(없으면 None)
    - prefixes  : noback / nofor / nocross
    - comment   : 줄 끝 '#' 주석(없으면 None)
    """
    opcode: str
    args: Tuple[Value, ...] = ()
    expression: Optional["TestAction"] = None
    prefixes: FrozenSet[str] = frozenset()
    span: Optional[Span] = _span()
    comment: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class Ruleset:
    """파일 순서가 곧 의미(뒤 규칙이 앞 규칙을 가릴 수 있음). 해석은 소비자 몫."""
    directives: Tuple[Directive, ...] = ()

    def __iter__(self) -> Iterator[Directive]:
        return iter(self.directives)

    def __len__(self) -> int:
        return len(self.directives)

    def __getitem__(self, idx: int) -> Directive:
        return self.directives[idx]

    def by_opcode(self, name: str) -> Tuple[Directive, ...]:
        key = name.lower()
        return tuple(d for d in self.directives if d.opcode == key)
