# louistab/lex/__init__.py
"""louistab 토크나이저: 논리 줄 하나를 토큰 스트림으로 자른다.

규칙
----
- 공백 연속이 토큰을 구분한다.
- 토큰 맨 앞의 '#'(따옴표 밖)는 주석 시작 → 줄의 나머지는 `comment`로 보관하고 버린다.
- "..." 토큰은 내부 공백을 보존하며 이스케이프는 `\\"`, `\\\\` 두 가지뿐.
  닫히지 않은 따옴표는 **여는 따옴표 위치**로 LexError.
- 토큰 종류는 참고용 분류이며, 받아들일지는 기본 문법(primitives)이 정한다.
- 식 모드(접두어 뒤 첫 토큰이 multipart opcode일 때, 그 뒤부터): '(' ')'는 붙어 있어도
  독립 토큰이고, 따옴표는 '(' 바로 뒤에서 열리고 ')' 바로 앞에서 닫힐 수 있다.

토큰 종류
---------
  word / quoted-string / dot-pattern / number / punctuation

API
---
- `Token(kind, text, value, span, start, end)`: 토큰 단위
- `LineLexer(comment_char, expression_opcodes, prefixes)`
    - `reset(line)` / `peek()` / `next()` / `tokenize(line)`
    - `comment` : 마지막으로 읽은 줄의 꼬리 주석(없으면 None)
- `split_operators(tokens)`: multipart 식용, '(' ')' 비교 연산자를 따로 떼어냄
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import regex as re

from ..grammar.ast import Span
from ..grammar.errors import LexError
from ..grammar.loader import LogicalLine

WORD = "word"
STRING = "quoted-string"
DOTS = "dot-pattern"
NUMBER = "number"
PUNCT = "punctuation"

_NUMBER_RE = re.compile(r"[0-9]+")
_DOTS_RE = re.compile(r"[0-9][0-9a-f]*(?:-[0-9a-f]+)*|[0-9a-f]+(?:-[0-9a-f]+)+")
_PUNCT_RE = re.compile(r"[\p{P}\p{S}]+")

# 비교 연산자는 긴 것부터
_OPERATOR_SPLIT_RE = re.compile(r"!=|<=|>=|[()=<>]|[^()=<>!]+|!")
OPERATORS = ("(", ")", "=", "!=", "<", "<=", ">", ">=")


def classify(text: str) -> str:
    if _NUMBER_RE.fullmatch(text):
        return NUMBER
    if _DOTS_RE.fullmatch(text):
        return DOTS
    if _PUNCT_RE.fullmatch(text):
        return PUNCT
    return WORD


# --------- Public datatypes ---------

@dataclass(frozen=True)
class Token:
    kind: str       # 위 다섯 종류 중 하나
    text: str       # 원문 lexeme(따옴표 포함)
    value: str      # quoted-string이면 따옴표/이스케이프를 푼 값, 아니면 text
    span: Span
    start: int      # 논리 줄 인덱스 [start, end)
    end: int
    source: Optional[LogicalLine] = field(default=None, compare=False, repr=False)

    def sub_span(self, i: int, j: int) -> Span:
        """text 안의 [i, j) 범위. 따옴표 토큰은 토큰 전체를 가리킨다."""
        if self.source is None or self.kind == STRING:
            return self.span
        return self.source.span(self.start + i, self.start + j)


# --------- Core implementation ---------

class LineLexer:
    """
    LineLexer
    =========
    논리 줄 하나를 읽는 렉서. 고정 크기 버퍼 없이 줄 길이만큼만 자란다.
    """
    def __init__(self, comment_char: str = "#", expression_opcodes: Iterable[str] = (),
                 prefixes: Iterable[str] = ()):
        self._comment_char = comment_char
        # 이 opcode 뒤로는 식 모드: '(' ')'는 언제나 독립 토큰, 따옴표는 괄호에 붙어도 된다
        self._expression_opcodes = frozenset(n.lower() for n in expression_opcodes)
        self._prefixes = frozenset(p.lower() for p in prefixes)
        self._head = True
        self._expr = False
        self._line: Optional[LogicalLine] = None
        self._text = ""
        self._i = 0
        self._peek_cache: Optional[Token] = None
        self.comment: Optional[str] = None

    # ---- Input binding ----
    def reset(self, line: LogicalLine) -> None:
        self._line = line
        self._text = line.text
        self._i = 0
        self._peek_cache = None
        self.comment = None
        self._head = True
        self._expr = False

    # ---- Public API ----
    def peek(self) -> Optional[Token]:
        if self._peek_cache is None:
            self._peek_cache = self._next_token()
        return self._peek_cache

    def next(self) -> Optional[Token]:
        if self._peek_cache is not None:
            t = self._peek_cache
            self._peek_cache = None
            return t
        return self._next_token()

    def tokenize(self, line: LogicalLine) -> List[Token]:
        self.reset(line)
        out: List[Token] = []
        while True:
            t = self.next()
            if t is None:
                return out
            out.append(t)

    # ---- Internals ----
    def _make(self, kind: str, start: int, end: int, value: Optional[str] = None) -> Token:
        text = self._text[start:end]
        return Token(kind=kind, text=text, value=text if value is None else value,
                     span=self._line.span(start, end), start=start, end=end, source=self._line)

    def _skip_ws(self) -> None:
        s = self._text
        while self._i < len(s) and s[self._i].isspace():
            self._i += 1

    def _quoted(self) -> Token:
        s = self._text
        start = self._i
        j = start + 1
        out: List[str] = []
        while j < len(s):
            ch = s[j]
            if ch == "\\":
                if j + 1 < len(s) and s[j + 1] in "\"\\":
                    out.append(s[j + 1])
                    j += 2
                    continue
                if j + 1 >= len(s):
                    break
                raise LexError(
                    f"Unknown escape '\\{s[j + 1]}' in quoted string",
                    self._line.span(j, j + 2), expected=('\\"', "\\\\"), found=s[j:j + 2],
                )
            if ch == '"':
                end = j + 1
                if end < len(s) and not s[end].isspace() and s[end] != self._comment_char \
                        and not (self._expr and s[end] == ")"):
                    raise LexError(
                        "Expected whitespace after closing quote",
                        self._line.span(end, end + 1), expected=("whitespace",), found=s[end],
                    )
                self._i = end
                return self._make(STRING, start, end, "".join(out))
            out.append(ch)
            j += 1
        raise LexError("Unterminated quoted string", self._line.span(start, start + 1),
                       expected=('"',), found=None)

    def _next_token(self) -> Optional[Token]:
        if self._line is None:
            return None
        self._skip_ws()
        s = self._text
        if self._i >= len(s):
            return None

        ch = s[self._i]
        # 1) 주석
        if self._comment_char and ch == self._comment_char:
            self.comment = s[self._i + 1:].strip()
            self._i = len(s)
            return None

        # 2) 식 모드의 괄호
        if self._expr and ch in "()":
            self._i += 1
            return self._make(PUNCT, self._i - 1, self._i)

        # 3) 따옴표 문자열
        if ch == '"':
            return self._after(self._quoted())

        # 4) 일반 토큰(공백까지, 식 모드면 괄호 앞까지)
        start = self._i
        while self._i < len(s) and not s[self._i].isspace():
            if self._expr and s[self._i] in "()":
                break
            self._i += 1
        return self._after(self._make(classify(s[start:self._i]), start, self._i))

    def _after(self, tok: Token) -> Token:
        """접두어 다음의 첫 토큰이 multipart opcode면 나머지를 식 모드로 읽는다."""
        if self._head:
            name = tok.text.lower() if tok.kind == WORD else None
            if name not in self._prefixes:
                self._head = False
                self._expr = name in self._expression_opcodes
        return tok


def tokenize(line: LogicalLine, comment_char: str = "#") -> List[Token]:
    """편의 함수."""
    return LineLexer(comment_char).tokenize(line)


def split_operators(tokens: List[Token]) -> List[Token]:
    """따옴표 밖 토큰에서 '(' ')' 와 비교 연산자를 독립 토큰으로 떼어낸다."""
    out: List[Token] = []
    for t in tokens:
        if t.kind == STRING or t.source is None or len(t.text) == 1:
            out.append(t)
            continue
        parts = list(_OPERATOR_SPLIT_RE.finditer(t.text))
        if len(parts) == 1:
            out.append(t)
            continue
        for m in parts:
            piece = m.group(0)
            kind = PUNCT if piece in OPERATORS else classify(piece)
            start = t.start + m.start()
            end = t.start + m.end()
            out.append(Token(kind=kind, text=piece, value=piece, span=t.source.span(start, end),
                             start=start, end=end, source=t.source))
    return out
