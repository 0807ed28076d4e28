# louistab/grammar/primitives.py
"""기본 값 문법: 토큰 하나를 Value 하나로.

각 함수는 `(tok, config) -> Value`이고, 실패하면 ValueParseError를 던진다.
오류 위치는 토큰 시작이 아니라 **토큰 안에서 가장 멀리 읽은 문자**다.

  dots       : 123-1f            → DotPattern(((1, 2, 3), (1, 15)))
  character  : a, \\s, \\x0041   → CharacterLiteral
  characters : abc, "a b"        → StringLiteral
  class      : [a-z_]            → CharacterClass
  number     : 42                → Number (범위 검사는 호출자 몫)
  name       : vowels            → Identifier
  filename   : en-us-g1.ctb      → StringLiteral
  string     : "a b"             → StringLiteral (따옴표 토큰만)

테이블 이스케이프: \\\\ \\s \\t \\n \\r \\f \\v \\e \\xHHHH \\yHHHHH \\zHHHHHHHH
"""

from __future__ import annotations
from typing import Callable, Dict, List, Sequence, Tuple, TYPE_CHECKING

import regex as re

from .ast import (
    CharacterClass, CharacterLiteral, DotPattern, Identifier, Number, StringLiteral, Value,
)
from .errors import ValueParseError
from ..lex import DOTS, NUMBER, PUNCT, STRING, WORD, Token

if TYPE_CHECKING:
    from ..config import ParserConfig

IDENT_RE = re.compile(r"\p{L}[\p{L}\p{N}_]*")
_HEX_RE = re.compile(r"[0-9a-fA-F]+")

_SIMPLE_ESCAPES = {
    "\\": "\\",
    "s": " ",
    "t": "\t",
    "n": "\n",
    "r": "\r",
    "f": "\f",
    "v": "\v",
    "e": "\x1b",
}
_HEX_ESCAPES = {"x": 4, "y": 5, "z": 8}

ALL_KINDS = (WORD, STRING, DOTS, NUMBER, PUNCT)


def _fail(tok: Token, i: int, j: int, what: str, kinds: Sequence[str] = ()) -> ValueParseError:
    found = tok.text[i:j] if j > i else tok.text
    span = tok.sub_span(i, j) if tok.text else tok.span
    return ValueParseError(f"Expected {what}, found {found!r}", span,
                           expected=kinds or (what,), found=tok.text)


def _require_kind(tok: Token, kinds: Sequence[str], what: str,
                  report: Sequence[str] = ()) -> None:
    """report: 오류에 expected로 실을 종류(생략하면 kinds)."""
    if tok.kind not in kinds:
        raise ValueParseError(f"Expected {what}, found {tok.kind} {tok.text!r}", tok.span,
                              expected=report or kinds, found=tok.text)


def decode_escapes(tok: Token, extra: str = "") -> List[Tuple[str, int, int]]:
    """
    토큰 원문의 테이블 이스케이프를 풀어 (문자, 시작, 끝) 목록으로 돌려준다.
    - extra: 추가로 허용할 단일 문자 이스케이프(예: 문자 클래스의 ']', '-')
    - quoted-string 토큰은 렉서가 이미 풀었으므로 값 그대로 쓴다.
    """
    if tok.kind == STRING:
        return [(ch, 0, len(tok.text)) for ch in tok.value]
    s = tok.text
    out: List[Tuple[str, int, int]] = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch != "\\":
            out.append((ch, i, i + 1))
            i += 1
            continue
        if i + 1 >= len(s):
            raise _fail(tok, i, i + 1, "escape sequence")
        code = s[i + 1]
        if code in _SIMPLE_ESCAPES:
            out.append((_SIMPLE_ESCAPES[code], i, i + 2))
            i += 2
        elif code in extra:
            out.append((code, i, i + 2))
            i += 2
        elif code in _HEX_ESCAPES:
            width = _HEX_ESCAPES[code]
            digits = s[i + 2:i + 2 + width]
            if len(digits) != width or not _HEX_RE.fullmatch(digits):
                raise _fail(tok, i, i + 2 + width, f"{width} hex digits after '\\{code}'")
            cp = int(digits, 16)
            if cp > 0x10FFFF:
                raise _fail(tok, i, i + 2 + width, "code point up to 10FFFF")
            out.append((chr(cp), i, i + 2 + width))
            i += 2 + width
        else:
            raise _fail(tok, i, i + 2, "escape sequence")
    return out


# --------- primitives ---------

def parse_dots(tok: Token, config: "ParserConfig") -> DotPattern:
    """'-'로 구분된 셀. 각 셀은 점 알파벳 문자들이고, 한 셀 안의 중복은 거부."""
    _require_kind(tok, (DOTS, NUMBER, WORD), "dots", report=(DOTS, NUMBER))
    alphabet = config.dot_alphabet
    s = tok.text
    cells: List[Tuple[int, ...]] = []
    cell: List[int] = []
    cell_start = 0
    for i, ch in enumerate(s):
        if ch == "-":
            if not cell:
                raise _fail(tok, i, i + 1, "dot number", (DOTS, NUMBER))
            cells.append(tuple(cell))
            cell = []
            cell_start = i + 1
            continue
        if ch not in alphabet:
            raise _fail(tok, i, i + 1, "dot number", (DOTS, NUMBER))
        dot = int(ch, 16)
        if dot in cell:
            raise ValueParseError(
                f"Duplicate dot {ch!r} in cell {s[cell_start:i + 1]!r}", tok.sub_span(i, i + 1),
                expected=(DOTS,), found=tok.text,
            )
        cell.append(dot)
    if not cell:
        raise _fail(tok, len(s), len(s), "dot number", (DOTS, NUMBER))
    cells.append(tuple(cell))
    return DotPattern(tuple(cells), span=tok.span)


def parse_characters(tok: Token, config: "ParserConfig") -> StringLiteral:
    decoded = decode_escapes(tok)
    if not decoded:
        raise _fail(tok, 0, 0, "at least one character", ALL_KINDS)
    return StringLiteral("".join(ch for (ch, _i, _j) in decoded), span=tok.span)


def parse_character(tok: Token, config: "ParserConfig") -> CharacterLiteral:
    decoded = decode_escapes(tok)
    if len(decoded) != 1:
        if not decoded:
            raise _fail(tok, 0, 0, "a single character", ALL_KINDS)
        _ch, i, _j = decoded[1]
        raise ValueParseError(
            f"Expected a single character, found {tok.text!r}", tok.sub_span(i, len(tok.text)),
            expected=("character",), found=tok.text,
        )
    return CharacterLiteral(decoded[0][0], span=tok.span)


def parse_char_class(tok: Token, config: "ParserConfig") -> CharacterClass:
    """'[' item+ ']' , item := char | char '-' char"""
    _require_kind(tok, (WORD, PUNCT), "character class")
    s = tok.text
    if not s.startswith("["):
        raise _fail(tok, 0, 1, "'['", (WORD, PUNCT))
    body = Token(kind=tok.kind, text=s[1:], value=s[1:], span=tok.span,
                 start=tok.start + 1, end=tok.end, source=tok.source)
    chars = decode_escapes(body, extra="]-[")

    def raw(k: int) -> str:
        _ch, i, j = chars[k]
        return body.text[i:j]

    # 닫는 ']'는 이스케이프되지 않은 마지막 문자여야 한다
    if not chars or raw(-1) != "]":
        raise _fail(tok, len(s), len(s), "']'", (WORD, PUNCT))
    chars = chars[:-1]
    if not chars:
        raise _fail(tok, 1, 2, "at least one class item", (WORD, PUNCT))

    items: List[Tuple[str, str]] = []
    k = 0
    while k < len(chars):
        lo, i, j = chars[k]
        if raw(k) in ("]", "["):
            raise _fail(body, i, j, f"escaped {raw(k)!r} inside class", (WORD, PUNCT))
        if k + 2 < len(chars) and raw(k + 1) == "-":
            hi, _i2, j2 = chars[k + 2]
            if hi < lo:
                raise ValueParseError(
                    f"Descending range {lo!r}-{hi!r} in character class", body.sub_span(i, j2),
                    expected=("character class",), found=tok.text,
                )
            items.append((lo, hi))
            k += 3
            continue
        items.append((lo, lo))
        k += 1
    return CharacterClass(tuple(items), span=tok.span)


def parse_number(tok: Token, config: "ParserConfig") -> Number:
    _require_kind(tok, (NUMBER,), "number")
    return Number(int(tok.text), span=tok.span)


def parse_identifier(tok: Token, config: "ParserConfig") -> Identifier:
    _require_kind(tok, (WORD,), "name")
    m = IDENT_RE.match(tok.text)
    if m is None:
        raise _fail(tok, 0, 1, "name", (WORD,))
    if m.end() != len(tok.text):
        raise _fail(tok, m.end(), m.end() + 1, "name character", (WORD,))
    return Identifier(tok.text, span=tok.span)


def parse_class_reference(tok: Token, config: "ParserConfig") -> Identifier:
    """multipart 식의 '_name' 클래스 참조."""
    _require_kind(tok, (WORD,), "class reference")
    if not tok.text.startswith("_"):
        raise _fail(tok, 0, 1, "'_' before class name", (WORD,))
    m = IDENT_RE.match(tok.text, 1)
    if m is None:
        raise _fail(tok, 1, 2, "class name", (WORD,))
    if m.end() != len(tok.text):
        raise _fail(tok, m.end(), m.end() + 1, "class name character", (WORD,))
    return Identifier(tok.text[1:], span=tok.span)


def parse_filename(tok: Token, config: "ParserConfig") -> StringLiteral:
    _require_kind(tok, ALL_KINDS, "filename")
    return StringLiteral(tok.value, span=tok.span)


def parse_string(tok: Token, config: "ParserConfig") -> StringLiteral:
    """따옴표 문자열만. 값은 렉서가 푼 그대로(빈 문자열 허용)."""
    _require_kind(tok, (STRING,), "quoted string")
    return StringLiteral(tok.value, span=tok.span)


PRIMITIVES: Dict[str, Callable[[Token, "ParserConfig"], Value]] = {
    "dots": parse_dots,
    "character": parse_character,
    "characters": parse_characters,
    "class": parse_char_class,
    "number": parse_number,
    "name": parse_identifier,
    "filename": parse_filename,
    "string": parse_string,
}


def choose(tok: Token, kinds: Sequence[str], config: "ParserConfig") -> Value:
    """
    순서 있는 선택. 처음으로 성공한 것을 채택한다.
    전부 실패하면 가장 멀리 간 실패를 던지고, 같은 위치의 실패들은 expected를 합친다.
    """
    best: ValueParseError = None  # type: ignore[assignment]
    merged: List[str] = []
    for kind in kinds:
        try:
            return PRIMITIVES[kind](tok, config)
        except ValueParseError as e:
            if best is None or e.span.start > best.span.start:
                best = e
                merged = list(e.expected)
            elif e.span.start == best.span.start:
                merged.extend(e.expected)
    if len(kinds) > 1:
        raise ValueParseError(best.message, best.span, expected=merged, found=best.found) from best
    raise best


# 인자 종류 → 그 자리에서 받아들일 수 있는 토큰 종류(진단용 expected 집합)
ACCEPTS: Dict[str, Tuple[str, ...]] = {
    "dots": (DOTS, NUMBER),
    "character": ALL_KINDS,
    "characters": ALL_KINDS,
    "class": (WORD, PUNCT),
    "number": (NUMBER,),
    "name": (WORD,),
    "filename": ALL_KINDS,
    "string": (STRING,),
}


def accepted_kinds(kinds: Sequence[str]) -> Tuple[str, ...]:
    out: List[str] = []
    for k in kinds:
        for t in ACCEPTS[k]:
            if t not in out:
                out.append(t)
    return tuple(out)
