"""louistab 규칙 줄 파서 (opcode 문법)
- [접두어]* opcode 인자*        접두어: noback / nofor / nocross
- opcode는 대소문자 무시, 설정의 opcode 표(shape)에서 찾는다
- 인자는 shape의 슬롯 순서대로 기본 문법(primitives)에 맡긴다
- multipart opcode는 나머지 토큰 전부를 test/action 식 문법에 넘긴다

오류
- 모르는 opcode           → UnknownOpcodeError(토큰 원문 그대로)
- 인자 개수/종류/범위      → ArgumentError(opcode, position, expected_kind)
- 기본 문법의 ValueParseError는 여기서 ArgumentError로 바꿔 던진다(원인은 __cause__)
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Set, Tuple

from .ast import CharacterLiteral, Directive, Identifier, Number, Span, StringLiteral, Value
from .cursor import END_OF_LINE, Cursor
from .errors import ArgumentError, UnknownOpcodeError, ValueParseError
from .loader import LogicalLine
from .opcodes import PREFIXES, ArgSpec, OpcodeShape
from .primitives import accepted_kinds, choose
from ..config import DEFAULT_CONFIG, ParserConfig
from ..lex import STRING, WORD, Token, split_operators
from ..multipart.parser import parse_multipart


# 함께 쓸 수 없는 접두어 쌍
_EXCLUSIVE = frozenset({"noback", "nofor"})


def _default_value(spec: ArgSpec, span: Span) -> Value:
    """생략된 슬롯의 기본값. 위치는 opcode 토큰을 가리킨다."""
    kind = spec.kinds[0]
    raw = spec.default
    if kind == "character":
        return CharacterLiteral(raw, span=span)
    if kind == "number":
        return Number(int(raw), span=span)
    if kind == "name":
        return Identifier(raw, span=span)
    return StringLiteral(raw, span=span)


# ---- 접두어 ----

def _parse_prefixes(cur: Cursor) -> Tuple[List[Token], Cursor]:
    seen: Set[str] = set()
    toks: List[Token] = []
    while True:
        t = cur.peek()
        if t is None or t.kind != WORD or t.text.lower() not in PREFIXES:
            return toks, cur
        name = t.text.lower()
        if name in seen:
            raise ArgumentError(f"Duplicate prefix {t.text!r}", t.span,
                                opcode=name, position=0, expected_kind="opcode",
                                expected=("opcode",), found=t.text)
        if name in _EXCLUSIVE and (seen & _EXCLUSIVE):
            raise ArgumentError("Prefixes 'noback' and 'nofor' cannot be combined", t.span,
                                opcode=name, position=0, expected_kind="opcode",
                                expected=("opcode",), found=t.text)
        seen.add(name)
        toks.append(t)
        cur = cur.advance()


def _lookup_opcode(cur: Cursor, config: ParserConfig, prefixes: List[Token]) -> OpcodeShape:
    t = cur.peek()
    if t is None:
        opcode = prefixes[-1].text.lower() if prefixes else ""
        raise ArgumentError(f"Expected opcode, found {END_OF_LINE}", cur.eol,
                            opcode=opcode, position=0, expected_kind="opcode",
                            expected=("opcode",), found=None)
    shape = config.opcodes.get(t.text.lower()) if t.kind != STRING else None
    if shape is None:
        raise UnknownOpcodeError(t.text, t.span, expected=("opcode",))
    if prefixes and not shape.prefixable:
        p = prefixes[0]
        raise ArgumentError(f"Opcode {shape.name!r} does not accept prefix {p.text!r}", p.span,
                            opcode=shape.name, position=0, expected_kind="opcode",
                            expected=("opcode",), found=p.text)
    return shape


# ---- 인자 ----

def _missing(shape: OpcodeShape, spec: ArgSpec, position: int, cur: Cursor) -> ArgumentError:
    return ArgumentError(
        f"{shape.name}: missing argument {position} ({spec.label}), found {END_OF_LINE}",
        cur.eol, opcode=shape.name, position=position, expected_kind=spec.label,
        expected=accepted_kinds(spec.kinds), found=None,
    )


def _parse_arg(shape: OpcodeShape, spec: ArgSpec, position: int, cur: Cursor,
               config: ParserConfig) -> Value:
    tok = cur.peek()
    try:
        value = choose(tok, spec.kinds, config)
    except ValueParseError as e:
        raise ArgumentError(
            f"{shape.name}: argument {position} must be {spec.label}: {e.message}", e.span,
            opcode=shape.name, position=position, expected_kind=spec.label,
            expected=e.expected, found=e.found,
        ) from e

    if isinstance(value, Number):
        lo, hi = spec.min_value, spec.max_value
        if (lo is not None and value.value < lo) or (hi is not None and value.value > hi):
            bounds = f"{'' if lo is None else lo}..{'' if hi is None else hi}"
            raise ArgumentError(
                f"{shape.name}: argument {position} out of range {bounds}, found {value.value}",
                tok.span, opcode=shape.name, position=position, expected_kind=spec.label,
                expected=accepted_kinds(spec.kinds), found=tok.text,
            )
    return value


def _parse_args(shape: OpcodeShape, opcode_tok: Token, cur: Cursor,
                config: ParserConfig) -> Tuple[Tuple[Value, ...], Cursor]:
    out: List[Value] = []
    specs: Sequence[ArgSpec] = shape.args
    for idx, spec in enumerate(specs):
        position = idx + 1
        later_required = sum(1 for a in specs[idx + 1:] if not a.optional)

        if spec.optional and cur.remaining <= later_required:
            # 남은 토큰은 뒤쪽 필수 슬롯 몫
            if spec.default is not None:
                out.append(_default_value(spec, opcode_tok.span))
            continue

        if cur.at_end:
            raise _missing(shape, spec, position, cur)

        if spec.repeat:
            k = 0
            while not cur.at_end:
                out.append(_parse_arg(shape, spec, position + k, cur, config))
                cur = cur.advance()
                k += 1
            continue

        out.append(_parse_arg(shape, spec, position, cur, config))
        cur = cur.advance()

    if not cur.at_end:
        extra = cur.peek()
        position = len(out) + 1
        raise ArgumentError(
            f"{shape.name}: unexpected extra argument {extra.text!r}", extra.span,
            opcode=shape.name, position=position, expected_kind=END_OF_LINE,
            expected=(END_OF_LINE,), found=extra.text,
        )
    return tuple(out), cur


# ---- entry ----

def parse_directive(tokens: Sequence[Token], line: LogicalLine,
                    config: Optional[ParserConfig] = None,
                    comment: Optional[str] = None) -> Directive:
    """
    논리 줄 하나의 토큰 → Directive.
    tokens는 비어 있지 않아야 한다(빈 줄/주석 줄 건너뛰기는 조립기 몫).
    """
    if config is None:
        config = DEFAULT_CONFIG

    cur = Cursor(tuple(tokens), 0, line.end_span())
    prefixes, cur = _parse_prefixes(cur)
    shape = _lookup_opcode(cur, config, prefixes)
    opcode_tok = cur.peek()
    cur = cur.advance()

    args: Tuple[Value, ...] = ()
    expression = None
    if shape.multipart:
        # 식 문법은 '(' ')' 와 비교 연산자를 독립 토큰으로 본다
        body = Cursor(tuple(split_operators(list(cur.tokens[cur.pos:]))), 0, cur.eol)
        expression = parse_multipart(body, config, opcode=shape.name)
    else:
        args, cur = _parse_args(shape, opcode_tok, cur, config)

    first = tokens[0].span
    last = tokens[-1].span
    return Directive(
        opcode=shape.name,
        args=args,
        expression=expression,
        prefixes=frozenset(p.text.lower() for p in prefixes),
        span=first.merge(last),
        comment=comment,
    )
