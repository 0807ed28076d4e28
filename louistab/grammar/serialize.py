# louistab/grammar/serialize.py
"""
구조 → 테이블 원문.
parse → format → parse 가 같은 Directive(위치 제외)를 돌려주도록 쓴다.
원문 그대로 복원하지는 않는다(공백/이스케이프 표기는 정규화됨).

- 문자/문자열 인자 : 공백·제어문자는 테이블 이스케이프(\\s, \\t, \\xHHHH ...)
- 맨 앞의 '#' '"' '[' 는 \\xHHHH 로(주석/따옴표/문자 클래스로 읽히지 않게)
- 식 안의 문자열 : 항상 따옴표, 점 패턴은 '@' 접두
- 괄호는 우선순위(or < and < 나열 < not < 원자)에 필요한 곳에만
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from .ast import (
    CharacterClass, CharacterLiteral, Directive, DotPattern, Identifier, Number, Ruleset,
    StringLiteral, Value,
)
from .opcodes import PREFIXES, OpcodeShape
from ..config import DEFAULT_CONFIG, ParserConfig
from ..multipart.ast import (
    ActionStep, ClassReference, Comparator, Literal, LogicalCombinator, Node, Sequence,
    TestAction,
)

_ESCAPE_OF = {
    "\\": "\\\\",
    " ": "\\s",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
    "\v": "\\v",
    "\x1b": "\\e",
}

# 식 안에서 토큰을 쪼개는 문자(lex.split_operators)
_OPERATOR_CHARS = "()=<>!"

_PREC_OR, _PREC_AND, _PREC_SEQ, _PREC_NOT, _PREC_ATOM = 1, 2, 3, 4, 5


def _hex(ch: str) -> str:
    cp = ord(ch)
    if cp <= 0xFFFF:
        return "\\x%04x" % cp
    if cp <= 0xFFFFF:
        return "\\y%05x" % cp
    return "\\z%08x" % cp


def _escape(text: str, *, lead: str = "", special: str = "", hexify: str = "") -> str:
    """
    lead    : 맨 앞에 오면 \\x로 바꿀 문자
    special : 역슬래시 하나로 이스케이프할 문자(문자 클래스의 ']' 등)
    hexify  : 어디서든 \\x로 바꿀 문자
    """
    out: List[str] = []
    for i, ch in enumerate(text):
        if ch in _ESCAPE_OF:
            out.append(_ESCAPE_OF[ch])
        elif ch in special:
            out.append("\\" + ch)
        elif (i == 0 and ch in lead) or ch in hexify or ch.isspace() or not ch.isprintable():
            out.append(_hex(ch))
        else:
            out.append(ch)
    return "".join(out)


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _lead(config: ParserConfig) -> str:
    return config.comment_char + '"['


# ---- Value ----

def format_value(value: Value, kinds: Sequence[str] = (), config: Optional[ParserConfig] = None) -> str:
    """
    인자 하나. kinds는 그 인자가 들어갈 슬롯의 종류(filename은 이스케이프를 풀지 않으므로 그대로 쓴다).
    """
    config = config or DEFAULT_CONFIG
    if isinstance(value, CharacterLiteral):
        return _escape(value.char, lead=_lead(config))
    if isinstance(value, StringLiteral):
        if "filename" in kinds and "characters" not in kinds:
            if any(ch.isspace() for ch in value.text) or value.text.startswith(('"', config.comment_char)):
                return _quote(value.text)
            return value.text
        return _escape(value.text, lead=_lead(config))
    if isinstance(value, CharacterClass):
        parts = []
        for lo, hi in value.items:
            parts.append(_escape(lo, special="]-["))
            if hi != lo:
                parts.append("-" + _escape(hi, special="]-["))
        return "[" + "".join(parts) + "]"
    if isinstance(value, DotPattern):
        return str(value)
    if isinstance(value, Number):
        return str(value.value)
    if isinstance(value, Identifier):
        return value.name
    raise TypeError(f"Not a table value: {value!r}")


# ---- Expression ----

def _prec(node: Node) -> int:
    if isinstance(node, LogicalCombinator):
        return {"or": _PREC_OR, "and": _PREC_AND, "not": _PREC_NOT}[node.op]
    if isinstance(node, Sequence):
        return _PREC_SEQ
    return _PREC_ATOM


def _wrap(node: Node, need: int, config: ParserConfig) -> str:
    text = format_expression(node, config)
    return f"({text})" if _prec(node) < need else text


def _operand(node: Node, config: ParserConfig) -> str:
    if isinstance(node, ClassReference):
        return "_" + node.name
    value = node.value
    if isinstance(value, DotPattern):
        return "@" + str(value)
    if isinstance(value, Number):
        return str(value.value)
    if isinstance(value, StringLiteral):
        if "\n" in value.text or "\r" in value.text:
            # 따옴표 안에는 개행을 쓸 수 없다 → 이스케이프한 맨 단어로
            return _escape(value.text, lead="_@" + _lead(config), hexify=_OPERATOR_CHARS)
        return _quote(value.text)
    raise TypeError(f"Not an expression operand: {node!r}")


def format_expression(node: Node, config: Optional[ParserConfig] = None) -> str:
    config = config or DEFAULT_CONFIG
    if isinstance(node, TestAction):
        steps = " ".join(format_expression(s, config) for s in node.actions)
        test = format_expression(node.test, config)
        return f"{config.test_keyword} {test} {config.action_keyword} {steps}"
    if isinstance(node, (ClassReference, Literal)):
        return _operand(node, config)
    if isinstance(node, Comparator):
        return f"{_operand(node.left, config)} {node.op} {_operand(node.right, config)}"
    if isinstance(node, LogicalCombinator):
        if node.op == "not":
            return "not " + _wrap(node.operands[0], _PREC_ATOM, config)
        need = _prec(node)
        return f" {node.op} ".join(_wrap(o, need, config) for o in node.operands)
    if isinstance(node, Sequence):
        return " ".join(_wrap(i, _PREC_SEQ, config) for i in node.items)
    if isinstance(node, ActionStep):
        return " ".join([node.name] + [_operand(o, config) for o in node.operands])
    raise TypeError(f"Not an expression node: {node!r}")


# ---- Directive / Ruleset ----

def _slot_kinds(shape: OpcodeShape, n: int) -> List[Tuple[str, ...]]:
    """인자 n개가 어느 슬롯에 들어갔는지(파서의 슬롯 채우기 규칙과 같음)."""
    out: List[Tuple[str, ...]] = []
    left = n
    for idx, spec in enumerate(shape.args):
        later = sum(1 for a in shape.args[idx + 1:] if not a.optional)
        if spec.optional and left <= later and spec.default is None:
            continue
        if spec.repeat:
            out.extend([spec.kinds] * left)
            left = 0
            break
        out.append(spec.kinds)
        left -= 1
    return out


def format_directive(d: Directive, config: Optional[ParserConfig] = None) -> str:
    config = config or DEFAULT_CONFIG
    parts = [p for p in PREFIXES if p in d.prefixes]
    parts.append(d.opcode)
    if d.expression is not None:
        parts.append(format_expression(d.expression, config))
    else:
        shape = config.opcodes.get(d.opcode)
        kinds = _slot_kinds(shape, len(d.args)) if shape is not None else []
        for i, value in enumerate(d.args):
            parts.append(format_value(value, kinds[i] if i < len(kinds) else (), config))
    text = " ".join(parts)
    if d.comment:
        text += f" {config.comment_char} {d.comment}"
    return text


def format_ruleset(rs: Ruleset, config: Optional[ParserConfig] = None) -> str:
    return "".join(format_directive(d, config) + "\n" for d in rs)
