# louistab/grammar/opcodes.py
"""
opcode 이름 → 인자 shape 표. 문법 코드가 아니라 **데이터**다.

shape 문자열
------------
공백으로 구분된 인자 슬롯 목록. 슬롯 하나는

    kind[|kind...][?|+][[lo..hi]]

  - kind      : dots / character / characters / class / number / name / filename
  - a|b       : 순서 있는 선택(앞의 것부터 시도)
  - ?         : 생략 가능(남은 토큰이 뒤쪽 필수 슬롯보다 많을 때만 채움)
  - +         : 1개 이상 반복(마지막 슬롯만)
  - [lo..hi]  : number 범위(포함)

예) "character? dots", "dots name+", "name number[1..255]", "name class|characters"
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import regex as re

from .primitives import PRIMITIVES

PREFIXES = ("noback", "nofor", "nocross")
MULTIPART = "multipart"

_SLOT_RE = re.compile(
    r"(?P<kinds>[a-z]+(?:\|[a-z]+)*)(?P<mod>[?+])?(?:\[(?P<lo>[0-9]+)\.\.(?P<hi>[0-9]+)\])?"
)


@dataclass(frozen=True)
class ArgSpec:
    kinds: Tuple[str, ...]
    optional: bool = False
    repeat: bool = False
    default: Optional[str] = None        # 생략 시 채울 원문(예: space의 ' ')
    min_value: Optional[int] = None
    max_value: Optional[int] = None

    @property
    def label(self) -> str:
        return "|".join(self.kinds)


@dataclass(frozen=True)
class OpcodeShape:
    name: str
    args: Tuple[ArgSpec, ...] = ()
    multipart: bool = False
    prefixable: bool = False

    @property
    def required(self) -> int:
        return sum(1 for a in self.args if not a.optional)


def parse_shape(name: str, shape: str, *, prefixable: bool = False,
                defaults: Optional[Mapping[int, str]] = None) -> OpcodeShape:
    """shape 문자열 하나를 OpcodeShape로."""
    shape = shape.strip()
    if shape == MULTIPART:
        return OpcodeShape(name=name, multipart=True, prefixable=prefixable)
    slots = shape.split()
    args = []
    for idx, slot in enumerate(slots):
        m = _SLOT_RE.fullmatch(slot)
        if m is None:
            raise ValueError(f"opcode {name!r}: bad argument slot {slot!r}")
        kinds = tuple(m.group("kinds").split("|"))
        for k in kinds:
            if k not in PRIMITIVES:
                raise ValueError(f"opcode {name!r}: unknown argument kind {k!r}")
        mod = m.group("mod")
        if mod == "+" and idx != len(slots) - 1:
            raise ValueError(f"opcode {name!r}: only the last slot may repeat")
        lo, hi = m.group("lo"), m.group("hi")
        args.append(ArgSpec(
            kinds=kinds,
            optional=(mod == "?"),
            repeat=(mod == "+"),
            default=(defaults or {}).get(idx),
            min_value=int(lo) if lo is not None else None,
            max_value=int(hi) if hi is not None else None,
        ))
    return OpcodeShape(name=name, args=tuple(args), prefixable=prefixable)


# ---- 기본 어휘 ----

_CHARDEFS = ("punctuation", "digit", "letter", "lowercase", "uppercase", "litdigit", "sign", "math")
_TRANSLATION = ("always", "word", "begword", "midword", "endword", "partword", "joinword",
                "lowword", "largesign", "syllable", "repeated", "begnum", "midnum", "endnum")
_INDICATORS = ("numsign", "capsletter", "begcapsword", "endcapsword", "letsign")
_MULTIPASS = ("context", "correct", "pass2", "pass3", "pass4")


def _builtin() -> Dict[str, OpcodeShape]:
    table: Dict[str, OpcodeShape] = {}

    def add(name: str, shape: str, **kw) -> None:
        table[name] = parse_shape(name, shape, **kw)

    # 문자 정의
    add("space", "character? dots", defaults={0: " "})
    for name in _CHARDEFS:
        add(name, "character dots")
    add("display", "characters dots", prefixable=True)
    add("undefined", "dots")
    add("include", "filename")

    # 표시 기호
    for name in _INDICATORS:
        add(name, "dots")
    add("noletsign", "characters")

    # 하이픈
    add("hyphen", "character dots")

    # 번역 규칙
    for name in _TRANSLATION:
        add(name, "characters dots", prefixable=True)
    for name in ("contraction", "nocont", "compbrl", "literal"):
        add(name, "characters", prefixable=True)
    add("replace", "characters characters?", prefixable=True)

    # 속성 / 클래스
    add("class", "name class|characters")
    add("attribute", "name class|characters")
    add("multind", "dots name+", prefixable=True)

    # 강조
    add("emphclass", "name")
    add("begemph", "name dots")
    add("endemph", "name dots")
    add("lenemphphrase", "name number[1..255]")

    # multipart(test/action)
    for name in _MULTIPASS:
        add(name, MULTIPART, prefixable=True)
    return table


DEFAULT_OPCODES: Mapping[str, OpcodeShape] = MappingProxyType(_builtin())


def shapes_from_mapping(data: Mapping[str, str]) -> Dict[str, OpcodeShape]:
    """설정 파일의 {name: shape} 를 OpcodeShape 사전으로. 이름은 소문자화."""
    out: Dict[str, OpcodeShape] = {}
    for raw_name, shape in data.items():
        name = raw_name.lower()
        prefixable = False
        if shape.startswith("prefixable "):
            prefixable = True
            shape = shape[len("prefixable "):]
        out[name] = parse_shape(name, shape, prefixable=prefixable)
    return out
