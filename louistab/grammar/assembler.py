# louistab/grammar/assembler.py
"""
테이블 조립기
- 물리 줄 → (줄 이음) 논리 줄 → 토큰 → Directive → Ruleset
- 첫 오류에서 멈춘다(부분 Ruleset은 만들지 않음)
- 빈 줄 / 주석 줄은 Directive를 만들지 않는다
- collect_errors: 호출자 쪽 복구 정책. 논리 줄마다 문법을 다시 불러 모든 오류를 모은다
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from .ast import Directive, Ruleset
from .errors import ParseError
from .loader import LogicalLine, iter_physical_lines, join_lines
from .opcodes import PREFIXES
from .parser import parse_directive
from ..config import DEFAULT_CONFIG, ParserConfig
from ..lex import LineLexer

logger = logging.getLogger(__name__)


def make_lexer(config: ParserConfig) -> LineLexer:
    """config에 맞춘 렉서(multipart opcode 뒤는 식 모드)."""
    return LineLexer(config.comment_char, config.multipart_opcodes, PREFIXES)


def _parse_logical(ll: LogicalLine, lexer: LineLexer, config: ParserConfig) -> Optional[Directive]:
    tokens = lexer.tokenize(ll)
    if not tokens:
        return None
    return parse_directive(tokens, ll, config, comment=lexer.comment)


def assemble(lines: Iterable[str], config: Optional[ParserConfig] = None) -> Ruleset:
    """물리 줄들(개행 포함 가능) → Ruleset. 실패하면 첫 ParseError를 그대로 던진다."""
    config = config or DEFAULT_CONFIG
    lexer = make_lexer(config)
    out: List[Directive] = []
    for ll in join_lines(lines, config.continuation_marker, config.comment_char):
        d = _parse_logical(ll, lexer, config)
        if d is not None:
            out.append(d)
    logger.debug("Assembled %d directives", len(out))
    return Ruleset(tuple(out))


def parse_table(text: str, config: Optional[ParserConfig] = None) -> Ruleset:
    """테이블 원문 전체 → Ruleset."""
    return assemble(iter_physical_lines(text), config)


def parse_line(text: str, config: Optional[ParserConfig] = None, line: int = 1) -> Optional[Directive]:
    """
    물리 줄 하나 → Directive (빈 줄/주석 줄이면 None).
    line: 진단에 쓸 줄 번호(오프셋은 이 줄의 시작을 0으로 본다)
    """
    config = config or DEFAULT_CONFIG
    body = text[:-1] if text.endswith("\n") else text
    if "\n" in body:
        raise ValueError("parse_line expects a single line; use parse_table for more")
    ll = LogicalLine(body.rstrip("\r"), ((0, line, 1, 0),))
    return _parse_logical(ll, make_lexer(config), config)


def collect_errors(text: str, config: Optional[ParserConfig] = None) -> List[ParseError]:
    """모든 논리 줄을 따로 파싱해 오류 목록을 돌려준다(오류 없으면 빈 목록)."""
    config = config or DEFAULT_CONFIG
    lexer = make_lexer(config)
    errors: List[ParseError] = []
    lines = join_lines(iter_physical_lines(text), config.continuation_marker, config.comment_char)
    try:
        for ll in lines:
            try:
                _parse_logical(ll, lexer, config)
            except ParseError as e:
                errors.append(e)
    except ParseError as e:
        # 줄 이음 오류는 입력 끝에서만 난다
        errors.append(e)
    logger.debug("Collected %d errors", len(errors))
    return errors
