# louistab/cli.py
"""louistab – 점자 테이블 파서 CLI

사용 예)
    $ louistab check tables/en-us-g1.ctb -D
    $ louistab check tables/broken.ctb --keep-going
    $ louistab lex --text 'context test _c1 a actions pass2'
    $ louistab dump tables/en-us-g1.ctb --json

기능
----
- check : 테이블을 파싱해 오류 여부 확인(--keep-going이면 모든 줄의 오류를 모아 출력)
- lex   : 논리 줄 단위 토큰 목록 출력
- dump  : 파싱 결과를 정규화된 테이블 원문 또는 JSON으로 출력

종료 코드: 성공 0, 오류 2.
디버그 모드(-D/--debug)를 켜면 단계별 요약과 logging DEBUG 기록을 stderr로 출력합니다.
"""

from __future__ import annotations
import argparse
import dataclasses
import json
import logging
import sys
from typing import Any, Optional

from .config import DEFAULT_CONFIG, ParserConfig
from .diagnostics import error_record, format_error
from .grammar.assembler import collect_errors, make_lexer, parse_table
from .grammar.ast import Ruleset
from .grammar.errors import ParseError
from .grammar.loader import iter_physical_lines, join_lines, load_table_text
from .grammar.serialize import format_ruleset

# ------------------------------
# 헬퍼
# ------------------------------

def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)


def _load_config(args) -> ParserConfig:
    config = ParserConfig.from_toml(args.config) if args.config else DEFAULT_CONFIG
    if args.max_depth is not None:
        config = dataclasses.replace(config, max_depth=args.max_depth)
    if args.debug:
        _eprint(f"[DEBUG] config ready | opcodes={len(config.opcodes)} max_depth={config.max_depth}")
    return config


def _read_source(args) -> str:
    if getattr(args, "text", None) is not None:
        return args.text
    return load_table_text(args.file)


def _record(obj: Any) -> Any:
    """값/식 노드 → JSON용 dict (span은 'line:col' 문자열로)"""
    if dataclasses.is_dataclass(obj):
        rec = {"type": type(obj).__name__}
        for f in dataclasses.fields(obj):
            v = getattr(obj, f.name)
            if f.name == "span":
                rec["at"] = None if v is None else str(v)
            else:
                rec[f.name] = _record(v)
        return rec
    if isinstance(obj, frozenset):
        return sorted(obj)
    if isinstance(obj, tuple):
        return [_record(x) for x in obj]
    return obj


def _print_summary(rs: Ruleset) -> None:
    counts: dict = {}
    for d in rs:
        counts[d.opcode] = counts.get(d.opcode, 0) + 1
    _eprint("\n[Opcodes]")
    for name in sorted(counts):
        _eprint(f"  {name:<16} {counts[name]}")

# ------------------------------
# 커맨드 구현
# ------------------------------

def cmd_check(args) -> int:
    try:
        config = _load_config(args)
        src = _read_source(args)
    except (OSError, ValueError) as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    if args.keep_going:
        errors = collect_errors(src, config)
        for e in errors:
            _eprint(format_error(e, src))
        if errors:
            _eprint(f"[CHECK FAILED] errors={len(errors)}")
            return 2
        print("[CHECK OK]")
        return 0

    try:
        rs = parse_table(src, config)
    except ParseError as e:
        _eprint("[SYNTAX ERROR]")
        _eprint(format_error(e, src))
        return 2

    if args.debug:
        _print_summary(rs)
    multipart = sum(1 for d in rs if d.expression is not None)
    print(f"[CHECK OK] directives={len(rs)} multipart={multipart}")
    return 0


def cmd_lex(args) -> int:
    """논리 줄마다 토큰을 표준출력으로 보여줍니다."""
    try:
        config = _load_config(args)
        src = _read_source(args)
        lexer = make_lexer(config)
        i = 0
        for ll in join_lines(iter_physical_lines(src), config.continuation_marker, config.comment_char):
            for tok in lexer.tokenize(ll):
                print(f"{i:03d}: {tok.kind:<14} {tok.text!r}  @{tok.span}")
                i += 1
            if args.debug and lexer.comment is not None:
                _eprint(f"[DEBUG] line {ll.line} comment={lexer.comment!r}")
        return 0
    except ParseError as e:
        _eprint("[LEX ERROR]", format_error(e, src))
        return 2
    except (OSError, ValueError) as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2


def cmd_dump(args) -> int:
    try:
        config = _load_config(args)
        src = _read_source(args)
        rs = parse_table(src, config)
    except ParseError as e:
        if args.json:
            print(json.dumps({"error": error_record(e)}, ensure_ascii=False, indent=2))
        else:
            _eprint("[SYNTAX ERROR]")
            _eprint(format_error(e, src))
        return 2
    except (OSError, ValueError) as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    if args.json:
        print(json.dumps({"directives": [_record(d) for d in rs]}, ensure_ascii=False, indent=2))
    else:
        sys.stdout.write(format_ruleset(rs, config))
    return 0


# ------------------------------
# 엔트리포인트
# ------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-D", "--debug", action="store_true", help="디버그 정보를 상세 출력")
    common.add_argument("--config", help="파서 설정 TOML 파일([parser], [opcodes])")
    common.add_argument("--max-depth", type=int, help="multipart 식의 괄호 중첩 한도")

    ap = argparse.ArgumentParser(prog="louistab", description="braille translation table parser")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check", parents=[common], help="테이블을 파싱해 오류를 검사합니다")
    p_check.add_argument("file", help="테이블 파일")
    p_check.add_argument("--keep-going", action="store_true", help="첫 오류에서 멈추지 않고 모든 오류를 출력")
    p_check.set_defaults(func=cmd_check)

    p_lex = sub.add_parser("lex", parents=[common], help="테이블을 토크나이즈합니다")
    src_group = p_lex.add_mutually_exclusive_group(required=True)
    src_group.add_argument("file", nargs="?", help="테이블 파일")
    src_group.add_argument("--text", help="직접 입력 텍스트")
    p_lex.set_defaults(func=cmd_lex)

    p_dump = sub.add_parser("dump", parents=[common], help="파싱 결과를 출력합니다")
    p_dump.add_argument("file", help="테이블 파일")
    p_dump.add_argument("--json", action="store_true", help="JSON으로 출력")
    p_dump.set_defaults(func=cmd_dump)

    args = ap.parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="[DEBUG] %(name)s: %(message)s")
    return int(args.func(args))

if __name__ == "__main__":
    sys.exit(main())
