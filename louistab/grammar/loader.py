"""테이블 원문 로더 / 줄 이음 처리

- load_table_text : 파일을 UTF-8로 읽어 개행을 '\\n'으로 통일(CLI 전용, 문법 계층은 I/O 없음)
- iter_physical_lines : 개행을 포함한 물리 줄 단위 분할
- join_lines : 줄 끝 이음 표시(기본 '\\')로 이어진 물리 줄들을 논리 줄(LogicalLine) 하나로 합침
"""

from __future__ import annotations
from bisect     import bisect_right
from dataclasses import dataclass, field
from pathlib    import Path
from typing     import Iterable, Iterator, List, Tuple

from .ast import Span
from .errors import ContinuationError


def load_table_text(path: str) -> str:
    """
    Load Table Text
    """
    text = Path(path).read_text(encoding="utf-8")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def iter_physical_lines(text: str) -> Iterator[str]:
    """'\\n'만 줄 구분자로 본다(str.splitlines는 U+2028 등도 자르므로 쓰지 않음)."""
    i = 0
    n = len(text)
    while i < n:
        j = text.find("\n", i)
        if j == -1:
            yield text[i:]
            return
        yield text[i:j + 1]
        i = j + 1


@dataclass(frozen=True)
class LogicalLine:
    """
    이어 붙인 논리 줄 하나.
    - text   : 렉서가 보는 문자열(이음 표시는 같은 자리의 공백으로 바뀜)
    - pieces : (논리 인덱스, 물리 줄 번호, 열, 전체 오프셋). 각 물리 줄 조각의 시작점
    모든 논리 인덱스는 실제 원문 위치 하나에 대응한다.
    """
    text: str
    pieces: Tuple[Tuple[int, int, int, int], ...]
    # 조각 시작 인덱스. position()의 bisect용으로 한 번만 만든다
    starts: Tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "starts", tuple(p[0] for p in self.pieces))

    @property
    def line(self) -> int:
        return self.pieces[0][1]

    def position(self, idx: int) -> Tuple[int, int, int]:
        """논리 인덱스 → (line, col, offset)."""
        k = bisect_right(self.starts, idx) - 1
        start, line, col, offset = self.pieces[max(k, 0)]
        delta = idx - start
        return line, col + delta, offset + delta

    def span(self, i: int, j: int) -> Span:
        """논리 인덱스 범위 [i, j) → Span."""
        line, col, offset = self.position(i)
        if j <= i:
            return Span.point(offset, line, col)
        end_line, end_col, end_offset = self.position(j - 1)
        return Span(offset, end_offset + 1, line, col, end_line, end_col + 1)

    def end_span(self) -> Span:
        """줄 끝(마지막 문자 바로 다음)의 폭 0 위치."""
        return self.span(len(self.text), len(self.text))


def _continues(body: str, marker: str) -> bool:
    if not marker or not body.endswith(marker):
        return False
    if marker != "\\":
        return True
    # '\\\\'는 역슬래시 문자 자체이므로 홀수 개일 때만 이음 표시
    run = len(body) - len(body.rstrip("\\"))
    return run % 2 == 1


def join_lines(lines: Iterable[str], marker: str = "\\", comment_char: str = "#") -> Iterator[LogicalLine]:
    """
    물리 줄 → 논리 줄.

    - 각 줄의 '\\n' / '\\r\\n'은 제거하고, 오프셋은 원래 길이로 누적한다
      (개행 없이 넘어온 줄은 '\\n' 한 글자로 구분된 것으로 본다).
    - 주석만 있는 물리 줄은 이어지지 않는다.
    - 마지막 줄이 이음 표시로 끝나면 ContinuationError.
    """
    text_parts: List[str] = []
    pieces: List[Tuple[int, int, int, int]] = []
    pending: Tuple[int, int, int] = (0, 0, 0)    # 마지막 이음 표시 위치(line, col, offset)
    offset = 0
    line_no = 0
    logical_start = 0                            # 현재 논리 줄에 쌓인 글자 수

    for raw in lines:
        line_no += 1
        body = raw.rstrip("\r\n") if raw.endswith("\n") else raw.rstrip("\r")
        advance = len(raw) if raw.endswith("\n") else len(raw) + 1

        pieces.append((logical_start, line_no, 1, offset))

        stripped = body.rstrip()
        is_comment = body.lstrip().startswith(comment_char) if comment_char else False
        if not is_comment and _continues(stripped, marker):
            cut = len(stripped) - len(marker)
            text_parts.append(body[:cut] + " ")
            logical_start += cut + 1
            pending = (line_no, cut + 1, offset + cut)
            offset += advance
            continue

        text_parts.append(body)
        yield LogicalLine("".join(text_parts), tuple(pieces))
        text_parts = []
        pieces = []
        logical_start = 0
        offset += advance

    if pieces:
        line, col, off = pending
        span = Span(off, off + len(marker), line, col, line, col + len(marker))
        raise ContinuationError(
            f"Dangling continuation marker {marker!r} at end of input", span,
            expected=("line",), found=None,
        )
