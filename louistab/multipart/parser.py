# louistab/multipart/parser.py
from __future__ import annotations
from typing import List, Optional, Tuple

from .ast import (
    ActionStep, ClassReference, Comparator, Literal, LogicalCombinator, Operand, Sequence,
    TestAction, TestNode,
)
from ..config import ParserConfig
from ..grammar.ast import Span
from ..grammar.cursor import Cursor, FailureTracker
from ..grammar.errors import ExpressionSyntaxError, ValueParseError
from ..grammar.primitives import (
    parse_characters, parse_class_reference, parse_dots, parse_identifier, parse_number,
    parse_string,
)
from ..lex import NUMBER, PUNCT, STRING, WORD, Token, classify

# Grammar of a multipart body (tokens already split by lex.split_operators):
#   body        := TEST disjunction ACTIONS step+
#   disjunction := conjunction ("or" conjunction)*
#   conjunction := sequence ("and" sequence)*
#   sequence    := negation+                      juxtaposition: match in order
#   negation    := "not"? atom
#   atom        := comparator / classref / literal / "(" disjunction ")"
#   comparator  := operand OP operand             OP: = != < <= > >=
#   operand     := "_"name / number / "..." / "@"dots
#   literal     := operand / word
#   step        := name operand*
#
# Every alternative is tried in order and the first full match wins. After a
# token that only one production accepts ("(", "not", "and", "or", OP) the
# parser is committed and a failure there is final. The furthest failure seen
# (token position + expected set + innermost open '(') becomes the error.

COMPARATORS = ("=", "!=", "<", "<=", ">", ">=")
LOGICAL = ("and", "or", "not")

_OPERAND = ("class reference", NUMBER, STRING, "'@'dots")

Result = Optional[Tuple[TestNode, Cursor]]


def _subtoken(tok: Token, i: int) -> Token:
    """tok.text[i:] as a token of its own (for '@' dot operands)."""
    text = tok.text[i:]
    return Token(kind=classify(text), text=text, value=text, span=tok.sub_span(i, len(tok.text)),
                 start=tok.start + i, end=tok.end, source=tok.source)


def _merge(first: Span, last: Span) -> Span:
    return first.merge(last)


class _ExprParser:
    def __init__(self, config: ParserConfig, opcode: str):
        self.config = config
        self.opcode = opcode
        self.fail = FailureTracker()
        self.parens: List[Span] = []     # open '(' spans, innermost last
        self.reserved = {config.test_keyword.lower(), config.action_keyword.lower(), *LOGICAL}

    # ---- helpers ----
    def _context(self) -> Optional[Span]:
        return self.parens[-1] if self.parens else None

    def _miss(self, cur: Cursor, *expected: str) -> None:
        self.fail.miss(cur, expected, self._context())

    def _is_word(self, cur: Cursor, word: str) -> bool:
        t = cur.peek()
        return t is not None and t.kind == WORD and t.text.lower() == word

    def _is_punct(self, cur: Cursor, text: str) -> bool:
        t = cur.peek()
        return t is not None and t.kind == PUNCT and t.text == text

    def _error(self) -> ExpressionSyntaxError:
        cur = self.fail.cursor
        expected = sorted(self.fail.expected)
        context = self.fail.context
        msg = f"{self.opcode}: expected {' or '.join(expected)}, found {cur.describe()}"
        if context is not None:
            msg += f" (inside '(' opened at {context})"
        return ExpressionSyntaxError(msg, cur.span, expected=expected, found=cur.found,
                                     context=context)

    def _value_error(self, e: ValueParseError) -> ExpressionSyntaxError:
        return ExpressionSyntaxError(f"{self.opcode}: {e.message}", e.span, expected=e.expected,
                                     found=e.found, context=self._context())

    # ---- operands ----
    def operand(self, cur: Cursor) -> Optional[Tuple[Operand, Cursor]]:
        t = cur.peek()
        try:
            if t is None:
                pass
            elif t.kind == WORD and t.text.startswith("_"):
                ident = parse_class_reference(t, self.config)
                return ClassReference(ident.name, span=t.span), cur.advance()
            elif t.kind == NUMBER:
                return Literal(parse_number(t, self.config), span=t.span), cur.advance()
            elif t.kind == STRING:
                return Literal(parse_string(t, self.config), span=t.span), cur.advance()
            elif t.text.startswith("@"):
                if len(t.text) == 1:
                    raise ValueParseError("Expected dots after '@'", t.sub_span(1, 1),
                                          expected=("dot-pattern",), found=t.text)
                dots = parse_dots(_subtoken(t, 1), self.config)
                return Literal(dots, span=t.span), cur.advance()
        except ValueParseError as e:
            # '_', '@' or a quote already decided the kind of operand
            raise self._value_error(e) from e
        self._miss(cur, *_OPERAND)
        return None

    def literal(self, cur: Cursor) -> Optional[Tuple[Literal, Cursor]]:
        r = self.operand(cur)
        if r is not None:
            return r
        t = cur.peek()
        if t is None or t.kind != WORD or t.text.lower() in self.reserved:
            self._miss(cur, WORD)
            return None
        try:
            text = parse_characters(t, self.config)
        except ValueParseError as e:
            raise self._value_error(e) from e
        return Literal(text, span=t.span), cur.advance()

    # ---- test clause ----
    def comparator(self, cur: Cursor) -> Result:
        r = self.operand(cur)
        if r is None:
            return None
        left, after = r
        op = after.peek()
        if op is None or op.kind != PUNCT or op.text not in COMPARATORS:
            self._miss(after, "comparison operator")
            return None
        r = self.operand(after.advance())
        if r is None:
            raise self._error()
        right, end = r
        return Comparator(op.text, left, right, span=_merge(left.span, right.span)), end

    def group(self, cur: Cursor) -> Result:
        open_tok = cur.peek()
        if len(self.parens) >= self.config.max_depth:
            raise ExpressionSyntaxError(
                f"{self.opcode}: parentheses nested deeper than {self.config.max_depth}",
                open_tok.span, expected=_OPERAND + (WORD,), found=open_tok.text,
                context=self._context(),
            )
        self.parens.append(open_tok.span)
        try:
            r = self.disjunction(cur.advance())
            if r is None:
                raise self._error()
            node, after = r
            if not self._is_punct(after, ")"):
                self._miss(after, "')'", "'and'", "'or'")
                raise self._error()
        finally:
            self.parens.pop()
        return node, after.advance()

    def atom(self, cur: Cursor) -> Result:
        # only a group starts with '(' so it can be decided up front
        if self._is_punct(cur, "("):
            return self.group(cur)
        r = self.comparator(cur)
        if r is not None:
            return r
        t = cur.peek()
        if t is not None and t.kind == WORD and t.text.startswith("_"):
            return self.operand(cur)
        r = self.literal(cur)
        if r is None:
            self._miss(cur, "'('")
        return r

    def negation(self, cur: Cursor) -> Result:
        if not self._is_word(cur, "not"):
            r = self.atom(cur)
            if r is None:
                self._miss(cur, "'not'")
            return r
        not_tok = cur.peek()
        r = self.atom(cur.advance())
        if r is None:
            raise self._error()
        node, end = r
        return LogicalCombinator("not", (node,), span=_merge(not_tok.span, node.span)), end

    def sequence(self, cur: Cursor) -> Result:
        r = self.negation(cur)
        if r is None:
            return None
        items: List[TestNode] = []
        while r is not None:
            node, cur = r
            items.extend(node.items if isinstance(node, Sequence) else (node,))
            if cur.at_end:
                break
            r = self.negation(cur)
        if len(items) == 1:
            return items[0], cur
        return Sequence(tuple(items), span=_merge(items[0].span, items[-1].span)), cur

    def _chain(self, cur: Cursor, op: str, sub) -> Result:
        r = sub(cur)
        if r is None:
            return None
        node, cur = r
        operands: List[TestNode] = []
        while True:
            # (a and b) and c == a and b and c
            if isinstance(node, LogicalCombinator) and node.op == op:
                operands.extend(node.operands)
            else:
                operands.append(node)
            if not self._is_word(cur, op):
                self._miss(cur, f"'{op}'")
                break
            r = sub(cur.advance())
            if r is None:
                raise self._error()
            node, cur = r
        if len(operands) == 1:
            return operands[0], cur
        span = _merge(operands[0].span, operands[-1].span)
        return LogicalCombinator(op, tuple(operands), span=span), cur

    def conjunction(self, cur: Cursor) -> Result:
        return self._chain(cur, "and", self.sequence)

    def disjunction(self, cur: Cursor) -> Result:
        return self._chain(cur, "or", self.conjunction)

    # ---- action clause ----
    def step(self, cur: Cursor) -> Optional[Tuple[ActionStep, Cursor]]:
        t = cur.peek()
        if t is None or t.kind != WORD or t.text.startswith("_"):
            self._miss(cur, "action name")
            return None
        try:
            name = parse_identifier(t, self.config)
        except ValueParseError as e:
            raise self._value_error(e) from e
        cur = cur.advance()
        operands: List[Operand] = []
        last = t.span
        while not cur.at_end:
            r = self.operand(cur)
            if r is None:
                break
            node, cur = r
            operands.append(node)
            last = node.span
        return ActionStep(name.name, tuple(operands), span=_merge(t.span, last)), cur

    # ---- body ----
    def body(self, cur: Cursor) -> TestAction:
        test_kw = self.config.test_keyword.lower()
        action_kw = self.config.action_keyword.lower()
        if not self._is_word(cur, test_kw):
            self._miss(cur, f"'{test_kw}'")
            raise self._error()
        start = cur.peek().span
        r = self.disjunction(cur.advance())
        if r is None:
            raise self._error()
        test, cur = r
        if not self._is_word(cur, action_kw):
            self._miss(cur, f"'{action_kw}'")
            raise self._error()
        cur = cur.advance()

        steps: List[ActionStep] = []
        while True:
            r = self.step(cur)
            if r is None:
                break
            step, cur = r
            steps.append(step)
            if cur.at_end:
                break
        if not steps or not cur.at_end:
            if steps:
                self._miss(cur, "action name", *_OPERAND)
            raise self._error()
        return TestAction(test, tuple(steps), span=_merge(start, steps[-1].span))


def parse_multipart(cursor: Cursor, config: ParserConfig, opcode: str = "multipart") -> TestAction:
    """Parse ``test <Test> actions <Action>`` from ``cursor`` to end of line."""
    return _ExprParser(config, opcode).body(cursor)
