# louistab/multipart/ast.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

from ..grammar.ast import Span, Value

# ---- test/action expression nodes ----
# Every node carries its own span; spans do not take part in equality.

def _span():
    return field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Literal:
    value: Value        # StringLiteral / Number / DotPattern
    span: Optional[Span] = _span()

@dataclass(frozen=True)
class ClassReference:
    name: str           # without the leading '_'
    span: Optional[Span] = _span()

Operand = Union[Literal, ClassReference]

@dataclass(frozen=True)
class Comparator:
    op: str             # '=', '!=', '<', '<=', '>', '>='
    left: Operand
    right: Operand
    span: Optional[Span] = _span()

@dataclass(frozen=True)
class LogicalCombinator:
    op: str             # 'and' | 'or' (two or more operands), 'not' (exactly one)
    operands: Tuple["TestNode", ...]
    span: Optional[Span] = _span()

@dataclass(frozen=True)
class Sequence:
    """Juxtaposed tests that must match one after another."""
    items: Tuple["TestNode", ...]
    span: Optional[Span] = _span()

TestNode = Union[Literal, ClassReference, Comparator, LogicalCombinator, Sequence]

@dataclass(frozen=True)
class ActionStep:
    name: str
    operands: Tuple[Operand, ...] = ()
    span: Optional[Span] = _span()

@dataclass(frozen=True)
class TestAction:
    """Root of a multipart directive body: ``test <Test> actions <Action>``."""
    test: TestNode
    actions: Tuple[ActionStep, ...]
    span: Optional[Span] = _span()

Node = Union[TestNode, ActionStep, TestAction]


def children(node: Node) -> Tuple[Node, ...]:
    if isinstance(node, TestAction):
        return (node.test,) + node.actions
    if isinstance(node, Comparator):
        return (node.left, node.right)
    if isinstance(node, LogicalCombinator):
        return node.operands
    if isinstance(node, Sequence):
        return node.items
    if isinstance(node, ActionStep):
        return node.operands
    return ()


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal (iterative, so deep trees cannot exhaust the stack)."""
    stack = [node]
    while stack:
        cur = stack.pop()
        yield cur
        stack.extend(reversed(children(cur)))
