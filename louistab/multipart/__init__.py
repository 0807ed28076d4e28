# louistab/multipart/__init__.py
"""Test/action expressions of multipart opcodes (context, correct, pass2..pass4).

This package provides:
- frozen expression nodes with source spans (`ast`)
- a recursive-descent parser for ``test ... actions ...`` bodies (`parser`)
"""

from .ast import (
    Literal, ClassReference, Comparator, LogicalCombinator, Sequence,
    ActionStep, TestAction, walk,
)
from .parser import COMPARATORS, parse_multipart
