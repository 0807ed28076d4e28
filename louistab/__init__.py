# louistab/__init__.py
r"""louistab – grammar-driven parser for braille translation tables.

    >>> from louistab import parse_table
    >>> rs = parse_table("space 20\ncontext test _c1 a actions pass2\n")
    >>> rs[0].opcode, len(rs)
    ('space', 2)

Parsing either returns a complete, immutable ``Ruleset`` or raises one
``ParseError`` (a ``SyntaxError`` subclass) with a 1-based line/column span.
"""

from .config import DEFAULT_CONFIG, ParserConfig
from .diagnostics import caret_snippet, error_record, format_error
from .grammar.assembler import assemble, collect_errors, parse_line, parse_table
from .grammar.ast import (
    CharacterClass, CharacterLiteral, Directive, DotPattern, Identifier, Number, Ruleset, Span,
    StringLiteral,
)
from .grammar.errors import (
    ArgumentError, ContinuationError, ExpressionSyntaxError, LexError, ParseError,
    UnknownOpcodeError, ValueParseError,
)
from .grammar.loader import LogicalLine, join_lines
from .grammar.parser import parse_directive
from .grammar.serialize import format_directive, format_expression, format_ruleset, format_value
from .lex import LineLexer, Token, tokenize
from .multipart import (
    ActionStep, ClassReference, Comparator, Literal, LogicalCombinator, Sequence, TestAction,
    parse_multipart, walk,
)

__version__ = "0.1.0"
