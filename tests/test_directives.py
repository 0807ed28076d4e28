from __future__ import annotations

import pytest

from louistab.config import DEFAULT_CONFIG
from louistab.grammar.assembler import parse_line
from louistab.grammar.ast import (
    CharacterClass, CharacterLiteral, Directive, DotPattern, Identifier, Number, StringLiteral,
)
from louistab.grammar.errors import ArgumentError, UnknownOpcodeError, ValueParseError
from louistab.grammar.loader import LogicalLine
from louistab.grammar.opcodes import parse_shape
from louistab.grammar.parser import parse_directive
from louistab.lex import tokenize


def test_space_with_default_character() -> None:
    d = parse_line("space 20")

    assert d == Directive("space", (CharacterLiteral(" "), DotPattern(((2, 0),))))
    # the filled-in default points at the opcode token
    assert (d.args[0].span.col, d.args[0].span.end_col) == (1, 6)
    assert d.args[1].span.col == 7


def test_space_with_explicit_character() -> None:
    assert parse_line("space \\s 20") == parse_line("space 20")
    assert parse_line("space \\t 9").args[0] == CharacterLiteral("\t")


def test_opcode_is_case_insensitive() -> None:
    assert parse_line("SPACE 20").opcode == "space"
    assert parse_line("Letter a 1") == parse_line("letter a 1")


@pytest.mark.parametrize(
    "line, args",
    [
        ("letter a 1", (CharacterLiteral("a"), DotPattern(((1,),)))),
        ("always the 2346", (StringLiteral("the"), DotPattern(((2, 3, 4, 6),)))),
        ("multind 56-6 letsign capsletter",
         (DotPattern(((5, 6), (6,))), Identifier("letsign"), Identifier("capsletter"))),
        ("class vowels [aeiou]",
         (Identifier("vowels"), CharacterClass(tuple((c, c) for c in "aeiou")))),
        ("class digits 0123", (Identifier("digits"), StringLiteral("0123"))),
        ("include en-us-g1.ctb", (StringLiteral("en-us-g1.ctb"),)),
        ("replace abc", (StringLiteral("abc"),)),
        ("replace abc xyz", (StringLiteral("abc"), StringLiteral("xyz"))),
        ("lenemphphrase italic 3", (Identifier("italic"), Number(3))),
        ("numsign 3456", (DotPattern(((3, 4, 5, 6),)),)),
        ('always "a b" 1', (StringLiteral("a b"), DotPattern(((1,),)))),
    ],
)
def test_argument_shapes(line, args) -> None:
    assert parse_line(line).args == args


def test_directive_span_and_comment() -> None:
    d = parse_line("always the 2346 # article")

    assert (d.span.start, d.span.end) == (0, 15)
    assert d.comment == "article"
    # comments and spans are not part of equality
    assert d == parse_line("always the 2346")


# ---- unknown opcodes ----

@pytest.mark.parametrize("line, name, col", [("frobnicate a 1", "frobnicate", 1), ("  Frob 1", "Frob", 3),
                                             ("42 1", "42", 1), ('"space" 20', '"space"', 1)])
def test_unknown_opcode(line, name, col) -> None:
    with pytest.raises(UnknownOpcodeError) as ei:
        parse_line(line)

    err = ei.value
    assert err.name == name
    assert err.span.col == col
    assert err.span.end_col == col + len(name)
    assert err.kind == "UnknownOpcodeError"


# ---- argument errors ----

def test_too_few_arguments_points_at_end_of_line() -> None:
    with pytest.raises(ArgumentError) as ei:
        parse_line("letter a")

    err = ei.value
    assert (err.opcode, err.position, err.expected_kind) == ("letter", 2, "dots")
    assert (err.span.start, err.span.end, err.span.col) == (8, 8, 9)
    assert err.found is None


def test_too_many_arguments_points_at_first_extra() -> None:
    with pytest.raises(ArgumentError) as ei:
        parse_line("letter a 1 2")

    assert ei.value.span.col == 12
    assert ei.value.position == 3
    assert ei.value.found == "2"


def test_wrong_argument_type_is_wrapped() -> None:
    with pytest.raises(ArgumentError) as ei:
        parse_line("letter ab 1")

    err = ei.value
    assert err.position == 1
    assert err.expected_kind == "character"
    assert err.span.col == 9
    assert isinstance(err.__cause__, ValueParseError)
    assert isinstance(err, SyntaxError)


def test_duplicate_dot_is_an_argument_error() -> None:
    with pytest.raises(ArgumentError) as ei:
        parse_line("letter a 11")
    assert ei.value.span.col == 11
    assert ei.value.expected_kind == "dots"


@pytest.mark.parametrize("line", ["lenemphphrase italic 0", "lenemphphrase italic 300"])
def test_number_out_of_range(line) -> None:
    with pytest.raises(ArgumentError) as ei:
        parse_line(line)
    assert ei.value.position == 2
    assert ei.value.span.col == 22


# ---- prefixes ----

def test_prefixes() -> None:
    d = parse_line("nofor always the 2346")
    assert d.opcode == "always"
    assert d.prefixes == frozenset({"nofor"})
    assert d.span.col == 1

    assert parse_line("NOBACK nocross always a 1").prefixes == frozenset({"noback", "nocross"})


def test_display_and_multind_take_prefixes() -> None:
    d = parse_line("nocross display haha 12")
    assert d.prefixes == frozenset({"nocross"})
    assert d.args == (StringLiteral("haha"), DotPattern(((1, 2),)))

    d = parse_line("noback nocross display haha 12")
    assert d.prefixes == frozenset({"noback", "nocross"})

    d = parse_line("nocross multind 56-6 letsign capsletter")
    assert d.prefixes == frozenset({"nocross"})
    assert d.args[0] == DotPattern(((5, 6), (6,)))
    assert [a.name for a in d.args[1:]] == ["letsign", "capsletter"]


@pytest.mark.parametrize(
    "line, col",
    [
        ("nofor nofor always a 1", 7),
        ("noback nofor always a 1", 8),
        ("nofor letter a 1", 1),
        ("nofor", 6),
    ],
)
def test_prefix_errors(line, col) -> None:
    with pytest.raises(ArgumentError) as ei:
        parse_line(line)
    assert ei.value.span.col == col
    assert ei.value.position == 0


# ---- vocabulary is data ----

def test_custom_opcode_from_config() -> None:
    config = DEFAULT_CONFIG.with_opcodes({"exactdots": "prefixable dots", "nobreak": "characters"})

    assert parse_line("nofor exactdots 123", config).args == (DotPattern(((1, 2, 3),)),)
    assert parse_line("nobreak abc", config).opcode == "nobreak"
    with pytest.raises(UnknownOpcodeError):
        parse_line("nobreak abc")


def test_parse_shape() -> None:
    shape = parse_shape("x", "character? dots number[1..9] name+")
    assert [a.label for a in shape.args] == ["character", "dots", "number", "name"]
    assert shape.args[0].optional
    assert shape.args[-1].repeat
    assert (shape.args[2].min_value, shape.args[2].max_value) == (1, 9)
    assert shape.required == 3


@pytest.mark.parametrize("bad", ["dots+ name", "bogus", "dots[1..", "character??"])
def test_bad_shape(bad) -> None:
    with pytest.raises(ValueError):
        parse_shape("x", bad)


def test_parse_directive_on_tokens() -> None:
    line = LogicalLine("digit 1 2", ((0, 3, 1, 40),))
    d = parse_directive(tokenize(line), line)

    assert d == Directive("digit", (CharacterLiteral("1"), DotPattern(((2,),))))
    assert (d.span.line, d.span.start, d.span.end) == (3, 40, 49)
