from __future__ import annotations

import pytest

from louistab.config import DEFAULT_CONFIG, ParserConfig
from louistab.grammar.ast import CharacterClass, CharacterLiteral, DotPattern, Identifier, Number, StringLiteral
from louistab.grammar.errors import ValueParseError
from louistab.grammar.loader import LogicalLine
from louistab.grammar.primitives import (
    choose, parse_char_class, parse_character, parse_characters, parse_class_reference,
    parse_dots, parse_identifier, parse_number, parse_string,
)
from louistab.lex import tokenize


def _tok(text: str):
    return tokenize(LogicalLine(text, ((0, 1, 1, 0),)))[0]


# ---- dots ----

@pytest.mark.parametrize(
    "text, cells",
    [
        ("1", ((1,),)),
        ("20", ((2, 0),)),
        ("123-1f", ((1, 2, 3), (1, 15))),
        ("8-7-6", ((8,), (7,), (6,))),
    ],
)
def test_parse_dots(text, cells) -> None:
    assert parse_dots(_tok(text), DEFAULT_CONFIG) == DotPattern(cells)


def test_duplicate_dot_in_cell_is_rejected_at_duplicate() -> None:
    with pytest.raises(ValueParseError) as ei:
        parse_dots(_tok("11"), DEFAULT_CONFIG)
    assert ei.value.span.col == 2
    assert "Duplicate" in ei.value.message


def test_same_dot_in_different_cells_is_fine() -> None:
    assert parse_dots(_tok("1-1"), DEFAULT_CONFIG).cells == ((1,), (1,))


@pytest.mark.parametrize("text, col", [("1--2", 3), ("12-", 4), ("1g", 2)])
def test_bad_dots_report_furthest_character(text, col) -> None:
    with pytest.raises(ValueParseError) as ei:
        parse_dots(_tok(text), DEFAULT_CONFIG)
    assert ei.value.span.col == col


def test_dots_reject_quoted_string() -> None:
    with pytest.raises(ValueParseError) as ei:
        parse_dots(_tok('"12"'), DEFAULT_CONFIG)
    assert ei.value.expected == ("dot-pattern", "number")


def test_dot_alphabet_is_configurable() -> None:
    config = ParserConfig(dot_alphabet="12345678")
    assert parse_dots(_tok("78"), config).cells == ((7, 8),)
    with pytest.raises(ValueParseError):
        parse_dots(_tok("9"), config)


def test_dot_masks() -> None:
    assert DotPattern(((1, 2), (0,), (8,))).masks == (0b11, 0, 0b10000000)
    assert str(DotPattern(((1, 2, 15), (3,)))) == "12f-3"


# ---- characters ----

@pytest.mark.parametrize(
    "text, char",
    [
        ("a", "a"),
        ("\\s", " "),
        ("\\\\", "\\"),
        ("\\x0041", "A"),
        ("\\y1f600", "\U0001F600"),
        ("\\z0001f600", "\U0001F600"),
        ("\\e", "\x1b"),
        ('"#"', "#"),
    ],
)
def test_parse_character(text, char) -> None:
    assert parse_character(_tok(text), DEFAULT_CONFIG) == CharacterLiteral(char)


def test_character_rejects_two_characters() -> None:
    with pytest.raises(ValueParseError) as ei:
        parse_character(_tok("ab"), DEFAULT_CONFIG)
    assert ei.value.span.col == 2


@pytest.mark.parametrize("text", ["\\q", "\\x00", "\\z00110000", "a\\"])
def test_bad_escapes(text) -> None:
    with pytest.raises(ValueParseError):
        parse_characters(_tok(text), DEFAULT_CONFIG)


def test_parse_characters_decodes_escapes() -> None:
    assert parse_characters(_tok("a\\sb"), DEFAULT_CONFIG) == StringLiteral("a b")
    assert parse_characters(_tok('"x y"'), DEFAULT_CONFIG) == StringLiteral("x y")


# ---- classes ----

def test_parse_char_class() -> None:
    value = parse_char_class(_tok("[a-c_]"), DEFAULT_CONFIG)
    assert value == CharacterClass((("a", "c"), ("_", "_")))
    assert "b" in value
    assert "d" not in value


def test_char_class_escaped_brackets() -> None:
    value = parse_char_class(_tok("[\\]\\[x]"), DEFAULT_CONFIG)
    assert value.items == (("]", "]"), ("[", "["), ("x", "x"))


@pytest.mark.parametrize("text", ["[c-a]", "[]", "[abc", "abc", "[a]b]"])
def test_bad_char_class(text) -> None:
    with pytest.raises(ValueParseError):
        parse_char_class(_tok(text), DEFAULT_CONFIG)


# ---- numbers, names ----

def test_parse_number() -> None:
    assert parse_number(_tok("42"), DEFAULT_CONFIG) == Number(42)
    with pytest.raises(ValueParseError):
        parse_number(_tok("4a"), DEFAULT_CONFIG)


def test_parse_identifier() -> None:
    assert parse_identifier(_tok("vowels"), DEFAULT_CONFIG) == Identifier("vowels")
    with pytest.raises(ValueParseError) as ei:
        parse_identifier(_tok("vow,els"), DEFAULT_CONFIG)
    assert ei.value.span.col == 4


def test_parse_class_reference() -> None:
    assert parse_class_reference(_tok("_c1"), DEFAULT_CONFIG) == Identifier("c1")
    with pytest.raises(ValueParseError):
        parse_class_reference(_tok("_"), DEFAULT_CONFIG)
    with pytest.raises(ValueParseError):
        parse_class_reference(_tok("c1"), DEFAULT_CONFIG)


def test_parse_string_requires_quotes() -> None:
    assert parse_string(_tok('""'), DEFAULT_CONFIG) == StringLiteral("")
    with pytest.raises(ValueParseError):
        parse_string(_tok("abc"), DEFAULT_CONFIG)


# ---- ordered choice ----

def test_choose_takes_first_success() -> None:
    assert choose(_tok("[ab]"), ("class", "characters"), DEFAULT_CONFIG) == CharacterClass((("a", "a"), ("b", "b")))
    assert choose(_tok("abc"), ("class", "characters"), DEFAULT_CONFIG) == StringLiteral("abc")


def test_choose_merges_expected_of_ties() -> None:
    with pytest.raises(ValueParseError) as ei:
        choose(_tok("x"), ("dots", "number"), DEFAULT_CONFIG)
    assert ei.value.expected == ("dot-pattern", "number")
    assert ei.value.span.col == 1
