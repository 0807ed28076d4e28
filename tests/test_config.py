from __future__ import annotations

import pytest

from louistab.config import DEFAULT_CONFIG, ParserConfig
from louistab.grammar.assembler import parse_line, parse_table
from louistab.grammar.opcodes import DEFAULT_OPCODES


def test_defaults() -> None:
    assert DEFAULT_CONFIG.max_depth == 32
    assert DEFAULT_CONFIG.continuation_marker == "\\"
    assert DEFAULT_CONFIG.comment_char == "#"
    assert set(DEFAULT_OPCODES) <= set(DEFAULT_CONFIG.opcodes)
    for name in ("space", "include", "context", "pass4", "lenemphphrase"):
        assert name in DEFAULT_CONFIG.opcodes


@pytest.mark.parametrize(
    "kwargs",
    [{"max_depth": 0}, {"dot_alphabet": "xyz"}, {"comment_char": "//"}],
)
def test_invalid_settings(kwargs) -> None:
    with pytest.raises(ValueError):
        ParserConfig(**kwargs)


def test_with_opcodes_leaves_default_untouched() -> None:
    extended = DEFAULT_CONFIG.with_opcodes({"NoBreak": "characters"})

    assert "nobreak" in extended.opcodes
    assert "nobreak" not in DEFAULT_CONFIG.opcodes
    assert extended.max_depth == DEFAULT_CONFIG.max_depth


def test_from_mapping() -> None:
    config = ParserConfig.from_mapping({
        "parser": {"max_depth": 4, "comment_char": ";"},
        "opcodes": {"nobreak": "characters"},
    })

    assert config.max_depth == 4
    d = parse_line("nobreak abc ; note", config)
    assert d.opcode == "nobreak"
    assert d.comment == "note"


def test_from_mapping_rejects_unknown_settings() -> None:
    with pytest.raises(ValueError):
        ParserConfig.from_mapping({"parser": {"depth": 4}})
    with pytest.raises(ValueError):
        ParserConfig.from_mapping({"opcodes": {"bad": "dots+ name"}})


def test_from_toml(tmp_path) -> None:
    path = tmp_path / "louistab.toml"
    path.write_text(
        '[parser]\n'
        'max_depth = 8\n'
        'continuation_marker = "+"\n'
        '\n'
        '[opcodes]\n'
        'exactdots = "prefixable dots"\n',
        encoding="utf-8",
    )
    config = ParserConfig.from_toml(path)

    assert config.max_depth == 8
    rs = parse_table("nofor exactdots +\n 123\n", config)
    assert rs[0].opcode == "exactdots"
    assert rs[0].prefixes == frozenset({"nofor"})


def test_config_is_hashable_and_read_only() -> None:
    assert hash(DEFAULT_CONFIG) == hash(ParserConfig())
    assert DEFAULT_CONFIG == ParserConfig()
    with pytest.raises(TypeError):
        DEFAULT_CONFIG.opcodes["nobreak"] = DEFAULT_CONFIG.opcodes["space"]

    source = {"space": DEFAULT_CONFIG.opcodes["space"]}
    config = ParserConfig(opcodes=source)
    source.clear()
    assert "space" in config.opcodes
    assert config.multipart_opcodes == frozenset()
    assert "context" in DEFAULT_CONFIG.multipart_opcodes
