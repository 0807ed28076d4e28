"""Parser configuration for louistab.

A :class:`ParserConfig` is immutable and owned by whoever invokes the parser;
nothing in the grammar layer keeps module-level mutable state, so separate
tables can be parsed in parallel with separate (or shared) configs.

Settings can be loaded from a TOML file::

    [parser]
    max_depth = 16
    continuation_marker = "\\"

    [opcodes]
    nobreak = "characters"
    exactdots = "prefixable dots"
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping

from .grammar.opcodes import DEFAULT_OPCODES, OpcodeShape, shapes_from_mapping

logger = logging.getLogger(__name__)

_SETTINGS = (
    "continuation_marker",
    "comment_char",
    "dot_alphabet",
    "max_depth",
    "test_keyword",
    "action_keyword",
)


@dataclass(frozen=True)
class ParserConfig:
    """Static data the grammar consults; no behaviour lives here."""

    # Read-only copy; left out of hash() since a mappingproxy is unhashable.
    opcodes: Mapping[str, OpcodeShape] = field(default_factory=lambda: DEFAULT_OPCODES, hash=False)
    continuation_marker: str = "\\"
    comment_char: str = "#"
    dot_alphabet: str = "0123456789abcdef"
    # Maximum '(' nesting inside a multipart test clause.
    max_depth: int = 32
    test_keyword: str = "test"
    action_keyword: str = "actions"

    def __post_init__(self) -> None:
        object.__setattr__(self, "opcodes", MappingProxyType(dict(self.opcodes)))
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        bad = [ch for ch in self.dot_alphabet if ch not in "0123456789abcdef"]
        if bad:
            raise ValueError(f"dot_alphabet may only contain 0-9 and a-f, got {''.join(bad)!r}")
        if len(self.comment_char) != 1:
            raise ValueError("comment_char must be a single character")

    @property
    def multipart_opcodes(self) -> FrozenSet[str]:
        """Names of the opcodes whose rest of line is a test/actions expression."""
        return frozenset(name for name, shape in self.opcodes.items() if shape.multipart)

    def with_opcodes(self, shapes: Mapping[str, str]) -> "ParserConfig":
        """Return a copy whose vocabulary is extended (or overridden) by ``shapes``."""
        merged = dict(self.opcodes)
        merged.update(shapes_from_mapping(shapes))
        return replace(self, opcodes=merged)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ParserConfig":
        parser = dict(data.get("parser", {}))
        unknown = sorted(set(parser) - set(_SETTINGS))
        if unknown:
            raise ValueError(f"Unknown [parser] settings: {', '.join(unknown)}")
        config = cls(**parser)
        opcodes = data.get("opcodes", {})
        if opcodes:
            config = config.with_opcodes(opcodes)
            logger.debug("Loaded %d custom opcode shapes", len(opcodes))
        return config

    @classmethod
    def from_toml(cls, path: str | Path) -> "ParserConfig":
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
        logger.debug("Read parser configuration from %s", path)
        return cls.from_mapping(data)


DEFAULT_CONFIG = ParserConfig()
