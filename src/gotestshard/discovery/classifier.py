"""Classify Go function declarations as tests, benchmarks, or fuzz targets.

A declaration qualifies when it takes exactly one parameter of the matching
``testing`` type, returns nothing, and its name is the kind prefix optionally
followed by a non-lowercase character::

    func TestParse(t *testing.T)           -> test
    func BenchmarkParse(b *testing.B)      -> benchmark
    func FuzzParse(f *testing.F)           -> fuzz
    func (s *ParserSuite) TestX(t *testing.T) -> test in suite ParserSuite

Methods only qualify on a pointer receiver whose type name ends in
``Suite``; any other receiver discards the declaration entirely.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gotestshard.models.item import SUITE_SUFFIX, ItemKind

if TYPE_CHECKING:
    from gotestshard.parsing.treesitter import FuncDeclInfo

# Checked in order; TEST is the fallback once the others do not match.
_PARAM_TYPES: tuple[tuple[ItemKind, str], ...] = (
    (ItemKind.BENCHMARK, "*testing.B"),
    (ItemKind.FUZZ, "*testing.F"),
    (ItemKind.TEST, "*testing.T"),
)


@dataclass(frozen=True)
class Classification:
    """Result of classifying a qualifying declaration."""

    kind: ItemKind
    suite: str = ""


def classify(decl: FuncDeclInfo) -> Classification | None:
    """Return the classification of *decl*, or ``None`` if it is not test-like."""
    if len(decl.params) != 1 or len(decl.params[0].names) > 1:
        return None
    if decl.results:
        return None

    kind = _match_kind(decl.name, decl.params[0].type_expr)
    if kind is None:
        return None

    if not _has_exported_suffix(decl.name, kind.prefix):
        return None

    if decl.receiver is None:
        return Classification(kind=kind)

    suite = suite_name(decl)
    if suite is None:
        return None
    return Classification(kind=kind, suite=suite)


def suite_name(decl: FuncDeclInfo) -> str | None:
    """Return the suite type name of a ``*XxxSuite`` receiver, else ``None``."""
    if decl.receiver is None or len(decl.receiver) != 1:
        return None
    recv = decl.receiver[0]
    if len(recv.names) > 1:
        return None
    if not recv.type_expr.startswith("*") or not recv.type_expr.endswith(SUITE_SUFFIX):
        return None
    return recv.type_expr[1:]


def _match_kind(name: str, param_type: str) -> ItemKind | None:
    for kind, expected in _PARAM_TYPES:
        if name.startswith(kind.prefix) and param_type == expected:
            return kind
    return None


def _has_exported_suffix(name: str, prefix: str) -> bool:
    rest = name[len(prefix) :]
    # Lowercase letters only (category Ll), not other lowercase-property marks
    return not rest or unicodedata.category(rest[0]) != "Ll"
