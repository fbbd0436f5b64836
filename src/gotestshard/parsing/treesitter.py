"""Tree-sitter wrapper for parsing Go sources and rendering type expressions."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

import tree_sitter
import tree_sitter_language_pack as tslp

if TYPE_CHECKING:
    from pathlib import Path

    from tree_sitter_language_pack import SupportedLanguage

logger = logging.getLogger(__name__)

GO_LANGUAGE = "go"

SUPPORTED_LANGUAGES = frozenset({GO_LANGUAGE})


class SourceParseError(ValueError):
    """Raised when a source file contains syntax errors."""

    def __init__(self, path: str | Path, error_ranges: list[tuple[int, int]]) -> None:
        self.path = str(path)
        self.error_ranges = error_ranges
        where = ", ".join(
            f"{start}" if start == end else f"{start}-{end}" for start, end in error_ranges[:5]
        )
        super().__init__(f"{self.path}: syntax error at line {where or '?'}")


@dataclass
class FieldInfo:
    """One entry of a parameter, result, or receiver list."""

    names: list[str] = field(default_factory=list)
    """Declared names; empty for unnamed parameters."""

    type_expr: str = ""
    """Canonical type expression (``*testing.T``)."""


@dataclass
class FuncDeclInfo:
    """A top-level function or method declaration."""

    name: str
    start_line: int = 0
    receiver: list[FieldInfo] | None = None
    """Receiver list for methods, ``None`` for plain functions."""
    params: list[FieldInfo] = field(default_factory=list)
    results: list[FieldInfo] = field(default_factory=list)

    @property
    def is_method(self) -> bool:
        return self.receiver is not None


@dataclass
class GoFileInfo:
    """Declarations extracted from a single Go file."""

    package_name: str
    functions: list[FuncDeclInfo] = field(default_factory=list)


# Parsers are not safe to share between threads.
_local = threading.local()


def get_parser(language: str = GO_LANGUAGE) -> tree_sitter.Parser:
    """Get a (per-thread cached) tree-sitter parser for the given language."""
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    cache: dict[str, tree_sitter.Parser] | None = getattr(_local, "parsers", None)
    if cache is None:
        cache = {}
        _local.parsers = cache
    parser = cache.get(language)
    if parser is None:
        parser = tslp.get_parser(cast("SupportedLanguage", language))
        cache[language] = parser
        logger.debug("Created %s parser for thread %s", language, threading.current_thread().name)
    return parser


def parse_code(source: bytes, language: str = GO_LANGUAGE) -> tree_sitter.Tree:
    """Parse source code bytes into a tree-sitter AST."""
    return get_parser(language).parse(source)


def has_parse_errors(root: tree_sitter.Node) -> bool:
    """Check if the AST contains any parse errors."""
    return root.has_error


def collect_error_ranges(root: tree_sitter.Node) -> list[tuple[int, int]]:
    """Collect line ranges of parse error nodes."""
    errors: list[tuple[int, int]] = []
    _walk_errors(root, errors)
    return errors


def _walk_errors(node: tree_sitter.Node, errors: list[tuple[int, int]]) -> None:
    if node.is_error or node.is_missing:
        errors.append((node.start_point.row + 1, node.end_point.row + 1))
        return
    for child in node.children:
        if child.has_error or child.is_missing:
            _walk_errors(child, errors)


def node_text(node: tree_sitter.Node | None) -> str:
    """Decode node text from bytes, returning empty string for None."""
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="replace") if node.text else ""


# ── Type expressions ─────────────────────────────────────────────


def type_expr_string(node: tree_sitter.Node | None) -> str:
    """Render a Go type node in canonical form.

    Mirrors how the Go toolchain prints type expressions: no incidental
    whitespace, ``*`` glued to its operand, package qualifiers kept as
    written.  Node kinds without a dedicated rule fall back to their source
    text with whitespace runs collapsed.
    """
    if node is None:
        return ""

    kind = node.type
    named = [c for c in node.named_children if c.type != "comment"]

    if kind in {"type_identifier", "identifier", "package_identifier", "field_identifier"}:
        return node_text(node)
    if kind == "qualified_type":
        pkg = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        return f"{node_text(pkg)}.{node_text(name)}"
    if kind == "pointer_type" and named:
        return "*" + type_expr_string(named[0])
    if kind == "parenthesized_type" and named:
        return "(" + type_expr_string(named[0]) + ")"
    if kind == "slice_type":
        return "[]" + type_expr_string(node.child_by_field_name("element"))
    if kind == "array_type":
        length = " ".join(node_text(node.child_by_field_name("length")).split())
        return f"[{length}]" + type_expr_string(node.child_by_field_name("element"))
    if kind == "implicit_length_array_type":
        return "[...]" + type_expr_string(node.child_by_field_name("element"))
    if kind == "map_type":
        key = type_expr_string(node.child_by_field_name("key"))
        value = type_expr_string(node.child_by_field_name("value"))
        return f"map[{key}]{value}"
    if kind == "channel_type":
        value = type_expr_string(node.child_by_field_name("value"))
        tokens = [c.type for c in node.children if not c.is_named]
        if tokens and tokens[0] == "<-":
            return "<-chan " + value
        if "<-" in tokens:
            return "chan<- " + value
        return "chan " + value
    if kind == "generic_type":
        base = type_expr_string(node.child_by_field_name("type"))
        args = node.child_by_field_name("type_arguments")
        return base + type_expr_string(args)
    if kind == "type_arguments":
        return "[" + ", ".join(type_expr_string(c) for c in named) + "]"
    if kind == "type_elem":
        return " | ".join(type_expr_string(c) for c in named)
    if kind == "negated_type" and named:
        return "~" + type_expr_string(named[0])

    return " ".join(node_text(node).split())
