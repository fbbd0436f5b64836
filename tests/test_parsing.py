"""Tests for gotestshard.parsing (tree-sitter Go extraction)."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import pytest

from gotestshard.parsing import GoExtractor, SourceParseError, parse_code
from gotestshard.parsing.treesitter import collect_error_ranges, get_parser, has_parse_errors

if TYPE_CHECKING:
    from pathlib import Path

_SOURCE = b"""package widgets_test

import (
\t"context"
\t"testing"
)

type RenderSuite struct{}

func helper() int { return 1 }

func TestRender(t *testing.T) {}

func (s *RenderSuite) TestLayout(t *testing.T) {}

func BenchmarkRender(b *testing.B) {}
"""


def _param_type(signature: str) -> str:
    source = f"package p\n\nfunc F({signature}) {{}}\n".encode()
    info = GoExtractor().extract(source)
    return info.functions[0].params[0].type_expr


class TestGoExtractor:
    def test_package_name(self) -> None:
        info = GoExtractor().extract(_SOURCE)
        assert info.package_name == "widgets_test"

    def test_functions_and_methods(self) -> None:
        info = GoExtractor().extract(_SOURCE)
        names = [fn.name for fn in info.functions]
        assert names == ["helper", "TestRender", "TestLayout", "BenchmarkRender"]

    def test_receiver(self) -> None:
        info = GoExtractor().extract(_SOURCE)
        method = info.functions[2]
        assert method.is_method
        assert method.receiver is not None
        assert method.receiver[0].names == ["s"]
        assert method.receiver[0].type_expr == "*RenderSuite"

    def test_plain_function_has_no_receiver(self) -> None:
        info = GoExtractor().extract(_SOURCE)
        assert info.functions[1].receiver is None
        assert not info.functions[1].is_method

    def test_results(self) -> None:
        info = GoExtractor().extract(_SOURCE)
        assert [r.type_expr for r in info.functions[0].results] == ["int"]
        assert info.functions[1].results == []

    def test_named_results(self) -> None:
        source = b"package p\n\nfunc F() (n int, err error) { return }\n"
        results = GoExtractor().extract(source).functions[0].results
        assert [(r.names, r.type_expr) for r in results] == [(["n"], "int"), (["err"], "error")]

    def test_grouped_params(self) -> None:
        source = b"package p\n\nfunc F(a, b string, c int) {}\n"
        params = GoExtractor().extract(source).functions[0].params
        assert [(p.names, p.type_expr) for p in params] == [(["a", "b"], "string"), (["c"], "int")]

    def test_start_line(self) -> None:
        info = GoExtractor().extract(_SOURCE)
        assert info.functions[1].start_line == 12

    def test_syntax_error_raises(self) -> None:
        with pytest.raises(SourceParseError) as exc_info:
            GoExtractor().extract(
                b"package p\n\nfunc TestBroken(t *testing.T {\n", path="broken.go"
            )
        assert exc_info.value.path == "broken.go"
        assert exc_info.value.error_ranges
        assert "broken.go: syntax error at line" in str(exc_info.value)

    def test_read_package_name_tolerates_errors(self) -> None:
        assert GoExtractor().read_package_name(b"package lib\n\nfunc {{{\n") == "lib"

    def test_read_package_name_missing(self) -> None:
        assert GoExtractor().read_package_name(b"// just a comment\n") == ""

    def test_extract_file(self, tmp_path: Path) -> None:
        path = tmp_path / "a_test.go"
        path.write_bytes(_SOURCE)
        assert GoExtractor().extract_file(path).package_name == "widgets_test"


class TestTypeExprString:
    @pytest.mark.parametrize(
        ("signature", "expected"),
        [
            ("t *testing.T", "*testing.T"),
            ("t * testing . T", "*testing.T"),
            ("x []string", "[]string"),
            ("x [4]byte", "[4]byte"),
            ("x map[string]*Item", "map[string]*Item"),
            ("x chan int", "chan int"),
            ("x <-chan int", "<-chan int"),
            ("x chan<- int", "chan<- int"),
            ("x func(int) error", "func(int) error"),
            ("x ...string", "...string"),
            ("x List[int]", "List[int]"),
            ("x context.Context", "context.Context"),
        ],
    )
    def test_canonical_form(self, signature: str, expected: str) -> None:
        assert _param_type(signature) == expected


class TestParseHelpers:
    def test_parse_code_clean(self) -> None:
        tree = parse_code(b"package p\n")
        assert not has_parse_errors(tree.root_node)
        assert collect_error_ranges(tree.root_node) == []

    def test_error_ranges_are_one_based(self) -> None:
        tree = parse_code(b"package p\n\nfunc F( {\n")
        assert has_parse_errors(tree.root_node)
        ranges = collect_error_ranges(tree.root_node)
        assert ranges
        assert all(start >= 1 and end >= start for start, end in ranges)

    def test_parser_cached_per_thread(self) -> None:
        assert get_parser() is get_parser()
        other: list[object] = []
        thread = threading.Thread(target=lambda: other.append(get_parser()))
        thread.start()
        thread.join()
        assert other[0] is not get_parser()

    def test_unsupported_language(self) -> None:
        with pytest.raises(ValueError, match="Unsupported language"):
            get_parser("cobol")
