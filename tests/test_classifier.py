"""Tests for gotestshard.discovery.classifier."""

from __future__ import annotations

import pytest

from gotestshard.discovery.classifier import Classification, classify, suite_name
from gotestshard.models.item import ItemKind
from gotestshard.parsing.languages.go import GoExtractor
from gotestshard.parsing.treesitter import FieldInfo, FuncDeclInfo


def _decl(source: str) -> FuncDeclInfo:
    info = GoExtractor().extract(f'package p\n\nimport "testing"\n\n{source}\n'.encode())
    assert len(info.functions) == 1
    return info.functions[0]


def _t_param(name: str = "t") -> list[FieldInfo]:
    return [FieldInfo(names=[name], type_expr="*testing.T")]


class TestQualifyingDeclarations:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("func TestParse(t *testing.T) {}", Classification(ItemKind.TEST)),
            ("func Test(*testing.T) {}", Classification(ItemKind.TEST)),
            ("func Test1(*testing.T) {}", Classification(ItemKind.TEST)),
            ("func Test_underscore(t *testing.T) {}", Classification(ItemKind.TEST)),
            ("func BenchmarkRandInt(b *testing.B) {}", Classification(ItemKind.BENCHMARK)),
            ("func FuzzHex(f *testing.F) {}", Classification(ItemKind.FUZZ)),
            ("func Fuzz(*testing.F) {}", Classification(ItemKind.FUZZ)),
            ("func Benchmark(*testing.B) {}", Classification(ItemKind.BENCHMARK)),
        ],
    )
    def test_package_level(self, source: str, expected: Classification) -> None:
        assert classify(_decl(source)) == expected

    def test_suite_method(self) -> None:
        result = classify(_decl("func (s *MySuite) TestBuild(t *testing.T) {}"))
        assert result == Classification(ItemKind.TEST, suite="MySuite")

    def test_unnamed_suite_receiver(self) -> None:
        result = classify(_decl("func (*DBSuite) TestQuery(*testing.T) {}"))
        assert result == Classification(ItemKind.TEST, suite="DBSuite")

    def test_suite_benchmark(self) -> None:
        result = classify(_decl("func (s *LoadSuite) BenchmarkInsert(b *testing.B) {}"))
        assert result == Classification(ItemKind.BENCHMARK, suite="LoadSuite")

    def test_suite_entry_point_is_still_a_test(self) -> None:
        result = classify(_decl("func TestMySuite(t *testing.T) {}"))
        assert result == Classification(ItemKind.TEST)


class TestRejectedDeclarations:
    @pytest.mark.parametrize(
        "source",
        [
            "func TestornotTest(*testing.T) {}",
            "func Benchmarkfoo(b *testing.B) {}",
            "func Fuzzy(f *testing.F) {}",
            "func NotATest(*testing.T) {}",
            "func TestReturn(*testing.T) int { return 5 }",
            "func TestNamedResult(t *testing.T) (err error) { return nil }",
            "func TestTwoParams(t *testing.T, s string) {}",
            "func TestTwoParamsStringFirst(s string, t *testing.T) {}",
            "func TestOneParamWrong(s string) {}",
            "func TestNoParams() {}",
            "func TestValueParam(t testing.T) {}",
            "func TestWrongPairing(b *testing.B) {}",
            "func BenchmarkWrongPairing(t *testing.T) {}",
            "func FuzzWrongPairing(t *testing.T) {}",
            "func TestShared(a, b *testing.T) {}",
            "func TestVariadic(t ...*testing.T) {}",
        ],
    )
    def test_package_level(self, source: str) -> None:
        assert classify(_decl(source)) is None

    @pytest.mark.parametrize(
        "source",
        [
            "func (f *foo) TestMethod(*testing.T) {}",
            "func (foo) TestMethod2(*testing.T) {}",
            "func (s MySuite) TestValueReceiver(t *testing.T) {}",
            "func (s *MySuite) Testlower(t *testing.T) {}",
            "func (s *MySuite) TestTwo(t *testing.T, n int) {}",
        ],
    )
    def test_methods(self, source: str) -> None:
        assert classify(_decl(source)) is None


class TestSuiteName:
    def test_pointer_suite(self) -> None:
        decl = FuncDeclInfo(
            name="TestX",
            receiver=[FieldInfo(names=["s"], type_expr="*ApiSuite")],
            params=_t_param(),
        )
        assert suite_name(decl) == "ApiSuite"

    def test_plain_function(self) -> None:
        assert suite_name(FuncDeclInfo(name="TestX", params=_t_param())) is None

    def test_non_suite_type(self) -> None:
        decl = FuncDeclInfo(
            name="TestX",
            receiver=[FieldInfo(names=["h"], type_expr="*Helper")],
            params=_t_param(),
        )
        assert suite_name(decl) is None


class TestClassifyFromFields:
    @pytest.mark.parametrize("name", ["Test\u00aa", "Test\u00ba", "Test\u02b0", "Test\u03a3"])
    def test_suffix_not_starting_with_lowercase_letter(self, name: str) -> None:
        decl = FuncDeclInfo(name=name, params=_t_param())
        assert classify(decl) == Classification(ItemKind.TEST)

    @pytest.mark.parametrize("name", ["Test\u00e9t\u00e9", "Test\u03c3"])
    def test_suffix_starting_with_lowercase_letter(self, name: str) -> None:
        decl = FuncDeclInfo(name=name, params=_t_param())
        assert classify(decl) is None

    def test_unnamed_single_param(self) -> None:
        decl = FuncDeclInfo(name="TestX", params=[FieldInfo(type_expr="*testing.T")])
        assert classify(decl) == Classification(ItemKind.TEST)

    def test_results_reject(self) -> None:
        decl = FuncDeclInfo(
            name="TestX",
            params=_t_param(),
            results=[FieldInfo(type_expr="error")],
        )
        assert classify(decl) is None
