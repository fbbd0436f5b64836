"""Tests for gotestshard.discovery.build_context."""

from __future__ import annotations

import pytest

from gotestshard.discovery.build_context import (
    BuildContext,
    ConstraintSyntaxError,
    evaluate_go_build,
    evaluate_plus_build,
    go_filenames,
    read_constraint_lines,
)


class TestFilenameConstraints:
    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("foo.go", True),
            ("foo_test.go", True),
            ("foo_linux.go", True),
            ("foo_linux_test.go", True),
            ("foo_windows.go", False),
            ("foo_windows_test.go", False),
            ("foo_amd64.go", True),
            ("foo_arm64.go", False),
            ("foo_linux_amd64.go", True),
            ("foo_linux_arm64.go", False),
            ("foo_darwin_amd64_test.go", False),
            ("linux.go", True),
            ("foo_bar.go", True),
        ],
    )
    def test_linux_amd64(self, linux_amd64: BuildContext, filename: str, expected: bool) -> None:
        assert linux_amd64.good_os_arch_file(filename) is expected

    def test_os_alias(self) -> None:
        ctx = BuildContext(goos="android", goarch="arm64")
        assert ctx.good_os_arch_file("foo_linux.go")
        assert ctx.good_os_arch_file("foo_android.go")
        assert not ctx.good_os_arch_file("foo_darwin.go")


class TestConstraintLines:
    def test_go_build_line(self) -> None:
        source = "//go:build linux && !cgo\n\npackage p\n"
        assert read_constraint_lines(source) == ("linux && !cgo", [])

    def test_plus_build_requires_blank_line(self) -> None:
        assert read_constraint_lines("// +build linux\npackage p\n") == ("", [])
        assert read_constraint_lines("// +build linux\n\npackage p\n") == ("", ["linux"])

    def test_stops_at_package_clause(self) -> None:
        source = "package p\n\n//go:build ignore\n"
        assert read_constraint_lines(source) == ("", [])

    def test_after_license_comment(self) -> None:
        source = "// Copyright 2024\n\n//go:build integration\n\npackage p\n"
        assert read_constraint_lines(source)[0] == "integration"


class TestPlusBuild:
    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("linux", True),
            ("windows", False),
            ("windows linux", True),
            ("linux,amd64", True),
            ("linux,arm64", False),
            ("!windows", True),
            ("!linux", False),
            ("!!linux", False),
            ("", True),
        ],
    )
    def test_evaluate(self, line: str, expected: bool) -> None:
        assert evaluate_plus_build(line, {"linux", "amd64"}) is expected


class TestGoBuild:
    @pytest.mark.parametrize(
        ("expr", "expected"),
        [
            ("linux", True),
            ("!linux", False),
            ("linux && amd64", True),
            ("linux && arm64", False),
            ("windows || amd64", True),
            ("!(windows || darwin)", True),
            ("(linux || darwin) && !integration", True),
            ("go1.18", True),
        ],
    )
    def test_evaluate(self, linux_amd64: BuildContext, expr: str, expected: bool) -> None:
        assert evaluate_go_build(expr, linux_amd64.satisfied_tags()) is expected

    @pytest.mark.parametrize("expr", ["linux &&", "(linux", "linux)", "&& linux", "linux $ amd64"])
    def test_syntax_errors(self, expr: str) -> None:
        with pytest.raises(ConstraintSyntaxError):
            evaluate_go_build(expr, {"linux"})


class TestShouldBuild:
    def test_custom_tag(self) -> None:
        source = "//go:build integration\n\npackage p\n"
        assert not BuildContext(goos="linux", goarch="amd64").should_build(source)
        assert BuildContext(goos="linux", goarch="amd64", tags=["integration"]).should_build(source)

    def test_go_build_takes_precedence(self, linux_amd64: BuildContext) -> None:
        source = "//go:build linux\n// +build windows\n\npackage p\n"
        assert linux_amd64.should_build(source)

    def test_plus_build_lines_are_anded(self, linux_amd64: BuildContext) -> None:
        source = "// +build linux\n// +build windows\n\npackage p\n"
        assert not linux_amd64.should_build(source)

    def test_unix_tag(self) -> None:
        source = "//go:build unix\n\npackage p\n"
        assert BuildContext(goos="darwin", goarch="arm64").should_build(source)
        assert not BuildContext(goos="windows", goarch="amd64").should_build(source)

    def test_cgo_tag(self) -> None:
        source = "//go:build cgo\n\npackage p\n"
        assert BuildContext(goos="linux", goarch="amd64", cgo=True).should_build(source)
        assert not BuildContext(goos="linux", goarch="amd64", cgo=False).should_build(source)

    def test_unconstrained(self, linux_amd64: BuildContext) -> None:
        assert linux_amd64.should_build("package p\n")


class TestGoFilenames:
    def test_filters_and_sorts(self) -> None:
        entries = ["z.go", "a_test.go", "_skip.go", ".hidden.go", "README.md", "b.go"]
        assert go_filenames(entries) == ["a_test.go", "b.go", "z.go"]


class TestDefaults:
    def test_environment_overrides_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOOS", "plan9")
        monkeypatch.setenv("GOARCH", "386")
        ctx = BuildContext()
        assert (ctx.goos, ctx.goarch) == ("plan9", "386")
