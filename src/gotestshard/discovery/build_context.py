"""Select the files of a directory that form its Go package.

Reproduces the parts of the Go toolchain's package loading that decide which
``.go`` files belong to the package for a target platform: ignored names,
``_GOOS``/``_GOARCH`` filename suffixes, and ``//go:build`` / ``// +build``
constraints.
"""

from __future__ import annotations

import logging
import os
import platform
import re
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

KNOWN_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "js",
        "linux",
        "nacl",
        "netbsd",
        "openbsd",
        "plan9",
        "solaris",
        "wasip1",
        "windows",
        "zos",
    }
)

KNOWN_ARCH = frozenset(
    {
        "386",
        "amd64",
        "amd64p32",
        "arm",
        "armbe",
        "arm64",
        "arm64be",
        "loong64",
        "mips",
        "mipsle",
        "mips64",
        "mips64le",
        "mips64p32",
        "mips64p32le",
        "ppc",
        "ppc64",
        "ppc64le",
        "riscv",
        "riscv64",
        "s390",
        "s390x",
        "sparc",
        "sparc64",
        "wasm",
    }
)

UNIX_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "linux",
        "netbsd",
        "openbsd",
        "solaris",
    }
)

# GOOS values that also satisfy another GOOS name
_OS_ALIASES: dict[str, str] = {
    "android": "linux",
    "illumos": "solaris",
    "ios": "darwin",
}

_PYTHON_ARCH_TO_GO: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}

# Highest go1.N release tag considered satisfied
_GO_RELEASE_MINOR = 30

TEST_SUFFIX = "_test.go"


def host_goos() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform in {"win32", "cygwin"}:
        return "windows"
    for name in KNOWN_OS:
        if sys.platform.startswith(name):
            return name
    return sys.platform


def host_goarch() -> str:
    return _PYTHON_ARCH_TO_GO.get(platform.machine().lower(), platform.machine().lower())


@dataclass
class BuildContext:
    """Target platform and tags used to select package files."""

    goos: str = field(default_factory=lambda: os.environ.get("GOOS") or host_goos())
    goarch: str = field(default_factory=lambda: os.environ.get("GOARCH") or host_goarch())
    tags: list[str] = field(default_factory=list)
    """Extra build tags (``-tags``)."""
    cgo: bool = True

    def satisfied_tags(self) -> set[str]:
        tags = {self.goos, self.goarch, *self.tags}
        alias = _OS_ALIASES.get(self.goos)
        if alias:
            tags.add(alias)
        if self.goos in UNIX_OS:
            tags.add("unix")
        if self.cgo:
            tags.add("cgo")
        tags.update(f"go1.{minor}" for minor in range(1, _GO_RELEASE_MINOR + 1))
        return tags

    def match_os(self, name: str) -> bool:
        return name == self.goos or _OS_ALIASES.get(self.goos) == name

    def good_os_arch_file(self, filename: str) -> bool:
        """Check ``name_GOOS_GOARCH[_test].go`` style filename constraints."""
        name = filename.split(".", 1)[0]
        underscore = name.find("_")
        if underscore < 0:
            return True
        parts = name[underscore:].split("_")
        if parts and parts[-1] == "test":
            parts = parts[:-1]
        n = len(parts)
        if n >= 2 and parts[n - 2] in KNOWN_OS and parts[n - 1] in KNOWN_ARCH:
            return self.match_os(parts[n - 2]) and parts[n - 1] == self.goarch
        if n >= 1 and parts[n - 1] in KNOWN_OS:
            return self.match_os(parts[n - 1])
        if n >= 1 and parts[n - 1] in KNOWN_ARCH:
            return parts[n - 1] == self.goarch
        return True

    def should_build(self, source: str) -> bool:
        """Evaluate the build constraints found in the file header."""
        go_build, plus_build = read_constraint_lines(source)
        tags = self.satisfied_tags()
        if go_build:
            return evaluate_go_build(go_build, tags)
        return all(evaluate_plus_build(line, tags) for line in plus_build)


# ── Constraint lines ─────────────────────────────────────────────

_GO_BUILD_RE = re.compile(r"^//go:build(?:\s+(.*))?$")
_PLUS_BUILD_RE = re.compile(r"^//\s*\+build(?:\s+(.*))?$")


def read_constraint_lines(source: str) -> tuple[str, list[str]]:
    """Collect build constraints from the comment header of *source*.

    Only line comments before the package clause count.  ``// +build`` lines
    must be followed by a blank line to take effect.

    Returns:
        The ``//go:build`` expression (empty if absent) and the list of
        ``// +build`` argument strings.
    """
    go_build = ""
    plus_build: list[str] = []
    pending: list[str] = []
    for raw in source.splitlines():
        line = raw.strip()
        if not line:
            plus_build.extend(pending)
            pending = []
            continue
        if not line.startswith("//"):
            break
        m = _GO_BUILD_RE.match(line)
        if m and not go_build:
            go_build = (m.group(1) or "").strip()
            continue
        m = _PLUS_BUILD_RE.match(line)
        if m:
            pending.append((m.group(1) or "").strip())
    return go_build, plus_build


def evaluate_plus_build(line: str, tags: set[str]) -> bool:
    """Evaluate ``// +build`` arguments: spaces OR, commas AND, ``!`` negates."""
    options = line.split()
    if not options:
        return True
    for option in options:
        if all(_term(term, tags) for term in option.split(",")):
            return True
    return False


def _term(term: str, tags: set[str]) -> bool:
    if term.startswith("!!"):
        return False
    if term.startswith("!"):
        return term[1:] not in tags
    return term in tags


_TOKEN_RE = re.compile(r"\s*(\(|\)|&&|\|\||!|[A-Za-z0-9_.]+)")


class ConstraintSyntaxError(ValueError):
    """Raised for an unparsable ``//go:build`` expression."""


def evaluate_go_build(expr: str, tags: set[str]) -> bool:
    """Evaluate a ``//go:build`` boolean expression against *tags*."""
    tokens = _tokenize(expr)
    parser = _ExprParser(tokens, tags)
    value = parser.parse_or()
    if parser.pos != len(tokens):
        raise ConstraintSyntaxError(f"unexpected token in build constraint: {expr!r}")
    return value


def _tokenize(expr: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    stripped = expr.rstrip()
    while pos < len(stripped):
        m = _TOKEN_RE.match(stripped, pos)
        if m is None:
            raise ConstraintSyntaxError(f"invalid build constraint: {expr!r}")
        tokens.append(m.group(1))
        pos = m.end()
    return tokens


class _ExprParser:
    """Recursive-descent parser: or := and ('||' and)*; and := not ('&&' not)*."""

    def __init__(self, tokens: list[str], tags: set[str]) -> None:
        self.tokens = tokens
        self.tags = tags
        self.pos = 0

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ConstraintSyntaxError("unexpected end of build constraint")
        self.pos += 1
        return token

    def parse_or(self) -> bool:
        value = self.parse_and()
        while self._peek() == "||":
            self.pos += 1
            rhs = self.parse_and()
            value = value or rhs
        return value

    def parse_and(self) -> bool:
        value = self.parse_not()
        while self._peek() == "&&":
            self.pos += 1
            rhs = self.parse_not()
            value = value and rhs
        return value

    def parse_not(self) -> bool:
        token = self._next()
        if token == "!":
            return not self.parse_not()
        if token == "(":
            value = self.parse_or()
            if self._next() != ")":
                raise ConstraintSyntaxError("missing ')' in build constraint")
            return value
        if token in {")", "&&", "||"}:
            raise ConstraintSyntaxError(f"unexpected {token!r} in build constraint")
        return token in self.tags


# ── File selection ───────────────────────────────────────────────


def is_ignored_name(filename: str) -> bool:
    return filename.startswith(("_", "."))


def go_filenames(entries: Iterable[str]) -> list[str]:
    """Filter directory entries down to candidate ``.go`` files, sorted."""
    return sorted(
        name for name in entries if name.endswith(".go") and not is_ignored_name(name)
    )
