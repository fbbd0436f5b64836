"""Minimal ``.gitignore`` matcher used while walking package directories."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

_DOUBLE_STAR = "**"


@dataclass(frozen=True)
class IgnoreRule:
    """A single parsed ``.gitignore`` line."""

    segments: tuple[str, ...]
    negate: bool = False
    dir_only: bool = False
    anchored: bool = False

    def matches(self, rel_path: str, *, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        parts = [p for p in rel_path.split("/") if p]
        if not parts:
            return False
        if not self.anchored:
            return fnmatch.fnmatchcase(parts[-1], self.segments[0])
        return _match_segments(parts, list(self.segments))


def _match_segments(parts: list[str], pattern: list[str]) -> bool:
    """Match path segments against pattern segments; ``**`` spans any depth."""
    if not pattern:
        return not parts
    head = pattern[0]
    if head == _DOUBLE_STAR:
        return any(_match_segments(parts[i:], pattern[1:]) for i in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatch.fnmatchcase(parts[0], head) and _match_segments(parts[1:], pattern[1:])


def parse_rule(line: str) -> IgnoreRule | None:
    """Parse one ``.gitignore`` line, returning None for blanks and comments."""
    text = line.rstrip("\n").rstrip()
    if not text or text.startswith("#"):
        return None

    negate = False
    if text.startswith("!"):
        negate = True
        text = text[1:]
    elif text.startswith("\\"):
        text = text[1:]

    dir_only = text.endswith("/")
    text = text.rstrip("/")
    if not text:
        return None

    # A slash anywhere but the end anchors the pattern to the ignore file
    anchored = "/" in text
    text = text.lstrip("/")
    segments = tuple(s for s in text.split("/") if s)
    if not segments:
        return None
    return IgnoreRule(segments=segments, negate=negate, dir_only=dir_only, anchored=anchored)


class GitIgnore:
    """Ordered ignore rules; the last matching rule wins."""

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self.rules: list[IgnoreRule] = []
        for line in lines:
            rule = parse_rule(line)
            if rule is not None:
                self.rules.append(rule)

    @classmethod
    def from_file(cls, path: Path) -> GitIgnore:
        return cls(path.read_text(encoding="utf-8", errors="replace").splitlines())

    def add_patterns(self, patterns: Iterable[str]) -> None:
        for pattern in patterns:
            rule = parse_rule(pattern)
            if rule is not None:
                self.rules.append(rule)

    def matches(self, rel_path: str, *, is_dir: bool = True) -> bool:
        ignored = False
        for rule in self.rules:
            if rule.matches(rel_path, is_dir=is_dir):
                ignored = not rule.negate
        return ignored

    def __bool__(self) -> bool:
        return bool(self.rules)
