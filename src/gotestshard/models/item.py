"""Discovered test-like declarations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

SUITE_SUFFIX = "Suite"


class ItemKind(Enum):
    """Kind of a test-like declaration."""

    TEST = "test"
    BENCHMARK = "benchmark"
    FUZZ = "fuzz"

    @property
    def prefix(self) -> str:
        """Required name prefix (``Test``, ``Benchmark``, ``Fuzz``)."""
        return self.name.capitalize()


@dataclass(frozen=True)
class DiscoveredItem:
    """A single test, benchmark, or fuzz target found in a ``*_test.go`` file."""

    name: str
    """Declaration identifier (``TestParse``)."""

    kind: ItemKind = ItemKind.TEST

    suite: str = ""
    """Receiver type name for suite methods, empty for package-level functions."""

    pkg: str = ""
    """Package clause of the declaring file (``foo`` or ``foo_test``)."""

    file: str = ""
    """Absolute path of the declaring file."""

    @property
    def benchmark(self) -> bool:
        return self.kind is ItemKind.BENCHMARK

    @property
    def fuzz(self) -> bool:
        return self.kind is ItemKind.FUZZ

    @property
    def sort_key(self) -> str:
        return self.pkg + self.name

    @property
    def grouping_key(self) -> str | None:
        """Key used to bucket the item when distributing.

        Suite methods group under their suite.  Package-level items group
        under their own name, except names ending in ``Suite``: those are
        usually the ``TestXxxSuite`` entry points that launch a suite and are
        left out of distribution (``None``).
        """
        if self.suite:
            return self.suite
        if self.name.endswith(SUITE_SUFFIX):
            return None
        return self.name

    def __str__(self) -> str:
        return f"{self.pkg} {self.name} {self.file}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "benchmark": self.benchmark,
            "fuzz": self.fuzz,
            "suite": self.suite,
            "pkg": self.pkg,
            "file": self.file,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiscoveredItem:
        if data.get("benchmark"):
            kind = ItemKind.BENCHMARK
        elif data.get("fuzz"):
            kind = ItemKind.FUZZ
        else:
            kind = ItemKind.TEST
        return cls(
            name=str(data["name"]),
            kind=kind,
            suite=str(data.get("suite", "")),
            pkg=str(data.get("pkg", "")),
            file=str(data.get("file", "")),
        )
