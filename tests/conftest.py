"""Shared fixtures for gotestshard tests."""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest

from gotestshard.discovery.build_context import BuildContext

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def write_go() -> Callable[[Path, str, str], Path]:
    """Return a helper that writes dedented Go source into a directory."""

    def _write(directory: Path, name: str, source: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def linux_amd64() -> BuildContext:
    return BuildContext(goos="linux", goarch="amd64", tags=[], cgo=True)


@pytest.fixture(autouse=True)
def _isolate_go_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("GOOS", "GOARCH", "GOTESTSHARD_GOOS", "GOTESTSHARD_GOARCH"):
        monkeypatch.delenv(var, raising=False)
