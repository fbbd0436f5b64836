"""Matrix serialization for inter-job artifact exchange."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def dumps_matrix(entries: Sequence[str]) -> str:
    """Render matrix entries as a compact JSON array."""
    return json.dumps(list(entries), separators=(",", ":"))


def loads_matrix(text: str) -> list[str]:
    """Parse a JSON matrix.

    Raises:
        ValueError: If the document is not a JSON array of strings.
    """
    data: Any = json.loads(text)
    if not isinstance(data, list) or not all(isinstance(entry, str) for entry in data):
        msg = "matrix must be a JSON array of strings"
        raise ValueError(msg)
    return data


def write_matrix(entries: Sequence[str], output_path: Path) -> None:
    """Write the matrix JSON to *output_path*, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dumps_matrix(entries) + "\n", encoding="utf-8")


def read_matrix(path: Path) -> list[str]:
    """Read a matrix file written by :func:`write_matrix`."""
    return loads_matrix(path.read_text(encoding="utf-8"))
