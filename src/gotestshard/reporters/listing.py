"""Render catalogs as JSON or as aligned template columns."""

from __future__ import annotations

import io
import json
import re
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from gotestshard.models.item import DiscoveredItem

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

JSON_FORMAT = "json"
DEFAULT_FORMAT = "{{.Pkg}}\t{{.Name}}\t{{.File}}"

# Same layout as text/tabwriter with minwidth 5 and padding 5
_MIN_COLUMN_WIDTH = 5
_COLUMN_PADDING = 5

_PLACEHOLDER_RE = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")
_COLUMN_RE = re.compile(r"(?:\{\{.*?\}\}|\S)+")


def _go_bool(value: bool) -> str:
    return "true" if value else "false"


FIELDS: dict[str, Callable[[DiscoveredItem], str]] = {
    "Name": lambda item: item.name,
    "Benchmark": lambda item: _go_bool(item.benchmark),
    "Fuzz": lambda item: _go_bool(item.fuzz),
    "Suite": lambda item: item.suite,
    "Pkg": lambda item: item.pkg,
    "File": lambda item: item.file,
}


class TemplateError(ValueError):
    """Raised for listing templates that reference unknown fields."""


class ListingTemplate:
    """A whitespace-separated list of column templates.

    Each column may mix literal text with ``{{.Field}}`` placeholders.
    """

    def __init__(self, fmt: str) -> None:
        self.source = fmt or DEFAULT_FORMAT
        self.columns: list[str] = _COLUMN_RE.findall(self.source)
        for column in self.columns:
            for name in _PLACEHOLDER_RE.findall(column):
                if name not in FIELDS:
                    msg = f"can't evaluate field {name} in type DiscoveredItem"
                    raise TemplateError(msg)

    def render_row(self, item: DiscoveredItem) -> list[str]:
        return [
            _PLACEHOLDER_RE.sub(lambda m: FIELDS[m.group(1)](item), column)
            for column in self.columns
        ]


def render_json(items: Sequence[DiscoveredItem]) -> str:
    """Render items as a compact JSON array of records."""
    return json.dumps([item.to_dict() for item in items], separators=(",", ":"))


def items_from_json(text: str) -> list[DiscoveredItem]:
    """Parse the output of :func:`render_json` back into items.

    Raises:
        ValueError: If the document is not a JSON array of records.
    """
    data: Any = json.loads(text)
    if not isinstance(data, list) or not all(isinstance(rec, dict) for rec in data):
        msg = "listing must be a JSON array of objects"
        raise ValueError(msg)
    return [DiscoveredItem.from_dict(rec) for rec in data]


def render_table(items: Sequence[DiscoveredItem], fmt: str = DEFAULT_FORMAT) -> str:
    """Render items through *fmt* with columns aligned like ``tabwriter``.

    Raises:
        TemplateError: The format references an unknown field.
    """
    template = ListingTemplate(fmt)
    rows = [template.render_row(item) for item in items]
    if not rows:
        return ""

    # Cell text plus padding, never narrower than the minimum
    widths = [
        max(_MIN_COLUMN_WIDTH, max(len(row[i]) for row in rows) + _COLUMN_PADDING)
        for i in range(len(template.columns))
    ]
    table = Table(
        box=None,
        show_header=False,
        show_edge=False,
        pad_edge=False,
        padding=0,
    )
    for width in widths:
        table.add_column(min_width=width, no_wrap=True)
    for row in rows:
        table.add_row(*(Text(cell) for cell in row))

    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=sum(widths) + 1,
        color_system=None,
        highlight=False,
        emoji=False,
    )
    console.print(table)
    return "\n".join(line.rstrip() for line in buffer.getvalue().splitlines())


def render_listing(items: Sequence[DiscoveredItem], fmt: str = DEFAULT_FORMAT) -> str:
    """Render items as JSON when *fmt* is ``json``, as aligned columns otherwise."""
    if fmt == JSON_FORMAT:
        return render_json(items)
    return render_table(items, fmt)
