"""Terminal reporter with rich output formatting.

Everything here writes to stderr; stdout is reserved for listings and
matrices so they can be piped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from gotestshard.sharding.distributor import Shard

console = Console(stderr=True)

_MAX_KEYS_DISPLAY = 6


class CLIReporter:
    """Rich terminal output reporter for discovery and distribution runs."""

    def __init__(self, output: Console | None = None) -> None:
        """Initialize the CLI reporter."""
        self.console = output or console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{escape(message)}[/dim]")

    def print_shard_plan(self, shards: list[Shard], overrides: list[str], target: int) -> None:
        """Print the automatic shards and pinned overrides as a table."""
        table = Table(title=f"Shard plan (target {target} tests per shard)")
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Tests", justify="right")
        table.add_column("Groups", justify="right")
        table.add_column("Keys")

        for shard in shards:
            size_style = "red" if shard.size > target else "green"
            keys = ", ".join(shard.keys[:_MAX_KEYS_DISPLAY])
            if len(shard.keys) > _MAX_KEYS_DISPLAY:
                keys += f" (+{len(shard.keys) - _MAX_KEYS_DISPLAY} more)"
            table.add_row(
                str(shard.index),
                f"[{size_style}]{shard.size}[/{size_style}]",
                str(len(shard.keys)),
                escape(keys) or "[dim]empty[/dim]",
            )
        for offset, entry in enumerate(overrides, start=len(shards) + 1):
            table.add_row(str(offset), "[dim]-[/dim]", "[dim]pinned[/dim]", escape(entry))

        self.console.print(table)


reporter = CLIReporter()
