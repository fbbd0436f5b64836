"""Command-line interface for listing and sharding Go tests."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
import yaml
from rich.logging import RichHandler
from rich.markup import escape

from gotestshard import __version__
from gotestshard.config import ShardConfig, load_config, validate_config
from gotestshard.discovery.analyzer import AnalysisError
from gotestshard.discovery.catalog import NoTestsFoundError
from gotestshard.discovery.parallel import build_catalog
from gotestshard.models.item import DiscoveredItem
from gotestshard.parsing.treesitter import SourceParseError
from gotestshard.reporters.listing import JSON_FORMAT, ListingTemplate, TemplateError, render_listing
from gotestshard.reporters.terminal import console, reporter
from gotestshard.sharding.distributor import distribute, plan_shards, target_size
from gotestshard.sharding.matrix import dumps_matrix, write_matrix
from gotestshard.utils.packages import PackageResolutionError, resolve_dirs

logger = logging.getLogger(__name__)

_PACKAGE_LOGGER = "gotestshard"

# Errors from the discovery pipeline that end the run with exit status 1
_RUN_ERRORS = (
    PackageResolutionError,
    AnalysisError,
    SourceParseError,
    NoTestsFoundError,
    OSError,
)


def _configure_logging(*, verbose: bool) -> None:
    """Route package logs to stderr through rich."""
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=console, show_path=False, show_time=False))
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_config_or_abort(path: str) -> ShardConfig:
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e
    errors = validate_config(config)
    if errors:
        for error in errors:
            reporter.print_error(error)
        raise click.Abort
    return config


def _discover(packages: tuple[str, ...], config: ShardConfig) -> list[DiscoveredItem]:
    """Resolve *packages*, analyze them, and return the sorted catalog items."""
    try:
        dirs = resolve_dirs(packages, exclude=config.discovery.exclude)
        catalog = build_catalog(
            dirs,
            config.build.to_context(),
            workers=config.discovery.workers,
        )
        items = catalog.items()
    except _RUN_ERRORS as e:
        reporter.print_error(str(e))
        raise click.Abort from e
    logger.debug("Discovered %d tests in %d directories", len(items), len(dirs))
    return items


def _config_to_dict(config: ShardConfig) -> dict[str, Any]:
    """Convert ShardConfig to dictionary for display."""
    result = asdict(config)
    # Unresolved YAML is not part of the effective settings
    result.pop("raw", None)
    return result


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log progress and show the shard plan.")
@click.version_option(version=__version__, prog_name="gotestshard")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """List Go tests and split them into CI shards.

    Packages are directories (``.``, ``./pkg``), import paths, or either
    followed by ``/...`` to include every package below.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose=verbose)


@cli.command("list")
@click.argument("packages", nargs=-1, required=True)
@click.option(
    "-f",
    "--format",
    "fmt",
    default=None,
    help='Output format: "json" or a column template (default "{{.Pkg}}\\t{{.Name}}\\t{{.File}}").',
)
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Directory holding .gotestshard.yml.",
)
def list_tests(packages: tuple[str, ...], fmt: str | None, path: str) -> None:
    """List tests, benchmarks, and fuzz targets found in PACKAGES.

    Example:
      gotestshard list ./...
      gotestshard list -f json ./...
      gotestshard list -f "{{.Suite}} {{.Name}}" ./pkg/...
    """
    config = _load_config_or_abort(path)
    output_format = fmt if fmt is not None else config.listing.format

    if output_format != JSON_FORMAT:
        try:
            ListingTemplate(output_format)
        except TemplateError as e:
            raise click.BadParameter(str(e), param_hint="'--format'") from e

    items = _discover(packages, config)
    rendered = render_listing(items, output_format)
    if rendered:
        click.echo(rendered)


@cli.command("distribute")
@click.argument("packages", nargs=-1, required=True)
@click.option(
    "-n",
    "--shards",
    "shard_count",
    type=int,
    default=None,
    help="Number of automatic matrix entries (default: distribute.shards).",
)
@click.option(
    "-o",
    "--override",
    "overrides",
    multiple=True,
    help="Pinned matrix entry such as 'FooSuite|TestBar'; repeatable.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the matrix JSON to this file.",
)
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Directory holding .gotestshard.yml.",
)
@click.pass_context
def distribute_tests(
    ctx: click.Context,
    packages: tuple[str, ...],
    shard_count: int | None,
    overrides: tuple[str, ...],
    output_path: str | None,
    path: str,
) -> None:
    """Split tests in PACKAGES into a JSON matrix of shard entries.

    Each entry can be passed to ``go test -run '(<entry>)/'``.

    Example:
      gotestshard distribute -n 4 ./...
      gotestshard distribute -n 3 -o 'SlowSuite' ./...
    """
    config = _load_config_or_abort(path)
    count = shard_count if shard_count is not None else config.distribute.shards
    pinned = list(overrides) if overrides else list(config.distribute.overrides)

    if count < 1:
        raise click.UsageError(
            f"shard count must be >= 1, got {count} (use --shards or distribute.shards)"
        )

    items = _discover(packages, config)
    matrix = distribute(items, count, pinned)
    click.echo(dumps_matrix(matrix))

    empty = sum(1 for entry in matrix[:count] if not entry)
    if empty:
        reporter.print_warning(f"{empty} of {count} shards received no tests")

    verbose = ctx.obj.get("verbose", False) if ctx.obj else False
    if verbose:
        reporter.print_shard_plan(
            plan_shards(items, count, pinned), pinned, target_size(len(items), count)
        )

    if output_path is not None:
        try:
            write_matrix(matrix, Path(output_path))
        except OSError as e:
            reporter.print_error(f"Failed to write matrix to {output_path}: {e}")
            raise click.Abort from e
        reporter.print_info(f"Matrix written to {output_path}")


@cli.group("config")
def config_group() -> None:
    """Inspect `.gotestshard.yml` configuration."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Directory holding .gotestshard.yml.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration.

    Example:
      gotestshard config show
      gotestshard config show --json-output
    """
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config_dict = _config_to_dict(config)
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Directory holding .gotestshard.yml.",
)
def config_validate(path: str) -> None:
    """Validate `.gotestshard.yml`.

    Example:
      gotestshard config validate
    """
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    errors = validate_config(config)
    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{escape(error)}[/red]", highlight=False)
    raise click.Abort
