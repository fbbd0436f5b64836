"""Configuration parsing from ``.gotestshard.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from gotestshard.discovery.build_context import KNOWN_ARCH, KNOWN_OS, BuildContext
from gotestshard.reporters.listing import DEFAULT_FORMAT

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".gotestshard.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

_DEFAULT_WORKERS = 4


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    return value if isinstance(value, dict) else {}


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def _int_value(section: dict[str, Any], key: str, default: int, *, where: str) -> int:
    """Read an integer setting; an empty value means *default*."""
    value = section.get(key)
    if value is None:
        return default
    msg = f"{where}.{key} must be an integer (got: {value!r})"
    if isinstance(value, bool):
        raise ValueError(msg)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(msg) from e


@dataclass
class ListConfig:
    """Listing output configuration."""

    format: str = DEFAULT_FORMAT
    """``json`` or a column template such as ``{{.Pkg}}\\t{{.Name}}``."""


@dataclass
class DistributeConfig:
    """Shard distribution configuration."""

    shards: int = 0
    """Number of automatic shards (0 = not configured)."""

    overrides: list[str] = field(default_factory=list)
    """Pinned matrix entries, each ``KeyA|KeyB``, appended after the shards."""


@dataclass
class BuildConfig:
    """Target platform for package file selection."""

    goos: str = ""
    """Target GOOS (empty = ``GOTESTSHARD_GOOS``, ``GOOS``, then host)."""

    goarch: str = ""
    """Target GOARCH (empty = ``GOTESTSHARD_GOARCH``, ``GOARCH``, then host)."""

    tags: list[str] = field(default_factory=list)
    """Additional build tags."""

    cgo: bool = True
    """Whether the ``cgo`` build tag is satisfied."""

    def to_context(self) -> BuildContext:
        goos = self.goos or os.environ.get("GOTESTSHARD_GOOS", "")
        goarch = self.goarch or os.environ.get("GOTESTSHARD_GOARCH", "")
        ctx = BuildContext(tags=list(self.tags), cgo=self.cgo)
        if goos:
            ctx.goos = goos
        if goarch:
            ctx.goarch = goarch
        return ctx


@dataclass
class DiscoveryConfig:
    """Directory walking and analysis configuration."""

    exclude: list[str] = field(default_factory=list)
    """Gitignore-style patterns of directories to skip when walking ``/...``."""

    workers: int = _DEFAULT_WORKERS
    """Directories analyzed concurrently."""


@dataclass
class ShardConfig:
    """Complete configuration from ``.gotestshard.yml``."""

    listing: ListConfig = field(default_factory=ListConfig)
    distribute: DistributeConfig = field(default_factory=DistributeConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for extension/debugging."""


def _parse_list_config(raw: dict[str, Any]) -> ListConfig:
    list_raw = _section(raw, "list")
    return ListConfig(format=str(list_raw.get("format") or DEFAULT_FORMAT))


def _parse_distribute_config(raw: dict[str, Any]) -> DistributeConfig:
    dist_raw = _section(raw, "distribute")
    return DistributeConfig(
        shards=_int_value(dist_raw, "shards", 0, where="distribute"),
        overrides=_str_list(dist_raw.get("overrides", [])),
    )


def _parse_build_config(raw: dict[str, Any]) -> BuildConfig:
    build_raw = _section(raw, "build")
    return BuildConfig(
        goos=str(build_raw.get("goos") or ""),
        goarch=str(build_raw.get("goarch") or ""),
        tags=_str_list(build_raw.get("tags", [])),
        cgo=build_raw.get("cgo") in {None, True, "true", "1", "yes"},
    )


def _parse_discovery_config(raw: dict[str, Any]) -> DiscoveryConfig:
    discovery_raw = _section(raw, "discovery")
    return DiscoveryConfig(
        exclude=_str_list(discovery_raw.get("exclude", [])),
        workers=_int_value(discovery_raw, "workers", _DEFAULT_WORKERS, where="discovery"),
    )


def load_config(root: str | Path) -> ShardConfig:
    """Load and parse ``.gotestshard.yml`` from *root*.

    Falls back to defaults when the file is missing or incomplete.
    """
    config_path = Path(root).resolve() / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.is_file():
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        logger.debug("Loaded configuration from %s", config_path)

    return ShardConfig(
        listing=_parse_list_config(raw),
        distribute=_parse_distribute_config(raw),
        build=_parse_build_config(raw),
        discovery=_parse_discovery_config(raw),
        raw=raw,
    )


def _validate_distribute_config(distribute: DistributeConfig) -> list[str]:
    errors: list[str] = []

    if distribute.shards < 0:
        errors.append(f"distribute.shards must be non-negative (got: {distribute.shards})")

    for idx, entry in enumerate(distribute.overrides):
        if not entry.strip("|").strip():
            errors.append(f"distribute.overrides[{idx}] must not be empty")

    return errors


def _validate_build_config(build: BuildConfig) -> list[str]:
    errors: list[str] = []

    if build.goos and build.goos not in KNOWN_OS:
        errors.append(f"build.goos is not a known GOOS (got: {build.goos})")

    if build.goarch and build.goarch not in KNOWN_ARCH:
        errors.append(f"build.goarch is not a known GOARCH (got: {build.goarch})")

    return errors


def _validate_discovery_config(discovery: DiscoveryConfig) -> list[str]:
    errors: list[str] = []

    if discovery.workers < 1:
        errors.append(f"discovery.workers must be at least 1 (got: {discovery.workers})")

    return errors


def validate_config(config: ShardConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []
    errors.extend(_validate_distribute_config(config.distribute))
    errors.extend(_validate_build_config(config.build))
    errors.extend(_validate_discovery_config(config.discovery))
    return errors
