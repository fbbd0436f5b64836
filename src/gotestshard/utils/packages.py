"""Resolve package arguments (``./...``, import paths) to directories."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

from gotestshard.utils.gitignore import GitIgnore

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

RECURSIVE_SUFFIX = "/..."
_GO_MOD = "go.mod"
_GITIGNORE = ".gitignore"
_MODULE_RE = re.compile(r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE)

# Directory names the Go tool never matches with ``./...``
_SKIPPED_DIR_NAMES = frozenset({"testdata", "vendor"})


class PackageResolutionError(Exception):
    """Raised when a package argument cannot be mapped to a directory."""


def recursive_arg(arg: str) -> tuple[str, bool]:
    """Strip a trailing ``/...`` and report whether it was present."""
    if arg.endswith(RECURSIVE_SUFFIX):
        return arg[: -len(RECURSIVE_SUFFIX)] or "/", True
    return arg, False


def find_module(start: Path) -> tuple[str, Path] | None:
    """Find the enclosing ``go.mod`` and return ``(module_path, module_root)``."""
    for candidate in [start, *start.parents]:
        go_mod = candidate / _GO_MOD
        if go_mod.is_file():
            match = _MODULE_RE.search(go_mod.read_text(encoding="utf-8", errors="replace"))
            if match:
                return match.group(1), candidate
            return None
    return None


def _gopath_roots() -> list[Path]:
    raw = os.environ.get("GOPATH", "")
    roots = [Path(p) for p in raw.split(os.pathsep) if p]
    return roots or [Path.home() / "go"]


def abs_dir(arg: str, cwd: Path | None = None) -> Path:
    """Map one package argument to an absolute directory.

    Paths starting with ``.`` (and absolute paths) are taken literally;
    anything else is an import path, looked up in the enclosing module and
    then under ``$GOPATH/src``.

    Raises:
        PackageResolutionError: No existing directory matches *arg*.
    """
    base = (cwd or Path.cwd()).absolute()
    if arg.startswith(".") or os.path.isabs(arg):
        path = Path(os.path.normpath(base / arg))
        if not path.is_dir():
            raise PackageResolutionError(f"directory {path} does not exist")
        return path

    module = find_module(base)
    if module is not None:
        module_path, module_root = module
        if arg == module_path:
            return module_root
        if arg.startswith(module_path + "/"):
            path = module_root / arg[len(module_path) + 1 :]
            if path.is_dir():
                return path
            raise PackageResolutionError(f"cannot find package {arg!r} in module {module_path}")

    for gopath in _gopath_roots():
        path = gopath / "src" / arg
        if path.is_dir():
            return path.absolute()

    raise PackageResolutionError(f"cannot find package {arg!r}")


def _skip_dir(name: str) -> bool:
    return name.startswith((".", "_")) or name in _SKIPPED_DIR_NAMES


def _raise_walk_error(err: OSError) -> None:
    raise err


def walk_dirs(root: Path, exclude: Iterable[str] = ()) -> list[Path]:
    """List *root* and every directory below it that may hold a package.

    Skips VCS and hidden directories, ``testdata``, ``vendor``, and anything
    matched by the root's ``.gitignore`` or by *exclude* patterns.
    """
    ignore = GitIgnore()
    gitignore = root / _GITIGNORE
    if gitignore.is_file():
        ignore = GitIgnore.from_file(gitignore)
    ignore.add_patterns(exclude)

    found: list[Path] = []
    for current, dirnames, _files in os.walk(root, onerror=_raise_walk_error):
        current_path = Path(current)
        found.append(current_path)
        rel_dir = current_path.relative_to(root)
        kept: list[str] = []
        for name in sorted(dirnames):
            if _skip_dir(name):
                continue
            rel = (rel_dir / name).as_posix()
            if ignore.matches(rel, is_dir=True):
                logger.debug("Skipping ignored directory %s", rel)
                continue
            kept.append(name)
        dirnames[:] = kept
    return found


def resolve_dirs(
    args: Iterable[str],
    *,
    cwd: Path | None = None,
    exclude: Iterable[str] = (),
) -> list[str]:
    """Resolve package arguments into a sorted list of unique absolute directories.

    Raises:
        PackageResolutionError: An argument does not name an existing package.
        OSError: A directory tree cannot be walked.
    """
    patterns = list(exclude)
    arg_list = list(args)
    dirs: set[str] = set()
    for raw in arg_list:
        arg, recursive = recursive_arg(raw)
        directory = abs_dir(arg, cwd)
        dirs.add(str(directory))
        if recursive:
            dirs.update(str(d) for d in walk_dirs(directory, patterns))
    logger.debug("Resolved %d package arguments to %d directories", len(arg_list), len(dirs))
    return sorted(dirs)
