"""Find test-like declarations in the Go package of a single directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from gotestshard.discovery.build_context import (
    TEST_SUFFIX,
    BuildContext,
    ConstraintSyntaxError,
    go_filenames,
)
from gotestshard.discovery.classifier import classify
from gotestshard.models.item import DiscoveredItem
from gotestshard.parsing.languages.go import GoExtractor

logger = logging.getLogger(__name__)

_XTEST_PACKAGE_SUFFIX = "_test"
_IGNORED_PACKAGE = "documentation"


class AnalysisError(Exception):
    """Raised when a directory cannot be read as a Go package."""


class MultiplePackageError(AnalysisError):
    """Raised when files in one directory declare different packages."""

    def __init__(self, directory: str, packages: list[str], files: list[str]) -> None:
        self.directory = directory
        self.packages = packages
        self.files = files
        super().__init__(
            f"found packages {packages[0]} ({files[0]}) and {packages[1]} ({files[1]}) "
            f"in {directory}"
        )


@dataclass
class PackageFiles:
    """Files of one directory that make up its package."""

    directory: Path
    name: str = ""
    go_files: list[str] = field(default_factory=list)
    test_go_files: list[str] = field(default_factory=list)
    xtest_go_files: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.go_files or self.test_go_files or self.xtest_go_files)


def import_dir(
    directory: str | Path,
    build: BuildContext | None = None,
    extractor: GoExtractor | None = None,
) -> PackageFiles:
    """Sort the ``.go`` files of *directory* into package, test, and external test files.

    Raises:
        AnalysisError: The directory cannot be listed, a file cannot be read,
            or a build constraint is malformed.
        MultiplePackageError: Files disagree on the package name.
    """
    ctx = build or BuildContext()
    go = extractor or GoExtractor()
    path = Path(directory)
    try:
        entries = [entry.name for entry in path.iterdir() if entry.is_file()]
    except OSError as e:
        raise AnalysisError(f"cannot read directory {path}: {e}") from e

    pkg = PackageFiles(directory=path)
    first_file = ""
    for filename in go_filenames(entries):
        if not ctx.good_os_arch_file(filename):
            logger.debug("Skipping %s: filename constraint", filename)
            continue

        file_path = path / filename
        try:
            source = file_path.read_bytes()
        except OSError as e:
            raise AnalysisError(f"cannot read {file_path}: {e}") from e

        text = source.decode("utf-8", errors="replace")
        try:
            if not ctx.should_build(text):
                logger.debug("Skipping %s: build constraints exclude file", filename)
                continue
        except ConstraintSyntaxError as e:
            raise AnalysisError(f"{file_path}: {e}") from e

        package_name = go.read_package_name(source)
        if not package_name:
            raise AnalysisError(f"{file_path}: expected 'package', found none")
        if package_name == _IGNORED_PACKAGE:
            continue

        is_test = filename.endswith(TEST_SUFFIX)
        is_xtest = False
        if is_test and package_name.endswith(_XTEST_PACKAGE_SUFFIX):
            is_xtest = True
            package_name = package_name[: -len(_XTEST_PACKAGE_SUFFIX)]

        if not pkg.name:
            pkg.name = package_name
            first_file = filename
        elif package_name != pkg.name:
            raise MultiplePackageError(
                str(path), [pkg.name, package_name], [first_file, filename]
            )

        if is_xtest:
            pkg.xtest_go_files.append(filename)
        elif is_test:
            pkg.test_go_files.append(filename)
        else:
            pkg.go_files.append(filename)

    return pkg


def analyze_dir(
    directory: str | Path,
    build: BuildContext | None = None,
) -> list[DiscoveredItem]:
    """Return the test-like declarations of the package in *directory*.

    A directory without any Go files yields an empty list.

    Raises:
        AnalysisError: The directory is not a readable, consistent package.
        SourceParseError: A test file is malformed.
    """
    extractor = GoExtractor()
    path = Path(directory).absolute()
    pkg = import_dir(path, build, extractor)
    if pkg.is_empty:
        logger.debug("No Go package in %s", path)
        return []

    items: list[DiscoveredItem] = []
    for filename in [*pkg.test_go_files, *pkg.xtest_go_files]:
        file_path = path / filename
        try:
            info = extractor.extract_file(file_path)
        except OSError as e:
            raise AnalysisError(f"cannot read {file_path}: {e}") from e
        for decl in info.functions:
            result = classify(decl)
            if result is None:
                continue
            items.append(
                DiscoveredItem(
                    name=decl.name,
                    kind=result.kind,
                    suite=result.suite,
                    pkg=info.package_name,
                    file=str(file_path),
                )
            )

    logger.debug("Found %d test declarations in %s", len(items), path)
    return items
