"""Discovery of Go test declarations."""

from gotestshard.discovery.analyzer import (
    AnalysisError,
    MultiplePackageError,
    analyze_dir,
    import_dir,
)
from gotestshard.discovery.build_context import BuildContext
from gotestshard.discovery.catalog import Catalog, NoTestsFoundError
from gotestshard.discovery.classifier import Classification, classify
from gotestshard.discovery.parallel import analyze_dirs, build_catalog

__all__ = [
    "AnalysisError",
    "BuildContext",
    "Catalog",
    "Classification",
    "MultiplePackageError",
    "NoTestsFoundError",
    "analyze_dir",
    "analyze_dirs",
    "build_catalog",
    "classify",
    "import_dir",
]
