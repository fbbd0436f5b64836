"""Base class for language-specific declaration extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from gotestshard.parsing.treesitter import (
    SourceParseError,
    collect_error_ranges,
    has_parse_errors,
    parse_code,
)

if TYPE_CHECKING:
    import tree_sitter

    from gotestshard.parsing.treesitter import GoFileInfo


class LanguageExtractor(ABC):
    """Base class for language-specific extractors."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Tree-sitter language name."""

    def parse(self, source: bytes, *, path: str | Path = "<source>") -> tree_sitter.Node:
        """Parse *source* and return the root node.

        Raises:
            SourceParseError: The tree contains ERROR or MISSING nodes.
        """
        root = parse_code(source, self.language).root_node
        if has_parse_errors(root):
            raise SourceParseError(path, collect_error_ranges(root))
        return root

    def extract_file(self, file_path: str | Path) -> GoFileInfo:
        """Read and extract a file from disk."""
        path = Path(file_path)
        return self.extract(path.read_bytes(), path=path)

    @abstractmethod
    def extract(self, source: bytes, *, path: str | Path = "<source>") -> GoFileInfo:
        """Parse source and extract its top-level declarations."""
