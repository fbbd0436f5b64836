"""Language-specific declaration extractors."""

from __future__ import annotations

from gotestshard.parsing.languages.base import LanguageExtractor
from gotestshard.parsing.languages.go import GoExtractor

__all__ = [
    "GoExtractor",
    "LanguageExtractor",
]
