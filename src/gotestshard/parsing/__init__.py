"""Go source parsing and declaration extraction."""

from gotestshard.parsing.languages import GoExtractor
from gotestshard.parsing.treesitter import (
    FieldInfo,
    FuncDeclInfo,
    GoFileInfo,
    SourceParseError,
    parse_code,
    type_expr_string,
)

__all__ = [
    "FieldInfo",
    "FuncDeclInfo",
    "GoExtractor",
    "GoFileInfo",
    "SourceParseError",
    "parse_code",
    "type_expr_string",
]
