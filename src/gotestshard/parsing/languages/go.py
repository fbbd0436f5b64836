"""Go declaration extractor."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gotestshard.parsing.languages.base import LanguageExtractor
from gotestshard.parsing.treesitter import (
    GO_LANGUAGE,
    FieldInfo,
    FuncDeclInfo,
    GoFileInfo,
    node_text,
    parse_code,
    type_expr_string,
)

if TYPE_CHECKING:
    from pathlib import Path

    import tree_sitter

_FUNC_NODES = frozenset({"function_declaration", "method_declaration"})
_PARAM_NODES = frozenset({"parameter_declaration", "variadic_parameter_declaration"})


class GoExtractor(LanguageExtractor):
    language = GO_LANGUAGE

    def extract(self, source: bytes, *, path: str | Path = "<source>") -> GoFileInfo:
        root = self.parse(source, path=path)
        return GoFileInfo(
            package_name=self._package_name(root),
            functions=[
                self._parse_function(child) for child in root.children if child.type in _FUNC_NODES
            ],
        )

    def read_package_name(self, source: bytes) -> str:
        """Return the package clause name, tolerating errors after the clause.

        Used for non-test files whose bodies are never inspected.
        """
        return self._package_name(parse_code(source, self.language).root_node)

    def _package_name(self, root: tree_sitter.Node) -> str:
        for child in root.children:
            if child.type == "package_clause":
                for sub in child.named_children:
                    if sub.type in {"package_identifier", "identifier"}:
                        return node_text(sub)
        return ""

    def _parse_function(self, node: tree_sitter.Node) -> FuncDeclInfo:
        name_node = node.child_by_field_name("name")
        receiver_node = node.child_by_field_name("receiver")
        params_node = node.child_by_field_name("parameters")
        result_node = node.child_by_field_name("result")

        return FuncDeclInfo(
            name=node_text(name_node),
            start_line=node.start_point.row + 1,
            receiver=self._parse_fields(receiver_node) if receiver_node is not None else None,
            params=self._parse_fields(params_node),
            results=self._parse_result(result_node),
        )

    def _parse_result(self, node: tree_sitter.Node | None) -> list[FieldInfo]:
        if node is None:
            return []
        if node.type == "parameter_list":
            return self._parse_fields(node)
        # Single unparenthesized result type
        return [FieldInfo(type_expr=type_expr_string(node))]

    def _parse_fields(self, node: tree_sitter.Node | None) -> list[FieldInfo]:
        if node is None:
            return []
        fields: list[FieldInfo] = []
        for child in node.named_children:
            if child.type not in _PARAM_NODES:
                continue
            names = [node_text(n) for n in child.children_by_field_name("name")]
            type_expr = type_expr_string(child.child_by_field_name("type"))
            if child.type == "variadic_parameter_declaration":
                type_expr = "..." + type_expr
            fields.append(FieldInfo(names=names, type_expr=type_expr))
        return fields
