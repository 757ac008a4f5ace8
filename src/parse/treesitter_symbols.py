"""Tree-sitter based outline extraction for Python sources."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lsprotocol.types import Position, Range
from tree_sitter import Language, Node, Parser
from tree_sitter_python import language as get_python_language

from contract.models import OutlineSymbol, SymbolKind

if TYPE_CHECKING:
    from pathlib import Path

_PARSER: Parser | None = None


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with Python language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_python_language())
        _PARSER = Parser(lang)

    return _PARSER


class _SourceLines:
    """Maps tree-sitter byte columns to code point columns."""

    def __init__(self, source_bytes: bytes) -> None:
        self._lines = source_bytes.split(b"\n")

    def position(self, point: tuple[int, int]) -> Position:
        row, byte_col = point
        if row < len(self._lines):
            prefix = self._lines[row][:byte_col]
            column = len(prefix.decode("utf-8", errors="replace"))
        else:
            column = byte_col
        return Position(line=row, character=column)


def _create_outline_symbol(
    node: Node,
    name_node: Node,
    lines: _SourceLines,
    kind: SymbolKind,
    name: str,
    parent_classes: list[str],
) -> OutlineSymbol:
    """Create an OutlineSymbol from a tree-sitter node."""
    return OutlineSymbol(
        name=name,
        kind=kind,
        range=Range(
            start=lines.position(node.start_point),
            end=lines.position(node.end_point),
        ),
        selection=lines.position(name_node.start_point),
        container_name=parent_classes[-1] if parent_classes else None,
    )


def _handle_class_definition(
    node: Node,
    symbols: list[OutlineSymbol],
    lines: _SourceLines,
    parent_classes: list[str],
) -> bool:
    """Process a class definition node. Returns True if handled."""
    name_node = node.child_by_field_name("name")
    if not (name_node and name_node.text):
        return False

    class_name = name_node.text.decode("utf8")
    symbols.append(
        _create_outline_symbol(
            node, name_node, lines, "class", class_name, parent_classes
        )
    )

    new_parents = [*parent_classes, class_name]
    for child in node.children:
        _traverse_node(child, symbols, lines, new_parents)
    return True


def _handle_function_definition(
    node: Node,
    symbols: list[OutlineSymbol],
    lines: _SourceLines,
    parent_classes: list[str],
) -> bool:
    """Process a function definition node. Returns True if handled.

    Function bodies are not traversed; nested functions are not indexed.
    """
    name_node = node.child_by_field_name("name")
    if not (name_node and name_node.text):
        return False

    func_name = name_node.text.decode("utf8")
    kind: SymbolKind = "method" if parent_classes else "function"
    symbols.append(
        _create_outline_symbol(node, name_node, lines, kind, func_name, parent_classes)
    )
    return True


def _traverse_node(
    node: Node,
    symbols: list[OutlineSymbol],
    lines: _SourceLines,
    parent_classes: list[str],
) -> None:
    """Traverse the syntax tree and collect symbols in pre-order."""
    if node.type == "class_definition" and _handle_class_definition(
        node, symbols, lines, parent_classes
    ):
        return

    if node.type == "function_definition" and _handle_function_definition(
        node, symbols, lines, parent_classes
    ):
        return

    for child in node.children:
        _traverse_node(child, symbols, lines, parent_classes)


def extract_outline_from_source(source_bytes: bytes) -> list[OutlineSymbol]:
    """Extract a flat pre-order outline from Python source bytes."""
    tree = _get_parser().parse(source_bytes)
    symbols: list[OutlineSymbol] = []
    _traverse_node(tree.root_node, symbols, _SourceLines(source_bytes), [])
    return symbols


def extract_outline_treesitter(file_path: Path) -> list[OutlineSymbol]:
    """Extract outline symbols from a Python file using Tree-sitter.

    Args:
        file_path: Absolute path to the Python file

    Returns:
        Classes, functions and methods in source order, nested classes and
        methods directly after their enclosing class.
    """
    try:
        source_bytes = file_path.read_bytes()
    except OSError:
        return []

    return extract_outline_from_source(source_bytes)


__all__ = ["extract_outline_from_source", "extract_outline_treesitter"]
