"""AST-based import analysis for static name resolution."""

from __future__ import annotations

import ast
from dataclasses import dataclass


@dataclass(frozen=True)
class ImportBinding:
    """One name bound by an import statement.

    ``imported_name`` is None for ``import x`` forms, where the binding refers
    to a module rather than a member of one.
    """

    local_name: str
    module: str
    imported_name: str | None
    level: int
    line: int


def _process_import_node(node: ast.Import, bindings: list[ImportBinding]) -> None:
    """Process a standard import node (import x, import x.y as z)."""
    for alias in node.names:
        if alias.asname:
            local_name, module = alias.asname, alias.name
        else:
            # `import a.b` binds `a`.
            local_name = module = alias.name.split(".", 1)[0]
        bindings.append(ImportBinding(local_name, module, None, 0, node.lineno))


def _process_import_from_node(
    node: ast.ImportFrom, bindings: list[ImportBinding]
) -> None:
    """Process a from-import node (from x import y). Star imports bind nothing."""
    module = node.module or ""
    for alias in node.names:
        if alias.name == "*":
            continue
        bindings.append(
            ImportBinding(
                alias.asname or alias.name,
                module,
                alias.name,
                node.level,
                node.lineno,
            )
        )


def extract_imports(source: str, filename: str = "<unknown>") -> list[ImportBinding]:
    """Extract module-level import bindings from Python source.

    Imports nested in functions or classes are ignored. Later bindings of the
    same local name come after earlier ones, so callers building a table
    naturally keep the last one.
    """
    try:
        tree = ast.parse(source, filename)
    except (SyntaxError, ValueError):
        return []

    bindings: list[ImportBinding] = []
    stack: list[ast.AST] = list(reversed(tree.body))
    while stack:
        node = stack.pop()
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            continue
        if isinstance(node, ast.Import):
            _process_import_node(node, bindings)
        elif isinstance(node, ast.ImportFrom):
            _process_import_from_node(node, bindings)
        else:
            stack.extend(reversed(list(ast.iter_child_nodes(node))))

    bindings.sort(key=lambda b: b.line)
    return bindings


def resolve_relative_import(
    importing_module: str,
    relative_module: str,
    level: int,
    *,
    is_package: bool = False,
) -> str:
    """Resolve a relative import to an absolute module name.

    Args:
        importing_module: The module doing the import (e.g., "pkg.sub.mod")
        relative_module: The relative module name (e.g., "foo" from ".foo")
        level: Number of dots (1 for ".", 2 for "..", etc.)
        is_package: True when the importing module is a package ``__init__``,
            whose own name already denotes the package

    Returns:
        Absolute module name (e.g., "pkg.sub.foo")

    Examples:
        >>> resolve_relative_import("pkg.sub.mod", "foo", 1)
        'pkg.sub.foo'
        >>> resolve_relative_import("pkg.sub.mod", "", 1)
        'pkg.sub'
        >>> resolve_relative_import("pkg.sub.mod", "bar", 2)
        'pkg.bar'
        >>> resolve_relative_import("pkg", "core", 1, is_package=True)
        'pkg.core'
    """
    parts = importing_module.split(".") if importing_module else []
    drop = level - 1 if is_package else level

    if drop > len(parts):
        return relative_module or importing_module

    base_parts = parts[: len(parts) - drop]

    if relative_module:
        return ".".join([*base_parts, relative_module])
    if base_parts:
        return ".".join(base_parts)
    return importing_module


__all__ = ["ImportBinding", "extract_imports", "resolve_relative_import"]
