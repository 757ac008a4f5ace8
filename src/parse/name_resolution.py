"""Module-level name resolution helpers for static jump-to-definition."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from parse.ast_imports import resolve_relative_import

if TYPE_CHECKING:
    from contract.models import OutlineSymbol
    from parse.ast_imports import ImportBinding


@dataclass(frozen=True)
class NameBinding:
    """A single local-name binding in a module-level name table."""

    local_name: str
    qualified_name: str
    strategy: str


NameTable = dict[str, NameBinding]

_DOTTED_EXPR = re.compile(
    r"[A-Za-z_][A-Za-z0-9_]*(?:\s*\.\s*[A-Za-z_][A-Za-z0-9_]*)*"
)
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def expression_at(line: str, column: int) -> str | None:
    """Dotted expression ending at the identifier under ``column``.

    For ``pkg.mod.Base`` with the cursor on ``mod`` this returns ``pkg.mod``.
    """
    for match in _DOTTED_EXPR.finditer(line):
        if not match.start() <= column <= match.end():
            continue
        for ident in _IDENTIFIER.finditer(line, match.start(), match.end()):
            if ident.start() <= column <= ident.end():
                return re.sub(r"\s+", "", line[match.start() : ident.end()])
    return None


def build_name_table(
    module_name: str,
    outline: list[OutlineSymbol],
    imports: list[ImportBinding],
    *,
    is_package: bool = False,
) -> NameTable:
    """Build per-module name table from top-level defs and imports.

    Imports are applied after local definitions, matching the common layout
    where a module re-exports under a name it does not define.
    """
    table: NameTable = {}

    for symbol in outline:
        if symbol.container_name is None and symbol.kind in {"class", "function"}:
            table[symbol.name] = NameBinding(
                local_name=symbol.name,
                qualified_name=(
                    f"{module_name}.{symbol.name}" if module_name else symbol.name
                ),
                strategy="module_local_def",
            )

    for binding in imports:
        module = binding.module
        if binding.level > 0:
            module = resolve_relative_import(
                module_name, module, binding.level, is_package=is_package
            )
        if binding.imported_name is None:
            table[binding.local_name] = NameBinding(
                local_name=binding.local_name,
                qualified_name=module,
                strategy="module_import_module",
            )
            continue
        qualified = (
            f"{module}.{binding.imported_name}" if module else binding.imported_name
        )
        table[binding.local_name] = NameBinding(
            local_name=binding.local_name,
            qualified_name=qualified,
            strategy="module_import_from",
        )

    return table


def qualify_expression(expr: str, name_table: NameTable) -> str | None:
    """Expand the head of a dotted expression through the name table."""
    head, _, rest = expr.partition(".")
    binding = name_table.get(head)
    if binding is None:
        return None
    return f"{binding.qualified_name}.{rest}" if rest else binding.qualified_name


__all__ = [
    "NameBinding",
    "NameTable",
    "build_name_table",
    "expression_at",
    "qualify_expression",
]
