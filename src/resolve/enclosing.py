"""Enclosing class lookup over a document outline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lsprotocol.types import Position

    from contract.capabilities import ForeignTooling
    from contract.models import OutlineSymbol


def innermost_class(symbols: list[OutlineSymbol], line: int) -> str | None:
    """Name of the innermost class whose range brackets ``line``.

    Outlines are flat pre-order lists, so a nested class always follows the
    class that contains it. Every class bracketing ``line`` is an ancestor of
    the next one in the list, which makes the last match the innermost class
    and the first match the outermost. Columns are ignored.
    """
    found: str | None = None
    for symbol in symbols:
        if symbol.kind == "class" and symbol.brackets_line(line):
            found = symbol.name
    return found


async def find_enclosing_class(
    tooling: ForeignTooling, uri: str, position: Position
) -> str | None:
    symbols = await tooling.document_outline(uri)
    if not symbols:
        return None
    return innermost_class(symbols, position.line)


__all__ = ["find_enclosing_class", "innermost_class"]
