"""Lookup of dialect functions implemented in the foreign codebase."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from contract.models import SymbolMatch
from resolve.enclosing import find_enclosing_class

if TYPE_CHECKING:
    from lsprotocol.types import Location

    from contract.capabilities import ForeignTooling
    from contract.models import WorkspaceSymbol
    from resolve.ancestry import AncestryWalker

logger = logging.getLogger(__name__)


def normalize_matches(name: str, symbols: list[WorkspaceSymbol]) -> list[SymbolMatch]:
    """Keep exact-name functions and methods, in index order."""
    matches: list[SymbolMatch] = []
    for symbol in symbols:
        if symbol.name != name:
            continue
        if symbol.kind == "function":
            matches.append(SymbolMatch("function", symbol.location, None))
        elif symbol.kind == "method":
            matches.append(
                SymbolMatch("method", symbol.location, symbol.container_name or None)
            )
    return matches


class ForeignSymbolResolver:
    """Top-level functions, plus methods of classes descending from the base."""

    def __init__(self, tooling: ForeignTooling, ancestry: AncestryWalker) -> None:
        self._tooling = tooling
        self._ancestry = ancestry

    async def resolve(self, name: str) -> list[Location]:
        symbols = await self._tooling.workspace_symbols(name)
        if not symbols:
            return []

        locations: list[Location] = []
        for match in normalize_matches(name, symbols):
            if match.kind == "function" or await self._method_qualifies(match):
                locations.append(match.location)
        return locations

    async def _method_qualifies(self, match: SymbolMatch) -> bool:
        uri = match.location.uri
        class_name = match.enclosing_class or await find_enclosing_class(
            self._tooling, uri, match.location.range.start
        )
        if class_name is None:
            logger.debug("No enclosing class for method at %s", uri)
            return False
        if await self._ancestry.is_descendant_of_base(uri, class_name):
            return True
        logger.debug("Discarding method of %s: not derived from the base", class_name)
        return False


__all__ = ["ForeignSymbolResolver", "normalize_matches"]
