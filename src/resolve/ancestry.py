"""Inheritance checks against the well-known base class.

Two strategies answer the same question. The hierarchy-graph strategy walks
the foreign tooling's own supertype graph breadth-first. When that capability
(or the class's outline entry) is missing, the definition-chasing strategy
reads the class header, jumps to each base's definition and repeats from
there. The choice is made once per top-level query.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from lsprotocol.types import Position

from graph.algos import breadth_first_search, depth_first_search
from parse.class_headers import class_name_at, find_class_header, parse_base_list

if TYPE_CHECKING:
    from lsprotocol.types import Location

    from contract.capabilities import FileSystem, ForeignTooling
    from contract.models import BaseClassRef, HierarchyNode

logger = logging.getLogger(__name__)


class AncestryStrategy(Protocol):
    async def is_descendant(self, uri: str, class_name: str) -> bool: ...


@dataclass(frozen=True)
class ClassRef:
    """A class identified by the file that declares it and its simple name."""

    uri: str
    name: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.uri, self.name)


class HierarchyGraphStrategy:
    """Breadth-first search over ``supertypes`` edges from prepared roots."""

    def __init__(
        self,
        tooling: ForeignTooling,
        base: BaseClassRef,
        roots: list[HierarchyNode],
    ) -> None:
        self._tooling = tooling
        self._base = base
        self._roots = roots

    async def is_descendant(self, uri: str, class_name: str) -> bool:
        hit = await breadth_first_search(
            self._roots,
            self._tooling.supertypes,
            lambda node: self._base.matches(node.name, node.uri),
            key=lambda node: node.key,
        )
        logger.debug(
            "Hierarchy search for %s in %s: %s",
            class_name,
            uri,
            "found" if hit is not None else "not found",
        )
        return hit is not None


class DefinitionChasingStrategy:
    """Follow base-class names through jump-to-definition.

    Each ``(uri, class name)`` pair is expanded at most once per query, which
    bounds the walk by the number of distinct classes reached.
    """

    def __init__(
        self,
        tooling: ForeignTooling,
        files: FileSystem,
        base: BaseClassRef,
    ) -> None:
        self._tooling = tooling
        self._files = files
        self._base = base
        self._sources: dict[str, str | None] = {}

    async def is_descendant(self, uri: str, class_name: str) -> bool:
        found = await depth_first_search(
            ClassRef(uri, class_name),
            self._expand,
            key=lambda ref: ref.key,
        )
        logger.debug(
            "Definition chase for %s in %s: %s",
            class_name,
            uri,
            "found" if found else "not found",
        )
        return found

    def _source(self, uri: str) -> str | None:
        if uri not in self._sources:
            self._sources[uri] = self._files.read_text(uri)
        return self._sources[uri]

    async def _expand(self, ref: ClassRef) -> tuple[bool, list[ClassRef]]:
        source = self._source(ref.uri)
        if source is None:
            return False, []
        header = find_class_header(source, ref.name)
        if header is None:
            return False, []

        line_index, line = header
        successors: list[ClassRef] = []
        for base in parse_base_list(line_index, line, ref.name, self._base.root_base):
            position = Position(line=base.line, character=base.column)
            locations = await self._tooling.jump_to_definition(ref.uri, position)
            for location in locations or ():
                if self._base.defined_in(location.uri):
                    logger.debug("%s reaches the base through %s", ref.name, base.expr)
                    return True, []
                name = self._class_name_at(location)
                if name is not None:
                    successors.append(ClassRef(location.uri, name))
        return False, successors

    def _class_name_at(self, location: Location) -> str | None:
        source = self._source(location.uri)
        if source is None:
            return None
        lines = source.splitlines()
        line_index = location.range.start.line
        if not 0 <= line_index < len(lines):
            return None
        return class_name_at(lines[line_index], location.range.start.character)


class AncestryWalker:
    """Decide whether a foreign class descends from the well-known base."""

    def __init__(
        self,
        tooling: ForeignTooling,
        files: FileSystem,
        base: BaseClassRef,
    ) -> None:
        self._tooling = tooling
        self._files = files
        self._base = base

    async def select_strategy(self, uri: str, class_name: str) -> AncestryStrategy:
        outline = await self._tooling.document_outline(uri)
        symbol = next(
            (
                s
                for s in outline or ()
                if s.kind == "class" and s.name == class_name
            ),
            None,
        )
        if symbol is not None:
            roots = await self._tooling.prepare_type_hierarchy(uri, symbol.selection)
            if roots:
                logger.debug("Using the type hierarchy for %s", class_name)
                return HierarchyGraphStrategy(self._tooling, self._base, roots)
        logger.debug("Falling back to definition chasing for %s", class_name)
        return DefinitionChasingStrategy(self._tooling, self._files, self._base)

    async def is_descendant_of_base(self, uri: str, class_name: str) -> bool:
        strategy = await self.select_strategy(uri, class_name)
        return await strategy.is_descendant(uri, class_name)


__all__ = [
    "AncestryStrategy",
    "AncestryWalker",
    "ClassRef",
    "DefinitionChasingStrategy",
    "HierarchyGraphStrategy",
]
