"""Capabilities the resolution engine consumes from its host.

Any call may come back with ``None``; callers treat that exactly like an
empty answer. ``ForeignTooling.prepare_type_hierarchy`` returning ``None``
additionally means the hierarchy capability is not available at all.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from lsprotocol.types import Location, Position

    from contract.models import HierarchyNode, OutlineSymbol, WorkspaceSymbol


class TextBuffer(Protocol):
    """Read access to the document the query was issued from."""

    @property
    def uri(self) -> str: ...

    @property
    def path(self) -> Path: ...

    def read_line(self, index: int) -> str: ...


class FileSystem(Protocol):
    """File existence, workspace search and raw text access."""

    def file_exists(self, path: Path) -> bool: ...

    async def find_files(self, pattern: str, max_results: int) -> list[str]: ...

    def read_text(self, uri: str) -> str | None: ...


class ForeignTooling(Protocol):
    """Symbol, hierarchy and definition queries over the foreign codebase."""

    async def workspace_symbols(self, name: str) -> list[WorkspaceSymbol] | None: ...

    async def document_outline(self, uri: str) -> list[OutlineSymbol] | None: ...

    async def prepare_type_hierarchy(
        self, uri: str, position: Position
    ) -> list[HierarchyNode] | None: ...

    async def supertypes(self, node: HierarchyNode) -> list[HierarchyNode] | None: ...

    async def jump_to_definition(
        self, uri: str, position: Position
    ) -> list[Location] | None: ...


__all__ = ["FileSystem", "ForeignTooling", "TextBuffer"]
