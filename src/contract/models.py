"""In-memory models shared by the resolution engine and its backends.

Every column carried by these models is counted in Unicode code points.
Conversion to the editor's units happens at the LSP boundaries only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from lsprotocol.types import Location, Position, Range

SymbolKind = Literal["class", "function", "method"]
TokenForm = Literal["parenthesized", "colon", "bare"]


@dataclass(frozen=True)
class ReferenceToken:
    """A marker-prefixed reference found on a single line."""

    name: str
    start: int
    end: int
    form: TokenForm

    def contains(self, column: int) -> bool:
        return self.start <= column <= self.end

    @property
    def is_dotted(self) -> bool:
        return "." in self.name


@dataclass(frozen=True)
class OutlineSymbol:
    """A class, function or method from a document outline."""

    name: str
    kind: SymbolKind
    range: Range
    selection: Position
    container_name: str | None = None

    def brackets_line(self, line: int) -> bool:
        return self.range.start.line <= line <= self.range.end.line


@dataclass(frozen=True)
class WorkspaceSymbol:
    """A hit from a whole-workspace symbol search."""

    name: str
    kind: SymbolKind
    location: Location
    container_name: str | None = None


@dataclass(frozen=True)
class SymbolMatch:
    """A workspace symbol normalized for filtering."""

    kind: Literal["function", "method"]
    location: Location
    enclosing_class: str | None


@dataclass(frozen=True)
class HierarchyNode:
    """Opaque type-hierarchy handle, compared by ``(uri, name)``."""

    uri: str
    name: str
    handle: Any = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.uri, self.name)


@dataclass(frozen=True)
class BaseClassRef:
    """The well-known base class that qualifies methods as targets."""

    name: str = "Context"
    path_marker: str = "appeldryck"
    root_base: str = "object"

    def defined_in(self, uri: str) -> bool:
        return self.path_marker in uri

    def matches(self, name: str, uri: str) -> bool:
        return name == self.name and self.defined_in(uri)


def file_start(uri: str) -> Location:
    """Location pointing at the first character of a file."""
    origin = Position(line=0, character=0)
    return Location(uri=uri, range=Range(start=origin, end=origin))


__all__ = [
    "BaseClassRef",
    "HierarchyNode",
    "OutlineSymbol",
    "ReferenceToken",
    "SymbolKind",
    "SymbolMatch",
    "TokenForm",
    "WorkspaceSymbol",
    "file_start",
]
