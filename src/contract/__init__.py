"""Models and capability interfaces shared across the navigation engine."""

from contract.capabilities import FileSystem, ForeignTooling, TextBuffer
from contract.models import (
    BaseClassRef,
    HierarchyNode,
    OutlineSymbol,
    ReferenceToken,
    SymbolKind,
    SymbolMatch,
    WorkspaceSymbol,
    file_start,
)

__all__ = [
    "BaseClassRef",
    "FileSystem",
    "ForeignTooling",
    "HierarchyNode",
    "OutlineSymbol",
    "ReferenceToken",
    "SymbolKind",
    "SymbolMatch",
    "TextBuffer",
    "WorkspaceSymbol",
    "file_start",
]
