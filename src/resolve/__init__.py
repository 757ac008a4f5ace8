"""Resolution pipeline for marker references."""

from resolve.ancestry import AncestryWalker
from resolve.enclosing import find_enclosing_class
from resolve.foreign_symbols import ForeignSymbolResolver
from resolve.local_files import LocalFileResolver
from resolve.orchestrator import DefinitionResolver

__all__ = [
    "AncestryWalker",
    "DefinitionResolver",
    "ForeignSymbolResolver",
    "LocalFileResolver",
    "find_enclosing_class",
]
