"""Go-to-definition for marker references in dialect documents."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from contract.models import file_start
from parse.reference_tokens import extract_reference
from resolve.ancestry import AncestryWalker
from resolve.foreign_symbols import ForeignSymbolResolver
from resolve.local_files import LocalFileResolver

if TYPE_CHECKING:
    from lsprotocol.types import Location, Position

    from contract.capabilities import FileSystem, ForeignTooling, TextBuffer
    from contract.models import BaseClassRef

logger = logging.getLogger(__name__)


class DefinitionResolver:
    """Resolve the reference under a cursor to file or foreign locations.

    File references are tried first. Names without dots then fall back to the
    foreign symbol index; dotted names are always file references.
    """

    def __init__(
        self,
        files: FileSystem,
        tooling: ForeignTooling,
        base: BaseClassRef,
        *,
        extension: str = "dryck",
    ) -> None:
        self.local_files = LocalFileResolver(files, extension)
        self.foreign_symbols = ForeignSymbolResolver(
            tooling, AncestryWalker(tooling, files, base)
        )

    async def provide_definition(
        self, document: TextBuffer, position: Position
    ) -> list[Location]:
        token = extract_reference(document.read_line(position.line), position.character)
        if token is None:
            return []
        logger.debug("Reference %r (%s form) at %s", token.name, token.form, position)

        uri = await self.local_files.resolve(token.name, document.path.parent)
        if uri is not None:
            return [file_start(uri)]

        if token.is_dotted:
            return []
        return await self.foreign_symbols.resolve(token.name)


__all__ = ["DefinitionResolver"]
