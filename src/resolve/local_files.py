"""Resolution of references to sibling dialect files."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from utils import path_to_uri

if TYPE_CHECKING:
    from pathlib import Path

    from contract.capabilities import FileSystem

logger = logging.getLogger(__name__)


def candidate_filenames(name: str, extension: str) -> tuple[str, str]:
    """Plain and underscore-prefixed filenames, in priority order."""
    return (f"{name}.{extension}", f"_{name}.{extension}")


class LocalFileResolver:
    """Find ``name.ext`` or ``_name.ext`` near a document, then workspace-wide.

    Scopes are tried current directory, parent directory, workspace; within a
    scope the plain name wins over the underscore variant.
    """

    def __init__(self, files: FileSystem, extension: str = "dryck") -> None:
        self._files = files
        self._extension = extension

    async def resolve(self, name: str, start_directory: Path) -> str | None:
        filenames = candidate_filenames(name, self._extension)

        for directory in (start_directory, start_directory.parent):
            for filename in filenames:
                candidate = directory / filename
                if self._files.file_exists(candidate):
                    logger.debug("Resolved %r to %s", name, candidate)
                    return path_to_uri(candidate)

        for filename in filenames:
            results = await self._files.find_files(f"**/{filename}", 1)
            if results:
                logger.debug("Resolved %r to %s (workspace)", name, results[0])
                return results[0]

        return None


__all__ = ["LocalFileResolver", "candidate_filenames"]
