"""Foreign tooling implementations and backend selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from backends.lsp_client import LanguageServerError, LanguageServerTooling
from backends.static_python import StaticPythonTooling

if TYPE_CHECKING:
    from pathlib import Path

    from contract.capabilities import ForeignTooling
    from rules.config import NavConfig
    from scan.files import WorkspaceFiles


async def start_backend(
    config: NavConfig, root: Path, files: WorkspaceFiles
) -> ForeignTooling:
    """Build (and for ``lsp``, start) the backend named by the configuration."""
    if config.backend == "lsp":
        tooling = LanguageServerTooling(
            config.language_server.command,
            root,
            files,
            request_timeout=config.language_server.request_timeout,
        )
        await tooling.start()
        return tooling
    return StaticPythonTooling(files, config.resolve_search_paths(root))


async def stop_backend(tooling: ForeignTooling) -> None:
    if isinstance(tooling, LanguageServerTooling):
        await tooling.stop()


__all__ = [
    "LanguageServerError",
    "LanguageServerTooling",
    "StaticPythonTooling",
    "start_backend",
    "stop_backend",
]
