"""Language server answering go-to-definition for dialect documents."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from lsprotocol import types
from pygls.server import LanguageServer

from backends import LanguageServerError, start_backend, stop_backend
from resolve.orchestrator import DefinitionResolver
from rules.config import ConfigError, NavConfig, load_config
from scan.files import WorkspaceFiles

if TYPE_CHECKING:
    from pygls.workspace import TextDocument

    from contract.capabilities import ForeignTooling

logger = logging.getLogger(__name__)


class DocumentBuffer:
    """``TextBuffer`` view of a pygls workspace document."""

    def __init__(self, document: TextDocument) -> None:
        self._document = document

    @property
    def uri(self) -> str:
        return self._document.uri

    @property
    def path(self) -> Path:
        return Path(self._document.path)

    def read_line(self, index: int) -> str:
        lines = self._document.lines
        if not 0 <= index < len(lines):
            return ""
        return lines[index].rstrip("\r\n")


class DryckLanguageServer(LanguageServer):
    """pygls server holding one resolver per workspace session."""

    def __init__(self) -> None:
        super().__init__("dryck-nav", "v0.1.0")
        self.config: NavConfig = NavConfig()
        self.resolver: DefinitionResolver | None = None
        self.tooling: ForeignTooling | None = None
        self.default_root: Path | None = None
        self._setup_lock = asyncio.Lock()

    async def ensure_resolver(self, root: Path) -> DefinitionResolver:
        """Set up the session for ``root`` once; later calls reuse it.

        Requests that arrive while setup is still running wait for it.
        """
        async with self._setup_lock:
            if self.resolver is None:
                await self.setup(root)
        assert self.resolver is not None
        return self.resolver

    async def setup(self, root: Path) -> None:
        try:
            self.config = load_config(root)
        except ConfigError as exc:
            logger.error("%s; using defaults", exc)
            self.config = NavConfig()

        files = WorkspaceFiles(
            root,
            exclude_patterns=self.config.exclude,
            nested_gitignore=self.config.nested_gitignore,
        )
        try:
            self.tooling = await start_backend(self.config, root, files)
        except LanguageServerError as exc:
            logger.error("%s; falling back to the static backend", exc)
            self.config = self.config.model_copy(update={"backend": "static"})
            self.tooling = await start_backend(self.config, root, files)

        self.resolver = DefinitionResolver(
            files,
            self.tooling,
            self.config.base_class.to_ref(),
            extension=self.config.extension,
        )

    async def teardown(self) -> None:
        tooling, self.tooling = self.tooling, None
        self.resolver = None
        if tooling is not None:
            await stop_backend(tooling)

    def shutdown(self) -> None:
        # pygls calls this after `exit`, once the reader loop has stopped and
        # before the event loop is closed.
        if self.tooling is not None and not self.loop.is_closed():
            self.loop.run_until_complete(self.teardown())
        super().shutdown()


def _workspace_root(ls: DryckLanguageServer) -> Path:
    root_path = ls.workspace.root_path
    if root_path:
        return Path(root_path)
    return ls.default_root or Path.cwd()


def create_server() -> DryckLanguageServer:
    server = DryckLanguageServer()

    @server.feature(types.INITIALIZED)
    async def initialized(
        ls: DryckLanguageServer, params: types.InitializedParams
    ) -> None:
        await ls.ensure_resolver(_workspace_root(ls))

    @server.feature(types.TEXT_DOCUMENT_DEFINITION)
    async def definition(
        ls: DryckLanguageServer, params: types.DefinitionParams
    ) -> list[types.Location] | None:
        resolver = await ls.ensure_resolver(_workspace_root(ls))
        document = ls.workspace.get_text_document(params.text_document.uri)
        position = document.position_codec.position_from_client_units(
            document.lines, params.position
        )
        locations = await resolver.provide_definition(
            DocumentBuffer(document), position
        )
        return [_to_client_units(ls, location) for location in locations] or None

    return server


def _to_client_units(
    ls: DryckLanguageServer, location: types.Location
) -> types.Location:
    target = ls.workspace.get_text_document(location.uri)
    return types.Location(
        uri=location.uri,
        range=target.position_codec.range_to_client_units(
            target.lines, location.range
        ),
    )


def serve(root: Path | None = None) -> None:
    """Run the language server on stdio until the client disconnects."""
    server = create_server()
    if root is not None:
        server.default_root = root
    server.start_io()


__all__ = ["DocumentBuffer", "DryckLanguageServer", "create_server", "serve"]
