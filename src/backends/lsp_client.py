"""Foreign tooling backed by an external Python language server.

The server is driven over stdio with pygls' language client. Positions handed
to the engine are converted to code points; positions sent to the server are
converted back to the negotiated encoding (UTF-16 unless the server says
otherwise).
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import TYPE_CHECKING, Any, TypeVar

from lsprotocol import types
from pygls.exceptions import JsonRpcException
from pygls.lsp.client import BaseLanguageClient
from pygls.workspace import PositionCodec

from contract.models import HierarchyNode, OutlineSymbol, SymbolKind, WorkspaceSymbol
from utils import path_to_uri

if TYPE_CHECKING:
    from collections.abc import Awaitable, Sequence
    from pathlib import Path

    from contract.capabilities import FileSystem

logger = logging.getLogger(__name__)

T = TypeVar("T")

_KINDS: dict[types.SymbolKind, SymbolKind] = {
    types.SymbolKind.Class: "class",
    types.SymbolKind.Function: "function",
    types.SymbolKind.Method: "method",
    types.SymbolKind.Constructor: "method",
}

_CLIENT_CAPABILITIES = types.ClientCapabilities(
    text_document=types.TextDocumentClientCapabilities(
        document_symbol=types.DocumentSymbolClientCapabilities(
            hierarchical_document_symbol_support=True,
        ),
        definition=types.DefinitionClientCapabilities(link_support=True),
        type_hierarchy=types.TypeHierarchyClientCapabilities(),
    ),
    workspace=types.WorkspaceClientCapabilities(
        symbol=types.WorkspaceSymbolClientCapabilities(),
        workspace_folders=True,
    ),
    general=types.GeneralClientCapabilities(
        position_encodings=[types.PositionEncodingKind.Utf16],
    ),
)


class LanguageServerError(Exception):
    """Raised when the external language server cannot be started."""


def flatten_document_symbols(
    result: Sequence[types.DocumentSymbol | types.SymbolInformation] | None,
) -> list[OutlineSymbol]:
    """Flatten a documentSymbol response into a pre-order outline.

    Symbols of other kinds are dropped but their children are still visited.
    """
    outline: list[OutlineSymbol] = []

    def visit(symbol: types.DocumentSymbol, container: str | None) -> None:
        kind = _KINDS.get(symbol.kind)
        if kind is not None:
            outline.append(
                OutlineSymbol(
                    name=symbol.name,
                    kind=kind,
                    range=symbol.range,
                    selection=symbol.selection_range.start,
                    container_name=container,
                )
            )
        for child in symbol.children or ():
            visit(child, symbol.name)

    for item in result or ():
        if isinstance(item, types.DocumentSymbol):
            visit(item, None)
            continue
        kind = _KINDS.get(item.kind)
        if kind is not None:
            outline.append(
                OutlineSymbol(
                    name=item.name,
                    kind=kind,
                    range=item.location.range,
                    selection=item.location.range.start,
                    container_name=item.container_name or None,
                )
            )
    return outline


def normalize_workspace_symbols(
    result: Sequence[types.SymbolInformation | types.WorkspaceSymbol] | None,
) -> list[WorkspaceSymbol]:
    """Keep class, function and method hits with a usable location."""
    symbols: list[WorkspaceSymbol] = []
    for item in result or ():
        kind = _KINDS.get(item.kind)
        if kind is None:
            continue
        location = item.location
        if not isinstance(location, types.Location):
            # URI-only locations are not resolved further.
            origin = types.Position(line=0, character=0)
            location = types.Location(
                uri=location.uri, range=types.Range(start=origin, end=origin)
            )
        symbols.append(
            WorkspaceSymbol(
                name=item.name,
                kind=kind,
                location=location,
                container_name=item.container_name or None,
            )
        )
    return symbols


def normalize_definition(result: Any) -> list[types.Location]:
    """Turn any definition response shape into a list of locations."""
    if result is None:
        return []
    items = result if isinstance(result, list) else [result]
    locations: list[types.Location] = []
    for item in items:
        if isinstance(item, types.LocationLink):
            locations.append(
                types.Location(uri=item.target_uri, range=item.target_selection_range)
            )
        elif isinstance(item, types.Location):
            locations.append(item)
    return locations


class LanguageServerTooling:
    """``ForeignTooling`` delegating to a language server subprocess."""

    def __init__(
        self,
        command: list[str],
        root: Path,
        files: FileSystem,
        *,
        request_timeout: float = 10.0,
    ) -> None:
        self._command = command
        self._root = root
        self._files = files
        self._timeout = request_timeout
        self._client = BaseLanguageClient("dryck-nav", "0.1.0")
        self._capabilities: types.ServerCapabilities | None = None
        self._codec = PositionCodec()
        self._opened: set[str] = set()

    @property
    def supports_type_hierarchy(self) -> bool:
        return bool(
            self._capabilities is not None
            and self._capabilities.type_hierarchy_provider
        )

    async def start(self) -> None:
        try:
            await self._client.start_io(
                self._command[0], *self._command[1:], cwd=str(self._root)
            )
        except OSError as exc:
            msg = f"Cannot start language server {self._command[0]!r}: {exc}"
            raise LanguageServerError(msg) from exc

        root_uri = path_to_uri(self._root)
        result = await self._request(
            self._client.initialize_async(
                types.InitializeParams(
                    capabilities=_CLIENT_CAPABILITIES,
                    process_id=os.getpid(),
                    root_uri=root_uri,
                    workspace_folders=[
                        types.WorkspaceFolder(uri=root_uri, name=self._root.name)
                    ],
                )
            )
        )
        if result is None:
            await self._client.stop()
            msg = f"Language server {self._command[0]!r} did not initialize"
            raise LanguageServerError(msg)

        self._capabilities = result.capabilities
        if result.capabilities.position_encoding:
            self._codec = PositionCodec(encoding=result.capabilities.position_encoding)
        self._client.initialized(types.InitializedParams())
        logger.info(
            "Language server %s started (type hierarchy: %s)",
            self._command[0],
            "yes" if self.supports_type_hierarchy else "no",
        )

    async def stop(self) -> None:
        await self._request(self._client.shutdown_async(None))
        self._client.exit(None)
        await self._client.stop()

    async def workspace_symbols(self, name: str) -> list[WorkspaceSymbol] | None:
        result = await self._request(
            self._client.workspace_symbol_async(types.WorkspaceSymbolParams(query=name))
        )
        if result is None:
            return None
        return [
            WorkspaceSymbol(
                name=symbol.name,
                kind=symbol.kind,
                location=self._decode_location(symbol.location),
                container_name=symbol.container_name,
            )
            for symbol in normalize_workspace_symbols(result)
        ]

    async def document_outline(self, uri: str) -> list[OutlineSymbol] | None:
        self._ensure_open(uri)
        result = await self._request(
            self._client.text_document_document_symbol_async(
                types.DocumentSymbolParams(
                    text_document=types.TextDocumentIdentifier(uri=uri)
                )
            )
        )
        if result is None:
            return None
        lines = self._lines(uri)
        return [
            OutlineSymbol(
                name=symbol.name,
                kind=symbol.kind,
                range=self._codec.range_from_client_units(lines, symbol.range),
                selection=self._codec.position_from_client_units(
                    lines, symbol.selection
                ),
                container_name=symbol.container_name,
            )
            for symbol in flatten_document_symbols(result)
        ]

    async def prepare_type_hierarchy(
        self, uri: str, position: types.Position
    ) -> list[HierarchyNode] | None:
        if not self.supports_type_hierarchy:
            return None
        self._ensure_open(uri)
        result = await self._request(
            self._client.text_document_prepare_type_hierarchy_async(
                types.TypeHierarchyPrepareParams(
                    text_document=types.TextDocumentIdentifier(uri=uri),
                    position=self._encode(uri, position),
                )
            )
        )
        if result is None:
            return None
        return [
            HierarchyNode(uri=item.uri, name=item.name, handle=item) for item in result
        ]

    async def supertypes(self, node: HierarchyNode) -> list[HierarchyNode] | None:
        if not isinstance(node.handle, types.TypeHierarchyItem):
            return None
        result = await self._request(
            self._client.type_hierarchy_supertypes_async(
                types.TypeHierarchySupertypesParams(item=node.handle)
            )
        )
        if result is None:
            return None
        return [
            HierarchyNode(uri=item.uri, name=item.name, handle=item) for item in result
        ]

    async def jump_to_definition(
        self, uri: str, position: types.Position
    ) -> list[types.Location] | None:
        self._ensure_open(uri)
        result = await self._request(
            self._client.text_document_definition_async(
                types.DefinitionParams(
                    text_document=types.TextDocumentIdentifier(uri=uri),
                    position=self._encode(uri, position),
                )
            )
        )
        if result is None:
            return None
        return [
            self._decode_location(location)
            for location in normalize_definition(result)
        ]

    async def _request(self, request: Awaitable[T]) -> T | None:
        try:
            return await asyncio.wait_for(request, self._timeout)
        except (JsonRpcException, asyncio.TimeoutError) as exc:
            logger.warning("Language server request failed: %r", exc)
            return None

    def _ensure_open(self, uri: str) -> None:
        if uri in self._opened:
            return
        text = self._files.read_text(uri)
        if text is None:
            return
        self._client.text_document_did_open(
            types.DidOpenTextDocumentParams(
                text_document=types.TextDocumentItem(
                    uri=uri, language_id="python", version=1, text=text
                )
            )
        )
        self._opened.add(uri)

    def _lines(self, uri: str) -> list[str]:
        return (self._files.read_text(uri) or "").splitlines(keepends=True)

    def _encode(self, uri: str, position: types.Position) -> types.Position:
        return self._codec.position_to_client_units(self._lines(uri), position)

    def _decode_location(self, location: types.Location) -> types.Location:
        return types.Location(
            uri=location.uri,
            range=self._codec.range_from_client_units(
                self._lines(location.uri), location.range
            ),
        )


__all__ = [
    "LanguageServerError",
    "LanguageServerTooling",
    "flatten_document_symbols",
    "normalize_definition",
    "normalize_workspace_symbols",
]
