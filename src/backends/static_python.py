"""Foreign tooling backed by tree-sitter outlines and import tables.

Needs no external language server. It offers workspace symbols, document
outlines and jump-to-definition for names bound at module level; it has no
type hierarchy, so ancestry checks run through definition chasing. Modules are
looked up under the workspace, its `src/` directory and `search_paths`, then on
the interpreter's import path.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from lsprotocol.types import Location, Position, Range

from contract.models import OutlineSymbol, WorkspaceSymbol, file_start
from parse.ast_imports import extract_imports
from parse.name_resolution import (
    NameTable,
    build_name_table,
    expression_at,
    qualify_expression,
)
from parse.treesitter_symbols import extract_outline_treesitter
from utils import path_to_module, path_to_uri, uri_to_path

if TYPE_CHECKING:
    from collections.abc import Iterable

    from contract.models import HierarchyNode
    from scan.files import WorkspaceFiles

logger = logging.getLogger(__name__)

# Re-export chains through package __init__ modules followed per lookup.
_MAX_REEXPORT_HOPS = 4


def _symbol_location(uri: str, symbol: OutlineSymbol) -> Location:
    start = symbol.selection
    end = Position(line=start.line, character=start.character + len(symbol.name))
    return Location(uri=uri, range=Range(start=start, end=end))


def _import_roots() -> list[Path]:
    """Directories on the interpreter's import path, in search order."""
    return [Path(entry) for entry in sys.path if entry and Path(entry).is_dir()]


def _read_source(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


class StaticPythonTooling:
    """``ForeignTooling`` over the Python files of a workspace."""

    def __init__(
        self,
        files: WorkspaceFiles,
        search_paths: Iterable[Path] = (),
    ) -> None:
        self._files = files
        self._module_roots = [files.root, files.root / "src", *search_paths]
        self._outlines: dict[Path, tuple[int, list[OutlineSymbol]]] = {}

    async def workspace_symbols(self, name: str) -> list[WorkspaceSymbol] | None:
        return await asyncio.to_thread(self._workspace_symbols, name)

    async def document_outline(self, uri: str) -> list[OutlineSymbol] | None:
        path = self._local_path(uri)
        if path is None or not path.is_file():
            return None
        return await asyncio.to_thread(self.outline_for, path)

    async def prepare_type_hierarchy(
        self, uri: str, position: Position
    ) -> list[HierarchyNode] | None:
        return None

    async def supertypes(self, node: HierarchyNode) -> list[HierarchyNode] | None:
        return None

    async def jump_to_definition(
        self, uri: str, position: Position
    ) -> list[Location] | None:
        return await asyncio.to_thread(self._jump_to_definition, uri, position)

    def outline_for(self, path: Path) -> list[OutlineSymbol]:
        """Outline of ``path``, cached until the file's mtime changes."""
        try:
            mtime = path.stat().st_mtime_ns
        except OSError:
            return []
        cached = self._outlines.get(path)
        if cached is not None and cached[0] == mtime:
            return cached[1]
        outline = extract_outline_treesitter(path)
        self._outlines[path] = (mtime, outline)
        return outline

    def _workspace_symbols(self, name: str) -> list[WorkspaceSymbol]:
        results: list[WorkspaceSymbol] = []
        for path in self._files.python_files():
            for symbol in self.outline_for(path):
                if symbol.name != name:
                    continue
                results.append(
                    WorkspaceSymbol(
                        name=symbol.name,
                        kind=symbol.kind,
                        location=_symbol_location(path_to_uri(path), symbol),
                        container_name=symbol.container_name,
                    )
                )
        logger.debug("workspace_symbols %r -> %d hit(s)", name, len(results))
        return results

    def _jump_to_definition(self, uri: str, position: Position) -> list[Location]:
        path = self._local_path(uri)
        source = _read_source(path) if path is not None else None
        if path is None or source is None:
            return []
        lines = source.splitlines()
        if not 0 <= position.line < len(lines):
            return []
        expr = expression_at(lines[position.line], position.character)
        if expr is None:
            return []

        module_name, is_package = self._module_name_for(path)
        table = self._name_table(path, module_name, is_package, source)
        head = expr.split(".", 1)[0]
        binding = table.get(head)
        if binding is None:
            logger.debug("No module-level binding for %r in %s", head, uri)
            return []

        if binding.strategy == "module_local_def":
            location = self._locate_member(
                path, module_name, expr.split("."), hops=0
            )
        else:
            qualified = qualify_expression(expr, table)
            location = (
                self._locate(qualified, _MAX_REEXPORT_HOPS)
                if qualified is not None
                else None
            )
        return [location] if location is not None else []

    def _locate(self, qualified_name: str, hops: int) -> Location | None:
        parts = qualified_name.split(".")
        for split in range(len(parts), 0, -1):
            module = ".".join(parts[:split])
            module_file = self._module_file(module)
            if module_file is None:
                continue
            rest = parts[split:]
            if not rest:
                return file_start(path_to_uri(module_file))
            return self._locate_member(module_file, module, rest, hops)
        logger.debug("No module file for %s", qualified_name)
        return None

    def _locate_member(
        self,
        module_file: Path,
        module_name: str,
        rest: list[str],
        hops: int,
    ) -> Location | None:
        outline = self.outline_for(module_file)
        head = rest[0]
        symbol = next(
            (s for s in outline if s.container_name is None and s.name == head),
            None,
        )
        if symbol is not None:
            if len(rest) == 1:
                return _symbol_location(path_to_uri(module_file), symbol)
            if len(rest) == 2:
                member = next(
                    (
                        s
                        for s in outline
                        if s.container_name == head and s.name == rest[1]
                    ),
                    None,
                )
                if member is not None:
                    return _symbol_location(path_to_uri(module_file), member)
            return None

        if hops <= 0:
            return None
        source = _read_source(module_file)
        if source is None:
            return None
        table = self._name_table(
            module_file, module_name, module_file.name == "__init__.py", source
        )
        binding = table.get(head)
        if binding is None:
            return None
        return self._locate(".".join([binding.qualified_name, *rest[1:]]), hops - 1)

    def _name_table(
        self,
        path: Path,
        module_name: str,
        is_package: bool,
        source: str,
    ) -> NameTable:
        return build_name_table(
            module_name,
            self.outline_for(path),
            extract_imports(source, str(path)),
            is_package=is_package,
        )

    def _search_roots(self) -> list[Path]:
        # Installed packages (the base class library among them) come last.
        return [*self._module_roots, *_import_roots()]

    def _module_file(self, module: str) -> Path | None:
        parts = module.split(".")
        for root in self._search_roots():
            base = root.joinpath(*parts)
            package_init = base / "__init__.py"
            if package_init.is_file():
                return package_init
            module_path = base.with_name(f"{base.name}.py")
            if module_path.is_file():
                return module_path
        return None

    def _module_name_for(self, path: Path) -> tuple[str, bool]:
        is_package = path.name == "__init__.py"
        resolved = path.resolve()
        for root in self._search_roots():
            try:
                relative = resolved.relative_to(root.resolve())
            except (OSError, ValueError):
                continue
            return path_to_module(relative), is_package
        return path_to_module(path.name), is_package

    @staticmethod
    def _local_path(uri: str) -> Path | None:
        try:
            return uri_to_path(uri)
        except ValueError:
            return None


__all__ = ["StaticPythonTooling"]
