from __future__ import annotations

import os
from pathlib import Path

import pytest
from lsprotocol.types import Position

from backends.static_python import StaticPythonTooling
from contract.models import BaseClassRef
from resolve.orchestrator import DefinitionResolver
from scan.files import WorkspaceFiles
from utils import path_to_uri


def _write(path: Path, source: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


def _tooling(workspace: Path, *search_paths: Path) -> StaticPythonTooling:
    return StaticPythonTooling(WorkspaceFiles(workspace), search_paths)


class _Document:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.uri = path_to_uri(path)
        self._lines = path.read_text(encoding="utf-8").splitlines()

    def read_line(self, index: int) -> str:
        return self._lines[index] if 0 <= index < len(self._lines) else ""


@pytest.fixture
def project(tmp_path: Path) -> tuple[Path, Path]:
    workspace = tmp_path / "ws"
    library = tmp_path / "lib"
    _write(
        library / "appeldryck" / "__init__.py",
        "from .context import Context\n\n__all__ = ['Context']\n",
    )
    _write(
        library / "appeldryck" / "context.py",
        "class Context:\n    def include(self, name):\n        return name\n",
    )
    _write(
        workspace / "site" / "layouts.py",
        "import appeldryck\n\n\nclass Layout(appeldryck.Context):\n    pass\n",
    )
    _write(
        workspace / "site" / "pages.py",
        "from .layouts import Layout\n\n\n"
        "class Page(Layout):\n    def render(self):\n        return ''\n\n\n"
        "class Plain:\n    def render(self):\n        return ''\n\n\n"
        "def footer():\n    return ''\n",
    )
    _write(workspace / "site" / "__init__.py", "")
    _write(
        workspace / "site" / "index.dryck", "◊render\n◊footer\n◊(missing.part)\n"
    )
    return workspace, library


@pytest.mark.asyncio
async def test_outline_lists_classes_methods_and_functions(
    project: tuple[Path, Path],
) -> None:
    workspace, _ = project
    tooling = _tooling(workspace)
    pages = workspace / "site" / "pages.py"

    outline = await tooling.document_outline(path_to_uri(pages))

    assert outline is not None
    assert [(s.name, s.kind, s.container_name) for s in outline] == [
        ("Page", "class", None),
        ("render", "method", "Page"),
        ("Plain", "class", None),
        ("render", "method", "Plain"),
        ("footer", "function", None),
    ]
    assert outline[0].selection == Position(line=3, character=6)


@pytest.mark.asyncio
async def test_outline_columns_are_code_points(tmp_path: Path) -> None:
    module = _write(tmp_path / "m.py", "x = 1\nclass Ü: pass\n")
    tooling = _tooling(tmp_path)

    outline = await tooling.document_outline(path_to_uri(module))

    assert outline is not None
    [symbol] = outline
    assert symbol.name == "Ü"
    assert symbol.selection == Position(line=1, character=6)
    assert symbol.range.end == Position(line=1, character=13)


@pytest.mark.asyncio
async def test_missing_document_has_no_outline(tmp_path: Path) -> None:
    tooling = _tooling(tmp_path)

    assert await tooling.document_outline(path_to_uri(tmp_path / "nope.py")) is None


@pytest.mark.asyncio
async def test_workspace_symbols_match_exact_names(project: tuple[Path, Path]) -> None:
    workspace, _ = project
    tooling = _tooling(workspace)

    symbols = await tooling.workspace_symbols("render")

    assert symbols is not None
    assert [(s.kind, s.container_name) for s in symbols] == [
        ("method", "Page"),
        ("method", "Plain"),
    ]


@pytest.mark.asyncio
async def test_jump_follows_relative_import(project: tuple[Path, Path]) -> None:
    workspace, library = project
    tooling = _tooling(workspace, library)
    pages = workspace / "site" / "pages.py"

    locations = await tooling.jump_to_definition(
        path_to_uri(pages), Position(line=3, character=12)
    )

    assert locations is not None and len(locations) == 1
    location = locations[0]
    assert location.uri == path_to_uri(workspace / "site" / "layouts.py")
    assert location.range.start == Position(line=3, character=6)


@pytest.mark.asyncio
async def test_jump_follows_package_reexport(project: tuple[Path, Path]) -> None:
    workspace, library = project
    tooling = _tooling(workspace, library)
    layouts = workspace / "site" / "layouts.py"

    locations = await tooling.jump_to_definition(
        path_to_uri(layouts), Position(line=3, character=24)
    )

    assert locations is not None and len(locations) == 1
    location = locations[0]
    assert location.uri == path_to_uri(library / "appeldryck" / "context.py")
    assert location.range.start == Position(line=0, character=6)


@pytest.mark.asyncio
async def test_jump_on_module_segment_targets_module_file(
    project: tuple[Path, Path],
) -> None:
    workspace, library = project
    tooling = _tooling(workspace, library)
    layouts = workspace / "site" / "layouts.py"

    locations = await tooling.jump_to_definition(
        path_to_uri(layouts), Position(line=3, character=15)
    )

    assert locations is not None and len(locations) == 1
    location = locations[0]
    assert location.uri == path_to_uri(library / "appeldryck" / "__init__.py")


@pytest.mark.asyncio
async def test_jump_to_unbound_name_finds_nothing(project: tuple[Path, Path]) -> None:
    workspace, _ = project
    tooling = _tooling(workspace)
    pages = workspace / "site" / "pages.py"

    assert await tooling.jump_to_definition(
        path_to_uri(pages), Position(line=4, character=16)
    ) == []


@pytest.mark.asyncio
async def test_static_backend_has_no_type_hierarchy(project: tuple[Path, Path]) -> None:
    workspace, _ = project
    tooling = _tooling(workspace)

    uri = path_to_uri(workspace / "site" / "pages.py")
    position = Position(line=3, character=6)
    assert await tooling.prepare_type_hierarchy(uri, position) is None


@pytest.mark.asyncio
async def test_end_to_end_with_static_backend(project: tuple[Path, Path]) -> None:
    workspace, library = project
    files = WorkspaceFiles(workspace)
    resolver = DefinitionResolver(files, _tooling(workspace, library), BaseClassRef())
    document = _Document(workspace / "site" / "index.dryck")
    pages_uri = path_to_uri(workspace / "site" / "pages.py")

    render = await resolver.provide_definition(document, Position(line=0, character=2))
    footer = await resolver.provide_definition(document, Position(line=1, character=2))
    missing = await resolver.provide_definition(document, Position(line=2, character=4))

    assert [(loc.uri, loc.range.start.line) for loc in render] == [(pages_uri, 4)]
    assert [(loc.uri, loc.range.start.line) for loc in footer] == [(pages_uri, 13)]
    assert missing == []


@pytest.mark.asyncio
async def test_outline_cache_refreshes_after_edit(tmp_path: Path) -> None:
    module = _write(tmp_path / "m.py", "def first():\n    pass\n")
    tooling = _tooling(tmp_path)
    uri = path_to_uri(module)

    before = await tooling.document_outline(uri)
    _write(module, "def first():\n    pass\n\n\ndef second():\n    pass\n")
    stat = module.stat()
    os.utime(module, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000))
    after = await tooling.document_outline(uri)

    assert [s.name for s in before or []] == ["first"]
    assert [s.name for s in after or []] == ["first", "second"]


@pytest.mark.asyncio
async def test_base_class_found_on_import_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    installed = tmp_path / "site-packages"
    _write(installed / "appeldryck" / "__init__.py", "from .context import Context\n")
    _write(installed / "appeldryck" / "context.py", "class Context:\n    pass\n")
    workspace = tmp_path / "ws"
    pages = _write(
        workspace / "pages.py",
        "from appeldryck import Context\n\n\n"
        "class Page(Context):\n    def render(self):\n        return ''\n",
    )
    _write(workspace / "index.dryck", "◊render\n")
    monkeypatch.syspath_prepend(str(installed))
    resolver = DefinitionResolver(
        WorkspaceFiles(workspace), _tooling(workspace), BaseClassRef()
    )

    locations = await resolver.provide_definition(
        _Document(workspace / "index.dryck"), Position(line=0, character=2)
    )

    assert [(loc.uri, loc.range.start) for loc in locations] == [
        (path_to_uri(pages), Position(line=4, character=8))
    ]


@pytest.mark.asyncio
async def test_non_file_uri_has_no_outline(tmp_path: Path) -> None:
    tooling = _tooling(tmp_path)

    assert await tooling.document_outline("untitled:Untitled-1") is None
    assert await tooling.jump_to_definition(
        "untitled:Untitled-1", Position(line=0, character=0)
    ) == []
