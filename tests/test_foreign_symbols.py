from __future__ import annotations

import pytest
from lsprotocol.types import Location, Position, Range

from contract.models import BaseClassRef, WorkspaceSymbol
from fakes import FakePythonIndex, SourceFiles, uri
from parse.treesitter_symbols import extract_outline_from_source
from resolve.ancestry import AncestryWalker
from resolve.enclosing import find_enclosing_class, innermost_class
from resolve.foreign_symbols import ForeignSymbolResolver, normalize_matches

PAGES = uri("site/pages.py")
HELPERS = uri("site/helpers.py")
FRAMEWORK = uri("lib/appeldryck/context.py")

PAGES_SOURCE = """\
from appeldryck.context import Context


class Layout(Context):
    pass


class Page(Layout):
    def render(self):
        return ""

    class Meta:
        def render(self):
            return ""


class Loose:
    def render(self):
        return ""
"""

HELPERS_SOURCE = """\
def render(value):
    return value


def render_all(values):
    return values
"""

SOURCES = {
    PAGES: PAGES_SOURCE,
    HELPERS: HELPERS_SOURCE,
    FRAMEWORK: "class Context:\n    pass\n",
}


def _location(file_uri: str, line: int, character: int = 0) -> Location:
    position = Position(line=line, character=character)
    return Location(uri=file_uri, range=Range(start=position, end=position))


def _resolver(index: FakePythonIndex) -> ForeignSymbolResolver:
    walker = AncestryWalker(index, SourceFiles(index.sources), BaseClassRef())
    return ForeignSymbolResolver(index, walker)


def test_innermost_class_picks_nested_class() -> None:
    outline = extract_outline_from_source(PAGES_SOURCE.encode("utf-8"))

    assert innermost_class(outline, 8) == "Page"
    assert innermost_class(outline, 13) == "Meta"
    assert innermost_class(outline, 0) is None


@pytest.mark.asyncio
async def test_find_enclosing_class_without_outline() -> None:
    index = FakePythonIndex(SOURCES, outlines=False)

    assert await find_enclosing_class(index, PAGES, Position(line=8, character=4)) is None


def test_normalize_matches_filters_names_and_kinds() -> None:
    location = _location(HELPERS, 0)
    symbols = [
        WorkspaceSymbol("render_all", "function", location),
        WorkspaceSymbol("render", "class", location),
        WorkspaceSymbol("render", "method", location, ""),
        WorkspaceSymbol("render", "function", location, "ignored"),
    ]

    matches = normalize_matches("render", symbols)

    assert [(m.kind, m.enclosing_class) for m in matches] == [
        ("method", None),
        ("function", None),
    ]


@pytest.mark.asyncio
async def test_functions_kept_and_methods_filtered_by_ancestry() -> None:
    index = FakePythonIndex(SOURCES)

    locations = await _resolver(index).resolve("render")

    assert [(loc.uri, loc.range.start.line) for loc in locations] == [
        (PAGES, 8),
        (HELPERS, 0),
    ]


@pytest.mark.asyncio
async def test_method_without_container_hint_uses_outline() -> None:
    page_render = _location(PAGES, 8, 8)
    loose_render = _location(PAGES, 17, 8)
    index = FakePythonIndex(
        SOURCES,
        workspace_symbols=[
            WorkspaceSymbol("render", "method", loose_render),
            WorkspaceSymbol("render", "method", page_render),
        ],
    )

    locations = await _resolver(index).resolve("render")

    assert locations == [page_render]


@pytest.mark.asyncio
async def test_duplicate_index_hits_are_passed_through() -> None:
    hit = _location(HELPERS, 0)
    index = FakePythonIndex(
        SOURCES,
        workspace_symbols=[
            WorkspaceSymbol("render", "function", hit),
            WorkspaceSymbol("render", "function", hit),
        ],
    )

    assert await _resolver(index).resolve("render") == [hit, hit]


@pytest.mark.asyncio
async def test_method_outside_any_class_is_discarded() -> None:
    index = FakePythonIndex(
        SOURCES,
        workspace_symbols=[WorkspaceSymbol("render", "method", _location(HELPERS, 0))],
    )

    assert await _resolver(index).resolve("render") == []


@pytest.mark.asyncio
async def test_empty_index_answer_is_no_match() -> None:
    index = FakePythonIndex(SOURCES, workspace_symbols=[])

    assert await _resolver(index).resolve("render") == []
