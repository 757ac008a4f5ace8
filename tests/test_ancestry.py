from __future__ import annotations

import pytest

from contract.models import BaseClassRef
from fakes import FakePythonIndex, SourceFiles, uri
from resolve.ancestry import (
    AncestryWalker,
    DefinitionChasingStrategy,
    HierarchyGraphStrategy,
)

BASE = BaseClassRef(name="Context", path_marker="appeldryck")

PAGES = uri("site/pages.py")
FRAMEWORK = uri("lib/appeldryck/context.py")
UNRELATED = uri("lib/other/context.py")
CYCLE = uri("site/cycle.py")

PAGES_SOURCE = """\
from appeldryck.context import Context


class Layout(Context):
    def header(self):
        return ""


class Page(Layout):
    def render(self):
        return ""


class Loose(object):
    def render(self):
        return ""
"""

CONTEXT_SOURCE = """\
class Context:
    def include(self, name):
        return name
"""

CYCLE_SOURCE = """\
class A(B):
    pass


class B(C):
    pass


class C(A):
    pass
"""


def _walker(
    sources: dict[str, str], **index_options: object
) -> tuple[AncestryWalker, FakePythonIndex]:
    index = FakePythonIndex(sources, **index_options)  # type: ignore[arg-type]
    return AncestryWalker(index, SourceFiles(sources), BASE), index


@pytest.mark.asyncio
@pytest.mark.parametrize("hierarchy", [True, False])
@pytest.mark.parametrize(
    ("class_name", "expected"),
    [("Page", True), ("Layout", True), ("Loose", False)],
)
async def test_strategies_agree_on_ancestry(
    hierarchy: bool, class_name: str, expected: bool
) -> None:
    walker, _ = _walker(
        {PAGES: PAGES_SOURCE, FRAMEWORK: CONTEXT_SOURCE}, hierarchy=hierarchy
    )

    assert await walker.is_descendant_of_base(PAGES, class_name) is expected


@pytest.mark.asyncio
@pytest.mark.parametrize("hierarchy", [True, False])
async def test_same_named_base_outside_the_framework_is_rejected(
    hierarchy: bool,
) -> None:
    walker, _ = _walker(
        {PAGES: PAGES_SOURCE, UNRELATED: CONTEXT_SOURCE}, hierarchy=hierarchy
    )

    assert await walker.is_descendant_of_base(PAGES, "Page") is False


@pytest.mark.asyncio
async def test_definition_chasing_terminates_on_cycles() -> None:
    walker, index = _walker({CYCLE: CYCLE_SOURCE})

    assert await walker.is_descendant_of_base(CYCLE, "A") is False
    assert index.count("jump_to_definition") == 3


@pytest.mark.asyncio
async def test_hierarchy_search_terminates_on_cycles() -> None:
    walker, index = _walker({CYCLE: CYCLE_SOURCE}, hierarchy=True)

    assert await walker.is_descendant_of_base(CYCLE, "A") is False
    assert index.count("supertypes") == 3


@pytest.mark.asyncio
async def test_diamond_expands_shared_ancestor_once() -> None:
    source = """\
class Base:
    pass


class Left(Base):
    pass


class Right(Base):
    pass


class Bottom(Left, Right):
    pass
"""
    diamond = uri("site/diamond.py")
    walker, index = _walker({diamond: source})

    assert await walker.is_descendant_of_base(diamond, "Bottom") is False
    # Two jumps for Bottom, one each for Left and Right; Base is expanded once.
    assert index.count("jump_to_definition") == 4


@pytest.mark.asyncio
async def test_hierarchy_strategy_is_selected_when_available() -> None:
    walker, _ = _walker({PAGES: PAGES_SOURCE}, hierarchy=True)

    strategy = await walker.select_strategy(PAGES, "Page")

    assert isinstance(strategy, HierarchyGraphStrategy)


@pytest.mark.asyncio
async def test_missing_hierarchy_capability_selects_definition_chasing() -> None:
    walker, _ = _walker({PAGES: PAGES_SOURCE}, hierarchy=False)

    strategy = await walker.select_strategy(PAGES, "Page")

    assert isinstance(strategy, DefinitionChasingStrategy)


@pytest.mark.asyncio
async def test_missing_outline_selects_definition_chasing() -> None:
    walker, index = _walker(
        {PAGES: PAGES_SOURCE, FRAMEWORK: CONTEXT_SOURCE},
        hierarchy=True,
        outlines=False,
    )

    assert await walker.is_descendant_of_base(PAGES, "Page") is True
    assert index.count("prepare_type_hierarchy") == 0
    assert index.count("supertypes") == 0


@pytest.mark.asyncio
async def test_unknown_class_is_not_a_descendant() -> None:
    walker, _ = _walker({PAGES: PAGES_SOURCE, FRAMEWORK: CONTEXT_SOURCE})

    assert await walker.is_descendant_of_base(PAGES, "Missing") is False


@pytest.mark.asyncio
async def test_unreadable_source_is_not_a_descendant() -> None:
    walker, _ = _walker({FRAMEWORK: CONTEXT_SOURCE})

    assert await walker.is_descendant_of_base(uri("site/gone.py"), "Page") is False
