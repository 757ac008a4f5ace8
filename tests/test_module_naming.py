from __future__ import annotations

from pathlib import Path

import pytest

from utils import path_to_module, path_to_uri, uri_to_path


def test_path_to_module_canonical_src_package_rules() -> None:
    assert path_to_module("src/appeldryck/__init__.py") == "appeldryck"
    assert path_to_module("src/appeldryck/context.py") == "appeldryck.context"
    assert path_to_module("src/site/pages/blog.py") == "site.pages.blog"


def test_path_to_module_fallback_rules_are_deterministic() -> None:
    assert path_to_module("pkg/module.py") == "pkg.module"
    assert path_to_module("pkg/__init__.py") == "pkg"
    assert path_to_module(Path("nested/feature/tool.py")) == "nested.feature.tool"
    assert path_to_module("pkg\\windows.py") == "pkg.windows"


def test_uri_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "pages" / "index.dryck"

    uri = path_to_uri(path)

    assert uri.startswith("file://")
    assert uri_to_path(uri) == path


@pytest.mark.parametrize("uri", ["untitled:Untitled-1", "https://example.com/y"])
def test_uri_to_path_rejects_other_schemes(uri: str) -> None:
    with pytest.raises(ValueError, match="Not a file URI"):
        uri_to_path(uri)
