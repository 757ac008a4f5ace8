"""Shared utilities for dryck-nav."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from pygls.uris import from_fs_path, to_fs_path


def path_to_module(file_path: str | Path) -> str:
    """Convert a file path to a Python module name.

    Args:
        file_path: File path relative to a module root (e.g., "pkg/cli.py")

    Returns:
        Module name (e.g., "pkg.cli")

    Examples:
        >>> path_to_module("src/appeldryck/context.py")
        'appeldryck.context'
        >>> path_to_module("appeldryck/__init__.py")
        'appeldryck'
        >>> path_to_module(Path("foo/bar.py"))
        'foo.bar'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    normalized_parts = [part for part in path_str.replace("\\", "/").split("/") if part]

    # Python source under src/<package>/... maps to <package>.<submodules>.
    module_parts = (
        normalized_parts[1:]
        if len(normalized_parts) >= 2 and normalized_parts[0] == "src"
        else normalized_parts
    )

    if module_parts and module_parts[-1].endswith(".py"):
        module_parts[-1] = module_parts[-1][:-3]

    if module_parts and module_parts[-1] == "__init__":
        module_parts = module_parts[:-1]

    return ".".join(module_parts)


def path_to_uri(path: str | Path) -> str:
    """Return the ``file://`` URI for a local path."""
    uri = from_fs_path(str(path))
    if uri is None:
        msg = f"Cannot build a URI for {path}"
        raise ValueError(msg)
    return uri


def uri_to_path(uri: str) -> Path:
    """Return the local path for a ``file://`` URI.

    Other schemes (``untitled:``, ``https:``) name no local file and raise
    ValueError.
    """
    fs_path = to_fs_path(uri) if urlparse(uri).scheme == "file" else None
    if fs_path is None:
        msg = f"Not a file URI: {uri}"
        raise ValueError(msg)
    return Path(fs_path)
