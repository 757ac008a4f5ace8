"""Workspace file access and scanning for the navigation engine."""

from __future__ import annotations

import asyncio
import logging
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from utils import path_to_uri, uri_to_path

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

logger = logging.getLogger(__name__)


def _should_include_file(
    path: Path,
    directory: Path,
    gitignore_matches: Callable[[str], bool] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    if not path.is_file() or path.is_symlink():
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {
        path for path in gitignore_paths if path.is_file() and not path.is_symlink()
    }
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def _filter_sorted(
    candidates: Iterable[Path],
    directory: Path,
    gitignore_matches: Callable[[str], bool] | None,
    exclude_patterns: list[str] | None,
) -> list[Path]:
    matched_files = [
        path
        for path in candidates
        if _should_include_file(path, directory, gitignore_matches, exclude_patterns)
    ]
    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())
    return matched_files


def find_python_files(
    directory: Path,
    *,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find all Python files in a directory, respecting .gitignore.

    Args:
        directory: Directory to search for Python files
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        nested_gitignore: Compose every .gitignore under the directory
            instead of only the root one

    Yields:
        Path objects for each Python file found, sorted lexicographically
        by relative path for deterministic ordering.
    """
    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )
    yield from _filter_sorted(
        directory.rglob("*.py"), directory, gitignore_matches, exclude_patterns
    )


class WorkspaceFiles:
    """File system capability rooted at a workspace directory."""

    def __init__(
        self,
        root: Path,
        *,
        exclude_patterns: list[str] | None = None,
        nested_gitignore: bool = False,
    ) -> None:
        self.root = root
        self.exclude_patterns = list(exclude_patterns or [])
        self.nested_gitignore = nested_gitignore

    def file_exists(self, path: Path) -> bool:
        return path.is_file()

    async def find_files(self, pattern: str, max_results: int) -> list[str]:
        """Glob ``pattern`` under the root and return at most ``max_results`` URIs."""
        paths = await asyncio.to_thread(self._glob, pattern)
        logger.debug("find_files %s -> %d match(es)", pattern, len(paths))
        return [path_to_uri(path) for path in paths[:max_results]]

    def read_text(self, uri: str) -> str | None:
        try:
            return uri_to_path(uri).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.debug("Cannot read %s: %s", uri, exc)
            return None

    def python_files(self) -> list[Path]:
        return list(
            find_python_files(
                self.root,
                exclude_patterns=self.exclude_patterns,
                nested_gitignore=self.nested_gitignore,
            )
        )

    def _glob(self, pattern: str) -> list[Path]:
        gitignore_matches = _build_gitignore_matcher(
            self.root,
            nested_gitignore=self.nested_gitignore,
        )
        return _filter_sorted(
            self.root.glob(pattern),
            self.root,
            gitignore_matches,
            self.exclude_patterns,
        )


__all__ = [
    "WorkspaceFiles",
    "_build_gitignore_matcher",
    "_should_include_file",
    "find_python_files",
]
