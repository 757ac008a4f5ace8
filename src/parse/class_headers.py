"""Single-line class header parsing.

This is a deliberately shallow heuristic: headers spanning several lines,
or base lists with nested parentheses, are not understood and yield no
bases.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_BASE_ENTRY = re.compile(r"[^,]+")
_DOTTED_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\s*\.\s*[A-Za-z_][A-Za-z0-9_]*)*")
_CLASS_NAME_AT = re.compile(r"^\s*class\s+([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class BaseReference:
    """A base class as written in a header, with the column of its last segment."""

    expr: str
    line: int
    column: int


def _header_pattern(class_name: str) -> re.Pattern[str]:
    return re.compile(rf"^\s*class\s+{re.escape(class_name)}(?=\(|\s)")


def find_class_header(source: str, class_name: str) -> tuple[int, str] | None:
    """Return ``(line_index, line_text)`` of the first header for ``class_name``."""
    pattern = _header_pattern(class_name)
    for index, line in enumerate(source.splitlines()):
        if pattern.match(line):
            return index, line
    return None


def parse_base_list(
    line_index: int,
    line: str,
    class_name: str,
    root_base: str = "object",
) -> list[BaseReference]:
    """Extract the bases listed in a class header line.

    Keyword entries (``metaclass=...``) and the universal root base are
    skipped. Subscripted bases keep only the part before ``[``.
    """
    header = _header_pattern(class_name).match(line)
    if header is None:
        return []

    open_paren = line.find("(", header.end())
    if open_paren == -1 or line[header.end() : open_paren].strip():
        return []
    close_paren = line.find(")", open_paren + 1)
    if close_paren == -1:
        return []

    list_start = open_paren + 1
    bases: list[BaseReference] = []
    for entry in _BASE_ENTRY.finditer(line[list_start:close_paren]):
        text = entry.group(0)
        if "=" in text:
            continue
        name = _DOTTED_NAME.search(text.split("[", 1)[0])
        if name is None:
            continue
        expr = re.sub(r"\s+", "", name.group(0))
        if expr == root_base:
            continue
        last_dot = name.group(0).rfind(".")
        last_segment = name.group(0)[last_dot + 1 :]
        offset = last_dot + 1 + (len(last_segment) - len(last_segment.lstrip()))
        column = list_start + entry.start() + name.start() + offset
        bases.append(BaseReference(expr=expr, line=line_index, column=column))
    return bases


def class_name_at(line: str, column: int | None = None) -> str | None:
    """Name of the class declared on ``line``, or the identifier at ``column``."""
    header = _CLASS_NAME_AT.match(line)
    if header is not None:
        return header.group(1)
    if column is None:
        return None
    for match in re.finditer(r"[A-Za-z_][A-Za-z0-9_]*", line):
        if match.start() <= column <= match.end():
            return match.group(0)
    return None


__all__ = [
    "BaseReference",
    "class_name_at",
    "find_class_header",
    "parse_base_list",
]
