"""Parsing utilities for dialect references and Python sources."""

from parse.ast_imports import ImportBinding, extract_imports, resolve_relative_import
from parse.class_headers import (
    BaseReference,
    class_name_at,
    find_class_header,
    parse_base_list,
)
from parse.name_resolution import (
    build_name_table,
    expression_at,
    qualify_expression,
)
from parse.reference_tokens import MARKER, extract_reference
from parse.treesitter_symbols import (
    extract_outline_from_source,
    extract_outline_treesitter,
)

__all__ = [
    "MARKER",
    "BaseReference",
    "ImportBinding",
    "build_name_table",
    "class_name_at",
    "expression_at",
    "extract_imports",
    "extract_outline_from_source",
    "extract_outline_treesitter",
    "extract_reference",
    "find_class_header",
    "parse_base_list",
    "qualify_expression",
    "resolve_relative_import",
]
