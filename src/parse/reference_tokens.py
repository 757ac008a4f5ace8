"""Marker-prefixed reference extraction for dialect documents.

Three surface forms are recognized, tried in this order::

    ◊(foo.bar)   parenthesized, dots allowed
    ◊foo: arg    colon form
    ◊foo         bare form, also ◊foo{...}

The bare pattern matches a superset of the colon form, so it has to run last.
"""

from __future__ import annotations

import re

from contract.models import ReferenceToken, TokenForm

MARKER = "◊"

_SEGMENT = r"[A-Za-z_][A-Za-z0-9_]*"
_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_-]*"

_PATTERNS: tuple[tuple[TokenForm, re.Pattern[str]], ...] = (
    (
        "parenthesized",
        re.compile(rf"{MARKER}\(({_SEGMENT}(?:\.{_SEGMENT})*)\)"),
    ),
    ("colon", re.compile(rf"{MARKER}({_IDENTIFIER})(?=\s*:)")),
    ("bare", re.compile(rf"{MARKER}({_IDENTIFIER})")),
)


def iter_reference_tokens(line: str, form: TokenForm) -> list[ReferenceToken]:
    """Return every non-overlapping token of one form on ``line``."""
    for candidate_form, pattern in _PATTERNS:
        if candidate_form == form:
            return [
                ReferenceToken(
                    name=match.group(1),
                    start=match.start(),
                    end=match.end(),
                    form=form,
                )
                for match in pattern.finditer(line)
            ]
    msg = f"Unknown token form: {form!r}"
    raise ValueError(msg)


def extract_reference(line: str, column: int) -> ReferenceToken | None:
    """Return the reference under ``column`` or None.

    Spans are inclusive at both ends so a cursor sitting right after the
    token still resolves it.
    """
    for form, _ in _PATTERNS:
        for token in iter_reference_tokens(line, form):
            if token.contains(column):
                return token
    return None


__all__ = ["MARKER", "extract_reference", "iter_reference_tokens"]
