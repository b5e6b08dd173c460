"""Placeholder substitution applied to file contents during materialization.

Two passes run over every file, always in this order:

1. Delimited tokens such as ``{{PROJECT_NAME}}`` are replaced wherever they occur.
2. Bare tokens such as ``PROJECT_NAME`` are replaced only at identifier
   boundaries, so ``MY_PROJECT_NAME_2`` is left alone.

A value written by the first pass is visible to the second.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Dict

_SEPARATOR_RUN = re.compile(r"[-_\s]+(.)?")

TOKEN_NAMES = (
    "PROJECT_NAME",
    "PROJECT_NAME_UPPER",
    "PROJECT_NAME_LOWER",
    "PROJECT_NAME_CAMEL",
    "PROJECT_NAME_PASCAL",
    "DATE",
    "YEAR",
)


def to_camel_case(value: str) -> str:
    """Drop hyphen/underscore/whitespace runs and upper-case the character after each."""
    return _SEPARATOR_RUN.sub(lambda match: (match.group(1) or "").upper(), value)


def to_pascal_case(value: str) -> str:
    """Return :func:`to_camel_case` with the first character upper-cased."""
    camel = to_camel_case(value)
    return camel[:1].upper() + camel[1:]


def build_replacements(project_name: str, today: date | None = None) -> Dict[str, str]:
    """Return token values for ``project_name`` keyed by bare token name, in pass order."""
    today = today or date.today()
    return {
        "PROJECT_NAME": project_name,
        "PROJECT_NAME_UPPER": project_name.upper(),
        "PROJECT_NAME_LOWER": project_name.lower(),
        "PROJECT_NAME_CAMEL": to_camel_case(project_name),
        "PROJECT_NAME_PASCAL": to_pascal_case(project_name),
        "DATE": today.isoformat(),
        "YEAR": str(today.year),
    }


def _bare_pattern(token: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(token)}\b", re.ASCII)


_BARE_PATTERNS = {token: _bare_pattern(token) for token in TOKEN_NAMES}


def replace_placeholders(content: str, project_name: str, today: date | None = None) -> str:
    """Substitute every placeholder in ``content``.

    Args:
        content: File text captured in a blueprint.
        project_name: Name of the project being created.
        today: Date used for ``DATE`` and ``YEAR``; defaults to the current date.

    Returns:
        str: Content with both delimited and bare tokens replaced.
    """
    replacements = build_replacements(project_name, today)

    result = content
    for token, value in replacements.items():
        result = result.replace("{{" + token + "}}", value)
    for token, value in replacements.items():
        pattern = _BARE_PATTERNS.get(token) or _bare_pattern(token)
        result = pattern.sub(lambda _match, value=value: value, result)
    return result


__all__ = [
    "TOKEN_NAMES",
    "build_replacements",
    "replace_placeholders",
    "to_camel_case",
    "to_pascal_case",
]
