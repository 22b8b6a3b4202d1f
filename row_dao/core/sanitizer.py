"""Identifier validation.

Table, relation and column names are the only caller-supplied text that is
written into generated SQL. Values always travel as bound parameters, so
checking identifiers here is what keeps generated statements injection-safe.
"""

from __future__ import annotations

import re

# Plain, unquoted SQL identifier
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Longest identifier accepted by every supported backend (PostgreSQL: 63)
MAX_IDENTIFIER_LENGTH = 63


def check_identifier(name: str, kind: str) -> str:
    """Return *name* unchanged, or raise ValueError describing the problem.

    Args:
        name: The identifier to check.
        kind: What the identifier names ("table", "column", "relation"),
              used in the error message.
    """
    if not isinstance(name, str) or not name:
        raise ValueError(f"{kind} name must be a non-empty string, got {name!r}")
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValueError(
            f"{kind} name '{name}' is longer than {MAX_IDENTIFIER_LENGTH} characters"
        )
    if _IDENTIFIER.fullmatch(name) is None:
        raise ValueError(
            f"{kind} name '{name}' must contain only letters, digits and underscores "
            "and must not start with a digit"
        )
    return name
