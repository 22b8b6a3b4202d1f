"""Statement parameter naming and style conversion.

Generated statements use positional ``:p0, :p1, ...`` placeholders. Before
execution they are converted to the driver's style and the ordered values
are bound by name.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

_PREFIX = "p"

# Matches :name but not ::typecast and not inside words
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Matches single-quoted string literals (with escaped quotes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")


def placeholder(index: int) -> str:
    """Return the placeholder text for the parameter at *index*."""
    return f":{_PREFIX}{index}"


def bind(values: Sequence[Any]) -> dict[str, Any]:
    """Name ordered *values* to match the placeholders from ``placeholder``."""
    return {f"{_PREFIX}{i}": value for i, value in enumerate(values)}


def normalize_params(sql: str, paramstyle: str) -> str:
    """Convert :name parameters to the target param style.

    Args:
        sql: SQL string with :name parameters.
        paramstyle: Target style - 'named' (no conversion) or 'pyformat' (%(name)s).

    Returns:
        SQL with parameters converted to the target style.
    """
    if paramstyle == "named":
        return sql
    return _convert_to_pyformat(sql)


@lru_cache(maxsize=256)
def _convert_to_pyformat(sql: str) -> str:
    """Convert :name params to %(name)s, preserving string literals."""
    parts: list[str] = []
    last_end = 0

    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[last_end:start]))
        parts.append(match.group())
        last_end = end

    if last_end < len(sql):
        parts.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[last_end:]))

    return "".join(parts)
