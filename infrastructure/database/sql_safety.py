"""
SQL Safety Utilities
====================

Column allowlisting for the dynamic ``UPDATE ... SET`` statements used by the
garden operations. Only keys named in the allowlist are interpolated into SQL;
values always travel as bound parameters.

Usage::

    cols = safe_columns(fields, ROW_COLUMNS, context="update_row")
    clause, values = build_set_clause(cols)
    db.execute(f"UPDATE GardenRows SET {clause} WHERE row_id = ?", [*values, row_id])
"""

from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def safe_columns(
    data: dict[str, Any],
    allowed: frozenset[str] | set[str],
    *,
    context: str = "",
    drop_none: bool = True,
) -> dict[str, Any]:
    """Return ``data`` restricted to allowlisted identifier keys.

    ``None`` values are dropped by default so partial updates leave the
    column untouched.
    """
    filtered: dict[str, Any] = {}
    rejected: list[str] = []
    for key, value in data.items():
        if key not in allowed or not _IDENT_RE.match(key):
            rejected.append(key)
            continue
        if drop_none and value is None:
            continue
        filtered[key] = value

    if rejected:
        logger.warning("safe_columns(%s): dropped non-allowed keys: %s", context or "?", rejected)
    return filtered


def build_set_clause(cols: dict[str, Any]) -> tuple[str, list[Any]]:
    """``{"name": "A", "length": 2}`` -> ``("name = ?, length = ?", ["A", 2])``."""
    return ", ".join(f"{key} = ?" for key in cols), list(cols.values())
