"""SQL pretty-printing for the ``format`` command."""

from __future__ import annotations

import sqlparse


def format_sql(sql: str, indent_width: int = 4) -> str:
    """
    Re-indent SQL and upper-case its keywords.

    Args:
        sql: Raw SQL text (may hold several statements)
        indent_width: Spaces per indentation level

    Returns:
        Formatted SQL, or an empty string for blank input
    """
    if not sql.strip():
        return ""
    return sqlparse.format(
        sql.strip(),
        reindent=True,
        keyword_case="upper",
        indent_width=indent_width,
        strip_whitespace=True,
    )
