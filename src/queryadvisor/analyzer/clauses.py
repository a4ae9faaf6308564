"""
Clause extraction for SQL text.

A single-pass, surface-level scanner over explicit clause-boundary
keywords. It extracts:
- Statement kind from the leading keyword
- Tables after the first FROM and after every JOIN
- ON-clause predicates, one per join
- WHERE predicates split at top-level AND/OR
- ORDER BY content and its leading columns
- Wildcards (``*`` or ``%...%``) and function calls

Extraction is total: any text yields a QueryFeatures record, with empty
containers for absent clauses. Subqueries and multiple statements are not
treated specially, so clauses of a second statement or an inner SELECT
may bleed into the first one's segments.
"""

from __future__ import annotations

import logging
import re

from queryadvisor.analyzer.models import QueryFeatures, QueryType

logger = logging.getLogger(__name__)

# A plain identifier, or one decorated with [brackets], "quotes" or `backticks`
_IDENT = r"[A-Za-z_][\w$]*"
_DECORATED_IDENT = rf'(?:\[[^\]]*\]|"[^"]*"|`[^`]*`|{_IDENT})'
_QUALIFIED_NAME = rf"{_DECORATED_IDENT}(?:\s*\.\s*{_DECORATED_IDENT})*"

_DECORATION_RE = re.compile(r'[\[\]"`]')

_QUERY_TYPE_RE = re.compile(r"^\s*(SELECT|INSERT|UPDATE|DELETE)\b", re.IGNORECASE)

_FROM_TABLE_RE = re.compile(rf"\bFROM\s+({_QUALIFIED_NAME})", re.IGNORECASE)
_JOIN_TABLE_RE = re.compile(rf"\bJOIN\s+({_QUALIFIED_NAME})", re.IGNORECASE)

_ON_RE = re.compile(r"\bON\b", re.IGNORECASE)
_WHERE_RE = re.compile(r"\bWHERE\b", re.IGNORECASE)
_ORDER_BY_RE = re.compile(r"\bORDER\s+BY\b(.*)$", re.IGNORECASE | re.DOTALL)

# Keywords that close an ON clause: the next clause or the next join
_ON_BOUNDARY_RE = re.compile(
    r"\b(?:WHERE|GROUP\s+BY|HAVING|ORDER\s+BY"
    r"|(?:(?:INNER|LEFT|RIGHT|FULL|CROSS|OUTER|NATURAL)\s+)*JOIN)\b",
    re.IGNORECASE,
)
# Keywords that close a WHERE clause
_WHERE_BOUNDARY_RE = re.compile(r"\b(?:GROUP\s+BY|HAVING|ORDER\s+BY)\b", re.IGNORECASE)

_LOGICAL_RE = re.compile(r"(?:AND|OR)\b", re.IGNORECASE)

_PERCENT_PATTERN_RE = re.compile(r"%[^%]*%")
_FUNCTION_RE = re.compile(rf"\b({_IDENT})\(")

# Identifier directly in front of a comparison operator
_COMPARISON_RE = re.compile(
    rf"\b({_IDENT})\s*(?:NOT\s+)?"
    r"(?:<>|!=|<=|>=|=|<|>|\bLIKE\b|\bIN\b|\bIS\b|\bBETWEEN\b)",
    re.IGNORECASE,
)
_LEADING_IDENT_RE = re.compile(rf"\s*[\[\"`]?({_IDENT})")
_LEADING_NAME_RE = re.compile(rf"\s*({_QUALIFIED_NAME})")


def _clean(text: str) -> str:
    """Collapse whitespace and drop statement terminators."""
    return " ".join(text.split()).rstrip(";").strip()


def _strip_decoration(name: str) -> str:
    return re.sub(r"\s*\.\s*", ".", _DECORATION_RE.sub("", name)).strip()


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _quoted_positions(text: str) -> list[bool]:
    """
    Per-character flag: True inside a '...' or "..." literal, quotes included.

    An unterminated literal runs to the end of the text.
    """
    flags: list[bool] = []
    quote: str | None = None
    for ch in text:
        if quote:
            flags.append(True)
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            flags.append(True)
        else:
            flags.append(False)
    return flags


# =============================================================================
# Clause detection
# =============================================================================


def get_query_type(sql: str) -> QueryType:
    """Classify a statement by its leading keyword (case-insensitive)."""
    match = _QUERY_TYPE_RE.match(sql)
    if not match:
        return QueryType.UNKNOWN
    return QueryType(match.group(1).upper())


def extract_tables(sql: str) -> list[str]:
    """
    Tables after the first FROM and after every JOIN.

    Bracket and quote decoration is stripped; names keep the case they
    were written in. Duplicates are dropped, first occurrence wins.
    """
    candidates: list[str] = []

    from_match = _FROM_TABLE_RE.search(sql)
    if from_match:
        candidates.append(_strip_decoration(from_match.group(1)))

    for match in _JOIN_TABLE_RE.finditer(sql):
        candidates.append(_strip_decoration(match.group(1)))

    # Remove duplicates while preserving order
    seen: set[str] = set()
    tables: list[str] = []
    for name in candidates:
        if name and name not in seen:
            seen.add(name)
            tables.append(name)
    return tables


def detect_joins(sql: str) -> list[str]:
    """
    Predicate text of every ON clause, in source order.

    Each predicate runs up to the next WHERE / GROUP BY / HAVING /
    ORDER BY, the next JOIN, or the end of the text. Keywords inside
    string literals are ignored.
    """
    quoted = _quoted_positions(sql)
    predicates: list[str] = []
    last_end = 0

    for match in _ON_RE.finditer(sql):
        if match.start() < last_end or quoted[match.start()]:
            continue
        start = match.end()
        end = next(
            (b.start() for b in _ON_BOUNDARY_RE.finditer(sql, start) if not quoted[b.start()]),
            len(sql),
        )
        last_end = end

        predicate = _clean(sql[start:end])
        if predicate:
            predicates.append(predicate)

    return predicates


def split_top_level(text: str) -> list[str]:
    """
    Split a predicate list at AND/OR that sit outside parentheses and
    string literals.
    """
    quoted = _quoted_positions(text)
    segments: list[str] = []
    depth = 0
    start = 0
    i = 0

    while i < len(text):
        if quoted[i]:
            i += 1
            continue
        ch = text[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif depth == 0 and (i == 0 or not _is_word_char(text[i - 1])):
            logical = _LOGICAL_RE.match(text, i)
            if logical:
                segments.append(text[start:i])
                start = i = logical.end()
                continue
        i += 1

    segments.append(text[start:])
    return [cleaned for cleaned in (_clean(s) for s in segments) if cleaned]


def detect_where_conditions(sql: str) -> list[str]:
    """WHERE predicates up to the next clause keyword, split at top-level AND/OR."""
    where = _WHERE_RE.search(sql)
    if not where:
        return []

    start = where.end()
    boundary = _WHERE_BOUNDARY_RE.search(sql, start)
    end = boundary.start() if boundary else len(sql)
    return split_top_level(sql[start:end])


def detect_order_by(sql: str) -> str | None:
    """ORDER BY content to the end of the text, or None when absent or empty."""
    match = _ORDER_BY_RE.search(sql)
    if not match:
        return None
    clause = _clean(match.group(1))
    return clause or None


def detect_wildcards(sql: str) -> bool:
    """
    True for a literal ``*`` or a ``%...%`` pattern.

    ``COUNT(*)`` and ``SELECT *`` raise the same flag as ``LIKE '%x%'``.
    """
    return "*" in sql or _PERCENT_PATTERN_RE.search(sql) is not None


def detect_functions(sql: str) -> list[str]:
    """Every identifier immediately followed by ``(``, in order of appearance."""
    return [match.group(1) for match in _FUNCTION_RE.finditer(sql)]


# =============================================================================
# Column helpers
# =============================================================================


def join_columns(predicate: str) -> list[str]:
    """
    Columns flanking the ``=`` of a join predicate.

    Each side is cut at its last ``.``; the identifier that follows is
    the column. ``c.CustomerID = o.CustomerID`` gives
    ``["CustomerID", "CustomerID"]``.
    """
    columns: list[str] = []
    for side in predicate.split("="):
        tail = side.rsplit(".", 1)[-1]
        match = _LEADING_IDENT_RE.match(tail)
        if match:
            columns.append(match.group(1))
    return columns


def filter_column(condition: str) -> str | None:
    """The identifier immediately preceding the first comparison operator."""
    match = _COMPARISON_RE.search(condition)
    return match.group(1) if match else None


def sort_columns(order_by: str) -> list[str]:
    """Leading column of each comma-separated ORDER BY segment."""
    columns: list[str] = []
    for segment in order_by.split(","):
        match = _LEADING_NAME_RE.match(segment)
        if not match:
            continue
        name = _strip_decoration(match.group(1))
        column = name.rsplit(".", 1)[-1]
        if column:
            columns.append(column)
    return columns


def extract_features(sql: str) -> QueryFeatures:
    """
    Extract every clause feature from a SQL statement.

    Args:
        sql: Raw SQL text

    Returns:
        QueryFeatures for the statement (empty containers for absent clauses)
    """
    order_by = detect_order_by(sql)

    features = QueryFeatures(
        query_type=get_query_type(sql),
        tables=tuple(extract_tables(sql)),
        join_predicates=tuple(detect_joins(sql)),
        where_conditions=tuple(detect_where_conditions(sql)),
        order_by_clause=order_by,
        order_by_columns=tuple(sort_columns(order_by)) if order_by else (),
        has_wildcard=detect_wildcards(sql),
        function_calls=tuple(detect_functions(sql)),
    )

    logger.debug(
        "Extracted %s query: %d table(s), %d join(s), %d condition(s), order by=%s",
        features.query_type.value,
        len(features.tables),
        len(features.join_predicates),
        len(features.where_conditions),
        features.has_order_by,
    )
    return features
