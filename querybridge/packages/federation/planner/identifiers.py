"""
Validation and quoting of project, collection and column names.
"""

from __future__ import annotations

import re

from querybridge.packages.common.querybridge_common.errors import InvalidIdentifier

MATERIALIZED_VIEW_PREFIX = "$materialized_"
CONTINUOUS_QUERY_PREFIX = "$view_"
RESERVED_PREFIXES = (MATERIALIZED_VIEW_PREFIX, CONTINUOUS_QUERY_PREFIX)

DEFAULT_SEPARATOR = '"'
MAX_IDENTIFIER_LENGTH = 250

PROJECT_RE = re.compile(r"^[A-Za-z0-9_]+$")
COLLECTION_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_\-]*$")
COLUMN_RE = re.compile(r"^[A-Za-z0-9_$][A-Za-z0-9_$\-]*$")


def quote_identifier(name: str, separator: str = DEFAULT_SEPARATOR) -> str:
    escaped = name.replace(separator, separator * 2)
    return f"{separator}{escaped}{separator}"


def _check(name: str, pattern: re.Pattern[str], kind: str) -> str:
    if name is None or not name:
        raise InvalidIdentifier(f"{kind} name is empty")
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise InvalidIdentifier(f"{kind} name is too long: '{name[:32]}...'")
    lowered = name.lower()
    if any(lowered.startswith(prefix) for prefix in RESERVED_PREFIXES):
        raise InvalidIdentifier(f"{kind} name uses a reserved prefix: '{name}'")
    if not pattern.match(name):
        raise InvalidIdentifier(f"{kind} name contains invalid characters: '{name}'")
    return name


def check_project(project: str, separator: str = DEFAULT_SEPARATOR) -> str:
    return quote_identifier(_check(project, PROJECT_RE, "Project"), separator)


def check_collection(collection: str, separator: str = DEFAULT_SEPARATOR) -> str:
    return quote_identifier(_check(collection, COLLECTION_RE, "Collection"), separator)


def check_table_column(column: str, separator: str = DEFAULT_SEPARATOR) -> str:
    return quote_identifier(_check(column, COLUMN_RE, "Column"), separator)


def check_literal(value: str) -> str:
    """Escape a value for use inside a single-quoted SQL string literal."""
    return value.replace("'", "''")


def continuous_query_table(name: str, separator: str = DEFAULT_SEPARATOR) -> str:
    _check(name, COLLECTION_RE, "Continuous query")
    return quote_identifier(CONTINUOUS_QUERY_PREFIX + name, separator)


def materialized_view_table(name: str, separator: str = DEFAULT_SEPARATOR) -> str:
    _check(name, COLLECTION_RE, "Materialized view")
    return quote_identifier(MATERIALIZED_VIEW_PREFIX + name, separator)
