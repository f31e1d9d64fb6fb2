"""
Static datasource type -> adapter table.
"""

from typing import Dict, List

from querybridge.packages.common.querybridge_common.errors.connector_errors import UnsupportedDatabase

from .config import DataSourceType
from .connector import DatabaseAdapter
from .mysql import MySqlAdapter  # noqa: F401 - required for subclass registration
from .postgres import PostgresAdapter  # noqa: F401 - required for subclass registration


def _build_adapter_table() -> Dict[DataSourceType, DatabaseAdapter]:
    return {subclass.TYPE: subclass() for subclass in DatabaseAdapter.__subclasses__()}


_ADAPTERS = _build_adapter_table()


def get_adapter(type_s: DataSourceType | str) -> DatabaseAdapter:
    try:
        key = DataSourceType(type_s.upper() if isinstance(type_s, str) else type_s)
    except ValueError:
        raise UnsupportedDatabase(f"Unsupported database type: {type_s}") from None
    adapter = _ADAPTERS.get(key)
    if adapter is None:
        raise UnsupportedDatabase(f"No adapter registered for database type: {key.value}")
    return adapter


def supported_types() -> List[DataSourceType]:
    return list(_ADAPTERS)


def dialect_separator(type_s: DataSourceType | str) -> str:
    """Identifier quote character of a datasource type; unknown types fall back to '"'."""
    try:
        return get_adapter(type_s).SEPARATOR
    except UnsupportedDatabase:
        return '"'
