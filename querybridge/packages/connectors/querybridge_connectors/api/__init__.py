from .config import BaseConnectorConfig, CustomDataSourceOptions, DataSourceType
from .connector import DatabaseAdapter
from .mysql import MySqlAdapter
from .postgres import PostgresAdapter
from .registry import dialect_separator, get_adapter, supported_types

__all__ = [
    "BaseConnectorConfig",
    "CustomDataSourceOptions",
    "DataSourceType",
    "DatabaseAdapter",
    "MySqlAdapter",
    "PostgresAdapter",
    "dialect_separator",
    "get_adapter",
    "supported_types",
]
