from __future__ import annotations

from sqlalchemy.pool import QueuePool

from querybridge.packages.common.querybridge_common.config import Settings
from querybridge.packages.connectors.querybridge_connectors.api import (
    CustomDataSourceOptions,
    DataSourceType,
    get_adapter,
)


def warehouse_options(settings: Settings) -> CustomDataSourceOptions:
    return CustomDataSourceOptions(
        host=settings.POSTGRES_SERVER,
        port=settings.POSTGRES_PORT,
        database=settings.POSTGRES_DB or None,
        username=settings.POSTGRES_USER or None,
        password=settings.POSTGRES_PASSWORD or None,
    )


def create_warehouse_pool(settings: Settings) -> QueuePool:
    """
    Connection pool for the primary PostgreSQL warehouse. Connections are
    opened lazily on first checkout; `close()` on a checked-out connection
    returns it to the pool.
    """
    adapter = get_adapter(DataSourceType.POSTGRESQL)
    options = warehouse_options(settings)
    return QueuePool(
        lambda: adapter.open_connection(options),
        pool_size=settings.SQLALCHEMY_POOL_SIZE,
        max_overflow=settings.SQLALCHEMY_MAX_OVERFLOW,
        timeout=settings.SQLALCHEMY_POOL_TIMEOUT,
    )
