"""
Adapter interface for externally registered databases.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from querybridge.packages.common.querybridge_common.errors.connector_errors import (
    ConnectionError,
    ConnectorError,
)

from .config import CustomDataSourceOptions, DataSourceType


class DatabaseAdapter(ABC):
    """
    Opens DB-API connections for one datasource type.

    Adapters are stateless; a single instance serves every session.
    """

    TYPE: DataSourceType
    SEPARATOR: str = '"'
    SQLGLOT_DIALECT: str
    DEFAULT_PORT: int

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def _connect(self, options: CustomDataSourceOptions) -> Any:
        raise NotImplementedError

    def open_connection(self, options: CustomDataSourceOptions) -> Any:
        try:
            return self._connect(options)
        except ConnectorError:
            raise
        except Exception as exc:
            self.logger.error("Connection to %s at %s failed: %s", self.TYPE.value, options.host, exc)
            raise ConnectionError(
                f"Unable to connect to {self.TYPE.value} at {options.host}: {exc}"
            ) from exc

    def test_connection(self, options: CustomDataSourceOptions) -> None:
        connection = self.open_connection(options)
        try:
            cursor = connection.cursor()
            cursor.execute("SELECT 1")
            cursor.fetchall()
            cursor.close()
        except Exception as exc:
            raise ConnectionError(f"Connection test failed: {exc}") from exc
        finally:
            connection.close()

    def port(self, options: CustomDataSourceOptions) -> int:
        return options.port or self.DEFAULT_PORT
