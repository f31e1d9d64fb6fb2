from __future__ import annotations

from pydantic import ConfigDict

from querybridge.packages.common.querybridge_common.contracts import _Base
from querybridge.packages.connectors.querybridge_connectors.api.config import (
    CustomDataSourceOptions,
    DataSourceType,
)


class CustomDataSource(_Base):
    """An externally registered physical database, addressed by `schema_name`."""

    model_config = ConfigDict(frozen=True)

    schema_name: str
    type: DataSourceType
    options: CustomDataSourceOptions

    def in_same_database(self, other: CustomDataSource) -> bool:
        if self.schema_name == other.schema_name:
            return True
        return (
            self.type == other.type
            and self.options.host == other.options.host
            and self.options.username == other.options.username
            and self.options.password == other.options.password
            and self.options.port == other.options.port
            and self.options.enable_ssl == other.options.enable_ssl
        )
