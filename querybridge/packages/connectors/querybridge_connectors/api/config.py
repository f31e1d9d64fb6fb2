from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field

from querybridge.packages.common.querybridge_common.contracts import _Base


class DataSourceType(str, Enum):
    POSTGRESQL = "POSTGRESQL"
    MYSQL = "MYSQL"


class BaseConnectorConfig(_Base):
    pass


class CustomDataSourceOptions(BaseConnectorConfig):
    """
    Connection options of an externally registered database.
    `target_schema` is the physical schema remote tables are read from.
    """

    model_config = ConfigDict(frozen=True)

    host: str
    port: Optional[int] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    target_schema: Optional[str] = Field(default=None, alias="schema")
    enable_ssl: bool = False
