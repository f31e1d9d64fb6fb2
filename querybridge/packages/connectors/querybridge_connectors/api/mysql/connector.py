from typing import Any, Dict

from querybridge.packages.common.querybridge_common.errors.connector_errors import AuthError, ConnectorError

from ..config import CustomDataSourceOptions, DataSourceType
from ..connector import DatabaseAdapter

try:  # pragma: no cover - optional dependency
    import pymysql  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    pymysql = None  # type: ignore

# ER_ACCESS_DENIED_ERROR
_ACCESS_DENIED = 1045


class MySqlAdapter(DatabaseAdapter):
    """
    MySQL adapter backed by PyMySQL.
    """

    TYPE = DataSourceType.MYSQL
    SEPARATOR = "`"
    SQLGLOT_DIALECT = "mysql"
    DEFAULT_PORT = 3306

    def _connection_kwargs(self, options: CustomDataSourceOptions) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "host": options.host,
            "port": self.port(options),
            "user": options.username,
            "password": options.password or "",
            "database": options.database,
            "charset": "utf8mb4",
        }
        if options.enable_ssl:
            kwargs["ssl"] = {"check_hostname": False}
        return {key: value for key, value in kwargs.items() if value is not None}

    def _connect(self, options: CustomDataSourceOptions) -> Any:
        if pymysql is None:
            raise ConnectorError("PyMySQL is required for MySQL support.")
        try:
            return pymysql.connect(**self._connection_kwargs(options))
        except pymysql.err.OperationalError as exc:
            if exc.args and exc.args[0] == _ACCESS_DENIED:
                raise AuthError(f"Access denied for MySQL at {options.host}") from exc
            raise
