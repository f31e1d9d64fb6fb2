from typing import Any, Dict

from querybridge.packages.common.querybridge_common.errors.connector_errors import AuthError, ConnectorError

from ..config import CustomDataSourceOptions, DataSourceType
from ..connector import DatabaseAdapter

try:  # pragma: no cover - optional dependency
    import psycopg  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    psycopg = None  # type: ignore


class PostgresAdapter(DatabaseAdapter):
    """
    PostgreSQL adapter backed by psycopg.
    """

    TYPE = DataSourceType.POSTGRESQL
    SEPARATOR = '"'
    SQLGLOT_DIALECT = "postgres"
    DEFAULT_PORT = 5432

    def _connection_kwargs(self, options: CustomDataSourceOptions) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "host": options.host,
            "port": self.port(options),
            "user": options.username,
            "password": options.password,
            "sslmode": "require" if options.enable_ssl else "prefer",
        }
        if options.database:
            kwargs["dbname"] = options.database
        return {key: value for key, value in kwargs.items() if value is not None}

    def _connect(self, options: CustomDataSourceOptions) -> Any:
        if psycopg is None:
            raise ConnectorError("psycopg is required for PostgreSQL support.")
        try:
            return psycopg.connect(**self._connection_kwargs(options))
        except psycopg.OperationalError as exc:
            if "authentication failed" in str(exc).lower():
                raise AuthError(f"Authentication failed for PostgreSQL at {options.host}") from exc
            raise
