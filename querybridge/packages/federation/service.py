from __future__ import annotations

import logging
from datetime import tzinfo
from typing import Any, Mapping, MutableMapping, Optional, Protocol

from querybridge.packages.common.querybridge_common.config import Settings, settings as default_settings
from querybridge.packages.connectors.querybridge_connectors.api import get_adapter
from querybridge.packages.federation.catalog import CustomDataSourceService, Metastore
from querybridge.packages.federation.executor import QueryExecution, QueryWorkerPool
from querybridge.packages.federation.models import (
    CustomDataSource,
    QualifiedName,
    QuerySampling,
    ResolvedTable,
)
from querybridge.packages.federation.planner import CrossDatabaseRewriter, TableReferenceResolver, session_state

# helper SQL functions some query forms rely on; each is optional
REQUIRED_PROCEDURES: dict[str, str] = {
    "to_unixtime": (
        "CREATE OR REPLACE FUNCTION to_unixtime(timestamp) RETURNS double precision"
        " AS 'select extract(epoch from $1);'"
        " LANGUAGE SQL"
        " IMMUTABLE"
        " RETURNS NULL ON NULL INPUT"
    ),
}


class ConnectionPool(Protocol):
    def connect(self) -> Any:
        ...


class FederatedQueryExecutor:
    """
    Entry point of the federation layer: resolves virtual table references
    and runs raw SQL against the warehouse or, for sessions that referenced
    an external datasource, against that datasource.
    """

    def __init__(
        self,
        *,
        connection_pool: ConnectionPool,
        metastore: Metastore,
        worker_pool: QueryWorkerPool,
        data_source_service: Optional[CustomDataSourceService] = None,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._settings = settings or default_settings
        self._connection_pool = connection_pool
        self._worker_pool = worker_pool
        self._logger = logger or logging.getLogger(__name__)
        self._resolver = TableReferenceResolver(
            metastore=metastore,
            data_source_service=data_source_service,
            user_storage_is_postgresql=self._settings.user_storage_is_postgresql,
            time_column=self._settings.PROJECT_TIME_COLUMN,
        )
        self._rewriter = CrossDatabaseRewriter(read_dialect=self._settings.FEDERATION_SQL_DIALECT)

    def install_procedures(self) -> list[str]:
        """Create the helper SQL functions; failures are logged and skipped."""
        installed: list[str] = []
        for name, ddl in REQUIRED_PROCEDURES.items():
            try:
                connection = self._connection_pool.connect()
                try:
                    cursor = connection.cursor()
                    cursor.execute(ddl)
                    cursor.close()
                    connection.commit()
                finally:
                    connection.close()
            except Exception:
                self._logger.exception("Error while creating required procedure '%s'.", name)
                continue
            installed.append(name)
        return installed

    def get_connection(self) -> Any:
        return self._connection_pool.connect()

    def execute_raw_query(
        self,
        sql: str,
        time_zone: tzinfo | str | None = None,
        session_parameters: Optional[Mapping[str, str]] = None,
        api_key: Optional[str] = None,
    ) -> Optional[QueryExecution]:
        """
        Start `sql`. Returns None when the session's external datasource
        cannot express the statement.
        """
        data_sources = session_state.decode(session_parameters)
        if data_sources:
            return self._execute_on_data_source(sql, data_sources, time_zone)
        execution = QueryExecution(
            self._connection_pool.connect,
            sql,
            is_statement=False,
            time_zone=time_zone,
            report_progress=True,
            fetch_size=self._settings.QUERY_FETCH_SIZE,
        )
        return execution.start(self._worker_pool)

    def execute_raw_statement(self, sql: str) -> QueryExecution:
        execution = QueryExecution(
            self._connection_pool.connect,
            sql,
            is_statement=True,
            report_progress=True,
        )
        return execution.start(self._worker_pool)

    def resolve_table_reference(
        self,
        project: str,
        name: QualifiedName | str,
        sample: Optional[QuerySampling] = None,
        state: session_state.SessionState = (),
    ) -> ResolvedTable:
        if isinstance(name, str):
            name = QualifiedName.of(name)
        return self._resolver.resolve(project, name, sample, state)

    def format_table_reference(
        self,
        project: str,
        name: QualifiedName | str,
        sample: Optional[QuerySampling],
        session_parameters: MutableMapping[str, str],
    ) -> str:
        """
        Physical SQL for `name`. The session state in `session_parameters`
        is updated only when resolution succeeds.
        """
        state = session_state.decode(session_parameters)
        resolved = self.resolve_table_reference(project, name, sample, state)
        if resolved.session_state != state:
            session_state.write(session_parameters, resolved.session_state)
        return resolved.sql

    def _execute_on_data_source(
        self,
        sql: str,
        data_sources: session_state.SessionState,
        time_zone: tzinfo | str | None,
    ) -> Optional[QueryExecution]:
        physical_sql = self._rewriter.rewrite(sql, data_sources)
        if physical_sql is None:
            return None

        primary: CustomDataSource = data_sources[0]
        adapter = get_adapter(primary.type)
        execution = QueryExecution(
            lambda: adapter.open_connection(primary.options),
            physical_sql,
            is_statement=False,
            time_zone=time_zone,
            report_progress=False,
            fetch_size=self._settings.QUERY_FETCH_SIZE,
        )
        return execution.start(self._worker_pool)


__all__ = ["FederatedQueryExecutor", "REQUIRED_PROCEDURES"]
