"""
Maps virtual table references onto physical, quoted SQL fragments.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from querybridge.packages.common.querybridge_common.errors import (
    UnknownSchema,
    UnsupportedOperation,
    UnsupportedSchema,
)
from querybridge.packages.federation.catalog import CustomDataSourceService, Metastore
from querybridge.packages.federation.models import (
    QualifiedName,
    QuerySampling,
    ResolvedTable,
    SchemaField,
)
from querybridge.packages.federation.planner import session_state
from querybridge.packages.federation.planner.identifiers import (
    check_collection,
    check_literal,
    check_project,
    check_table_column,
    continuous_query_table,
    materialized_view_table,
)

COLLECTION_SCHEMA = "collection"
CONTINUOUS_SCHEMA = "continuous"
MATERIALIZED_SCHEMA = "materialized"
REMOTE_FILE_SCHEMA = "remotefile"

USERS_TABLE = "users"
ALL_COLLECTIONS_TABLE = "_all"

# columns every `_all` branch projects on its own
_ALL_FIXED_COLUMNS = {"_collection", "$server_time"}


class TableReferenceResolver:
    def __init__(
        self,
        *,
        metastore: Metastore,
        data_source_service: Optional[CustomDataSourceService] = None,
        user_storage_is_postgresql: bool = False,
        time_column: str = "_time",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._metastore = metastore
        self._data_sources = data_source_service
        self._user_storage_is_postgresql = user_storage_is_postgresql
        self._time_column = time_column
        self._logger = logger or logging.getLogger(__name__)

    def resolve(
        self,
        project: str,
        name: QualifiedName,
        sample: Optional[QuerySampling] = None,
        state: session_state.SessionState = (),
    ) -> ResolvedTable:
        """
        Resolve `name` for `project`. The returned session state equals `state`
        unless the reference names an external datasource not yet in it.
        """
        prefix = name.prefix
        if prefix is None:
            return ResolvedTable(sql=self._resolve_unqualified(project, name.suffix), session_state=tuple(state))

        if prefix == COLLECTION_SCHEMA:
            sql = f"{check_project(project)}.{check_collection(name.suffix)}"
            if sample is not None:
                sql += f" TABLESAMPLE {sample.method.value}({sample.percentage})"
            return ResolvedTable(sql=sql, session_state=tuple(state))
        if prefix == CONTINUOUS_SCHEMA:
            return ResolvedTable(
                sql=f"{check_project(project)}.{continuous_query_table(name.suffix)}",
                session_state=tuple(state),
            )
        if prefix == MATERIALIZED_SCHEMA:
            return ResolvedTable(
                sql=f"{check_project(project)}.{materialized_view_table(name.suffix)}",
                session_state=tuple(state),
            )
        return self._resolve_external(project, prefix, name.suffix, state)

    def _resolve_external(
        self,
        project: str,
        prefix: str,
        table: str,
        state: session_state.SessionState,
    ) -> ResolvedTable:
        if prefix == REMOTE_FILE_SCHEMA:
            raise UnsupportedSchema("remotefile schema doesn't exist in this deployment")
        if self._data_sources is None:
            raise UnknownSchema(f"Schema does not exist: {prefix}")

        sql = f"{check_project(prefix)}.{check_collection(table)}"
        data_source = self._data_sources.get_database(project, prefix)
        updated = session_state.merge(state, data_source)
        if len(updated) != len(state):
            self._logger.debug("Session now references external schema '%s'", prefix)
        return ResolvedTable(sql=sql, session_state=updated)

    def _resolve_unqualified(self, project: str, table: str) -> str:
        if table == USERS_TABLE:
            if not self._user_storage_is_postgresql:
                raise UnsupportedOperation("User implementation is not supported")
            return f"{check_project(project)}.\"_users\""
        if table == ALL_COLLECTIONS_TABLE:
            return self._all_collections(project)
        return f"{check_project(project)}.{check_collection(table)}"

    def _all_collections(self, project: str) -> str:
        project_sql = check_project(project)
        collections = list(self._metastore.get_collections(project).items())
        if not collections:
            return (
                "(select cast(null as text) as \"_collection\", now() as \"$server_time\", "
                f"cast(null as text) as _user, cast(now() as timestamp) as {check_table_column(self._time_column)} "
                "limit 0) _all"
            )

        shared = "".join(f", {check_table_column(column)}" for column in shared_columns(collections))
        branches = [
            f"select cast('{check_literal(collection)}' as text) as \"_collection\", \"$server_time\"{shared} "
            f"from {project_sql}.{check_collection(collection)} t"
            for collection, _ in collections
        ]
        return "(" + " union all \n".join(branches) + ") _all"


def shared_columns(collections: Sequence[tuple[str, Sequence[SchemaField]]]) -> list[str]:
    """Column names present in every collection, in the first collection's order."""
    if not collections:
        return []
    names_per_collection = [{field.name for field in fields} for _, fields in collections]
    ordered = dict.fromkeys(field.name for field in collections[0][1])
    return [
        name
        for name in ordered
        if name not in _ALL_FIXED_COLUMNS and all(name in names for names in names_per_collection)
    ]
