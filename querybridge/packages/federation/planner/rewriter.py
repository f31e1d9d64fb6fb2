from __future__ import annotations

import logging
from typing import Optional, Sequence

import sqlglot
from sqlglot import exp
from sqlglot.errors import ErrorLevel, ParseError, UnsupportedError

from querybridge.packages.common.querybridge_common.errors import CrossDatabaseError, QueryParsingError
from querybridge.packages.connectors.querybridge_connectors.api import DatabaseAdapter, get_adapter
from querybridge.packages.federation.models import CustomDataSource


class CrossDatabaseRewriter:
    """
    Rewrites every schema-qualified table of a statement from its session
    alias to the physical schema of the matching external datasource, and
    renders the statement in that datasource's dialect.
    """

    def __init__(self, *, read_dialect: str = "postgres", logger: Optional[logging.Logger] = None) -> None:
        self._read_dialect = read_dialect
        self._logger = logger or logging.getLogger(__name__)

    def rewrite(self, sql: str, data_sources: Sequence[CustomDataSource]) -> Optional[str]:
        """
        Return the physical SQL, or None when the statement uses a construct
        the target dialect cannot express.
        """
        if not data_sources:
            raise ValueError("Cross database rewrite requires at least one datasource.")
        adapter = get_adapter(data_sources[0].type)

        try:
            expression = sqlglot.parse_one(sql, read=self._read_dialect)
        except ParseError as exc:
            raise QueryParsingError(str(exc)) from exc

        by_schema = {data_source.schema_name: data_source for data_source in data_sources}

        def _replace(node: exp.Expression) -> exp.Expression:
            if not isinstance(node, exp.Table):
                return node
            alias = ".".join(part for part in (node.catalog, node.db) if part)
            if not alias:
                # CTE reference or a table of the datasource's default schema
                return node
            data_source = by_schema.get(alias)
            if data_source is None:
                raise CrossDatabaseError("Cross database operations are not supported.")
            return _physical_table(node, data_source.options.target_schema)

        rewritten = expression.transform(_replace)
        return self._generate(rewritten, adapter)

    def _generate(self, expression: exp.Expression, adapter: DatabaseAdapter) -> Optional[str]:
        try:
            return expression.sql(dialect=adapter.SQLGLOT_DIALECT, unsupported_level=ErrorLevel.RAISE)
        except UnsupportedError as exc:
            self._logger.info("Statement cannot be rendered for %s: %s", adapter.TYPE.value, exc)
            return None


def _physical_table(node: exp.Table, target_schema: Optional[str]) -> exp.Table:
    node.set("this", exp.to_identifier(node.name, quoted=True))
    node.set("db", exp.to_identifier(target_schema, quoted=True) if target_schema else None)
    node.set("catalog", None)
    return node
