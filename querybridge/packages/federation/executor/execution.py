"""
Handle for a statement running on the query worker pool.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from concurrent.futures import Future
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Iterator, List, Optional
from zoneinfo import ZoneInfo

from querybridge.packages.common.querybridge_common.errors import (
    ConnectionError,
    ConnectorError,
    ExecutionError,
)
from querybridge.packages.federation.executor.worker_pool import QueryWorkerPool
from querybridge.packages.federation.models import QueryResult, QueryStats, QueryStatus

ConnectionFactory = Callable[[], Any]


class QueryExecution:
    """
    created -> running -> completed | failed | cancelled.

    The connection returned by `connection_factory` is owned by this
    execution and closed when the statement ends; for pooled connections
    closing returns them to their pool.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        sql: str,
        *,
        is_statement: bool = False,
        time_zone: tzinfo | str | None = None,
        report_progress: bool = True,
        fetch_size: int = 1000,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.sql = sql
        self.is_statement = is_statement
        self.time_zone = ZoneInfo(time_zone) if isinstance(time_zone, str) else time_zone
        self.report_progress = report_progress
        self._connection_factory = connection_factory
        self._fetch_size = max(1, fetch_size)
        self._logger = logger or logging.getLogger(__name__)

        self._condition = threading.Condition()
        self._cancel_requested = threading.Event()
        self._status = QueryStatus.CREATED
        self._columns: List[str] = []
        self._rows: List[List[Any]] = []
        self._error: Optional[Exception] = None
        self._connection: Any = None
        self._future: Optional[Future] = None
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def start(self, pool: QueryWorkerPool) -> QueryExecution:
        with self._condition:
            if self._future is not None:
                raise RuntimeError("Query execution has already been started.")
            if self._status.is_terminal:
                return self
        self._logger.debug("Submitting %s: %s", "statement" if self.is_statement else "query", self.sql)
        future = pool.submit(self._run)
        with self._condition:
            self._future = future
        future.add_done_callback(self._on_future_done)
        return self

    def _on_future_done(self, future: Future) -> None:
        # queued work dropped by a pool shutdown never reaches _run
        if future.cancelled():
            self._finish(QueryStatus.CANCELLED)

    @property
    def status(self) -> QueryStatus:
        with self._condition:
            return self._status

    @property
    def error(self) -> Optional[Exception]:
        with self._condition:
            return self._error

    @property
    def columns(self) -> List[str]:
        with self._condition:
            return list(self._columns)

    @property
    def stats(self) -> Optional[QueryStats]:
        if not self.report_progress:
            return None
        with self._condition:
            return QueryStats(state=self._status, rows_fetched=len(self._rows), elapsed_ms=self._elapsed_ms())

    def is_finished(self) -> bool:
        return self.status.is_terminal

    def result(self, timeout: Optional[float] = None) -> QueryResult:
        """
        Block until the execution ends. Raises the execution's error if it
        failed; a cancelled execution returns the rows fetched before the
        cancellation took effect, as `iter_rows` does.
        """
        with self._condition:
            if not self._condition.wait_for(lambda: self._status.is_terminal, timeout):
                raise TimeoutError(f"Query did not finish within {timeout} seconds.")
            if self._status is QueryStatus.FAILED and self._error is not None:
                raise self._error
            return QueryResult(
                status=self._status,
                columns=list(self._columns),
                rows=list(self._rows),
                elapsed_ms=self._elapsed_ms(),
                sql=self.sql,
            )

    async def wait(self, timeout: Optional[float] = None) -> QueryResult:
        return await asyncio.to_thread(self.result, timeout)

    def iter_rows(self, timeout: Optional[float] = None) -> Iterator[List[Any]]:
        """Yield rows as they are fetched, until the execution ends."""
        index = 0
        while True:
            with self._condition:
                ready = self._condition.wait_for(
                    lambda: len(self._rows) > index or self._status.is_terminal, timeout
                )
                if not ready:
                    raise TimeoutError(f"No rows arrived within {timeout} seconds.")
                batch = self._rows[index:]
                index = len(self._rows)
                status = self._status
                error = self._error
            yield from batch
            if status.is_terminal:
                if status is QueryStatus.FAILED and error is not None:
                    raise error
                return

    def cancel(self) -> bool:
        """
        Request cancellation. Returns False if the execution already ended.
        """
        with self._condition:
            if self._status.is_terminal:
                return False
            self._cancel_requested.set()
            connection = self._connection
            future = self._future
            not_started = self._status is QueryStatus.CREATED

        if future is not None and future.cancel():
            self._finish(QueryStatus.CANCELLED)
        elif future is None and not_started:
            self._finish(QueryStatus.CANCELLED)
        elif connection is not None:
            self._interrupt(connection)
        self._logger.info("Cancellation requested for query: %s", self.sql)
        return True

    # ------------------------------------------------------------------ #
    # Worker side
    # ------------------------------------------------------------------ #

    def _run(self) -> None:
        with self._condition:
            if self._cancel_requested.is_set():
                self._status = QueryStatus.CANCELLED
                self._condition.notify_all()
                return
            self._status = QueryStatus.RUNNING
            self._started_at = time.perf_counter()

        try:
            connection = self._connection_factory()
        except ConnectorError as exc:
            self._finish(QueryStatus.FAILED, exc)
            return
        except Exception as exc:
            error = ConnectionError(f"Unable to acquire a connection: {exc}")
            error.__cause__ = exc
            self._finish(QueryStatus.FAILED, error)
            return

        with self._condition:
            self._connection = connection

        status, error = QueryStatus.COMPLETED, None
        try:
            if not self._cancel_requested.is_set():
                self._execute(connection)
        except Exception as exc:
            if not self._cancel_requested.is_set():
                self._logger.debug("Query failed: %s", exc)
                status, error = QueryStatus.FAILED, _execution_error(exc)
        finally:
            with self._condition:
                self._connection = None
            self._release(connection)

        if self._cancel_requested.is_set():
            status, error = QueryStatus.CANCELLED, None
        self._finish(status, error)

    def _execute(self, connection: Any) -> None:
        cursor = connection.cursor()
        try:
            cursor.execute(self.sql)
            if self._cancel_requested.is_set():
                # the interrupt may have reached the connection before the statement did
                connection.rollback()
                return

            columns = [description[0] for description in cursor.description or ()]
            if self.is_statement or not columns:
                connection.commit()
                return
            with self._condition:
                self._columns = columns
                self._condition.notify_all()

            while not self._cancel_requested.is_set():
                batch = cursor.fetchmany(self._fetch_size)
                if not batch:
                    break
                rows = [self._convert_row(row) for row in batch]
                with self._condition:
                    self._rows.extend(rows)
                    self._condition.notify_all()
        finally:
            try:
                cursor.close()
            except Exception as exc:
                self._logger.debug("Ignoring cursor close failure: %s", exc)

    def _convert_row(self, row: Any) -> List[Any]:
        if self.time_zone is None:
            return list(row)
        return [self._convert_value(value) for value in row]

    def _convert_value(self, value: Any) -> Any:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value.astimezone(self.time_zone)
        return value

    def _interrupt(self, connection: Any) -> None:
        raw = getattr(connection, "dbapi_connection", None) or connection
        cancel = getattr(raw, "cancel", None)
        if not callable(cancel):
            return
        try:
            cancel()
        except Exception as exc:
            self._logger.warning("Unable to cancel running statement: %s", exc)

    def _release(self, connection: Any) -> None:
        try:
            connection.close()
        except Exception as exc:
            self._logger.warning("Unable to release connection: %s", exc)

    def _finish(self, status: QueryStatus, error: Optional[Exception] = None) -> None:
        with self._condition:
            if self._status.is_terminal:
                return
            self._status = status
            self._error = error
            self._finished_at = time.perf_counter()
            self._condition.notify_all()
        self._logger.debug("Query %s (rows=%s elapsed_ms=%s)", status.value, len(self._rows), self._elapsed_ms())

    def _elapsed_ms(self) -> int:
        if self._started_at is None:
            return 0
        end = self._finished_at or time.perf_counter()
        return int((end - self._started_at) * 1000)


def _execution_error(exc: Exception) -> ExecutionError:
    error = ExecutionError(
        str(exc) or exc.__class__.__name__,
        sql_state=getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None),
        error_code=exc.args[0] if exc.args and isinstance(exc.args[0], int) else None,
    )
    error.__cause__ = exc
    return error
