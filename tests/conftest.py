from __future__ import annotations

import threading
import time
from typing import Any, Callable, Sequence

import pytest

from querybridge.packages.connectors.querybridge_connectors.api import CustomDataSourceOptions, DataSourceType
from querybridge.packages.federation.models import CustomDataSource


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeCursor:
    def __init__(self, connection: "FakeConnection") -> None:
        self._connection = connection
        self._pending: list[tuple] = []
        self.description = None
        self.closed = False

    def execute(self, sql: str, params: Any = None) -> None:
        connection = self._connection
        connection.executed.append(sql)
        connection.started.set()
        if connection.on_execute is not None:
            connection.on_execute()
        if connection.block is not None:
            connection.block.wait(timeout=5)
            if connection.cancelled:
                raise RuntimeError("canceling statement due to user request")
        if connection.fail_with is not None:
            raise connection.fail_with
        if connection.columns:
            self.description = [(name, None, None, None, None, None, None) for name in connection.columns]
        self._pending = [tuple(row) for row in connection.rows]

    def fetchmany(self, size: int) -> list[tuple]:
        self._connection.fetch_calls += 1
        if self._connection.on_fetch is not None:
            self._connection.on_fetch(self._connection.fetch_calls)
        batch, self._pending = self._pending[:size], self._pending[size:]
        return batch

    def fetchall(self) -> list[tuple]:
        batch, self._pending = self._pending, []
        return batch

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    """Minimal DB-API connection serving one canned result."""

    def __init__(
        self,
        *,
        columns: Sequence[str] = (),
        rows: Sequence[Sequence[Any]] = (),
        fail_with: Exception | None = None,
        block: threading.Event | None = None,
        on_execute: Callable[[], None] | None = None,
        on_fetch: Callable[[int], None] | None = None,
    ) -> None:
        self.columns = list(columns)
        self.rows = [list(row) for row in rows]
        self.fail_with = fail_with
        self.block = block
        self.on_execute = on_execute
        self.on_fetch = on_fetch
        self.started = threading.Event()
        self.executed: list[str] = []
        self.fetch_calls = 0
        self.committed = False
        self.rolled_back = False
        self.cancelled = False
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True

    def cancel(self) -> None:
        self.cancelled = True
        if self.block is not None:
            self.block.set()

    def close(self) -> None:
        self.closed = True


class FakePool:
    def __init__(self, factory: Callable[[], FakeConnection] | None = None) -> None:
        self._factory = factory or FakeConnection
        self.connections: list[FakeConnection] = []

    def connect(self) -> FakeConnection:
        connection = self._factory()
        self.connections.append(connection)
        return connection


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(0.005)


def make_data_source(
    schema_name: str,
    *,
    type: DataSourceType = DataSourceType.MYSQL,
    host: str = "db.internal",
    target_schema: str | None = "remote_schema",
    port: int | None = 3306,
) -> CustomDataSource:
    return CustomDataSource(
        schema_name=schema_name,
        type=type,
        options=CustomDataSourceOptions(
            host=host,
            port=port,
            username="reader",
            password="secret",
            target_schema=target_schema,
        ),
    )
