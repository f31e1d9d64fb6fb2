import pytest

from querybridge.packages.common.querybridge_common.errors import (
    CrossDatabaseError,
    InvalidIdentifier,
    UnknownSchema,
    UnsupportedOperation,
    UnsupportedSchema,
)
from querybridge.packages.federation.catalog import InMemoryCustomDataSourceService, InMemoryMetastore
from querybridge.packages.federation.models import QualifiedName, QuerySampling, SampleMethod, SchemaField
from querybridge.packages.federation.planner import TableReferenceResolver, session_state
from tests.conftest import make_data_source


def _fields(*names: str) -> list[SchemaField]:
    return [SchemaField(name=name, type="STRING") for name in names]


@pytest.fixture
def data_sources() -> InMemoryCustomDataSourceService:
    service = InMemoryCustomDataSourceService()
    service.add_database("acme", make_data_source("myexternal"))
    service.add_database("acme", make_data_source("billing", target_schema="billing"))
    service.add_database("acme", make_data_source("crm", host="crm.internal"))
    return service


@pytest.fixture
def resolver(data_sources: InMemoryCustomDataSourceService) -> TableReferenceResolver:
    metastore = InMemoryMetastore(
        {"acme": {"A": _fields("x", "y"), "B": _fields("x", "z")}}
    )
    return TableReferenceResolver(metastore=metastore, data_source_service=data_sources)


def test_collection_reference(resolver: TableReferenceResolver) -> None:
    resolved = resolver.resolve("acme", QualifiedName.of("collection.pageviews"))

    assert resolved.sql == '"acme"."pageviews"'
    assert resolved.session_state == ()


def test_collection_reference_with_sampling(resolver: TableReferenceResolver) -> None:
    sample = QuerySampling(method=SampleMethod.BERNOULLI, percentage=10)

    resolved = resolver.resolve("acme", QualifiedName.of("collection.pageviews"), sample)

    assert resolved.sql == '"acme"."pageviews" TABLESAMPLE BERNOULLI(10)'


def test_continuous_and_materialized_references(resolver: TableReferenceResolver) -> None:
    assert resolver.resolve("acme", QualifiedName.of("continuous.daily_totals")).sql == '"acme"."$view_daily_totals"'
    assert resolver.resolve("acme", QualifiedName.of("materialized.weekly")).sql == '"acme"."$materialized_weekly"'


def test_unqualified_reference(resolver: TableReferenceResolver) -> None:
    assert resolver.resolve("acme", QualifiedName.of("pageviews")).sql == '"acme"."pageviews"'


def test_remotefile_schema_is_unsupported(resolver: TableReferenceResolver) -> None:
    with pytest.raises(UnsupportedSchema):
        resolver.resolve("acme", QualifiedName.of("remotefile.events"))


def test_unknown_schema(resolver: TableReferenceResolver) -> None:
    with pytest.raises(UnknownSchema):
        resolver.resolve("acme", QualifiedName.of("nowhere.orders"))


def test_external_schema_without_datasource_service() -> None:
    resolver = TableReferenceResolver(metastore=InMemoryMetastore())

    with pytest.raises(UnknownSchema):
        resolver.resolve("acme", QualifiedName.of("myexternal.orders"))


def test_users_table_requires_postgresql_user_storage() -> None:
    disabled = TableReferenceResolver(metastore=InMemoryMetastore())
    enabled = TableReferenceResolver(metastore=InMemoryMetastore(), user_storage_is_postgresql=True)

    with pytest.raises(UnsupportedOperation):
        disabled.resolve("acme", QualifiedName.of("users"))
    assert enabled.resolve("acme", QualifiedName.of("users")).sql == '"acme"."_users"'


def test_all_projects_only_shared_columns(resolver: TableReferenceResolver) -> None:
    resolved = resolver.resolve("acme", QualifiedName.of("_all"))

    assert resolved.sql == (
        "(select cast('A' as text) as \"_collection\", \"$server_time\", \"x\" from \"acme\".\"A\" t union all \n"
        "select cast('B' as text) as \"_collection\", \"$server_time\", \"x\" from \"acme\".\"B\" t) _all"
    )


def test_all_without_shared_columns() -> None:
    metastore = InMemoryMetastore({"acme": {"A": _fields("y"), "B": _fields("z")}})
    resolver = TableReferenceResolver(metastore=metastore)

    sql = resolver.resolve("acme", QualifiedName.of("_all")).sql

    assert "\"$server_time\" from \"acme\".\"A\" t" in sql
    assert "\"y\"" not in sql and "\"z\"" not in sql


def test_all_for_project_without_collections() -> None:
    resolver = TableReferenceResolver(metastore=InMemoryMetastore(), time_column="_time")

    sql = resolver.resolve("empty", QualifiedName.of("_all")).sql

    assert sql == (
        "(select cast(null as text) as \"_collection\", now() as \"$server_time\", "
        "cast(null as text) as _user, cast(now() as timestamp) as \"_time\" limit 0) _all"
    )


@pytest.mark.parametrize("name", ['collection.page"views', "collection.$view_x", "continuous.$materialized_x"])
def test_unsafe_names_are_rejected(resolver: TableReferenceResolver, name: str) -> None:
    with pytest.raises(InvalidIdentifier):
        resolver.resolve("acme", QualifiedName.of(name))


def test_invalid_project_is_rejected(resolver: TableReferenceResolver) -> None:
    with pytest.raises(InvalidIdentifier):
        resolver.resolve('ac"me', QualifiedName.of("collection.pageviews"))


def test_external_reference_registers_datasource(resolver: TableReferenceResolver) -> None:
    resolved = resolver.resolve("acme", QualifiedName.of("myexternal.orders"))

    assert resolved.sql == '"myexternal"."orders"'
    assert [data_source.schema_name for data_source in resolved.session_state] == ["myexternal"]


def test_external_reference_is_idempotent(resolver: TableReferenceResolver) -> None:
    first = resolver.resolve("acme", QualifiedName.of("myexternal.orders"))
    second = resolver.resolve("acme", QualifiedName.of("myexternal.customers"), state=first.session_state)

    assert second.session_state == first.session_state


def test_external_references_to_same_database_accumulate(resolver: TableReferenceResolver) -> None:
    first = resolver.resolve("acme", QualifiedName.of("myexternal.orders"))
    second = resolver.resolve("acme", QualifiedName.of("billing.invoices"), state=first.session_state)

    assert [data_source.schema_name for data_source in second.session_state] == ["myexternal", "billing"]


def test_external_reference_to_other_database_fails(resolver: TableReferenceResolver) -> None:
    first = resolver.resolve("acme", QualifiedName.of("myexternal.orders"))

    with pytest.raises(CrossDatabaseError):
        resolver.resolve("acme", QualifiedName.of("crm.contacts"), state=first.session_state)


def test_qualified_name_rejects_empty_parts() -> None:
    with pytest.raises(ValueError):
        QualifiedName.of("collection..pageviews")


def test_state_constant_key() -> None:
    assert session_state.SESSION_STATE_KEY == "remotedb"
