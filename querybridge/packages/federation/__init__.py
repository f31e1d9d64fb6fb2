from querybridge.packages.federation.catalog import (
    CustomDataSourceService,
    InMemoryCustomDataSourceService,
    InMemoryMetastore,
    Metastore,
)
from querybridge.packages.federation.executor import QueryExecution, QueryWorkerPool, create_warehouse_pool
from querybridge.packages.federation.models import (
    CustomDataSource,
    QualifiedName,
    QueryResult,
    QuerySampling,
    QueryStats,
    QueryStatus,
    ResolvedTable,
    SampleMethod,
    SchemaField,
)
from querybridge.packages.federation.service import FederatedQueryExecutor

__all__ = [
    "CustomDataSource",
    "CustomDataSourceService",
    "FederatedQueryExecutor",
    "InMemoryCustomDataSourceService",
    "InMemoryMetastore",
    "Metastore",
    "QualifiedName",
    "QueryExecution",
    "QueryResult",
    "QuerySampling",
    "QueryStats",
    "QueryStatus",
    "QueryWorkerPool",
    "ResolvedTable",
    "SampleMethod",
    "SchemaField",
    "create_warehouse_pool",
]
