from querybridge.packages.federation.models.data_source import CustomDataSource
from querybridge.packages.federation.models.execution import QueryResult, QueryStats, QueryStatus
from querybridge.packages.federation.models.query import (
    QualifiedName,
    QuerySampling,
    ResolvedTable,
    SampleMethod,
    SchemaField,
)

__all__ = [
    "CustomDataSource",
    "QualifiedName",
    "QueryResult",
    "QuerySampling",
    "QueryStats",
    "QueryStatus",
    "ResolvedTable",
    "SampleMethod",
    "SchemaField",
]
