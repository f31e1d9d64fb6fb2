from .connector_errors import AuthError, ConnectionError, ConnectorError, UnsupportedDatabase
from .federation_errors import (
    AmbiguousDatabaseError,
    CrossDatabaseError,
    ExecutionError,
    FederationError,
    InvalidIdentifier,
    MalformedSessionState,
    QueryParsingError,
    UnknownSchema,
    UnsupportedOperation,
    UnsupportedSchema,
    WorkerPoolSaturated,
)

__all__ = [
    "AmbiguousDatabaseError",
    "AuthError",
    "ConnectionError",
    "ConnectorError",
    "CrossDatabaseError",
    "ExecutionError",
    "FederationError",
    "InvalidIdentifier",
    "MalformedSessionState",
    "QueryParsingError",
    "UnknownSchema",
    "UnsupportedDatabase",
    "UnsupportedOperation",
    "UnsupportedSchema",
    "WorkerPoolSaturated",
]
