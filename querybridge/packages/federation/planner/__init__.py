from querybridge.packages.federation.planner import identifiers, session_state
from querybridge.packages.federation.planner.resolver import TableReferenceResolver, shared_columns
from querybridge.packages.federation.planner.rewriter import CrossDatabaseRewriter

__all__ = [
    "CrossDatabaseRewriter",
    "TableReferenceResolver",
    "identifiers",
    "session_state",
    "shared_columns",
]
