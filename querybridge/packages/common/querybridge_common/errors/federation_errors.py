from typing import Optional


class FederationError(Exception):
    """Base error for table resolution, rewriting and execution."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidIdentifier(FederationError):
    """Raised when a project, collection or column name is not allowed."""


class UnknownSchema(FederationError):
    """Raised when a table prefix does not name any known schema."""


class UnsupportedSchema(FederationError):
    """Raised when a schema exists but is disabled in this deployment."""


class CrossDatabaseError(FederationError):
    """Raised when a statement or session would span incompatible databases."""


class AmbiguousDatabaseError(CrossDatabaseError):
    """Raised when a datasource cannot join the datasources already in a session."""


class UnsupportedOperation(FederationError):
    status_code = 417


class MalformedSessionState(FederationError):
    """Raised when the session parameter payload cannot be decoded."""


class QueryParsingError(FederationError):
    pass


class ExecutionError(FederationError):
    """Raised when the backing engine fails to run a statement."""

    status_code = 502

    def __init__(self, message: str, *, sql_state: Optional[str] = None, error_code: Optional[int] = None):
        super().__init__(message)
        self.sql_state = sql_state
        self.error_code = error_code

    def __str__(self):
        if self.sql_state:
            return f"{self.message} (sqlstate={self.sql_state})"
        return self.message


class WorkerPoolSaturated(ExecutionError):
    status_code = 503
