class ConnectorError(RuntimeError):
    """Base error for connector issues."""


class ConnectionError(ConnectorError):
    """Raised when a connection to a datasource cannot be opened."""


class AuthError(ConnectionError):
    """Raised when authentication fails."""


class UnsupportedDatabase(ConnectorError):
    """Raised when no adapter is registered for a datasource type."""
