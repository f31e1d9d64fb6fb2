from .connector import PostgresAdapter

__all__ = ["PostgresAdapter"]
