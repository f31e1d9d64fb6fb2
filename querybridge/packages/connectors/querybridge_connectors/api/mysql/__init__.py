from .connector import MySqlAdapter

__all__ = ["MySqlAdapter"]
