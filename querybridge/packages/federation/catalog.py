"""
Interfaces of the catalog collaborators consumed by the resolver, plus
in-process implementations of both.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Sequence

from querybridge.packages.common.querybridge_common.errors import UnknownSchema
from querybridge.packages.federation.models import CustomDataSource, SchemaField


class Metastore(ABC):
    @abstractmethod
    def get_collections(self, project: str) -> Mapping[str, Sequence[SchemaField]]:
        """Ordered mapping of collection name to its ordered fields."""
        raise NotImplementedError


class CustomDataSourceService(ABC):
    @abstractmethod
    def get_database(self, project: str, schema_name: str) -> CustomDataSource:
        """Return the datasource registered as `schema_name`; raise UnknownSchema if absent."""
        raise NotImplementedError


class InMemoryMetastore(Metastore):
    def __init__(self, collections: Dict[str, Dict[str, List[SchemaField]]] | None = None) -> None:
        self._collections: Dict[str, Dict[str, List[SchemaField]]] = {
            project: {name: list(fields) for name, fields in entries.items()}
            for project, entries in (collections or {}).items()
        }
        self._lock = threading.Lock()

    def create_collection(self, project: str, collection: str, fields: Sequence[SchemaField]) -> None:
        with self._lock:
            self._collections.setdefault(project, {})[collection] = list(fields)

    def get_collections(self, project: str) -> Mapping[str, Sequence[SchemaField]]:
        with self._lock:
            return {name: list(fields) for name, fields in self._collections.get(project, {}).items()}


class InMemoryCustomDataSourceService(CustomDataSourceService):
    def __init__(self) -> None:
        self._data_sources: Dict[str, Dict[str, CustomDataSource]] = {}
        self._lock = threading.Lock()

    def add_database(self, project: str, data_source: CustomDataSource) -> None:
        with self._lock:
            self._data_sources.setdefault(project, {})[data_source.schema_name] = data_source

    def remove_database(self, project: str, schema_name: str) -> None:
        with self._lock:
            self._data_sources.get(project, {}).pop(schema_name, None)

    def list_databases(self, project: str) -> List[CustomDataSource]:
        with self._lock:
            return list(self._data_sources.get(project, {}).values())

    def get_database(self, project: str, schema_name: str) -> CustomDataSource:
        with self._lock:
            data_source = self._data_sources.get(project, {}).get(schema_name)
        if data_source is None:
            raise UnknownSchema(f"Schema does not exist: {schema_name}")
        return data_source
