from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from querybridge.packages.federation.models.data_source import CustomDataSource


class SampleMethod(str, Enum):
    BERNOULLI = "BERNOULLI"
    SYSTEM = "SYSTEM"


class QuerySampling(BaseModel):
    method: SampleMethod
    percentage: int = Field(gt=0, le=100)


class SchemaField(BaseModel):
    name: str
    type: str


@dataclass(frozen=True, slots=True)
class QualifiedName:
    """Dotted virtual table name, e.g. `collection.pageviews`."""

    parts: tuple[str, ...]

    @classmethod
    def of(cls, name: str) -> QualifiedName:
        parts = tuple(name.split("."))
        if any(not part for part in parts):
            raise ValueError(f"Invalid qualified name: '{name}'")
        return cls(parts=parts)

    @property
    def prefix(self) -> Optional[str]:
        if len(self.parts) < 2:
            return None
        return ".".join(self.parts[:-1])

    @property
    def suffix(self) -> str:
        return self.parts[-1]

    def __str__(self) -> str:
        return ".".join(self.parts)


@dataclass(frozen=True, slots=True)
class ResolvedTable:
    sql: str
    session_state: tuple[CustomDataSource, ...] = ()
