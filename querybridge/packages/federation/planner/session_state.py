"""
Codec for the `remotedb` session parameter: the ordered list of external
datasources a logical session has referenced so far.
"""

from __future__ import annotations

from typing import Mapping, MutableMapping, Sequence

from pydantic import TypeAdapter, ValidationError

from querybridge.packages.common.querybridge_common.errors import (
    AmbiguousDatabaseError,
    MalformedSessionState,
)
from querybridge.packages.federation.models.data_source import CustomDataSource

SESSION_STATE_KEY = "remotedb"

SessionState = tuple[CustomDataSource, ...]

_STATE_ADAPTER = TypeAdapter(list[CustomDataSource])


def decode(session_parameters: Mapping[str, str] | None) -> SessionState:
    if not session_parameters:
        return ()
    raw = session_parameters.get(SESSION_STATE_KEY)
    if raw is None:
        return ()
    try:
        return tuple(_STATE_ADAPTER.validate_json(raw))
    except ValidationError as exc:
        raise MalformedSessionState(f"Invalid '{SESSION_STATE_KEY}' session parameter: {exc}") from exc


def encode(state: Sequence[CustomDataSource]) -> str:
    return _STATE_ADAPTER.dump_json(list(state), by_alias=True).decode("utf-8")


def write(session_parameters: MutableMapping[str, str], state: Sequence[CustomDataSource]) -> None:
    """Store `state` in the caller's mapping; an empty state removes the key."""
    if state:
        session_parameters[SESSION_STATE_KEY] = encode(state)
    else:
        session_parameters.pop(SESSION_STATE_KEY, None)


def merge(existing: Sequence[CustomDataSource], candidate: CustomDataSource) -> SessionState:
    if any(entry.schema_name == candidate.schema_name for entry in existing):
        return tuple(existing)
    if not all(entry.in_same_database(candidate) for entry in existing):
        raise AmbiguousDatabaseError(
            f"Schema '{candidate.schema_name}' is in a different database than "
            f"'{existing[0].schema_name}'; cross database queries are not supported."
        )
    return (*existing, candidate)
