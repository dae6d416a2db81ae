"""Query keys addressing the read/event store."""

from __future__ import annotations

from enum import Enum


class QueryKind(str, Enum):
    """Record kind selected by a query key."""

    SNAPSHOT = "snapshot"
    EVENT = "event"


def query_key(entity: str, correlation_id: str, kind: QueryKind | str) -> str:
    """Build the store key ``{entity}-{correlation_id}-{kind}``.

    Args:
        entity: Entity tag (read model or event stream name)
        correlation_id: Per-scenario correlation value
        kind: QueryKind or its string value

    Returns:
        Key string accepted by the store's query endpoint

    Raises:
        ValueError: If entity or correlation_id is empty, or kind is unknown
    """
    if not entity:
        raise ValueError("Entity tag is required to build a query key.")
    if not correlation_id:
        raise ValueError("Correlation id is required to build a query key.")
    kind = QueryKind(kind)
    return f"{entity}-{correlation_id}-{kind.value}"


def snapshot_key(entity: str, correlation_id: str) -> str:
    return query_key(entity, correlation_id, QueryKind.SNAPSHOT)


def event_key(entity: str, correlation_id: str) -> str:
    return query_key(entity, correlation_id, QueryKind.EVENT)
