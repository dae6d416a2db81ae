"""Helpers for matching literals against serialized records."""

from __future__ import annotations

import json
from typing import Any, Iterable, Sequence

from .base import Record


def serialize_value(value: Any) -> str:
    """Serialize a record value as compact JSON, keeping non-ASCII text as is."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def normalize_literal(literal: Any) -> str:
    """Return the text searched for when checking that a record contains ``literal``.

    Strings lose every single and double quote character; other values are
    matched by their JSON text.

    Examples:
        >>> normalize_literal('"Apple"')
        'Apple'
        >>> normalize_literal(True)
        'true'
    """
    if isinstance(literal, str):
        return literal.replace("'", "").replace('"', "")
    return serialize_value(literal)


def filter_containing(records: Sequence[Record], literals: Iterable[Any]) -> list[Record]:
    """Narrow records to those whose serialized value contains every literal.

    Each literal filters the survivors of the previous one.
    """
    candidates = list(records)
    for literal in literals:
        needle = normalize_literal(literal)
        candidates = [record for record in candidates if needle in serialize_value(record.value)]
    return candidates
