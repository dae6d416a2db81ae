"""Verdict for event registration."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..errors import HarnessConfigurationError
from ..keys import QueryKind
from .base import Record, Verifier


def evaluate_event_registration(records: Sequence[Record]) -> bool:
    """Return True if at least one record is an event, regardless of content."""
    return any(record.kind == QueryKind.EVENT.value for record in records)


class EventVerifier(Verifier):
    """Verifier checking that an event was stored for the queried entity."""

    def __init__(self, event_name: str, name: Optional[str] = None):
        if not event_name:
            raise HarnessConfigurationError("EventVerifier needs the name of the expected event.")
        super().__init__(name or f"EventVerifier[{event_name}]")
        self.event_name = event_name

    def evaluate(self, records: Sequence[Record]) -> bool:
        return evaluate_event_registration(records)

    def describe_expected(self) -> Any:
        return self.event_name

    @property
    def comparison_type(self) -> Optional[str]:
        return "event_registered"
