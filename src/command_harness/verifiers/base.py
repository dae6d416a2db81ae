"""Base verifier interface and data structures."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence


@dataclass(frozen=True)
class Record:
    """A row returned by a read/event store query.

    Attributes:
        kind (Optional[str]): Record kind, e.g. "snapshot" or "event".
        value (Any): Record payload; serialized to JSON for content checks.
    """

    kind: Optional[str]
    value: Any = None

    @classmethod
    def from_raw(cls, raw: Any) -> "Record":
        """Wrap a store row (mapping or object with kind/value attributes)."""
        if isinstance(raw, Record):
            return raw
        if isinstance(raw, Mapping):
            return cls(kind=raw.get("kind"), value=raw.get("value"))
        return cls(kind=getattr(raw, "kind", None), value=getattr(raw, "value", None))


def as_records(raw_records: Optional[Iterable[Any]]) -> list[Record]:
    """Normalize a query result into Records; None is treated as no records."""
    if raw_records is None:
        return []
    return [Record.from_raw(raw) for raw in raw_records]


@dataclass
class VerifierResult:
    """Result from evaluating a verifier against query records."""

    name: str
    success: bool
    expected_value: Optional[Any]
    actual_value: Optional[Any]
    comparison_type: Optional[str]
    error: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class Verifier(ABC):
    """Abstract base class for verifiers.

    Verifiers decide whether the records a query returned show the effect a
    command was expected to have.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__

    @abstractmethod
    def evaluate(self, records: Sequence[Record]) -> bool:
        """Return the verdict for the given records.

        Raises:
            HarnessConfigurationError: If the verifier has nothing to evaluate
        """
        ...

    @abstractmethod
    def describe_expected(self) -> Any:
        """Return a printable form of what the verifier looks for."""
        ...

    def verify(self, raw_records: Optional[Iterable[Any]]) -> VerifierResult:
        """Evaluate raw query output and package the verdict."""
        records = as_records(raw_records)
        success = self.evaluate(records)
        return VerifierResult(
            name=self.name,
            success=success,
            expected_value=self.describe_expected(),
            actual_value=[{"kind": record.kind, "value": record.value} for record in records],
            comparison_type=self.comparison_type,
            error=None if success else "Expectation not met",
            metadata={"record_count": len(records)},
        )

    @property
    def comparison_type(self) -> Optional[str]:
        return None
