"""Verdicts for state changes observed through entity snapshots."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..errors import HarnessConfigurationError
from ..schema.expectations import ExpectationKind, WorkExpectation
from .base import Record, Verifier
from .utils import filter_containing


def evaluate_work(records: Sequence[Record], expectation: Optional[WorkExpectation]) -> bool:
    """Judge query records against a work expectation.

    Args:
        records: Records returned by the snapshot query
        expectation: Rule to apply

    Returns:
        True if the records show the expected outcome

    Raises:
        HarnessConfigurationError: If expectation is unset or not evaluable
    """
    if expectation is None:
        raise HarnessConfigurationError(
            "Work expectation is not set; declare exists, absent, or the values to look for."
        )

    if expectation.kind == ExpectationKind.EXISTS:
        return len(records) > 0
    if expectation.kind == ExpectationKind.ABSENT:
        return len(records) == 0
    if expectation.kind == ExpectationKind.CONTAINS_VALUES:
        if not expectation.values:
            raise HarnessConfigurationError("ContainsValues expectation has no values to look for.")
        return len(filter_containing(records, expectation.values)) > 0

    raise HarnessConfigurationError(f"Unsupported work expectation: {expectation.kind!r}")


class WorkVerifier(Verifier):
    """Verifier applying a WorkExpectation to snapshot records."""

    def __init__(self, expectation: Optional[WorkExpectation], name: Optional[str] = None):
        super().__init__(name or "WorkVerifier")
        self.expectation = expectation

    def evaluate(self, records: Sequence[Record]) -> bool:
        return evaluate_work(records, self.expectation)

    def describe_expected(self) -> Any:
        if self.expectation is None:
            return None
        if self.expectation.kind == ExpectationKind.CONTAINS_VALUES:
            return list(self.expectation.values)
        return self.expectation.kind.value

    @property
    def comparison_type(self) -> Optional[str]:
        return self.expectation.kind.value if self.expectation else None
