"""Exception types raised by the harness."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class HarnessError(Exception):
    """Base class for all harness errors."""


class SchemaError(HarnessError, ValueError):
    """A field schema or command definition is malformed.

    Raised while plans are being built, before any request is submitted.
    """


class HarnessConfigurationError(HarnessError):
    """A scenario declares an expectation that cannot be evaluated."""


class CommandRejectedError(HarnessError):
    """The backend refused a submitted command.

    Attributes:
        message (str): Human-readable rejection reason reported by the backend.
        errors (Sequence[Any]): Raw error entries from the response payload.
    """

    def __init__(self, message: str, errors: Optional[Sequence[Any]] = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class ScenarioFailure(HarnessError, AssertionError):
    """A scenario observed behavior other than what it expects.

    Subclasses AssertionError so external test runners report it as a failed
    assertion rather than an error.
    """
