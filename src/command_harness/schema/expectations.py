"""Declared downstream effects a command is expected to produce."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from ..errors import HarnessConfigurationError, SchemaError


class ExpectationKind(str, Enum):
    """How records found for a work expectation are judged."""

    EXISTS = "exists"
    ABSENT = "absent"
    CONTAINS_VALUES = "contains_values"


@dataclass(frozen=True)
class WorkExpectation:
    """Outcome expected from a query after the command has run.

    Attributes:
        kind (ExpectationKind): Verdict rule to apply.
        values (tuple[Any, ...]): Literals that must all appear in one record.
            Only used with CONTAINS_VALUES.
    """

    kind: ExpectationKind
    values: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if self.kind == ExpectationKind.CONTAINS_VALUES and not self.values:
            raise HarnessConfigurationError(
                "ContainsValues expectation needs at least one literal to look for."
            )
        if self.kind != ExpectationKind.CONTAINS_VALUES and self.values:
            raise HarnessConfigurationError(
                f"{self.kind.value} expectation does not take values; got {self.values!r}."
            )

    @classmethod
    def exists(cls) -> "WorkExpectation":
        return cls(ExpectationKind.EXISTS)

    @classmethod
    def absent(cls) -> "WorkExpectation":
        return cls(ExpectationKind.ABSENT)

    @classmethod
    def contains(cls, *values: Any) -> "WorkExpectation":
        return cls(ExpectationKind.CONTAINS_VALUES, tuple(values))

    @classmethod
    def from_should_have(cls, should_have: Any) -> "WorkExpectation":
        """Translate the short authoring form into an expectation.

        ``True`` means a record must exist, ``False`` means none may exist, and
        a list or tuple lists the literals a record must contain.

        Raises:
            HarnessConfigurationError: If should_have is None or of another type.
        """
        if should_have is True:
            return cls.exists()
        if should_have is False:
            return cls.absent()
        if isinstance(should_have, (list, tuple)):
            return cls.contains(*should_have)
        raise HarnessConfigurationError(
            f"Cannot evaluate work expectation {should_have!r}. "
            "Use True (exists), False (absent), or a list of expected values."
        )


@dataclass(frozen=True)
class ExpectedEvent:
    """Claim that submitting ``triggering_input`` records ``event_name``.

    Attributes:
        triggering_input (Mapping[str, Any]): Command inputs that cause the event.
        event_name (str): Name of the event that must be stored.
        entity (str): Entity tag whose event stream is queried.
    """

    triggering_input: Mapping[str, Any]
    event_name: str
    entity: str

    def __post_init__(self) -> None:
        if not self.event_name or not self.event_name.strip():
            raise HarnessConfigurationError("ExpectedEvent.event_name cannot be empty.")
        if not self.entity or not self.entity.strip():
            raise HarnessConfigurationError(
                f"ExpectedEvent '{self.event_name}' must name the entity it is observed through."
            )
        object.__setattr__(self, "triggering_input", dict(self.triggering_input))


@dataclass(frozen=True)
class ExpectedWork:
    """Claim that submitting ``triggering_input`` changes an entity's state.

    Attributes:
        description (str): Human-readable summary of the work, used in names.
        triggering_input (Mapping[str, Any]): Command inputs that trigger it.
        entity (str): Entity tag whose snapshots are queried.
        expectation (Optional[WorkExpectation]): Verdict rule. Left unset it is
            reported as a configuration error when the scenario runs.
    """

    description: str
    triggering_input: Mapping[str, Any]
    entity: str
    expectation: Optional[WorkExpectation] = None

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise SchemaError("ExpectedWork.description cannot be empty.")
        if not self.entity or not self.entity.strip():
            raise HarnessConfigurationError(
                f"ExpectedWork '{self.description}' must name the entity it is observed through."
            )
        object.__setattr__(self, "triggering_input", dict(self.triggering_input))
