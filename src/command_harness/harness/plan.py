"""Declarative description of the command under test."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from ..constants import (
    DEFAULT_CORRELATION_FIELD,
    POLL_INTERVAL_SECONDS,
    RESULT_WAIT_SECONDS,
    SCENARIO_TIMEOUT_MARGIN_SECONDS,
    UNIVERSAL_ROLE,
)
from ..errors import SchemaError
from ..mutation import CommandMutation, build_command_mutation
from ..schema.expectations import ExpectedEvent, ExpectedWork
from ..schema.fields import FieldSpec, PrimitiveType, validate_fields
from ..variables import VariableSets, build_variable_sets


@dataclass(frozen=True)
class CommandPlan:
    """Everything needed to derive the scenarios for one command.

    Construction validates the whole plan, so a malformed plan fails before
    any request reaches the backend.

    Attributes:
        command_name (str): Command as exposed by the backend.
        fields (Sequence[FieldSpec]): Accepted inputs.
        authorized_roles (Sequence[str]): Roles allowed to submit. Empty, or
            containing "all", means the command is open and authorization
            scenarios are skipped.
        registered_events (Sequence[ExpectedEvent]): Events the command must record.
        work (Sequence[ExpectedWork]): State changes the command must cause.
        correlation_field (str): Input carrying the per-scenario correlation id.
        poll_interval (float): Seconds between store queries while waiting.
        result_wait (float): Seconds to wait for an effect before the final check.
    """

    command_name: str
    fields: Sequence[FieldSpec]
    authorized_roles: Sequence[str] = (UNIVERSAL_ROLE,)
    registered_events: Sequence[ExpectedEvent] = ()
    work: Sequence[ExpectedWork] = ()
    correlation_field: str = DEFAULT_CORRELATION_FIELD
    poll_interval: float = POLL_INTERVAL_SECONDS
    result_wait: float = RESULT_WAIT_SECONDS
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        """Validate the plan.

        Raises:
            SchemaError: If the command name or schema is malformed, triggering
                inputs name unknown fields, or the correlation field is missing
                while effects are declared.
            ValueError: If poll timing is not positive.
        """
        object.__setattr__(self, "fields", validate_fields(self.fields))
        object.__setattr__(self, "authorized_roles", tuple(self.authorized_roles))
        object.__setattr__(self, "registered_events", tuple(self.registered_events))
        object.__setattr__(self, "work", tuple(self.work))

        # Builds and validates the mutation document up front.
        object.__setattr__(self, "_mutation", build_command_mutation(self.command_name, self.fields))
        object.__setattr__(self, "_variable_sets", build_variable_sets(self.fields))

        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}.")
        if self.result_wait < 0:
            raise ValueError(f"result_wait cannot be negative, got {self.result_wait}.")

        for role in self.authorized_roles:
            if not isinstance(role, str) or not role.strip():
                raise SchemaError(f"Authorized roles must be non-empty strings, got {role!r}.")

        names = {f.name for f in self.fields}
        if self.registered_events or self.work:
            correlation = next((f for f in self.fields if f.name == self.correlation_field), None)
            if correlation is None:
                raise SchemaError(
                    f"Command '{self.command_name}' declares expected effects but has no "
                    f"'{self.correlation_field}' input to carry the correlation id."
                )
            if correlation.type not in (PrimitiveType.STRING, PrimitiveType.ID):
                raise SchemaError(
                    f"Correlation input '{self.correlation_field}' must be String or ID, "
                    f"got {correlation.type.value}."
                )

        triggers = [(e.event_name, e.triggering_input) for e in self.registered_events]
        triggers += [(w.description, w.triggering_input) for w in self.work]
        for label, triggering_input in triggers:
            unknown = sorted(set(triggering_input) - names)
            if unknown:
                raise SchemaError(
                    f"Triggering input for '{label}' uses unknown field(s): {', '.join(unknown)}."
                )

    @property
    def mutation(self) -> CommandMutation:
        return self._mutation  # type: ignore[attr-defined]

    @property
    def variable_sets(self) -> VariableSets:
        return self._variable_sets  # type: ignore[attr-defined]

    @property
    def checks_authorization(self) -> bool:
        """True when the command is restricted to specific roles."""
        return bool(self.authorized_roles) and UNIVERSAL_ROLE not in self.authorized_roles

    @property
    def has_required_fields(self) -> bool:
        return self.variable_sets.has_required

    @property
    def scenario_timeout(self) -> float:
        """Seconds a runner should allow a polling scenario to take."""
        return self.result_wait + SCENARIO_TIMEOUT_MARGIN_SECONDS
