"""Load command plans from JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..constants import DEFAULT_CORRELATION_FIELD, POLL_INTERVAL_SECONDS, RESULT_WAIT_SECONDS, UNIVERSAL_ROLE
from ..errors import SchemaError
from ..schema.expectations import ExpectedEvent, ExpectedWork, WorkExpectation
from ..schema.fields import FieldSpec
from .plan import CommandPlan


def _first(entry: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the value of the first key present in entry."""
    for key in keys:
        if key in entry:
            return entry[key]
    return default


def _as_list(value: Any, label: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"'{label}' must be a list; got {type(value).__name__}")
    return list(value)


def _parse_event(raw: Any) -> ExpectedEvent:
    if not isinstance(raw, dict):
        raise TypeError(f"Each registered event must be a dict; got {type(raw).__name__}")
    return ExpectedEvent(
        triggering_input=_first(raw, "input", "triggering_input", default={}),
        event_name=_first(raw, "event", "event_name", default=""),
        entity=_first(raw, "evaluated_entity", "evaluatedEntity", "entity", default=""),
    )


def _parse_work(raw: Any) -> ExpectedWork:
    if not isinstance(raw, dict):
        raise TypeError(f"Each work entry must be a dict; got {type(raw).__name__}")
    should_have = _first(raw, "should_have", "shouldHave")
    # A missing expectation is kept so the scenario reports it when it runs.
    expectation = None if should_have is None else WorkExpectation.from_should_have(should_have)
    return ExpectedWork(
        description=_first(raw, "work_to_do", "workToDo", "description", default=""),
        triggering_input=_first(raw, "test_inputs", "testInputs", "triggering_input", default={}),
        entity=_first(raw, "evaluated_entity", "evaluatedEntity", "entity", default=""),
        expectation=expectation,
    )


def parse_plan(payload: dict[str, Any]) -> CommandPlan:
    """Build a CommandPlan from a decoded JSON document.

    Both snake_case and the camelCase keys of hand-written test files are
    accepted.

    Raises:
        SchemaError: If the plan is malformed
        TypeError: If a section has the wrong JSON type
    """
    if not isinstance(payload, dict):
        raise TypeError(f"Plan must be a JSON object; got {type(payload).__name__}")

    command_name = _first(payload, "command", "command_name", "commandName", default="")
    if not command_name:
        raise SchemaError("Plan must name the command under test ('command').")

    fields = [
        FieldSpec.from_dict(raw)
        for raw in _as_list(_first(payload, "accepted_inputs", "acceptedInputs", "fields"), "accepted_inputs")
    ]
    roles = _as_list(
        _first(payload, "authorized_roles", "authorizedRoles", default=[UNIVERSAL_ROLE]),
        "authorized_roles",
    )
    events = [
        _parse_event(raw)
        for raw in _as_list(_first(payload, "registered_events", "registeredEvents"), "registered_events")
    ]
    work = [
        _parse_work(raw)
        for raw in _as_list(_first(payload, "work_to_be_done", "workToBeDone", "work"), "work_to_be_done")
    ]

    return CommandPlan(
        command_name=command_name,
        fields=fields,
        authorized_roles=roles,
        registered_events=events,
        work=work,
        correlation_field=_first(payload, "correlation_field", default=DEFAULT_CORRELATION_FIELD),
        poll_interval=float(_first(payload, "poll_interval_seconds", default=POLL_INTERVAL_SECONDS)),
        result_wait=float(_first(payload, "result_wait_seconds", default=RESULT_WAIT_SECONDS)),
        metadata=dict(payload.get("metadata") or {}),
    )


def load_plan_file(path: Path) -> CommandPlan:
    """Load a command plan from a JSON file.

    Args:
        path: Path to JSON plan file

    Returns:
        Validated CommandPlan
    """
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    return parse_plan(payload)


def load_plan_directory(directory: Path) -> dict[str, CommandPlan]:
    """Load all JSON plan files from a directory.

    Args:
        directory: Path to directory containing JSON files

    Returns:
        Dict mapping file stem to plan

    Raises:
        ValueError: If directory doesn't exist, contains no JSON files, or a
            file fails to load
    """
    if not directory.is_dir():
        raise ValueError(f"Not a directory: {directory}")

    json_files = sorted(directory.glob("*.json"))
    if not json_files:
        raise ValueError(f"No JSON files found in directory: {directory}")

    plans: dict[str, CommandPlan] = {}
    for json_file in json_files:
        try:
            plans[json_file.stem] = load_plan_file(json_file)
        except Exception as exc:
            raise ValueError(f"Failed to load {json_file.name}: {exc}") from exc
    return plans
