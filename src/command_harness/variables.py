"""Derive the canonical input variants for a command schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .schema.fields import FieldSpec, PrimitiveType, validate_fields

ScenarioInputSet = dict[str, Any]

_PLACEHOLDERS: dict[PrimitiveType, Any] = {
    PrimitiveType.STRING: "test",
    PrimitiveType.ID: "test-id",
    PrimitiveType.INT: 1,
    PrimitiveType.FLOAT: 1.5,
    PrimitiveType.BOOLEAN: True,
}

_EMPTY_VALUES: dict[PrimitiveType, Any] = {
    PrimitiveType.STRING: "",
    PrimitiveType.ID: "",
    PrimitiveType.INT: 0,
    PrimitiveType.FLOAT: 0.0,
    PrimitiveType.BOOLEAN: False,
}

# Each value must fail PrimitiveType.accepts for its key.
_INVALID_VALUES: dict[PrimitiveType, Any] = {
    PrimitiveType.STRING: 12345,
    PrimitiveType.ID: True,
    PrimitiveType.INT: "not-a-number",
    PrimitiveType.FLOAT: "not-a-number",
    PrimitiveType.BOOLEAN: "not-a-boolean",
}


def valid_value(field: FieldSpec) -> Any:
    """Return the field's valid example, or a placeholder for its type."""
    if field.valid_example is not None:
        return field.valid_example
    return _PLACEHOLDERS[field.type]


def empty_value(field: FieldSpec) -> Any:
    return _EMPTY_VALUES[field.type]


def invalid_value(field: FieldSpec) -> Any:
    return _INVALID_VALUES[field.type]


@dataclass(frozen=True)
class VariableSets:
    """The four input variants derived from one schema.

    Attributes:
        all (ScenarioInputSet): Every field with a valid value.
        required_only (ScenarioInputSet): Only required fields, with valid values.
            Empty when the schema has no required fields.
        empty (ScenarioInputSet): Every field set to its type's empty value.
        invalid_type (ScenarioInputSet): Every field set to a value of the wrong type.
    """

    all: ScenarioInputSet
    required_only: ScenarioInputSet
    empty: ScenarioInputSet
    invalid_type: ScenarioInputSet

    @property
    def has_required(self) -> bool:
        return bool(self.required_only)


def build_variable_sets(fields: Iterable[FieldSpec]) -> VariableSets:
    """Derive all input variants for a schema.

    Pure function of the schema; each call returns fresh dicts so callers may
    extend them without affecting other scenarios.

    Raises:
        SchemaError: If the schema is malformed
    """
    schema = validate_fields(fields)
    return VariableSets(
        all={field.name: valid_value(field) for field in schema},
        required_only={field.name: valid_value(field) for field in schema if field.required},
        empty={field.name: empty_value(field) for field in schema},
        invalid_type={field.name: invalid_value(field) for field in schema},
    )
