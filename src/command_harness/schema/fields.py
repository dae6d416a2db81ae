"""Field schema describing the inputs a command accepts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Union

from ..errors import SchemaError

_NAME_PATTERN = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


class PrimitiveType(str, Enum):
    """Closed set of input types a command field may declare.

    Each value is the GraphQL scalar name used in the mutation document.
    """
    STRING = "String"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    ID = "ID"

    @classmethod
    def from_string(cls, value: str) -> "PrimitiveType":
        """Convert a type tag (including aliases) to PrimitiveType.

        Args:
            value: Type tag, case-insensitive (e.g. "String", "str", "number")

        Returns:
            PrimitiveType enum value

        Raises:
            SchemaError: If value is not a recognized type tag
        """
        normalized = value.lower().strip()
        alias_map = {
            "string": cls.STRING,
            "str": cls.STRING,
            "int": cls.INT,
            "integer": cls.INT,
            "float": cls.FLOAT,
            "number": cls.FLOAT,
            "boolean": cls.BOOLEAN,
            "bool": cls.BOOLEAN,
            "id": cls.ID,
        }
        if normalized not in alias_map:
            raise SchemaError(
                f"Unsupported field type: '{value}'. "
                f"Supported: String/str, Int/integer, Float/number, Boolean/bool, ID"
            )
        return alias_map[normalized]

    def accepts(self, value: Any) -> bool:
        """Return True if value is a valid runtime value for this type."""
        if self in (PrimitiveType.STRING, PrimitiveType.ID):
            return isinstance(value, str)
        if self == PrimitiveType.BOOLEAN:
            return isinstance(value, bool)
        if self == PrimitiveType.INT:
            return isinstance(value, int) and not isinstance(value, bool)
        return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class FieldSpec:
    """One input accepted by a command.

    Attributes:
        name (str): Input name, must be a valid GraphQL identifier.
        type (PrimitiveType): Declared type. Strings are converted on creation.
        required (bool): Whether the command rejects submissions without it.
        valid_example (Optional[Any]): Value used instead of the generated
            placeholder when a valid submission is built.
    """

    name: str
    type: Union[PrimitiveType, str] = PrimitiveType.STRING
    required: bool = False
    valid_example: Optional[Any] = None

    def __post_init__(self) -> None:
        """Validate and normalize the field.

        Raises:
            SchemaError: If the name is not an identifier, the type is unknown,
                or valid_example does not match the declared type.
        """
        if not isinstance(self.name, str) or not _NAME_PATTERN.match(self.name):
            raise SchemaError(
                f"FieldSpec.name must be a GraphQL identifier, got {self.name!r}."
            )

        field_type = self.type
        if not isinstance(field_type, PrimitiveType):
            field_type = PrimitiveType.from_string(str(field_type))
            object.__setattr__(self, "type", field_type)

        if self.valid_example is not None and not field_type.accepts(self.valid_example):
            raise SchemaError(
                f"Field '{self.name}' declares valid_example={self.valid_example!r} "
                f"({type(self.valid_example).__name__}), which is not a valid {field_type.value}."
            )

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FieldSpec":
        """Build a FieldSpec from a plain mapping.

        Accepts both ``valid_example`` and ``validExample`` keys.
        """
        if not isinstance(raw, dict):
            raise SchemaError(f"Field definition must be a dict; got {type(raw).__name__}")
        example = raw.get("valid_example", raw.get("validExample"))
        return cls(
            name=raw.get("name", ""),
            type=raw.get("type", PrimitiveType.STRING),
            required=bool(raw.get("required", False)),
            valid_example=example,
        )


def validate_fields(fields: Iterable[FieldSpec]) -> tuple[FieldSpec, ...]:
    """Check a schema and return it as an immutable tuple.

    Raises:
        SchemaError: If a field is not a FieldSpec or a name appears twice.
    """
    checked: list[FieldSpec] = []
    seen: set[str] = set()
    for field in fields:
        if not isinstance(field, FieldSpec):
            raise SchemaError(f"Expected FieldSpec, got {type(field).__name__}")
        if field.name in seen:
            raise SchemaError(f"Duplicate field name '{field.name}' in schema.")
        seen.add(field.name)
        checked.append(field)
    return tuple(checked)


def field_names(fields: Iterable[FieldSpec]) -> list[str]:
    return [field.name for field in fields]


def has_required_fields(fields: Iterable[FieldSpec]) -> bool:
    return any(field.required for field in fields)
