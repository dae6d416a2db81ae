"""Command input schema and expected-effect declarations."""

from .expectations import ExpectationKind, ExpectedEvent, ExpectedWork, WorkExpectation
from .fields import FieldSpec, PrimitiveType, field_names, has_required_fields, validate_fields

__all__ = [
    "FieldSpec",
    "PrimitiveType",
    "validate_fields",
    "field_names",
    "has_required_fields",
    "ExpectationKind",
    "WorkExpectation",
    "ExpectedEvent",
    "ExpectedWork",
]
