"""Verification of command effects from query records."""

from .base import Record, Verifier, VerifierResult, as_records
from .events import EventVerifier, evaluate_event_registration
from .utils import filter_containing, normalize_literal, serialize_value
from .work import WorkVerifier, evaluate_work

__all__ = [
    "Record",
    "Verifier",
    "VerifierResult",
    "as_records",
    "WorkVerifier",
    "evaluate_work",
    "EventVerifier",
    "evaluate_event_registration",
    "filter_containing",
    "normalize_literal",
    "serialize_value",
]
