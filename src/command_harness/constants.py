"""Harness-wide defaults, overridable with ``COMMAND_HARNESS_*`` variables."""

import os
from typing import Callable, TypeVar

T = TypeVar("T")

ENV_PREFIX = "COMMAND_HARNESS_"


def env_value(name: str, default: T, parse: Callable[[str], T]) -> T:
    """Read ``ENV_PREFIX + name``; unset or unparsable values fall back to default."""
    value = os.getenv(f"{ENV_PREFIX}{name}")
    if value is None:
        return default
    try:
        return parse(value)
    except ValueError:
        return default


def _status_codes(value: str) -> frozenset[int]:
    return frozenset(int(code) for code in value.split(",") if code.strip())


POLL_INTERVAL_SECONDS = env_value("POLL_INTERVAL_SECONDS", 0.5, float)
RESULT_WAIT_SECONDS = env_value("RESULT_WAIT_SECONDS", 5.0, float)
# Added on top of the result wait when a runner needs a per-scenario timeout.
SCENARIO_TIMEOUT_MARGIN_SECONDS = 0.5

HTTP_CLIENT_TIMEOUT_SECONDS = env_value("HTTP_CLIENT_TIMEOUT_SECONDS", 30.0, float)

# Event-store queries only; command submissions are never retried.
RETRY_BASE_DELAY_SECONDS = env_value("RETRY_BASE_DELAY_SECONDS", 0.25, float)
RETRY_MAX_DELAY_SECONDS = env_value("RETRY_MAX_DELAY_SECONDS", 5.0, float)
RETRY_DEFAULT_MAX_ATTEMPTS = env_value("RETRY_DEFAULT_MAX_ATTEMPTS", 3, int)
RETRY_EXPONENTIAL_BASE = env_value("RETRY_EXPONENTIAL_BASE", 2, int)
RETRY_TRANSIENT_STATUS_CODES = env_value(
    "RETRY_TRANSIENT_STATUS_CODES", frozenset({429, 500, 502, 503, 504}), _status_codes
)

UNIVERSAL_ROLE = "all"
DEFAULT_CORRELATION_FIELD = "tid"
ROLE_EMAIL_DOMAIN = "example.com"
