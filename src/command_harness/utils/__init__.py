"""Utility functions and helpers."""

from .retry import compute_retry_delay, retry_with_backoff, should_retry_error

__all__ = ["retry_with_backoff", "compute_retry_delay", "should_retry_error"]
