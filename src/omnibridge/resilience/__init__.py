"""Retry policy for read-only HTTP calls."""

from omnibridge.resilience.retry import execute_with_retry, is_transient_error

__all__ = ["execute_with_retry", "is_transient_error"]
