"""Utilities shared across entry points to standardise observability."""

from .logging import configure_logging, correlation_scope, get_correlation_id
from .metrics import observe_request

__all__ = [
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
    "observe_request",
]
