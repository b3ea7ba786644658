"""Typed exception hierarchy for aumai-toolsearch.

Hierarchy
---------
ToolSearchError (base)
├── InvalidRequestError       – search arguments failed validation
├── NotInitializedError       – search before any successful initialize
├── MethodNotRegisteredError  – unknown search method requested
├── NotReadyError             – engine registered but not ready (e.g. mid-reload)
├── DimensionMismatchError    – query/indexed embedding lengths disagree
├── ProviderUnavailableError  – embedding provider call failed
├── SearchTimeoutError        – search exceeded its deadline
└── FanOutError               – one or more engines failed during initialize/reload

Every class carries a stable ``code`` so outer layers can map error kinds to
distinct responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from aumai_toolsearch.models import SearchMethod

__all__ = [
    "DimensionMismatchError",
    "FanOutError",
    "InvalidRequestError",
    "MethodNotRegisteredError",
    "NotInitializedError",
    "NotReadyError",
    "ProviderUnavailableError",
    "SearchTimeoutError",
    "ToolSearchError",
]


class ToolSearchError(Exception):
    """Base exception for aumai-toolsearch."""

    code = "tool_search_error"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class InvalidRequestError(ToolSearchError):
    """Search arguments failed validation (e.g. ``top_k < 1``)."""

    code = "invalid_request"


class NotInitializedError(ToolSearchError):
    """Search attempted before the engine was initialized."""

    code = "not_initialized"


class MethodNotRegisteredError(ToolSearchError):
    """The requested search method has no registered engine."""

    code = "method_not_registered"


class NotReadyError(ToolSearchError):
    """The engine exists but cannot serve searches right now."""

    code = "not_ready"


class DimensionMismatchError(ToolSearchError):
    """Embedding vectors of different lengths were compared."""

    code = "dimension_mismatch"


class ProviderUnavailableError(ToolSearchError):
    """The embedding provider could not produce embeddings."""

    code = "provider_unavailable"


class SearchTimeoutError(ToolSearchError):
    """A search did not finish before its deadline."""

    code = "search_timeout"


class FanOutError(ToolSearchError):
    """Raised when engines fail during a concurrent initialize or reload.

    ``failures`` maps each failing method to its exception, so no concurrent
    failure is lost. The first failure is chained as ``__cause__``.
    ``succeeded`` lists the engines that did publish the new corpus.
    """

    code = "fan_out_failed"

    def __init__(
        self,
        operation: str,
        failures: dict[SearchMethod, BaseException],
        succeeded: list[SearchMethod] | None = None,
    ) -> None:
        succeeded = succeeded or []
        details = "; ".join(
            f"{method.value}: {type(exc).__name__}: {exc}" for method, exc in failures.items()
        )
        super().__init__(
            f"{operation} failed for {len(failures)} engine(s): {details}",
            context={
                "operation": operation,
                "methods": [m.value for m in failures],
                "succeeded": [m.value for m in succeeded],
            },
        )
        self.operation = operation
        self.failures = failures
        self.succeeded = succeeded
