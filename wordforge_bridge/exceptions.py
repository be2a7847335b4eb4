"""
wordforge_bridge.exceptions - Error taxonomy for the ability adapter

Every failure this package raises derives from BridgeError. Filtering
outcomes (namespace mismatch, excluded category) are never errors; they are
silent omissions from the loaded tool list.

Example:
    >>> from wordforge_bridge.exceptions import AbilityExecutionError
    >>>
    >>> try:
    ...     data = await tool.execute({"post_type": "page"})
    ... except AbilityExecutionError as e:
    ...     logger.error(f"Ability refused the call: {e} ({e.code})")
"""

from typing import Any

# Response bodies attached to transport errors are cut to this length
MAX_ERROR_BODY_LENGTH = 500


def truncate_body(body: str, limit: int = MAX_ERROR_BODY_LENGTH) -> str:
    """Cut a response body down to `limit` characters for error messages."""
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


class BridgeError(Exception):
    """Base exception for all adapter errors."""


class DiscoveryError(BridgeError):
    """
    Raised when the ability or category catalog cannot be fetched.

    This can occur due to:
    - Network failures or timeouts
    - Non-2xx responses from the registry
    - Malformed JSON in the response

    Fatal to tool loading: no partial catalog is ever returned.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExecutionTransportError(BridgeError):
    """
    Raised when an execution call fails below the envelope level.

    Covers non-2xx HTTP statuses, network errors and timeouts. Whether the
    remote side effect was applied is unknown when this is raised.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = truncate_body(body)


class AbilityExecutionError(BridgeError):
    """Raised when an ability answers with a `success: false` envelope."""

    DEFAULT_MESSAGE = "Ability execution failed"

    def __init__(self, message: str | None = None, code: str = "error") -> None:
        super().__init__(message or self.DEFAULT_MESSAGE)
        self.code = code


class ArgumentValidationError(BridgeError, ValueError):
    """Raised when tool arguments do not match the tool's input schema."""

    def __init__(self, message: str, issues: list[Any] | None = None) -> None:
        super().__init__(message)
        self.issues = issues or []


__all__ = [
    "MAX_ERROR_BODY_LENGTH",
    "AbilityExecutionError",
    "ArgumentValidationError",
    "BridgeError",
    "DiscoveryError",
    "ExecutionTransportError",
    "truncate_body",
]
