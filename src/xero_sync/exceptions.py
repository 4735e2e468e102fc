"""Error taxonomy for the sync engine.

Configuration/usage and validation errors are raised before any request is
sent. Remote errors are raised by the transport after the response has been
parsed, so the parsed `Response` is available on the exception.
"""

from __future__ import annotations

from typing import Any, Optional


class XeroSyncError(Exception):
    """Base exception for all sync engine errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(XeroSyncError):
    """Raised for invalid configuration keys, type tags or engine usage."""


class UnsupportedMethodError(ConfigurationError):
    """Raised when a resource type does not support the HTTP verb required."""

    def __init__(self, model: str, method: str):
        super().__init__(
            message=f"{model} doesn't support [{method}] via the API",
            details={"model": model, "method": method},
        )


class InvalidBatchError(ConfigurationError):
    """Raised when a batch is empty, mixed-type or cannot be encoded."""


class UnknownPropertyError(ConfigurationError):
    """Raised when reading or writing a property a resource type does not declare."""

    def __init__(self, model: str, name: str):
        super().__init__(
            message=f"{model} has no property [{name}]",
            details={"model": model, "property": name},
        )


class ValidationError(XeroSyncError):
    """Raised when an object fails its own pre-save validation."""


class RemoteError(XeroSyncError):
    """Raised for HTTP error statuses returned by the remote API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response: Any = None,
        details: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.response = response
        super().__init__(message=message, details=details)


class BadRequestError(RemoteError):
    """HTTP 400, usually a validation exception reported by the API."""


class UnauthorizedError(RemoteError):
    """HTTP 401."""


class ForbiddenError(RemoteError):
    """HTTP 403."""


class NotFoundError(RemoteError):
    """HTTP 404."""


class RateLimitExceededError(RemoteError):
    """HTTP 429."""

    def __init__(
        self,
        message: str,
        *,
        retry_after: int | None = None,
        problem: str | None = None,
        status_code: int | None = 429,
        response: Any = None,
    ):
        self.retry_after = retry_after
        self.problem = problem
        super().__init__(
            message,
            status_code=status_code,
            response=response,
            details={"retry_after": retry_after, "problem": problem},
        )


class ServerError(RemoteError):
    """HTTP 500."""


class NotAvailableError(RemoteError):
    """HTTP 503, organisation offline or API maintenance."""
