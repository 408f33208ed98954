"""Exceptions raised by the backend client and services."""

from typing import Any, Optional


class CareerHubError(Exception):
    """Base class for all application errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BackendError(CareerHubError):
    """
    A table query or mutation was rejected by the backend.

    Attributes:
        message: Error description returned by the backend
        status: HTTP status of the reply (0 when the request never completed)
        code: Backend error code (e.g. '42P01' for a missing table)
        details: Extra detail payload, if any
    """

    def __init__(
        self,
        message: str,
        status: int = 0,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        self.status = status
        self.code = code
        self.details = details
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return self.status if 400 <= self.status < 600 else 502


class AuthError(BackendError):
    """No session, an expired token or rejected credentials."""

    @property
    def status_code(self) -> int:
        return 401


class FunctionInvokeError(BackendError):
    """A serverless function returned an error or was unreachable."""

    def __init__(self, function_name: str, message: str, status: int = 0, details: Optional[Any] = None):
        self.function_name = function_name
        super().__init__(f"{function_name}: {message}", status=status, details=details)

    @property
    def status_code(self) -> int:
        # 429/402 are passed through so callers can show rate-limit and credit messages
        return self.status if self.status in (402, 429) else 502


class NotFoundError(CareerHubError):
    """A single-row lookup returned nothing."""

    status_code = 404
