"""
Error taxonomy for the admin console client.

HTTP failures are mapped by status code so callers can branch on type:

    400      -> ValidationError
    401/403  -> AuthError
    404      -> RouteNotFound
    5xx      -> BackendError
    other    -> ApiError

RouteNotFound is what the endpoint resolver swallows between candidates;
everything else reaches the caller unchanged.
"""
from typing import Optional


class ConsoleError(Exception):
    """Base class for all console client errors."""


class ApiError(ConsoleError):
    """Non-success HTTP response from the fleet API."""

    def __init__(self, message: str, status: Optional[int] = None, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.path = path

    @classmethod
    def from_status(cls, status: int, message: str, path: Optional[str] = None) -> "ApiError":
        """Build the most specific error class for an HTTP status."""
        if status == 400:
            error_cls = ValidationError
        elif status in (401, 403):
            error_cls = AuthError
        elif status == 404:
            error_cls = RouteNotFound
        elif status >= 500:
            error_cls = BackendError
        else:
            error_cls = ApiError
        return error_cls(message, status=status, path=path)


class ValidationError(ApiError):
    """Missing or invalid input. Raised locally (status None) or by the API (400)."""


class AuthError(ApiError):
    """Missing/invalid credential (401) or wrong role (403)."""


class RouteNotFound(ApiError):
    """The path does not exist on this deployment, or the record is unknown."""


class BackendError(ApiError):
    """Server-side failure (5xx)."""


class TransportFailure(ApiError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""


class NoMatchingRoute(ConsoleError):
    """Every candidate path of a write operation answered 404."""

    def __init__(self, operation: str, candidates: list[str]):
        super().__init__(f"Failed to {operation} (no matching route).")
        self.operation = operation
        self.candidates = candidates
