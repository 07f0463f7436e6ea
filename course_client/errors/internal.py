"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the interceptor layer and
for callers. Only raise these at the transport boundary – never surface raw
aiohttp / JSON errors to page-level code; wrap them instead.

Classes:
  InternalError          – Base for all internal errors.
  ConfigError            – Invalid client configuration.
  ApiError               – Any failed API call (status + human message).
  NetworkError           – No response received (connection error, timeout).
  AuthenticationError    – HTTP 401; eligible for one refresh cycle.
  PermissionDeniedError  – HTTP 403 (including CSRF rejections).
  NotFoundError          – HTTP 404.
  SessionExpiredError    – The session refresh failed; re-authentication needed.
  ParsingError           – Response declared JSON but could not be decoded.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class ConfigError(InternalError):
    """Raised when client settings cannot be loaded or validated."""


class ApiError(InternalError):
    """A failed API call as seen by callers.

    Page-level code only needs ``status`` and ``message``; ``raw`` keeps the
    decoded response payload (or the underlying exception) for debugging.

    Attributes:
        status: HTTP status code, or 0 when no response was received.
        message: Human readable message suitable for display.
        raw: Original payload or exception.
    """

    status: int
    message: str
    raw: object

    def __init__(
        self,
        message: str,
        *,
        status: int,
        raw: object = None,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, data=data)
        self.status = status
        self.message = message
        self.raw = raw

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class NetworkError(ApiError):
    """No response was received (connection failure, DNS, timeout).

    Never triggers a session refresh.
    """

    def __init__(
        self,
        message: str,
        *,
        raw: object = None,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, status=0, raw=raw, data=data)


class AuthenticationError(ApiError):
    """HTTP 401 from the service; the session is missing or expired."""


class PermissionDeniedError(ApiError):
    """HTTP 403; refresh cannot fix a missing or invalid CSRF token."""


class NotFoundError(ApiError):
    """HTTP 404."""


class SessionExpiredError(AuthenticationError):
    """The refresh call failed; every queued caller receives this error.

    Raised distinctly so callers can route to a re-authentication flow.
    """

    def __init__(
        self,
        message: str = "Session expired. Please login again.",
        *,
        raw: object = None,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, status=401, raw=raw, data=data)


class ParsingError(ApiError):
    """Response body declared JSON but could not be decoded."""


__all__ = [
    "InternalError",
    "ConfigError",
    "ApiError",
    "NetworkError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "SessionExpiredError",
    "ParsingError",
]
