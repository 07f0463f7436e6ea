"""Error hierarchy and classification helpers."""

from .handling import (
    extract_error_message,
    error_for_status,
    log_error,
    to_api_error,
)
from .internal import (
    ApiError,
    AuthenticationError,
    ConfigError,
    InternalError,
    NetworkError,
    NotFoundError,
    ParsingError,
    PermissionDeniedError,
    SessionExpiredError,
)

__all__ = [
    "ApiError",
    "AuthenticationError",
    "ConfigError",
    "InternalError",
    "NetworkError",
    "NotFoundError",
    "ParsingError",
    "PermissionDeniedError",
    "SessionExpiredError",
    "extract_error_message",
    "error_for_status",
    "log_error",
    "to_api_error",
]
