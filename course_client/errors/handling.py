"""Error classification shared by the HTTP client and its interceptors.

All status/payload interpretation lives here so callers never probe response
bodies themselves. Message extraction is one ordered fallback chain over the
error shapes the service is known to return:

1. ``{"detail": "..."}``            (DRF default)
2. ``{"message": "..."}``
3. ``{"<field>": "..."}``           first non-blank string field
4. ``{"<field>": ["...", ...]}``    first non-blank string of a list field

Blank strings never count as a message. When nothing matches, a generic
message for the status code is used.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

import aiohttp
from pydantic import AfterValidator, BaseModel, ConfigDict, RootModel, ValidationError

from ..logging_config import log_structured_error
from .internal import (
    ApiError,
    AuthenticationError,
    InternalError,
    NetworkError,
    NotFoundError,
    ParsingError,
    PermissionDeniedError,
    SessionExpiredError,
)

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."

_STATUS_MESSAGES = {
    401: "Unauthorized. Please login again.",
    403: "You don't have permission to perform this action.",
    404: "Requested resource was not found.",
}


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("blank message")
    return value


NonBlankStr = Annotated[str, AfterValidator(_require_text)]


class DetailBody(BaseModel):
    model_config = ConfigDict(strict=True)

    detail: NonBlankStr


class MessageBody(BaseModel):
    model_config = ConfigDict(strict=True)

    message: NonBlankStr


class FieldErrorsBody(RootModel[dict[str, Any]]):
    """Validation error payload keyed by field name."""

    def first_message(self) -> str | None:
        for value in self.root.values():
            if isinstance(value, str) and value.strip():
                return value
            if isinstance(value, list) and value:
                first = value[0]
                if isinstance(first, str) and first.strip():
                    return first
        return None


def extract_error_message(payload: object) -> str | None:
    """Return the best human-readable message found in an error payload.

    Args:
        payload: Decoded response body (any JSON value or None).

    Returns:
        The message, or None when the payload carries none.
    """
    if not isinstance(payload, dict):
        return None
    try:
        return DetailBody.model_validate(payload).detail
    except ValidationError:
        pass
    try:
        return MessageBody.model_validate(payload).message
    except ValidationError:
        pass
    return FieldErrorsBody.model_validate(payload).first_message()


def default_message(status: int) -> str:
    """Generic message for a status code when the payload has none."""
    if status == 0:
        return NETWORK_ERROR_MESSAGE
    return _STATUS_MESSAGES.get(status, GENERIC_ERROR_MESSAGE)


def error_for_status(status: int, payload: object = None) -> ApiError:
    """Build the ApiError subclass matching an HTTP error status.

    Args:
        status: HTTP status code (>= 400).
        payload: Decoded response body.

    Returns:
        AuthenticationError, PermissionDeniedError, NotFoundError or ApiError.
    """
    message = extract_error_message(payload) or default_message(status)
    if status == 401:
        return AuthenticationError(message, status=status, raw=payload)
    if status == 403:
        return PermissionDeniedError(message, status=status, raw=payload)
    if status == 404:
        return NotFoundError(message, status=status, raw=payload)
    return ApiError(message, status=status, raw=payload)


def to_api_error(error: BaseException) -> ApiError:
    """Normalize any exception raised around an API call into an ApiError.

    Args:
        error: The exception to normalize.

    Returns:
        The error itself when it already is an ApiError, a NetworkError for
        transport failures, or a status-0 ApiError otherwise.
    """
    if isinstance(error, ApiError):
        return error
    if isinstance(error, TimeoutError | aiohttp.ClientError | OSError):
        return NetworkError(NETWORK_ERROR_MESSAGE, raw=error)
    text = str(error).strip()
    return ApiError(text or GENERIC_ERROR_MESSAGE, status=0, raw=error)


def error_category(error: BaseException) -> str:
    if isinstance(error, NetworkError | OSError | ConnectionError | TimeoutError):
        return "network"
    if isinstance(error, SessionExpiredError):
        return "session"
    if isinstance(error, AuthenticationError):
        return "auth"
    if isinstance(error, PermissionDeniedError):
        return "permission"
    if isinstance(error, ParsingError):
        return "parsing"
    if isinstance(error, ApiError):
        return "http"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: BaseException,
    context: dict | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with its category through the structured error logger.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level.
    """
    log_structured_error(
        error_type=error_category(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
        level=level,
    )


__all__ = [
    "NETWORK_ERROR_MESSAGE",
    "GENERIC_ERROR_MESSAGE",
    "DetailBody",
    "MessageBody",
    "FieldErrorsBody",
    "extract_error_message",
    "default_message",
    "error_for_status",
    "to_api_error",
    "error_category",
    "log_error",
]
