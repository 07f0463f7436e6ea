"""
Configuration constants for the course platform HTTP client

This module contains all tunable constants used by the client layer.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Attempts to parse the environment variable as a float. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Remote service location
SERVER_URL_ENV = "COURSE_API_URL"
DEFAULT_SERVER_URL = "http://localhost:8000"  # "/api" and "/api/auth" are appended by the settings model
APPLICATION_JSON = "application/json"
DEFAULT_USER_AGENT = "CourseClient/1.0"

# CSRF double-submit contract (Django defaults)
CSRF_COOKIE_NAME = os.getenv("CSRF_COOKIE_NAME", "csrftoken")
CSRF_HEADER_NAME = os.getenv("CSRF_HEADER_NAME", "X-CSRFToken")
UNSAFE_METHODS = frozenset({"post", "put", "patch", "delete"})
SAFE_METHODS = frozenset({"get", "head", "options"})

# Network/HTTP constants
REQUEST_TIMEOUT_SECONDS = _get_env_float(
    "REQUEST_TIMEOUT_SECONDS", 15.0
)  # Total timeout applied to every request
REFRESH_TIMEOUT_SECONDS = _get_env_float(
    "REFRESH_TIMEOUT_SECONDS", 15.0
)  # Upper bound for one whole refresh cycle (refresh call + CSRF re-bootstrap)

# Retry/backoff constants (safe methods only)
REQUEST_RETRY_ATTEMPTS = _get_env_int(
    "REQUEST_RETRY_ATTEMPTS", 2
)  # Total attempts for GET/HEAD/OPTIONS on transport errors
REQUEST_RETRY_BACKOFF_SECONDS = _get_env_float(
    "REQUEST_RETRY_BACKOFF_SECONDS", 0.5
)  # Exponential backoff multiplier
REQUEST_RETRY_MAX_BACKOFF_SECONDS = _get_env_float(
    "REQUEST_RETRY_MAX_BACKOFF_SECONDS", 5.0
)  # Backoff ceiling

# Session keep-alive
KEEPALIVE_INTERVAL_SECONDS = _get_env_float(
    "KEEPALIVE_INTERVAL_SECONDS", 420.0
)  # 7 minutes between background session refreshes
