"""Async HTTP client for the course platform REST service.

Provides the shared client layer (CSRF double-submit handling, single-flight
session refresh on 401, stale-response protection) and thin endpoint
wrappers on top of it.
"""

from .application_context import ApplicationContext
from .config import ClientSettings, load_settings
from .errors import ApiError, NetworkError, SessionExpiredError

__version__ = "1.0.0"

__all__ = [
    "ApiError",
    "ApplicationContext",
    "ClientSettings",
    "NetworkError",
    "SessionExpiredError",
    "__version__",
    "load_settings",
]
