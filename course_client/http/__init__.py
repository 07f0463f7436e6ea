"""Shared HTTP client layer: CSRF handling and session refresh coordination."""

from .client import ApiClient, ApiResponse, HeaderDefaults, RequestDescriptor, ResponseInterceptor
from .cookies import CookieAccessor, parse_cookie
from .csrf import CsrfTokenManager
from .interceptors import CsrfRequestInterceptor, RefreshResponseInterceptor
from .refresh import RefreshCoordinator, RefreshState
from .stale_guard import LatestQuery, StaleResponseGuard

__all__ = [
    "ApiClient",
    "ApiResponse",
    "CookieAccessor",
    "CsrfRequestInterceptor",
    "CsrfTokenManager",
    "HeaderDefaults",
    "LatestQuery",
    "RefreshCoordinator",
    "RefreshResponseInterceptor",
    "RefreshState",
    "RequestDescriptor",
    "ResponseInterceptor",
    "StaleResponseGuard",
    "parse_cookie",
]
