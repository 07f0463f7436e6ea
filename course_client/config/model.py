from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..constants import (
    CSRF_COOKIE_NAME,
    CSRF_HEADER_NAME,
    DEFAULT_SERVER_URL,
    DEFAULT_USER_AGENT,
    KEEPALIVE_INTERVAL_SECONDS,
    REFRESH_TIMEOUT_SECONDS,
    REQUEST_RETRY_ATTEMPTS,
    REQUEST_RETRY_BACKOFF_SECONDS,
    REQUEST_RETRY_MAX_BACKOFF_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
)


def normalize_server_url(raw: str | None) -> str:
    """Normalize the configured server URL to the bare server root.

    Strips surrounding whitespace, one trailing slash and a trailing ``/api``
    so that both "http://host:8000/" and "http://host:8000/api" resolve to
    "http://host:8000". Empty input falls back to the default server.
    """
    url = (raw or DEFAULT_SERVER_URL).strip() or DEFAULT_SERVER_URL
    if url.endswith("/"):
        url = url[:-1]
    if url.endswith("/api"):
        url = url[:-4]
    return url


class ClientSettings(BaseModel):
    """Settings for the shared HTTP client layer.

    Attributes:
        server_url: Server root; "/api" and "/api/auth" are derived from it.
        request_timeout: Total timeout in seconds for each request.
        refresh_timeout: Upper bound in seconds for one refresh cycle.
        retry_attempts: Total attempts for safe methods on transport errors.
        retry_backoff: Exponential backoff multiplier in seconds.
        retry_max_backoff: Ceiling for a single backoff wait.
        keepalive_interval: Seconds between background session refreshes.
        csrf_cookie_name: Name of the readable CSRF cookie.
        csrf_header_name: Header echoing the CSRF token on unsafe methods.
        allow_ip_cookies: Accept cookies from IP-address hosts (local dev servers).
        refresh_on_api: Also wire refresh-on-401 into the general API client.
        user_agent: User-Agent header sent with every request.
    """

    server_url: str = DEFAULT_SERVER_URL
    request_timeout: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0)
    refresh_timeout: float = Field(default=REFRESH_TIMEOUT_SECONDS, gt=0)
    retry_attempts: int = Field(default=REQUEST_RETRY_ATTEMPTS, ge=1, le=10)
    retry_backoff: float = Field(default=REQUEST_RETRY_BACKOFF_SECONDS, ge=0)
    retry_max_backoff: float = Field(default=REQUEST_RETRY_MAX_BACKOFF_SECONDS, ge=0)
    keepalive_interval: float = Field(default=KEEPALIVE_INTERVAL_SECONDS, gt=0)
    csrf_cookie_name: str = Field(default=CSRF_COOKIE_NAME, min_length=1)
    csrf_header_name: str = Field(default=CSRF_HEADER_NAME, min_length=1)
    allow_ip_cookies: bool = True
    refresh_on_api: bool = False
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("server_url", mode="before")
    @classmethod
    def validate_server_url(cls, v: Any) -> str:
        """Normalize the server URL and require an http(s) scheme."""
        if v is not None and not isinstance(v, str):
            raise ValueError("server_url must be a string")
        url = normalize_server_url(v)
        if not url.startswith(("http://", "https://")):
            raise ValueError("server_url must start with http:// or https://")
        return url

    @property
    def api_base_url(self) -> str:
        return f"{self.server_url}/api"

    @property
    def auth_base_url(self) -> str:
        return f"{self.server_url}/api/auth"
