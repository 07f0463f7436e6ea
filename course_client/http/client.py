"""
Shared HTTP client for the course platform REST service.

Every network call goes through ``ApiClient.send``: request interceptors
(CSRF) run on a copy of the caller's request descriptor, the request is
dispatched through the shared aiohttp session, and HTTP/transport failures
are classified into ``ApiError`` subclasses before response interceptors
(refresh-on-401) get a chance to recover.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import aiohttp

from ..constants import (
    APPLICATION_JSON,
    REQUEST_RETRY_ATTEMPTS,
    REQUEST_RETRY_BACKOFF_SECONDS,
    REQUEST_RETRY_MAX_BACKOFF_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
    SAFE_METHODS,
    UNSAFE_METHODS,
)
from ..errors.handling import NETWORK_ERROR_MESSAGE, error_for_status
from ..errors.internal import ApiError, NetworkError, ParsingError
from ..utils.retry import retry_network_errors


@dataclass
class RequestDescriptor:
    """Everything needed to issue (and later replay) one request.

    Attributes:
        method: HTTP method, upper case.
        path: Path relative to the client's base URL (or an absolute URL).
        headers: Caller supplied headers.
        params: Query parameters.
        json_body: JSON body, sent when not None.
        data: Raw/form body, sent when not None.
        timeout: Per-request total timeout override in seconds.
        retried: Set once the request has entered a refresh cycle.
        skip_auth_refresh: Never hand a 401 for this request to the refresh
            coordinator (used by the refresh and CSRF calls themselves).
    """

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] | None = None
    json_body: Any = None
    data: Any = None
    timeout: float | None = None
    retried: bool = False
    skip_auth_refresh: bool = False

    def __post_init__(self) -> None:
        self.method = self.method.upper()

    @property
    def is_unsafe(self) -> bool:
        return self.method.lower() in UNSAFE_METHODS

    def copy(self) -> RequestDescriptor:
        return replace(self, headers=dict(self.headers))


@dataclass
class ApiResponse:
    """A successful (status < 400) response with its decoded body."""

    status: int
    data: Any
    headers: Mapping[str, str]
    method: str
    url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class HeaderDefaults:
    """Default headers merged into every request before interceptors run.

    ``unsafe`` headers only apply to POST/PUT/PATCH/DELETE.
    """

    common: dict[str, str] = field(default_factory=dict)
    unsafe: dict[str, str] = field(default_factory=dict)

    def for_method(self, method: str) -> dict[str, str]:
        headers = dict(self.common)
        if method.lower() in UNSAFE_METHODS:
            headers.update(self.unsafe)
        return headers


RequestInterceptor = Callable[[RequestDescriptor], RequestDescriptor]


class ResponseInterceptor:
    """Hook invoked when a request fails with an ApiError.

    ``on_error`` either returns a response (recovered) or raises; the raised
    error is handed to the next interceptor. The default re-raises.
    """

    async def on_error(
        self, error: ApiError, request: RequestDescriptor, client: ApiClient
    ) -> ApiResponse:
        raise error


class ApiClient:
    """HTTP client bound to one base URL with axios-style interceptor chains.

    Clients share one aiohttp session (and therefore one cookie jar); the
    session is owned by the application context, not by the client.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        *,
        name: str = "api",
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        retry_attempts: int = REQUEST_RETRY_ATTEMPTS,
        retry_backoff: float = REQUEST_RETRY_BACKOFF_SECONDS,
        retry_max_backoff: float = REQUEST_RETRY_MAX_BACKOFF_SECONDS,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        if session is None:
            raise ValueError("aiohttp session required")
        self._session = session
        self.base_url = base_url.rstrip("/")
        self.name = name
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_backoff = retry_backoff
        self.retry_max_backoff = retry_max_backoff
        self.defaults = HeaderDefaults(
            common={"Accept": APPLICATION_JSON, "Content-Type": APPLICATION_JSON}
        )
        if headers:
            self.defaults.common.update(headers)
        self.request_interceptors: list[RequestInterceptor] = []
        self.response_interceptors: list[ResponseInterceptor] = []
        self._request_count = 0

    @property
    def session(self) -> aiohttp.ClientSession:
        return self._session

    def build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    # ---- public request API ----
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        skip_auth_refresh: bool = False,
    ) -> ApiResponse:
        descriptor = RequestDescriptor(
            method=method,
            path=path,
            headers=dict(headers or {}),
            params=params,
            json_body=json_body,
            data=data,
            timeout=timeout,
            skip_auth_refresh=skip_auth_refresh,
        )
        return await self.send(descriptor)

    async def get(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", path, **kwargs)

    async def head(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("HEAD", path, **kwargs)

    async def options(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("OPTIONS", path, **kwargs)

    async def post(self, path: str, json_body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", path, json_body=json_body, **kwargs)

    async def put(self, path: str, json_body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", path, json_body=json_body, **kwargs)

    async def patch(self, path: str, json_body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PATCH", path, json_body=json_body, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", path, **kwargs)

    async def send(self, request: RequestDescriptor) -> ApiResponse:
        """Send a descriptor through the interceptor chains.

        The descriptor itself is never mutated by request interceptors, so a
        replay after refresh starts again from the caller's original headers.

        Raises:
            ApiError: Any classified failure that no response interceptor recovered.
        """
        prepared = self.prepare(request)
        try:
            return await self._dispatch_with_retry(prepared)
        except ApiError as error:
            return await self._handle_error(error, request)

    def prepare(self, request: RequestDescriptor) -> RequestDescriptor:
        """Merge default headers and run request interceptors on a copy."""
        prepared = request.copy()
        headers = self.defaults.for_method(prepared.method)
        headers.update(prepared.headers)
        prepared.headers = headers
        for interceptor in self.request_interceptors:
            prepared = interceptor(prepared)
        return prepared

    def get_stats(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "base_url": self.base_url,
            "request_count": self._request_count,
            "session_closed": self._session.closed,
        }

    # ---- internals ----
    async def _handle_error(self, error: ApiError, request: RequestDescriptor) -> ApiResponse:
        for interceptor in self.response_interceptors:
            try:
                return await interceptor.on_error(error, request, self)
            except ApiError as next_error:
                error = next_error
        raise error

    async def _dispatch_with_retry(self, request: RequestDescriptor) -> ApiResponse:
        if request.method.lower() not in SAFE_METHODS or self.retry_attempts <= 1:
            return await self._dispatch(request)
        return await retry_network_errors(
            lambda: self._dispatch(request),
            context=f"{request.method} {request.path}",
            max_attempts=self.retry_attempts,
            backoff=self.retry_backoff,
            max_backoff=self.retry_max_backoff,
        )

    async def _dispatch(self, request: RequestDescriptor) -> ApiResponse:
        url = self.build_url(request.path)
        timeout = aiohttp.ClientTimeout(total=request.timeout or self.timeout)
        kwargs: dict[str, Any] = {}
        if request.json_body is not None:
            kwargs["json"] = request.json_body
        elif request.data is not None:
            kwargs["data"] = request.data
        self._request_count += 1
        start_time = time.monotonic()
        context = {"method": request.method, "url": url}
        try:
            async with self._session.request(
                request.method,
                url,
                headers=request.headers,
                params=request.params,
                timeout=timeout,
                **kwargs,
            ) as resp:
                status = resp.status
                headers = dict(resp.headers)
                payload = await self._read_body(resp)
        except TimeoutError as e:
            elapsed = time.monotonic() - start_time
            logging.warning(f"⏱️ HTTP {request.method} {url} timed out after {elapsed:.3f}s")
            raise NetworkError(NETWORK_ERROR_MESSAGE, raw=e, data=context) from e
        except aiohttp.ClientError as e:
            elapsed = time.monotonic() - start_time
            logging.warning(
                f"💥 HTTP {request.method} {url} failed: {type(e).__name__} {e} ({elapsed:.3f}s)"
            )
            raise NetworkError(NETWORK_ERROR_MESSAGE, raw=e, data=context) from e

        elapsed = time.monotonic() - start_time
        logging.debug(f"HTTP {request.method} {url} -> {status} ({elapsed:.3f}s) client={self.name}")

        if isinstance(payload, _UndecodableJson):
            if status < 400:
                raise ParsingError(
                    "Failed to parse JSON response", status=status, raw=payload.text, data=context
                )
            payload = None
        if status >= 400:
            error = error_for_status(status, payload)
            error.data.update(context)
            raise error
        return ApiResponse(status=status, data=payload, headers=headers, method=request.method, url=url)

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse) -> Any:
        """Decode the body: JSON when declared, text otherwise, None when empty."""
        text = await resp.text()
        if not text:
            return None
        content_type = resp.headers.get("Content-Type", "")
        if APPLICATION_JSON not in content_type:
            return text
        try:
            return json.loads(text)
        except ValueError:
            return _UndecodableJson(text)


@dataclass
class _UndecodableJson:
    text: str
