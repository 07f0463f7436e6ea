"""Request and response interceptors wired into ApiClient instances."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import UNSAFE_METHODS
from ..errors.internal import ApiError, AuthenticationError, SessionExpiredError
from .client import ApiResponse, RequestDescriptor, ResponseInterceptor
from .csrf import CsrfTokenManager
from .refresh import RefreshCoordinator

if TYPE_CHECKING:
    from .client import ApiClient


class CsrfRequestInterceptor:
    """Attach the current CSRF token to unsafe requests.

    Safe methods are returned untouched. When no token exists the request is
    left as is and the service rejects it with a 403.
    """

    def __init__(self, csrf: CsrfTokenManager) -> None:
        self._csrf = csrf

    def __call__(self, request: RequestDescriptor) -> RequestDescriptor:
        if request.method.lower() not in UNSAFE_METHODS:
            return request
        token = self._csrf.get_csrf_token()
        if token:
            request.headers[self._csrf.header_name] = token
        return request


class RefreshResponseInterceptor(ResponseInterceptor):
    """Refresh the session on a first 401 and replay the request once."""

    def __init__(self, coordinator: RefreshCoordinator) -> None:
        self._coordinator = coordinator

    async def on_error(
        self, error: ApiError, request: RequestDescriptor, client: ApiClient
    ) -> ApiResponse:
        if (
            not isinstance(error, AuthenticationError)
            or isinstance(error, SessionExpiredError)
            or request.retried
            or request.skip_auth_refresh
        ):
            raise error
        request.retried = True
        logging.debug(f"🔐 401 on {request.method} {request.path}, waiting for session refresh")
        await self._coordinator.wait_for_refresh()
        return await client.send(request)
