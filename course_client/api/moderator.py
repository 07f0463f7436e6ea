"""Moderator/admin dashboard endpoints."""

from __future__ import annotations

from typing import Any, Literal

from ..http.client import ApiClient
from .query import QueryValue, build_query

ReviewAction = Literal["approve", "reject"]


class ModeratorAPI:
    """Asynchronous client for ``/api/admin/*`` listings and review actions.

    Listing methods accept the filters the endpoints understand (``search``,
    ``status``, ``role``, ``page``, ``page_size`` ...); empty filters are
    dropped from the query string.
    """

    def __init__(self, client: ApiClient):
        if client is None:
            raise ValueError("ApiClient required")
        self.client = client

    async def overview(self) -> Any:
        response = await self.client.get("/admin/overview-stats/")
        return response.data

    async def users(self, **filters: QueryValue) -> Any:
        return await self._list("users", filters)

    async def courses(self, **filters: QueryValue) -> Any:
        return await self._list("courses", filters)

    async def payments(self, **filters: QueryValue) -> Any:
        return await self._list("payments", filters)

    async def applications(self, **filters: QueryValue) -> Any:
        return await self._list("applications", filters)

    async def review_application(self, application_id: str, action: ReviewAction) -> Any:
        if action not in ("approve", "reject"):
            raise ValueError(f"Unknown review action: {action}")
        response = await self.client.post(
            f"/admin/applications/{application_id}/review/", {"action": action}
        )
        return response.data

    async def _list(self, resource: str, filters: dict[str, QueryValue]) -> Any:
        response = await self.client.get(f"/admin/{resource}/{build_query(filters)}")
        return response.data
