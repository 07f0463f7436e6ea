"""Course and tutor course endpoints.

Thin wrappers returning decoded JSON. Keep request logic here rather than
sprinkling raw paths across callers; presentation shaping stays with the caller.
"""

from __future__ import annotations

from typing import Any

from ..http.client import ApiClient


class CourseAPI:
    """Asynchronous client for ``/api/courses/*``."""

    def __init__(self, client: ApiClient):
        if client is None:
            raise ValueError("ApiClient required")
        self.client = client

    async def get_course(self, course_id: str | int) -> Any:
        response = await self.client.get(
            f"/courses/{course_id}/", headers={"Cache-Control": "no-store"}
        )
        return response.data

    async def get_curriculum(self, course_id: str | int) -> Any:
        """Module/lesson tree of a course."""
        response = await self.client.get(f"/courses/{course_id}/curriculum/")
        return response.data

    async def get_modules(self, course_id: str | int) -> Any:
        response = await self.client.get(f"/courses/{course_id}/modules/")
        return response.data

    # ---- tutor ----
    async def tutor_courses(self) -> list[dict[str, Any]]:
        response = await self.client.get("/courses/tutor/")
        return self._rows(response.data)

    async def tutor_deleted_courses(self) -> list[dict[str, Any]]:
        response = await self.client.get("/courses/tutor/deleted/")
        return self._rows(response.data)

    async def publish_course(self, course_id: str) -> Any:
        response = await self.client.post(f"/courses/tutor/{course_id}/publish/")
        return response.data

    async def unpublish_course(self, course_id: str) -> Any:
        response = await self.client.post(f"/courses/tutor/{course_id}/unpublish/")
        return response.data

    async def delete_course(self, course_id: str) -> Any:
        response = await self.client.delete(f"/courses/tutor/{course_id}/delete/")
        return response.data

    async def restore_course(self, course_id: str) -> Any:
        response = await self.client.patch(f"/courses/tutor/{course_id}/restore/")
        return response.data

    @staticmethod
    def _rows(data: Any) -> list[dict[str, Any]]:
        # Tutor listings come back either bare or DRF-paginated.
        if isinstance(data, dict):
            data = data.get("results")
        if isinstance(data, list):
            return [row for row in data if isinstance(row, dict)]
        return []
