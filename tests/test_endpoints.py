"""Endpoint wrappers issue the expected requests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from course_client.api.courses import CourseAPI
from course_client.api.moderator import ModeratorAPI
from course_client.http.client import ApiResponse


def _client(data=None):
    client = MagicMock()
    response = ApiResponse(status=200, data=data, headers={}, method="GET", url="u")
    for name in ("get", "post", "patch", "delete"):
        setattr(client, name, AsyncMock(return_value=response))
    return client


@pytest.mark.asyncio
async def test_get_course_bypasses_cache():
    client = _client({"id": 7})

    assert await CourseAPI(client).get_course(7) == {"id": 7}
    client.get.assert_awaited_once_with("/courses/7/", headers={"Cache-Control": "no-store"})


@pytest.mark.asyncio
async def test_curriculum_and_modules_paths():
    client = _client([])
    api = CourseAPI(client)

    await api.get_curriculum(3)
    await api.get_modules(3)

    assert [c.args[0] for c in client.get.await_args_list] == [
        "/courses/3/curriculum/",
        "/courses/3/modules/",
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data, rows",
    [
        ([{"id": 1}, "junk"], [{"id": 1}]),
        ({"results": [{"id": 2}], "count": 1}, [{"id": 2}]),
        ({"detail": "odd"}, []),
        (None, []),
    ],
)
async def test_tutor_courses_accept_bare_and_paginated(data, rows):
    assert await CourseAPI(_client(data)).tutor_courses() == rows


@pytest.mark.asyncio
async def test_tutor_actions_use_expected_methods():
    client = _client({"detail": "ok"})
    api = CourseAPI(client)

    await api.publish_course("c1")
    await api.unpublish_course("c1")
    await api.delete_course("c1")
    await api.restore_course("c1")
    await api.tutor_deleted_courses()

    assert [c.args[0] for c in client.post.await_args_list] == [
        "/courses/tutor/c1/publish/",
        "/courses/tutor/c1/unpublish/",
    ]
    client.delete.assert_awaited_once_with("/courses/tutor/c1/delete/")
    client.patch.assert_awaited_once_with("/courses/tutor/c1/restore/")
    client.get.assert_awaited_once_with("/courses/tutor/deleted/")


@pytest.mark.asyncio
async def test_moderator_listing_builds_query():
    client = _client({"results": []})
    api = ModeratorAPI(client)

    await api.users(search="ada", role=None, page=2)
    await api.payments()
    await api.overview()

    assert [c.args[0] for c in client.get.await_args_list] == [
        "/admin/users/?search=ada&page=2",
        "/admin/payments/",
        "/admin/overview-stats/",
    ]


@pytest.mark.asyncio
async def test_review_application():
    client = _client({"status": "approved"})
    api = ModeratorAPI(client)

    assert await api.review_application("a1", "approve") == {"status": "approved"}
    client.post.assert_awaited_once_with("/admin/applications/a1/review/", {"action": "approve"})

    with pytest.raises(ValueError):
        await api.review_application("a1", "maybe")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_courses_against_service(service, context):
    service.session_valid = True

    assert await context.courses.get_course(9) == {"id": 9, "title": "Python"}
