import pytest

from course_client.api.query import build_query, parse_number


@pytest.mark.parametrize(
    "params, expected",
    [
        ({"search": "py", "page": 2}, "?search=py&page=2"),
        ({"search": "  ", "role": None}, ""),
        ({}, ""),
        ({"active": True, "deleted": False}, "?active=true&deleted=false"),
        ({"search": "a b&c"}, "?search=a+b%26c"),
        ({"page": 0}, "?page=0"),
    ],
)
def test_build_query(params, expected):
    assert build_query(params) == expected


@pytest.mark.parametrize(
    "value, expected",
    [("3", 3), ("2.5", 2.5), (None, 1), ("", 1), ("abc", 1), ("inf", 1), ("nan", 1)],
)
def test_parse_number(value, expected):
    assert parse_number(value, 1) == expected
