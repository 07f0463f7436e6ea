import aiohttp
import pytest
from yarl import URL

from course_client.http.cookies import CookieAccessor, parse_cookie


@pytest.mark.parametrize(
    "header, expected",
    [
        ("csrftoken=abc", "abc"),
        ("sessionid=s1; csrftoken=abc", "abc"),
        ("  csrftoken = abc ;other=1", " abc"),
        ("csrftoken=a%20b%2Fc", "a b/c"),
        (";;garbage; csrftoken=ok", "ok"),
        ("xcsrftoken=no; csrftoken=yes", "yes"),
        ("csrftoken=first; csrftoken=second", "first"),
        ("csrftoken=", ""),
    ],
)
def test_parse_cookie(header, expected):
    assert parse_cookie(header, "csrftoken") == expected


@pytest.mark.parametrize("header", [None, "", "sessionid=s1", "csrftoken", "a=1;;b=2"])
def test_parse_cookie_absent(header):
    assert parse_cookie(header, "csrftoken") is None


@pytest.mark.asyncio
async def test_accessor_reads_jar_for_server():
    jar = aiohttp.CookieJar(unsafe=True)
    jar.update_cookies({"csrftoken": "tok123", "sessionid": "s1"}, URL("http://127.0.0.1:8000/"))
    accessor = CookieAccessor(jar, "http://127.0.0.1:8000/api/auth/")

    assert accessor.get_cookie("csrftoken") == "tok123"
    assert accessor.get_cookie("missing") is None
    assert "sessionid=s1" in accessor.cookie_header()


@pytest.mark.asyncio
async def test_accessor_empty_jar():
    accessor = CookieAccessor(aiohttp.CookieJar(unsafe=True), "http://127.0.0.1:8000/")

    assert accessor.cookie_header() == ""
    assert accessor.get_cookie("csrftoken") is None


def test_accessor_without_jar():
    accessor = CookieAccessor(None, "http://host/")

    assert accessor.cookie_header() is None
    assert accessor.get_cookie("csrftoken") is None
    assert accessor.url == URL("http://host/")


@pytest.mark.asyncio
async def test_accessor_returns_unquoted_value():
    jar = aiohttp.CookieJar(unsafe=True)
    jar.update_cookies({"csrftoken": "a b,c"}, URL("http://127.0.0.1:8000/"))
    accessor = CookieAccessor(jar, "http://127.0.0.1:8000/")

    assert accessor.get_cookie("csrftoken") == "a b,c"
