"""Endpoint wrappers built on the shared HTTP client."""

from .auth import AuthAPI, AuthSession, dashboard_path
from .courses import CourseAPI
from .moderator import ModeratorAPI
from .query import build_query, parse_number

__all__ = [
    "AuthAPI",
    "AuthSession",
    "CourseAPI",
    "ModeratorAPI",
    "build_query",
    "dashboard_path",
    "parse_number",
]
