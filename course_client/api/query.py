"""Query-string helpers for list endpoints."""

from __future__ import annotations

import math
from collections.abc import Mapping
from urllib.parse import urlencode

QueryValue = str | int | float | bool | None


def build_query(params: Mapping[str, QueryValue]) -> str:
    """Build a ``?key=value`` query string, skipping empty values.

    None values and values that are blank once stringified are dropped.
    Returns an empty string when nothing remains.

    Examples:
      {"search": "py", "page": 2} -> "?search=py&page=2"
      {"search": "  ", "role": None} -> ""
    """
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        text = _stringify(value).strip()
        if not text:
            continue
        pairs.append((key, text))
    if not pairs:
        return ""
    return f"?{urlencode(pairs)}"


def parse_number(value: str | None, fallback: float) -> float:
    """Parse a finite number from a query parameter, else return ``fallback``."""
    if not value:
        return fallback
    try:
        number = float(value)
    except ValueError:
        return fallback
    if not math.isfinite(number):
        return fallback
    return int(number) if number.is_integer() else number


def _stringify(value: QueryValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
