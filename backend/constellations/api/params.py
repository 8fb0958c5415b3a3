"""Lenient integer query-parameter parsing."""

from __future__ import annotations


def parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw.strip(), 10)
    except ValueError:
        return None


def page_number(raw: str | None) -> int:
    """Anything that is not a non-negative integer means the first page."""
    value = parse_int(raw)
    return value if value is not None and value >= 0 else 0
