"""
Utilities module for the combat engine.

Small helpers shared across the services: clock access, lenient integer
parsing and order-preserving de-duplication.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Iterable


def utc_now() -> datetime:
    """Returns the current UTC time truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def new_id() -> str:
    """Returns a fresh record identifier."""
    return str(uuid.uuid4())


def parse_integer(value: Any) -> int:
    """
    Reads an integer out of a loosely typed value.

    Strings are parsed from their leading signed digits ("+3" gives 3, "7 pts"
    gives 7). Anything that cannot be read gives 0.

    Args:
        value (Any): The value to parse.

    Returns:
        int: The parsed integer.

    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        end = 0
        if text[:1] in ("+", "-"):
            end = 1
        while end < len(text) and text[end].isdigit():
            end += 1
        digits = text[:end]
        if digits and digits not in ("+", "-"):
            return int(digits)
    return 0


def unique(items: Iterable[str]) -> list[str]:
    """Returns the items with duplicates dropped, keeping first occurrences."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
