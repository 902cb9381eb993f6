"""Identifier allocation and ordering for sibling names.

Run ids within a store and instance ids within a run share one naming
scheme: numeric names are allocated sequentially, explicit names are
suffixed on collision, and selection prefers numeric order.
"""

from __future__ import annotations

from typing import Iterable

from core.constants import EXPLICIT_ID_SEPARATOR, FIRST_AUTO_ID


def parse_numeric_name(name: str) -> int | None:
    """Parse a name as a non-negative integer, None when not numeric."""
    if name and name.isascii() and name.isdigit():
        return int(name)
    return None


def next_auto_id(existing_names: Iterable[str]) -> str:
    """Return the next free numeric id.

    Non-numeric names are ignored for the maximum but still occupy the
    namespace.

    Args:
        existing_names: Names already present among siblings.

    Returns:
        ``"1"`` when no name is numeric, otherwise max + 1.
    """
    numbers = [
        number
        for number in (parse_numeric_name(name) for name in existing_names)
        if number is not None
    ]
    if not numbers:
        return str(FIRST_AUTO_ID)
    return str(max(numbers) + 1)


def resolve_explicit_id(existing_names: Iterable[str], requested: str) -> str:
    """Return the requested id, suffixed with the first free counter on collision.

    Args:
        existing_names: Names already present among siblings.
        requested: Caller-supplied id.

    Returns:
        ``requested`` or ``"{requested}_{n}"`` for the smallest free n >= 1.
    """
    taken = set(existing_names)
    if requested not in taken:
        return requested
    counter = 1
    while f"{requested}{EXPLICIT_ID_SEPARATOR}{counter}" in taken:
        counter += 1
    return f"{requested}{EXPLICIT_ID_SEPARATOR}{counter}"


def ordered_names(names: Iterable[str]) -> list[str]:
    """Order names for enumeration.

    Numeric names come first in ascending numeric order, followed by the
    remaining names in lexicographic order.
    """
    numeric: list[tuple[int, str]] = []
    textual: list[str] = []
    for name in names:
        number = parse_numeric_name(name)
        if number is None:
            textual.append(name)
        else:
            numeric.append((number, name))
    return [name for _, name in sorted(numeric)] + sorted(textual)


def latest_name(names: Iterable[str]) -> str | None:
    """Select the most recent name.

    Returns the largest numeric name when any exist, else the
    lexicographically last name, else None.
    """
    candidates = list(names)
    numeric = [
        (number, name)
        for number, name in ((parse_numeric_name(name), name) for name in candidates)
        if number is not None
    ]
    if numeric:
        return max(numeric)[1]
    if candidates:
        return max(candidates)
    return None
