"""Shared validators for Pydantic config models.

- Ascending band validation
- String list normalization
"""

from typing import Any


def validate_ascending(
    values: list[int],
    field_name: str = "Values",
) -> list[int]:
    """Validate that a list of integers is strictly ascending.

    Args:
        values: Integers to check
        field_name: Name for error messages

    Returns:
        The unchanged list

    Raises:
        ValueError: If the list is not strictly ascending
    """
    if any(b <= a for a, b in zip(values, values[1:], strict=False)):
        raise ValueError(f"{field_name} must be strictly ascending. Got: {values}")
    return values


def normalize_string_list(value: Any) -> list[str]:
    """Normalize string list to lowercase, stripped, de-duplicated entries.

    Handles None, single strings, and lists.

    Args:
        value: Input value (None, str, or list[str])

    Returns:
        List of lowercased strings in first-seen order
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list | tuple | set | frozenset):
        return []
    seen: dict[str, None] = {}
    for s in value:
        if isinstance(s, str) and s.strip():
            seen.setdefault(s.strip().lower(), None)
    return list(seen)


__all__ = [
    "validate_ascending",
    "normalize_string_list",
]
