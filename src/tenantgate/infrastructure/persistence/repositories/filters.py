"""Shared helpers for building repository filters."""

LIKE_ESCAPE = "\\"


def contains_pattern(value: str) -> str:
    """Build a LIKE pattern matching ``value`` as a literal substring.

    Args:
        value: Raw search text.

    Returns:
        Pattern with ``%``, ``_`` and the escape character escaped.
    """
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"
