"""Wildcard pattern resolution for dispatch targets.

Patterns are matched segment by segment.  With the default tokens:

- ``user.*`` matches ``user.created`` but not ``user.friend.created``
- ``*.created`` matches ``user.created`` and ``dashboard.created``
- ``user.*.created`` matches ``user.manager.created``
- ``us*.created`` matches ``user.created`` and ``us.created``

A segment that is exactly the wildcard matches one non-empty segment; a
wildcard embedded in a segment matches any run of characters within that
segment.  Non-string names never act as patterns.
"""

import re
from collections.abc import Iterable
from functools import lru_cache

from relayon._types import EventName


def is_pattern(name: EventName, wildcard: str = "*") -> bool:
    """Return True when *name* carries wildcard syntax."""
    return isinstance(name, str) and wildcard in name


@lru_cache(maxsize=256)
def compile_pattern(
    pattern: str, separator: str = ".", wildcard: str = "*"
) -> re.Pattern[str]:
    """Translate a wildcard pattern into an anchored regular expression.

    Args:
        pattern: Dispatch target containing wildcard tokens.
        separator: Segment separator.
        wildcard: Wildcard token.

    Returns:
        Compiled expression matching whole event names.
    """
    within = f"(?:(?!{re.escape(separator)}).)"
    segments = []
    for segment in pattern.split(separator):
        if segment == wildcard:
            segments.append(within + "+")
        else:
            segments.append(
                (within + "*").join(re.escape(part) for part in segment.split(wildcard))
            )
    return re.compile(re.escape(separator).join(segments), re.DOTALL)


def matches(
    pattern: EventName,
    name: EventName,
    separator: str = ".",
    wildcard: str = "*",
) -> bool:
    """Check whether a concrete event name matches a dispatch target."""
    if not is_pattern(pattern, wildcard):
        return pattern == name
    if not isinstance(name, str):
        return False
    return compile_pattern(pattern, separator, wildcard).fullmatch(name) is not None


def resolve(
    target: EventName,
    names: Iterable[EventName],
    separator: str = ".",
    wildcard: str = "*",
) -> list[EventName]:
    """Resolve a dispatch target against the registered event names.

    A target without wildcard syntax resolves to itself, whether or not
    anything is registered under it.

    Args:
        target: Exact event name or wildcard pattern.
        names: Currently registered concrete names, in registration order.
        separator: Segment separator.
        wildcard: Wildcard token.

    Returns:
        Matching names, preserving the order of *names*.
    """
    if not is_pattern(target, wildcard):
        return [target]
    return [name for name in names if matches(target, name, separator, wildcard)]
