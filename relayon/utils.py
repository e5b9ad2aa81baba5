from collections.abc import Iterable, Mapping
from typing import Any


def callable_name(cb: Any) -> str:
    """Return a human-readable name for a callable, safe for logging.

    Falls back through ``__qualname__``, ``__name__``, and ``repr()``
    so that ``functools.partial``, callable instances, and other exotic
    callables never raise ``AttributeError``.

    Args:
        cb: Any callable object.

    Returns:
        Display name string.
    """
    return (
        getattr(cb, "__qualname__", None) or getattr(cb, "__name__", None) or repr(cb)
    )


def iter_pairs[K, V](pairs: Mapping[K, V] | Iterable[tuple[K, V]]) -> list[tuple[K, V]]:
    """Normalize a mapping or an iterable of pairs into a list of pairs.

    Args:
        pairs: Mapping, or iterable of ``(key, value)`` tuples.

    Returns:
        Pairs in iteration order.
    """
    if isinstance(pairs, Mapping):
        return list(pairs.items())
    return [(key, value) for key, value in pairs]
