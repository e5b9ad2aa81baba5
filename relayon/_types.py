"""Shared type definitions for relayon.

All type aliases use PEP 695 ``type`` statement syntax.
"""

from collections.abc import Callable, Hashable, Iterable, Mapping
from typing import Any, Literal

type EventName = Hashable
"""Identity of an event.

Usually a dotted string such as ``"user.created"``; strings may also carry
wildcard syntax when used as a dispatch target.  Any other hashable value
(an enum member, a sentinel object) is accepted and only ever matches
itself.
"""

type Listener = Callable[[EventName, Any], Any]
"""Callback invoked with ``(event_name, payload)``.

The return value is not consumed.  When it is awaitable, the async
dispatch disciplines await it and the synchronous one detaches it.
"""

type Unsubscribe = Callable[[], None]
"""Zero-argument capability that removes one registration."""

type ErrorMode = Literal["group", "first"]
"""How concurrent dispatch reports listener failures.

``"group"`` raises an ``ExceptionGroup`` holding every failure;
``"first"`` re-raises the earliest failure in dispatch-plan order.
"""

type Events = Mapping[EventName, Any] | Iterable[tuple[EventName, Any]]
"""Batch of ``(name, payload)`` pairs, or a mapping of them, for batch dispatch."""
