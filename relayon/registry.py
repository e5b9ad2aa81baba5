"""Registry for listener management.

This module provides ListenerRegistry for storing and querying listeners
by event name, plus the wildcard observers that receive every event.
"""

from loguru import logger

from relayon._types import EventName
from relayon.utils import callable_name

log = logger.bind(source=__name__)


class ListenerRegistry[L]:
    """Registry table for event listeners.

    Each concrete event name owns an insertion-ordered set of listeners,
    stored as dict keys.  A listener appears at most once per name; adding
    it again is a no-op.

    Reads never create entries and a set that becomes empty is dropped,
    so a name without listeners is indistinguishable from an absent one.
    All queries return snapshots, never live views.
    """

    def __init__(self) -> None:
        """Initialize empty registry.

        Post:
            _listeners and _observers are empty.
        """
        self._listeners: dict[EventName, dict[L, None]] = {}
        self._observers: dict[L, None] = {}

    def add(self, name: EventName, listener: L) -> bool:
        """Register a listener for an event name.

        Args:
            name: Concrete event name.
            listener: Callback to register.

        Returns:
            True if the listener was inserted, False if it was already present.

        Post:
            listener is in the set for name, exactly once.
        """
        listeners = self._listeners.setdefault(name, {})
        if listener in listeners:
            return False
        listeners[listener] = None
        log.debug("Listen {} -> {}", name, callable_name(listener))
        return True

    def remove(self, name: EventName, listener: L) -> bool:
        """Remove a listener from an event name.

        Args:
            name: Concrete event name.
            listener: Callback to remove.

        Returns:
            True if the listener was removed, False if it was not registered.

        Post:
            listener is not in the set for name.
            name is dropped if its set became empty.
        """
        listeners = self._listeners.get(name)
        if listeners is None or listener not in listeners:
            return False
        del listeners[listener]
        # Clean up empty set
        if not listeners:
            del self._listeners[name]
        log.debug("Forget {} -> {}", name, callable_name(listener))
        return True

    def add_observer(self, observer: L) -> bool:
        """Register a wildcard observer; returns False if already present."""
        if observer in self._observers:
            return False
        self._observers[observer] = None
        log.debug("Listen <any> -> {}", callable_name(observer))
        return True

    def remove_observer(self, observer: L) -> bool:
        """Remove a wildcard observer; returns False if it was not registered."""
        if observer not in self._observers:
            return False
        del self._observers[observer]
        log.debug("Forget <any> -> {}", callable_name(observer))
        return True

    def clear(self, name: EventName | None = None) -> None:
        """Remove listeners.

        Supports two modes:
        - (name): Remove every listener of that name; observers are kept.
        - (None): Remove every listener of every name and every observer.

        Args:
            name: Event name to clear, or None for everything.
        """
        if name is None:
            self._listeners.clear()
            self._observers.clear()
            log.debug("Cleared all listeners")
        elif self._listeners.pop(name, None) is not None:
            log.debug("Cleared listeners of {}", name)

    def snapshot(self, name: EventName) -> list[L]:
        """Return the listeners of *name* in registration order."""
        return list(self._listeners.get(name, ()))

    def observers(self) -> list[L]:
        """Return the wildcard observers in registration order."""
        return list(self._observers)

    def has(self, name: EventName) -> bool:
        """Return True if *name* has at least one listener."""
        return bool(self._listeners.get(name))

    def names(self) -> list[EventName]:
        """Return names that currently have listeners, in registration order."""
        return list(self._listeners)

    def count(self, name: EventName | None = None) -> int:
        """Count listeners, wildcard observers included.

        Args:
            name: Restrict the named part of the count to this event name,
                or None to sum over every name.

        Returns:
            Number of observers plus the matching named listeners.
        """
        if name is not None:
            return len(self._observers) + len(self._listeners.get(name, ()))
        return len(self._observers) + sum(map(len, self._listeners.values()))
