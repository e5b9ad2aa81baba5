from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from functools import partial, wraps
from typing import Any

from loguru import logger

from relayon import patterns
from relayon._types import EventName, Listener, Unsubscribe
from relayon.options import EmitterOptions
from relayon.registry import ListenerRegistry
from relayon.utils import iter_pairs

log = logger.bind(source=__name__)


@dataclass(frozen=True)
class DispatchPlan:
    """Resolved listeners for a single dispatch call.

    Attributes:
        target: Dispatch target as given by the caller (exact or pattern).
        steps: Matched concrete names with a snapshot of their listeners,
            in resolution order.
        observers: Snapshot of the wildcard observers.
    """

    target: EventName
    steps: list[tuple[EventName, list[Listener]]] = field(default_factory=list)
    observers: list[Listener] = field(default_factory=list)

    def calls(self) -> list[tuple[Listener, EventName]]:
        """Flatten the plan into ``(listener, event_name)`` invocations.

        Named listeners come first, grouped by matched name; observers
        follow and receive the dispatch target.
        """
        calls = [
            (listener, name) for name, listeners in self.steps for listener in listeners
        ]
        calls.extend((observer, self.target) for observer in self.observers)
        return calls

    def __len__(self) -> int:
        return sum(len(listeners) for _, listeners in self.steps) + len(self.observers)


class BaseEmitter:
    """Listener registration and dispatch plan resolution.

    Provides everything the dispatch disciplines share:
    - Listener registration/unregistration, wildcard observers included
    - Registry queries (snapshots, counts, names)
    - Resolution of a dispatch target into a :class:`DispatchPlan`

    Every emitter owns its own registry; instances never share state.
    """

    _options: EmitterOptions
    _registry: ListenerRegistry[Listener]

    def __init__(self, options: EmitterOptions | None = None, **overrides: Any) -> None:
        """Initialize emitter.

        Args:
            options: Emitter options (default: ``EmitterOptions()``).
            **overrides: Individual option fields, applied on top of
                *options*.

        Raises:
            OptionsError: If the resulting options fail validation.
        """
        if options is None:
            options = EmitterOptions(**overrides)
        elif overrides:
            options = EmitterOptions(**(options.model_dump() | overrides))
        self._options = options
        self._registry = ListenerRegistry[Listener]()

    @property
    def options(self) -> EmitterOptions:
        return self._options

    # -- registration ---------------------------------------------------------

    def on[F: Listener](self, name: EventName) -> Callable[[F], F]:
        """Decorator to register a function as listener.

        Args:
            name: Concrete event name to listen for.

        Returns:
            Decorator function that returns the original function unchanged.
        """

        def decorator(func: F) -> F:
            self.listen(name, func)
            return func

        return decorator

    def listen(self, name: EventName, listener: Listener) -> Unsubscribe:
        """Register a listener for an event name.

        Registering the same listener twice for one name is a no-op.

        Args:
            name: Concrete event name.
            listener: Callback invoked with ``(event_name, payload)``.

        Returns:
            Zero-argument callable removing exactly this registration.
            Calling it more than once is harmless.
        """
        self._registry.add(name, listener)
        return partial(self.forget, name, listener)

    def listen_many(
        self,
        pairs: Mapping[EventName, Listener] | Iterable[tuple[EventName, Listener]],
    ) -> dict[EventName, Unsubscribe]:
        """Register several listeners at once.

        Args:
            pairs: ``(name, listener)`` pairs, or a mapping of them.

        Returns:
            Unsubscribe capability per name.  When a name appears more than
            once, the last registration's capability is kept.
        """
        return {
            name: self.listen(name, listener) for name, listener in iter_pairs(pairs)
        }

    def listen_once(self, name: EventName, listener: Listener) -> None:
        """Register a listener that fires at most once.

        The wrapper unsubscribes itself before running *listener*, so a
        dispatch triggered from inside the listener body, or a second
        dispatch holding an older snapshot, cannot invoke it again.

        Args:
            name: Concrete event name.
            listener: Callback invoked with ``(event_name, payload)``.
        """
        # Holds the unsubscribe capability until the first invocation takes it
        cell: list[Unsubscribe] = []

        @wraps(listener)
        def once(event_name: EventName, payload: Any) -> Any:
            if not cell:
                return None
            cell.pop()()
            return listener(event_name, payload)

        cell.append(self.listen(name, once))

    def listen_any(self, observer: Listener) -> Unsubscribe:
        """Register a wildcard observer invoked on every dispatch.

        Args:
            observer: Callback invoked with ``(dispatch_target, payload)``.

        Returns:
            Zero-argument callable removing the observer.
        """
        self._registry.add_observer(observer)
        return partial(self.forget_any, observer)

    def forget(self, name: EventName, listener: Listener) -> None:
        """Unregister a listener; does nothing if it is not registered."""
        self._registry.remove(name, listener)

    def forget_many(
        self,
        pairs: Mapping[EventName, Listener] | Iterable[tuple[EventName, Listener]],
    ) -> None:
        """Unregister several ``(name, listener)`` pairs."""
        for name, listener in iter_pairs(pairs):
            self.forget(name, listener)

    def forget_any(self, observer: Listener) -> None:
        """Unregister a wildcard observer; does nothing if absent."""
        self._registry.remove_observer(observer)

    def clear_listeners(self, name: EventName | None = None) -> None:
        """Remove listeners.

        Supports two modes:
        - (name): Remove that name's listeners, keeping wildcard observers.
        - (): Remove every listener and every wildcard observer.
        """
        self._registry.clear(name)

    def flush(self) -> None:
        """Return the emitter to its initial empty state."""
        self._registry.clear()

    # -- queries --------------------------------------------------------------

    def get_listeners(self, name: EventName) -> list[Listener]:
        """Return a snapshot of *name*'s listeners in registration order."""
        return self._registry.snapshot(name)

    def has_listeners(self, name: EventName) -> bool:
        return self._registry.has(name)

    def listener_count(self, name: EventName | None = None) -> int:
        """Count listeners, wildcard observers included.

        Args:
            name: Count only this name's listeners (plus observers), or
                None to count every listener.
        """
        return self._registry.count(name)

    def event_names(self) -> list[EventName]:
        return self._registry.names()

    # -- resolution -----------------------------------------------------------

    def _plan(self, target: EventName) -> DispatchPlan:
        """Resolve a dispatch target against the live registry.

        Matching is computed once, here; listeners registered afterwards
        are not part of the returned plan.

        Args:
            target: Exact event name or wildcard pattern.

        Returns:
            Snapshot of every listener the dispatch must invoke.
        """
        names = patterns.resolve(
            target,
            self._registry.names(),
            separator=self._options.separator,
            wildcard=self._options.wildcard,
        )
        plan = DispatchPlan(
            target=target,
            steps=[(name, self._registry.snapshot(name)) for name in names],
            observers=self._registry.observers(),
        )
        log.debug(
            "Plan {} (names={}, calls={})",
            target,
            [name for name, _ in plan.steps],
            len(plan),
        )
        return plan
