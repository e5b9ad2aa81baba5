"""Emitter with concurrent, sequential and synchronous dispatch."""

import asyncio
import inspect
from collections.abc import Awaitable, Iterable
from typing import Any

from loguru import logger

from relayon._types import EventName, Events, Listener
from relayon.base_emitter import BaseEmitter
from relayon.options import EmitterOptions
from relayon.utils import callable_name, iter_pairs

log = logger.bind(source=__name__)


class Emitter(BaseEmitter):
    """In-process event emitter.

    Offers three dispatch disciplines over the same dispatch plan:

    - :meth:`dispatch` runs every listener concurrently as asyncio tasks.
    - :meth:`dispatch_seq` awaits listeners one at a time, in order.
    - :meth:`dispatch_sync` calls listeners on the calling stack.

    The async disciplines always suspend once before invoking anything, so
    emitting never has a synchronous side effect.  The dispatch plan is
    resolved after that suspension and is not affected by listeners that
    register or unregister while the dispatch is in flight.

    Example::

        emitter = Emitter()

        @emitter.on("user.created")
        async def welcome(name, user):
            await send_mail(user)

        await emitter.dispatch("user.*", user)
    """

    _detached: set[asyncio.Future[Any]]  # Awaitables detached by dispatch_sync

    def __init__(self, options: EmitterOptions | None = None, **overrides: Any) -> None:
        super().__init__(options, **overrides)
        self._detached = set()

    # -- concurrent -----------------------------------------------------------

    async def dispatch(self, name: EventName, payload: Any = None) -> None:
        """Concurrently dispatch an event.

        Every planned listener is scheduled as a task in an
        ``asyncio.TaskGroup`` without waiting for the previous one.  A
        failing listener does not cancel the others; failures are reported
        once all of them have settled.

        Args:
            name: Exact event name or wildcard pattern.
            payload: Opaque value passed to every listener.

        Post:
            All planned listeners executed to completion.

        Raises:
            ExceptionGroup: If any listener failed (``error_mode="group"``).
            Exception: The earliest failure in plan order
                (``error_mode="first"``).
        """
        await asyncio.sleep(0)
        plan = self._plan(name)
        errors = await self._gather(
            self._invoke(listener, event_name, payload)
            for listener, event_name in plan.calls()
        )
        self._raise_errors(name, errors)

    async def dispatch_many(self, events: Events) -> None:
        """Concurrently dispatch several events.

        Each ``(name, payload)`` pair gets its own :meth:`dispatch`, and the
        pairs run concurrently with each other.

        Args:
            events: ``(name, payload)`` pairs, or a mapping of them.

        Raises:
            ExceptionGroup: If any dispatch failed (``error_mode="group"``);
                nested groups are kept as raised.
            Exception: The earliest failure in pair order
                (``error_mode="first"``).
        """
        pairs = iter_pairs(events)
        log.debug("Dispatch many {}", [name for name, _ in pairs])
        errors = await self._gather(
            self.dispatch(name, payload) for name, payload in pairs
        )
        self._raise_errors([name for name, _ in pairs], errors)

    # -- sequential -----------------------------------------------------------

    async def dispatch_seq(self, name: EventName, payload: Any = None) -> None:
        """Sequentially dispatch an event.

        Listeners are awaited one at a time in plan order.  The first
        failure stops the sequence: later listeners are not invoked.

        Args:
            name: Exact event name or wildcard pattern.
            payload: Opaque value passed to every listener.

        Raises:
            Exception: Whatever the first failing listener raised.
        """
        await asyncio.sleep(0)
        plan = self._plan(name)
        for listener, event_name in plan.calls():
            try:
                await self._invoke(listener, event_name, payload)
            except Exception:
                log.debug(
                    "Sequential dispatch of {} halted at {}",
                    name,
                    callable_name(listener),
                )
                raise

    async def dispatch_many_seq(self, events: Events) -> None:
        """Sequentially dispatch several events, one after the other.

        Args:
            events: ``(name, payload)`` pairs, or a mapping of them.

        Raises:
            Exception: Whatever the first failing listener raised; the
                remaining events are not dispatched.
        """
        for name, payload in iter_pairs(events):
            await self.dispatch_seq(name, payload)

    # -- synchronous ----------------------------------------------------------

    def dispatch_sync(self, name: EventName, payload: Any = None) -> None:
        """Synchronously dispatch an event.

        Listeners run immediately, in plan order, on the calling stack.
        When a listener returns an awaitable it is not waited on: it is
        scheduled on the running event loop, or closed if there is none.

        Args:
            name: Exact event name or wildcard pattern.
            payload: Opaque value passed to every listener.

        Raises:
            Exception: Whatever the first failing listener raised; the
                remaining listeners are not invoked.
        """
        plan = self._plan(name)
        for listener, event_name in plan.calls():
            result = listener(event_name, payload)
            if inspect.isawaitable(result):
                self._detach(listener, result)

    def dispatch_many_sync(self, events: Events) -> None:
        """Synchronously dispatch several events, one after the other.

        Args:
            events: ``(name, payload)`` pairs, or a mapping of them.
        """
        for name, payload in iter_pairs(events):
            self.dispatch_sync(name, payload)

    async def drain(self) -> None:
        """Wait for awaitables detached by :meth:`dispatch_sync`.

        Failures have already been logged when the tasks finished, so they
        are not raised here.
        """
        while self._detached:
            # wait() does not own the futures, so cancelling drain leaves them running
            await asyncio.wait(set(self._detached))

    # -- internals ------------------------------------------------------------

    @staticmethod
    async def _invoke(listener: Listener, name: EventName, payload: Any) -> None:
        """Call a listener and await its result when it is awaitable."""
        result = listener(name, payload)
        if inspect.isawaitable(result):
            await result

    @staticmethod
    async def _settle(awaitable: Awaitable[Any]) -> Exception | None:
        """Await *awaitable*, returning its exception instead of raising it.

        Keeps one failing task from cancelling its siblings in the
        TaskGroup.
        """
        try:
            await awaitable
        except Exception as exc:
            return exc
        return None

    async def _gather(self, awaitables: Iterable[Awaitable[Any]]) -> list[Exception]:
        """Run awaitables concurrently and collect their failures in order."""
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(self._settle(aw)) for aw in awaitables]
        return [exc for task in tasks if (exc := task.result()) is not None]

    def _raise_errors(self, target: Any, errors: list[Exception]) -> None:
        """Report collected failures according to ``error_mode``."""
        if not errors:
            return
        log.debug("Dispatch of {} failed ({} error(s))", target, len(errors))
        if self._options.error_mode == "first":
            raise errors[0]
        raise ExceptionGroup(f"{len(errors)} listener(s) failed for {target!r}", errors)

    def _detach(self, listener: Listener, awaitable: Awaitable[Any]) -> None:
        """Let an awaitable returned during synchronous dispatch run on its own."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.warning(
                "No running event loop, dropping awaitable returned by {}",
                callable_name(listener),
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        future = asyncio.ensure_future(awaitable, loop=loop)
        self._detached.add(future)
        future.add_done_callback(self._on_detached_done)

    def _on_detached_done(self, future: asyncio.Future[Any]) -> None:
        self._detached.discard(future)
        if future.cancelled():
            return
        if (exc := future.exception()) is not None:
            log.opt(exception=exc).error("Detached listener failed: {}", exc)
