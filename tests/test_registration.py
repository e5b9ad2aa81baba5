"""Tests for listener registration on Emitter."""

import pytest

from relayon import Emitter


class TestListen:
    """Test listen(), its unsubscribe capability and on()."""

    def test_listen_adds_listener(self, emitter, calls):
        """Each registered listener is invoked."""
        emitter.listen("ping", lambda name, payload: calls.append(1))
        emitter.listen("ping", lambda name, payload: calls.append(2))
        emitter.dispatch_sync("ping")
        assert calls == [1, 2]

    def test_duplicate_listener_is_ignored(self, emitter, calls):
        """listen() with the same reference keeps a single entry."""

        def listener(name, payload):
            calls.append(1)

        emitter.listen("ping", listener)
        emitter.listen("ping", listener)
        emitter.listen("ping", listener)

        assert emitter.listener_count("ping") == 1
        emitter.dispatch_sync("ping")
        assert calls == [1]

    def test_unsubscribe(self, emitter, calls):
        """The returned capability removes exactly that registration."""

        def listener(name, payload):
            calls.append(1)

        off = emitter.listen("ping", listener)
        emitter.dispatch_sync("ping")
        assert calls == [1]

        off()
        emitter.dispatch_sync("ping")
        assert calls == [1]

    def test_unsubscribe_twice_is_harmless(self, emitter):
        """Calling the capability again does nothing."""

        def listener(name, payload): ...

        off = emitter.listen("ping", listener)
        off()
        off()
        assert not emitter.has_listeners("ping")

    def test_unsubscribe_leaves_other_names(self, emitter):
        """Unsubscribing one name keeps the listener on other names."""

        def listener(name, payload): ...

        off = emitter.listen("ping", listener)
        emitter.listen("pong", listener)
        off()
        assert emitter.get_listeners("pong") == [listener]

    def test_stale_unsubscribe_after_relisten(self, emitter):
        """A stale capability removes the current registration of the same pair."""

        def listener(name, payload): ...

        off = emitter.listen("ping", listener)
        emitter.listen("ping", listener)
        off()
        assert not emitter.has_listeners("ping")

    def test_on_decorator(self, emitter, calls):
        """The decorator registers the function and returns it unchanged."""
        @emitter.on("ping")
        def handler(name, payload):
            calls.append(payload)

        emitter.dispatch_sync("ping", "hi")
        assert calls == ["hi"]
        assert handler.__name__ == "handler"


class TestListenMany:
    """Test listen_many() and forget_many()."""

    def test_listen_many_pairs(self, emitter, calls):
        """Every pair is registered and gets a capability."""

        def ping(name, payload):
            calls.append("ping")

        def pong(name, payload):
            calls.append("pong")

        offs = emitter.listen_many([("ping", ping), ("pong", pong)])
        assert set(offs) == {"ping", "pong"}

        emitter.dispatch_many_sync([("ping", None), ("pong", None)])
        assert calls == ["ping", "pong"]

    def test_each_pair_has_independent_unsubscribe(self, emitter):
        """Each capability removes only its own pair."""

        def listener(name, payload): ...

        offs = emitter.listen_many({"ping": listener, "pong": listener})
        offs["ping"]()
        assert not emitter.has_listeners("ping")
        assert emitter.has_listeners("pong")

    def test_forget_many(self, emitter):
        """forget_many() removes only the given pairs."""

        def listener(name, payload): ...

        emitter.listen_many(
            [("ping", listener), ("pong", listener), ("pang", listener)]
        )
        emitter.forget_many([("ping", listener), ("pang", listener)])
        assert emitter.event_names() == ["pong"]


class TestForget:
    """Test forget()."""

    def test_forget_removes_listener(self, emitter, calls):
        """A forgotten listener is no longer invoked."""

        def listener(name, payload):
            calls.append(1)

        emitter.listen("ping", listener)
        emitter.forget("ping", listener)
        emitter.dispatch_sync("ping")
        assert calls == []

    def test_forget_absent_is_harmless(self, emitter):
        """Forgetting an unknown pair does nothing."""

        def listener(name, payload): ...

        emitter.forget("ping", listener)
        emitter.listen("pong", listener)
        emitter.forget("ping", listener)
        assert emitter.get_listeners("pong") == [listener]


class TestListenOnce:
    """Test listen_once()."""

    def test_once_fires_once_with_first_payload(self, emitter, calls):
        """The listener runs once, with the first payload."""
        emitter.listen_once("ping", lambda name, payload: calls.append(payload))
        emitter.dispatch_sync("ping", True)
        emitter.dispatch_sync("ping", False)
        assert calls == [True]
        assert not emitter.has_listeners("ping")

    @pytest.mark.asyncio
    async def test_once_with_seq_dispatch(self, emitter, calls):
        """Once-semantics hold under dispatch_seq()."""
        emitter.listen_once("ping", lambda name, payload: calls.append(payload))
        await emitter.dispatch_seq("ping", True)
        await emitter.dispatch_seq("ping", False)
        assert calls == [True]

    def test_once_reentrant_dispatch(self, emitter, calls):
        """Dispatching from inside the listener cannot retrigger it."""

        def listener(name, payload):
            calls.append(payload)
            emitter.dispatch_sync("ping", "inner")

        emitter.listen_once("ping", listener)
        emitter.dispatch_sync("ping", "outer")
        assert calls == ["outer"]

    @pytest.mark.asyncio
    async def test_once_with_overlapping_dispatches(self, emitter, calls):
        """Two concurrent dispatches holding the wrapper still fire it once."""

        async def listener(name, payload):
            calls.append(payload)

        emitter.listen_once("ping", listener)
        await emitter.dispatch_many([("ping", 1), ("ping", 2)])
        assert calls == [1]

    def test_once_receives_event_name(self, emitter, calls):
        """The wrapper passes the matched event name through."""
        emitter.listen_once("user.created", lambda name, payload: calls.append(name))
        emitter.dispatch_sync("user.*")
        assert calls == ["user.created"]

    def test_once_keeps_listener_name(self, emitter):
        """The wrapper carries the listener's name."""

        def greet(name, payload): ...

        emitter.listen_once("ping", greet)
        (wrapper,) = emitter.get_listeners("ping")
        assert wrapper.__name__ == "greet"
        assert wrapper.__wrapped__ is greet


class TestWildcardObservers:
    """Test listen_any() and forget_any()."""

    def test_observer_receives_every_event(self, emitter, calls):
        """An observer sees every dispatched name and payload."""
        emitter.listen_any(lambda name, payload: calls.append((name, payload)))
        emitter.dispatch_sync("ping", 1)
        emitter.dispatch_sync("pong", 2)
        assert calls == [("ping", 1), ("pong", 2)]

    def test_observer_runs_after_named_listeners(self, emitter, calls):
        """Observers run after the named listeners."""
        emitter.listen_any(lambda name, payload: calls.append("any"))
        emitter.listen("ping", lambda name, payload: calls.append("ping"))
        emitter.dispatch_sync("ping")
        assert calls == ["ping", "any"]

    def test_observer_receives_pattern_target_once(self, emitter, calls):
        """Observers get the pattern once, not each matched name."""
        emitter.listen("user.created", lambda name, payload: None)
        emitter.listen("user.deleted", lambda name, payload: None)
        emitter.listen_any(lambda name, payload: calls.append(name))
        emitter.dispatch_sync("user.*")
        assert calls == ["user.*"]

    def test_forget_any(self, emitter, calls):
        """A forgotten observer is no longer invoked."""

        def observer(name, payload):
            calls.append(1)

        emitter.listen_any(observer)
        emitter.dispatch_sync("ping")
        emitter.forget_any(observer)
        emitter.dispatch_sync("ping")
        assert calls == [1]

    def test_listen_any_unsubscribe(self, emitter):
        """The observer capability is safe to call twice."""

        def observer(name, payload): ...

        off = emitter.listen_any(observer)
        off()
        off()
        assert emitter.listener_count() == 0


class TestClearAndCount:
    """Test clearing and registry queries."""

    def _populate(self, emitter: Emitter, calls: list) -> None:
        emitter.listen("first", lambda name, payload: calls.append("first"))
        emitter.listen("second", lambda name, payload: calls.append("second"))
        emitter.listen_any(lambda name, payload: calls.append("any"))

    def test_clear_all(self, emitter, calls):
        """Without a name, every listener and observer is removed."""
        self._populate(emitter, calls)
        emitter.dispatch_sync("first")
        emitter.dispatch_sync("second")
        assert calls == ["first", "any", "second", "any"]

        emitter.clear_listeners()
        emitter.dispatch_sync("first")
        emitter.dispatch_sync("second")
        assert calls == ["first", "any", "second", "any"]

    def test_clear_one_name(self, emitter, calls):
        """With a name, only that name's listeners are removed."""
        self._populate(emitter, calls)
        emitter.clear_listeners("first")
        emitter.dispatch_sync("first")
        emitter.dispatch_sync("second")
        assert calls == ["any", "second", "any"]

    def test_flush(self, emitter, calls):
        """flush() empties the emitter."""
        self._populate(emitter, calls)
        emitter.flush()
        assert emitter.listener_count() == 0
        assert emitter.event_names() == []

    def test_listener_count(self, emitter, calls):
        """Counts include wildcard observers."""
        self._populate(emitter, calls)
        assert emitter.listener_count("first") == 2
        assert emitter.listener_count("second") == 2
        assert emitter.listener_count() == 3

    def test_has_listeners(self, emitter):
        """has_listeners() follows registration and removal."""

        def listener(name, payload): ...

        assert not emitter.has_listeners("ping")
        off = emitter.listen("ping", listener)
        assert emitter.has_listeners("ping")
        off()
        assert not emitter.has_listeners("ping")

    def test_get_listeners_snapshot(self, emitter):
        """get_listeners() returns a copy in registration order."""

        def a(name, payload): ...
        def b(name, payload): ...

        emitter.listen("ping", a)
        listeners = emitter.get_listeners("ping")
        emitter.listen("ping", b)
        assert listeners == [a]
        assert emitter.get_listeners("ping") == [a, b]

    def test_event_names_in_registration_order(self, emitter):
        """Emptied names disappear from event_names()."""

        def listener(name, payload): ...

        emitter.listen("b", listener)
        emitter.listen("a", listener)
        emitter.listen("c", listener)
        emitter.forget("a", listener)
        assert emitter.event_names() == ["b", "c"]
