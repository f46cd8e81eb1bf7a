"""Tests for the event dispatcher."""

from sitemap_stream.events import Drain, EventDispatcher, SegmentCreated, SessionDone


class TestEventDispatcher:
    def test_emits_to_registered_handler(self):
        """Handlers should receive events of their kind."""
        dispatcher = EventDispatcher()
        received = []
        dispatcher.on(SessionDone, received.append)

        dispatcher.emit(SessionDone(finalized_count=2))

        assert received == [SessionDone(finalized_count=2)]

    def test_ignores_other_kinds(self):
        """Handlers should not receive events of other kinds."""
        dispatcher = EventDispatcher()
        received = []
        dispatcher.on(Drain, received.append)

        dispatcher.emit(SegmentCreated(location="sitemap-1.xml", ordinal=1))

        assert received == []

    def test_handlers_called_in_registration_order(self):
        """Handlers should run in the order they were registered."""
        dispatcher = EventDispatcher()
        calls = []
        dispatcher.on(Drain, lambda e: calls.append("first"))
        dispatcher.on(Drain, lambda e: calls.append("second"))

        dispatcher.emit(Drain(injected_count=1))

        assert calls == ["first", "second"]

    def test_off_removes_handler(self):
        """off should unregister a handler."""
        dispatcher = EventDispatcher()
        received = []
        dispatcher.on(Drain, received.append)
        dispatcher.off(Drain, received.append)

        dispatcher.emit(Drain(injected_count=1))

        assert received == []

    def test_emit_without_handlers(self):
        """Emitting with no handlers should be a no-op."""
        EventDispatcher().emit(Drain(injected_count=0))
