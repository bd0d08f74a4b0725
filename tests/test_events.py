"""Tests for signals, sync events and the in-process bus."""

import asyncio
import logging

import pytest

from syncstate import InProcessBus, Signal, SyncEvent, SyncEventType, deep_equal, watch


class TestSignal:
    """Observable values"""

    def test_read_and_write(self):
        signal = Signal(1, name="count")
        signal.set(2)
        signal.update(lambda value: value + 1)

        assert signal() == 3
        assert signal.value == 3

    def test_subscribers_receive_new_and_old(self):
        signal = Signal("a", name="letter")
        seen = []
        unsubscribe = signal.subscribe(lambda name, new, old: seen.append((name, new, old)))

        signal.set("b")
        unsubscribe()
        signal.set("c")

        assert seen == [("letter", "b", "a")]
        assert signal.subscriber_count == 0

    def test_equal_suppresses_notification(self):
        signal = Signal({"a": 1}, equal=deep_equal)
        seen = []
        watch(signal, seen.append)

        signal.set({"a": 1})
        signal.set({"a": 2})

        assert seen == [{"a": 2}]

    def test_failing_subscriber_is_isolated(self, caplog):
        signal = Signal(0, name="count")
        seen = []

        def broken(name, new, old):
            raise ValueError("boom")

        signal.subscribe(broken)
        watch(signal, seen.append)

        with caplog.at_level(logging.ERROR):
            signal.set(1)

        assert seen == [1]
        assert "boom" in caplog.text


class TestSyncEvent:
    """Event records"""

    def test_dict_round_trip(self):
        event = SyncEvent(SyncEventType.MODEL_CHANGED, form="profile", field_path="name", payload={"value": 1})

        restored = SyncEvent.from_dict(event.to_dict())

        assert restored.event_type is SyncEventType.MODEL_CHANGED
        assert restored.event_id == event.event_id
        assert restored.timestamp == event.timestamp
        assert restored.name == "model.changed"
        assert str(restored) == "SyncEvent(model.changed: profile.name)"


class TestInProcessBus:
    """Synchronous publication with async handler support"""

    def test_publish_to_sync_handlers(self):
        bus = InProcessBus()
        received = []
        bus.subscribe(received.append)

        event = SyncEvent(SyncEventType.FORM_RESET)
        bus.publish(event)

        assert received == [event]

    def test_failing_handler_does_not_block_others(self):
        bus = InProcessBus()
        received = []

        def broken(event):
            raise RuntimeError("handler failed")

        bus.subscribe(broken)
        bus.subscribe(received.append)
        bus.publish(SyncEvent(SyncEventType.FORM_RESET))

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_async_handlers_are_scheduled(self):
        bus = InProcessBus()
        received = []

        async def handler(event):
            await asyncio.sleep(0)
            received.append(event.name)

        async def broken(event):
            raise RuntimeError("async handler failed")

        bus.subscribe(handler)
        bus.subscribe(broken)
        bus.publish(SyncEvent(SyncEventType.FORM_SUBMITTED))
        assert received == []

        await bus.drain()

        assert received == ["form.submitted"]

    def test_async_handler_without_loop_is_dropped(self, caplog):
        bus = InProcessBus()

        async def handler(event):
            pass

        bus.subscribe(handler)
        with caplog.at_level(logging.WARNING):
            bus.publish(SyncEvent(SyncEventType.FORM_RESET))

        assert "No running event loop" in caplog.text

    def test_unsubscribe_and_clear(self):
        bus = InProcessBus()
        unsubscribe = bus.subscribe(print)
        bus.subscribe(repr)

        unsubscribe()
        assert bus.subscriber_count == 1

        bus.clear_subscribers()
        assert bus.subscriber_count == 0
