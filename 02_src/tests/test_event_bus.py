"""Tests for EventBus."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from council.models import BusMessage, Topic


def message(topic=Topic.PANEL, payload=None):
    return BusMessage(
        id="msg1",
        topic=topic,
        payload=payload or {"panel_id": "panel-1"},
        source="test",
        timestamp=datetime.now(timezone.utc),
    )


class TestEventBusSubscribe:
    """Tests for EventBus subscription."""

    def test_subscribe_multiple_handlers(self, event_bus):
        """Several handlers can subscribe to one topic."""

        async def handler1(msg):
            pass

        async def handler2(msg):
            pass

        event_bus.subscribe(Topic.PANEL, handler1)
        event_bus.subscribe(Topic.PANEL, handler2)
        assert len(event_bus._subscribers[Topic.PANEL]) == 2

    def test_unsubscribe(self, event_bus):
        """Unsubscribing removes the handler; unknown handlers are ignored."""

        async def handler(msg):
            pass

        event_bus.subscribe(Topic.DIALOGUE, handler)
        event_bus.unsubscribe(Topic.DIALOGUE, handler)
        event_bus.unsubscribe(Topic.DIALOGUE, handler)
        assert event_bus._subscribers[Topic.DIALOGUE] == []


class TestEventBusPublish:
    """Tests for EventBus publishing."""

    @pytest.mark.asyncio
    async def test_publish_calls_topic_handlers_only(self, event_bus):
        """Only handlers of the message's topic are called."""
        on_panel = AsyncMock()
        on_dialogue = AsyncMock()

        event_bus.subscribe(Topic.PANEL, on_panel)
        event_bus.subscribe(Topic.DIALOGUE, on_dialogue)

        await event_bus.publish(message(Topic.PANEL))

        on_panel.assert_awaited_once()
        on_dialogue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publish_generates_id(self, event_bus):
        """A message without id gets one."""
        msg = message()
        msg.id = ""

        async def handler(m):
            pass

        event_bus.subscribe(Topic.PANEL, handler)
        await event_bus.publish(msg)
        assert msg.id

    @pytest.mark.asyncio
    async def test_handler_error_does_not_propagate(self, event_bus):
        """A failing handler is logged; other handlers still run."""
        broken = AsyncMock(side_effect=RuntimeError("observer broke"))
        healthy = AsyncMock()

        event_bus.subscribe(Topic.SYNTHESIS, broken)
        event_bus.subscribe(Topic.SYNTHESIS, healthy)

        await event_bus.publish(message(Topic.SYNTHESIS))
        healthy.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_emit_builds_message(self, event_bus):
        """emit() wraps a payload in a BusMessage."""
        handler = AsyncMock()
        event_bus.subscribe(Topic.DIALOGUE, handler)
        await event_bus.emit(Topic.DIALOGUE, "dialogue", {"k": "v"})

        sent = handler.await_args.args[0]
        assert sent.source == "dialogue"
        assert sent.payload == {"k": "v"}
        assert sent.id
