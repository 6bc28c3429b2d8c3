"""Unit tests for EventBus."""

import asyncio
import pytest
from communication.bus import DROP_OLDEST, EventBus


class TestEventBus:
    """Tests for EventBus class."""

    @pytest.mark.asyncio
    async def test_bus_creation(self):
        bus = EventBus(queue_size=10)
        assert bus._queue_size == 10
        assert len(bus._subscribers) == 0

    @pytest.mark.asyncio
    async def test_subscribe(self):
        bus = EventBus(queue_size=10)
        sub = await bus.subscribe("test-client")
        assert "test-client" in bus._subscribers
        assert sub.name == "test-client"

    @pytest.mark.asyncio
    async def test_subscribe_twice_returns_same(self):
        bus = EventBus(queue_size=10)
        first = await bus.subscribe("test-client")
        assert await bus.subscribe("test-client") is first

    @pytest.mark.asyncio
    async def test_subscribe_custom_queue_size(self):
        bus = EventBus(queue_size=10)
        sub = await bus.subscribe("test-client", max_queue_size=50)
        assert sub.queue.maxsize == 50

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = EventBus(queue_size=10)
        await bus.subscribe("test-client")
        assert await bus.unsubscribe("test-client") is True
        assert "test-client" not in bus._subscribers

    @pytest.mark.asyncio
    async def test_unsubscribe_nonexistent(self):
        bus = EventBus(queue_size=10)
        assert await bus.unsubscribe("nonexistent") is False

    @pytest.mark.asyncio
    async def test_publish_to_multiple_subscribers(self):
        bus = EventBus(queue_size=10)
        sub1 = await bus.subscribe("client-1")
        sub2 = await bus.subscribe("client-2")

        assert await bus.publish({"kind": "broadcast"}) == 2

        msg1 = await asyncio.wait_for(sub1.queue.get(), timeout=1.0)
        msg2 = await asyncio.wait_for(sub2.queue.get(), timeout=1.0)
        assert msg1["kind"] == msg2["kind"] == "broadcast"

    @pytest.mark.asyncio
    async def test_topic_filtering(self):
        """Subscribers with topics only see those topics; others see everything."""
        bus = EventBus(queue_size=10)
        scenes = await bus.subscribe("scenes", topics=["scene"])
        everything = await bus.subscribe("all")

        await bus.publish({"kind": "reset"}, topic="event")
        await bus.publish({"frame": 1}, topic="scene")

        assert scenes.queue.qsize() == 1
        assert (await scenes.queue.get())["frame"] == 1
        assert everything.queue.qsize() == 2

    @pytest.mark.asyncio
    async def test_queue_overflow_drops_newest(self):
        bus = EventBus(queue_size=2)
        sub = await bus.subscribe("slow-client", max_queue_size=2)

        await bus.publish({"msg": 1})
        await bus.publish({"msg": 2})
        await bus.publish({"msg": 3})

        assert sub.dropped == 1
        assert [sub.queue.get_nowait()["msg"] for _ in range(2)] == [1, 2]

    @pytest.mark.asyncio
    async def test_queue_overflow_drops_oldest(self):
        """Viewers keep the freshest frames."""
        bus = EventBus(queue_size=2)
        sub = await bus.subscribe("viewer", max_queue_size=2, overflow=DROP_OLDEST)

        for msg in (1, 2, 3):
            await bus.publish({"msg": msg})

        assert sub.dropped == 1
        assert [sub.queue.get_nowait()["msg"] for _ in range(2)] == [2, 3]
        assert bus.get_stats()["total_dropped"] == 1

    @pytest.mark.asyncio
    async def test_get_stats(self):
        bus = EventBus(queue_size=10)
        await bus.subscribe("client-1")
        await bus.publish({"kind": "test"})

        stats = bus.get_stats()
        assert stats["subscriber_count"] == 1
        assert stats["total_published"] == 1
        assert stats["total_delivered"] == 1

    @pytest.mark.asyncio
    async def test_get_subscriber_info(self):
        bus = EventBus(queue_size=10)
        sub = await bus.subscribe("client-1", topics=["event"])
        await bus.publish({"kind": "test"}, topic="event")
        await sub.queue.get()

        info = await bus.get_subscriber_info()
        assert len(info) == 1
        assert info[0]["name"] == "client-1"
        assert info[0]["topics"] == ["event"]
        assert info[0]["received"] == 1
        assert info[0]["dropped"] == 0
