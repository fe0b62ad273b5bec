"""End-to-end delivery on an asyncio event loop."""

import asyncio

from simplemq import AsyncioScheduler, EventBroker, IdAllocator


class TestAsyncioDelivery:
    def test_topic_and_queue_on_event_loop(self):
        received: dict[str, list[str]] = {"audit": [], "w1": [], "w2": []}

        async def main():
            broker = EventBroker(scheduler=AsyncioScheduler(), ids=IdAllocator(), strict=False)
            broker.subscribe_to_event_handler(
                "topic", "orders", "audit", lambda e: received["audit"].append(e.name)
            )
            broker.subscribe_to_event_handler(
                "queue", "jobs", "w1", lambda e: received["w1"].append(e.name)
            )
            broker.subscribe_to_event_handler(
                "queue", "jobs", "w2", lambda e: received["w2"].append(e.name)
            )
            orders = broker.get_event_handler("orders")
            jobs = broker.get_event_handler("jobs")

            orders.publish_data("created", "order", {"id": 1})
            for name in ["a", "b", "c"]:
                jobs.publish_data(name, "job", "x")
            assert received == {"audit": [], "w1": [], "w2": []}

            for _ in range(3):
                await asyncio.sleep(0)

        asyncio.run(main())
        assert received == {"audit": ["created"], "w1": ["a", "c"], "w2": ["b"]}
