"""Tests for simplemq.infrastructure.scheduling."""

import asyncio

from simplemq.domain.ports import Scheduler
from simplemq.infrastructure.scheduling import AsyncioScheduler, ManualScheduler


class TestManualScheduler:
    def test_satisfies_port(self):
        assert isinstance(ManualScheduler(), Scheduler)

    def test_tasks_do_not_run_on_schedule(self):
        scheduler = ManualScheduler()
        ran = []
        scheduler.schedule(lambda: ran.append(1))
        assert ran == []
        assert scheduler.pending == 1

    def test_runs_in_fifo_order(self):
        scheduler = ManualScheduler()
        order = []
        for i in range(3):
            scheduler.schedule(lambda i=i: order.append(i))
        assert scheduler.run_until_idle() == 3
        assert order == [0, 1, 2]
        assert scheduler.pending == 0

    def test_run_next_on_empty(self):
        assert ManualScheduler().run_next() is False

    def test_tasks_scheduled_by_tasks_run_last(self):
        scheduler = ManualScheduler()
        order = []

        def first():
            order.append("first")
            scheduler.schedule(lambda: order.append("nested"))

        scheduler.schedule(first)
        scheduler.schedule(lambda: order.append("second"))
        scheduler.run_until_idle()
        assert order == ["first", "second", "nested"]

    def test_max_steps(self):
        scheduler = ManualScheduler()
        for _ in range(5):
            scheduler.schedule(lambda: None)
        assert scheduler.run_until_idle(max_steps=2) == 2
        assert scheduler.pending == 3


class TestAsyncioScheduler:
    def test_satisfies_port(self):
        assert isinstance(AsyncioScheduler(), Scheduler)

    def test_runs_on_later_loop_turn(self):
        order = []

        async def main():
            scheduler = AsyncioScheduler()
            scheduler.schedule(lambda: order.append("task"))
            order.append("after schedule")
            await asyncio.sleep(0)
            order.append("after yield")

        asyncio.run(main())
        assert order == ["after schedule", "task", "after yield"]
