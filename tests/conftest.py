"""Shared fixtures: an isolated id allocator and a manually stepped scheduler."""

from __future__ import annotations

import pytest

from simplemq.broker import EventBroker
from simplemq.domain.identifiers import IdAllocator
from simplemq.infrastructure.scheduling import ManualScheduler


@pytest.fixture
def ids() -> IdAllocator:
    return IdAllocator()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def broker(scheduler: ManualScheduler, ids: IdAllocator) -> EventBroker:
    return EventBroker(scheduler=scheduler, ids=ids, strict=False)


class Recorder:
    """Callback that records the events it receives."""

    def __init__(self, fail: bool = False) -> None:
        self.events = []
        self.calls = 0
        self.fail = fail

    def __call__(self, event) -> None:
        self.calls += 1
        if self.fail:
            raise RuntimeError("subscriber failed")
        self.events.append(event)

    @property
    def names(self) -> list[str]:
        return [e.name for e in self.events]


@pytest.fixture
def recorder():
    return Recorder
