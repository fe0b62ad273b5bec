"""Queue: round-robin point-to-point delivery.

Each event goes to exactly one subscriber.  Subscribers take turns; the
turn only advances after a successful delivery, so a failing subscriber is
retried (with the same event) instead of being skipped.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from simplemq.domain.entities import Event, HandlerOptions, Subscriber
from simplemq.domain.enums import HandlerKind
from simplemq.domain.identifiers import IdAllocator
from simplemq.domain.ports import Scheduler
from simplemq.handlers.base import EventHandler


class Queue(EventHandler):
    """Round-robin event handler. Subscriber names need not be unique."""

    kind = HandlerKind.QUEUE.value

    def __init__(
        self,
        name: str,
        options: HandlerOptions | Mapping[str, Any] | None = None,
        *,
        scheduler: Scheduler | None = None,
        ids: IdAllocator | None = None,
    ) -> None:
        super().__init__(name, options, scheduler=scheduler, ids=ids)
        # -1: nobody served yet
        self._last_subscriber_index = -1

    @property
    def last_subscriber_index(self) -> int:
        return self._last_subscriber_index

    def _next_subscriber_index(self) -> int | None:
        if not self._subscribers:
            return None
        if self._last_subscriber_index >= len(self._subscribers) - 1:
            self._last_subscriber_index = -1
            return 0
        return self._last_subscriber_index + 1

    def dispatch(self) -> bool:
        """Deliver the head event to the next subscriber in turn."""
        index = self._next_subscriber_index()
        if index is None:
            return False
        subscriber = self._subscribers[index]
        delivered = self.receive(subscriber.callback)
        if delivered:
            self._last_subscriber_index = index
        return delivered

    def drain(self) -> int:
        """Dispatch until the queue is empty. Returns the number delivered.

        Stops early when there are no subscribers left or a delivery fails;
        the failed event stays at the head for the next dispatch.
        """
        delivered = 0
        while self._queue and self._subscribers:
            if not self.dispatch():
                break
            delivered += 1
        if delivered:
            self._log.debug("queue.drained", delivered=delivered, remaining=len(self._queue))
        return delivered

    def _post_publish(self, event: Event) -> None:
        if self._subscribers:
            self._scheduler.schedule(self.dispatch)

    def _post_subscribe(self, subscriber: Subscriber) -> None:
        # Flush the backlog collected while nobody was listening.
        if len(self._subscribers) == 1:
            self._scheduler.schedule(self.drain)

    def _post_unsubscribe(self, name: str, removed: int) -> None:
        if self._last_subscriber_index >= len(self._subscribers) - 1:
            self._last_subscriber_index = -1
