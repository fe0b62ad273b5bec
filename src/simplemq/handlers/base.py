"""Abstract event handler: the publish/receive lifecycle.

An :class:`EventHandler` owns a FIFO queue of pending events and an ordered
list of subscribers.  The base class fixes the lifecycle

    publish -> enqueue -> (deferred) dispatch -> dequeue -> deliver
            -> success | re-queue at the head

and exposes ``_pre_*`` / ``_post_*`` hooks that concrete handlers override
to implement a delivery policy.  ``_pre_*`` hooks return ``True`` to let the
operation proceed; every hook defaults to a no-op that allows.

A callback that raises never breaks the handler: the event goes back to the
front of the queue, ``delivery_failed_count`` grows and a warning is logged.
There is no retry limit, so a callback that always fails blocks every event
queued behind it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from simplemq.domain.entities import Event, HandlerOptions, Subscriber
from simplemq.domain.exceptions import IllegalOperationError, SimpleMQError, ValidationError
from simplemq.domain.identifiers import DEFAULT_ALLOCATOR, IdAllocator
from simplemq.domain.ports import Callback, Scheduler
from simplemq.domain.rules import require_callback, require_name
from simplemq.infrastructure.scheduling import ManualScheduler

if TYPE_CHECKING:
    from simplemq.broker import EventBroker

logger = structlog.get_logger(__name__)


class EventHandler(ABC):
    """Base class for Topic, Queue and custom delivery policies."""

    kind: ClassVar[str]

    def __init__(
        self,
        name: str,
        options: HandlerOptions | Mapping[str, Any] | None = None,
        *,
        scheduler: Scheduler | None = None,
        ids: IdAllocator | None = None,
    ) -> None:
        self._ids = ids or DEFAULT_ALLOCATOR
        self._name = require_name(name, "handler name").strip()
        self._id = self._ids.next_id("handler")
        self._options = HandlerOptions.coerce(options)
        self._scheduler: Scheduler = scheduler or ManualScheduler()
        self._queue: deque[Event] = deque()
        self._subscribers: list[Subscriber] = []
        self._enqueued_count = 0
        self._dequeued_count = 0
        self._delivery_failed_count = 0
        self._broker: EventBroker | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"

    @property
    def _log(self) -> structlog.stdlib.BoundLogger:
        return logger.bind(handler=self._name, kind=self.kind)

    # -- identity -----------------------------------------------------------

    @property
    def id(self) -> int:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> HandlerOptions:
        return self._options

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    # -- counters -----------------------------------------------------------

    @property
    def enqueued_count(self) -> int:
        return self._enqueued_count

    @property
    def dequeued_count(self) -> int:
        """Number of successful deliveries."""
        return self._dequeued_count

    @property
    def delivery_failed_count(self) -> int:
        """Number of delivery attempts whose callback raised."""
        return self._delivery_failed_count

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    def pending_events(self) -> list[Event]:
        """Snapshot of the queue, head first."""
        return list(self._queue)

    # -- events -------------------------------------------------------------

    def create_event(self, name: str, data_type: str, data: Any) -> Event:
        """Build an event owned by this handler."""
        return Event.create(self, name, data_type, data, ids=self._ids)

    def publish(self, event: Event) -> None:
        """Enqueue *event* and let the delivery policy schedule a dispatch.

        Never delivers synchronously: callbacks run on a later scheduler turn.
        """
        if not isinstance(event, Event):
            raise ValidationError("Object of type Event expected", {"field": "event"})
        if not self._pre_publish(event):
            self._log.debug("handler.publish_declined", event_id=event.id)
            return
        self._queue.append(event)
        self._enqueued_count += 1
        self._log.debug("handler.enqueued", event_id=event.id, queue_length=len(self._queue))
        self._post_publish(event)

    def publish_data(self, name: str, data_type: str, data: Any) -> Event:
        """Create an event from raw values, publish it and return it."""
        event = self.create_event(name, data_type, data)
        self.publish(event)
        return event

    @abstractmethod
    def dispatch(self) -> bool:
        """Make one delivery attempt according to the handler's policy.

        Returns True if an event was delivered successfully.
        """

    def receive(self, callback: Callback) -> bool:
        """Pop the head event and hand it to *callback*.

        An empty queue is a no-op.  If *callback* raises, the event is put
        back at the head of the queue.  Returns True only on a successful
        delivery.
        """
        require_callback(callback)
        event: Event | None = None
        failed = False
        try:
            if not self._pre_dequeue():
                return False
            event = self._queue.popleft() if self._queue else None
            if not self._post_dequeue(event):
                self._requeue(event)
                return False
            if event is None:
                return False
            if not self._pre_callback(event):
                self._requeue(event)
                return False
            try:
                callback(event)
            except Exception as exc:
                failed = True
                self._delivery_failed(event, exc)
                return False
            self._callback_success(event)
            self._dequeued_count += 1
            return True
        finally:
            self._post_receive(event, failed)

    def _requeue(self, event: Event | None) -> None:
        if event is not None:
            self._queue.appendleft(event)

    def _delivery_failed(self, event: Event, error: Exception) -> None:
        if not self._pre_callback_failed(event, error):
            self._log.warning(
                "handler.delivery_dropped",
                event_id=event.id,
                event_name=event.name,
                error=repr(error),
            )
            return
        self._queue.appendleft(event)
        self._delivery_failed_count += 1
        self._log.warning(
            "handler.delivery_failed",
            event_id=event.id,
            event_name=event.name,
            error=repr(error),
            failed_count=self._delivery_failed_count,
            exc_info=error,
        )
        self._post_callback_failed(event, error)

    # -- subscribers --------------------------------------------------------

    def subscribe(self, name: str, callback: Callback) -> None:
        """Register *callback* under *name*."""
        subscriber = Subscriber(name=name, callback=callback)
        if not self._pre_subscribe(subscriber):
            self._log.debug("handler.subscribe_declined", subscriber=name)
            return
        self._subscribers.append(subscriber)
        self._log.debug("handler.subscribed", subscriber=name, subscribers=len(self._subscribers))
        self._post_subscribe(subscriber)

    def unsubscribe(self, name: str) -> int:
        """Remove every subscriber registered as *name*. Returns how many were removed."""
        require_name(name, "subscriber name")
        if not self._pre_unsubscribe(name):
            return 0
        before = len(self._subscribers)
        self._subscribers = [s for s in self._subscribers if s.name != name]
        removed = before - len(self._subscribers)
        if removed:
            self._log.debug("handler.unsubscribed", subscriber=name, removed=removed)
        self._post_unsubscribe(name, removed)
        return removed

    def has_subscribers(self) -> bool:
        return bool(self._subscribers)

    def is_subscribed(self, name: str) -> bool:
        require_name(name, "subscriber name")
        return any(s.name == name for s in self._subscribers)

    def get_subscribers(self, name: str) -> list[Subscriber]:
        """All subscribers registered as *name*, in registration order."""
        require_name(name, "subscriber name")
        return [s for s in self._subscribers if s.name == name]

    def get_all_subscribers(self) -> list[Subscriber]:
        return list(self._subscribers)

    # -- broker ownership ---------------------------------------------------

    @property
    def broker(self) -> EventBroker | None:
        return self._broker

    @property
    def is_managed(self) -> bool:
        return self._broker is not None

    def add_to_broker(self, broker: EventBroker) -> None:
        """Attach this handler to *broker* and register it there."""
        if self._broker is not None and self._broker is not broker:
            raise IllegalOperationError(
                f"Handler '{self._name}' already belongs to another broker",
                {"handler": self._name},
            )
        if self._broker is broker:
            return
        self._broker = broker
        try:
            broker.add_event_handler(self)
        except SimpleMQError:
            self._broker = None
            raise

    def remove_from_broker(self, broker: EventBroker | None = None) -> None:
        """Detach this handler from its broker.

        Passing a *broker* that does not own the handler is an error.
        """
        if broker is not None and self._broker is not broker:
            raise IllegalOperationError(
                f"Handler '{self._name}' is not managed by this broker",
                {"handler": self._name},
            )
        owner = self._broker
        self._broker = None
        if owner is not None and owner.get_event_handler(self._name) is self:
            owner.remove_event_handler(self._name)

    # -- inspection ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "kind": self.kind,
            "name": self._name,
            "subscriber_count": len(self._subscribers),
            "subscribers": [s.name for s in self._subscribers],
            "queue_length": len(self._queue),
            "enqueued_count": self._enqueued_count,
            "dequeued_count": self._dequeued_count,
            "delivery_failed_count": self._delivery_failed_count,
            "options": self._options.to_dict(),
        }

    # -- hooks --------------------------------------------------------------

    def _pre_publish(self, event: Event) -> bool:
        return True

    def _post_publish(self, event: Event) -> None:
        pass

    def _pre_dequeue(self) -> bool:
        return True

    def _post_dequeue(self, event: Event | None) -> bool:
        return True

    def _pre_callback(self, event: Event) -> bool:
        return True

    def _callback_success(self, event: Event) -> None:
        pass

    def _pre_callback_failed(self, event: Event, error: Exception) -> bool:
        return True

    def _post_callback_failed(self, event: Event, error: Exception) -> None:
        pass

    def _post_receive(self, event: Event | None, failed: bool) -> None:
        pass

    def _pre_subscribe(self, subscriber: Subscriber) -> bool:
        return True

    def _post_subscribe(self, subscriber: Subscriber) -> None:
        pass

    def _pre_unsubscribe(self, name: str) -> bool:
        return True

    def _post_unsubscribe(self, name: str, removed: int) -> None:
        pass
