"""Topic: broadcast delivery.

Every published event is delivered to every subscriber, in registration
order.  Subscriber names are unique within a topic.
"""

from __future__ import annotations

from simplemq.domain.entities import Event, Subscriber
from simplemq.domain.enums import HandlerKind
from simplemq.domain.exceptions import DuplicationError
from simplemq.handlers.base import EventHandler


class Topic(EventHandler):
    """Broadcast event handler.

    If any subscriber raises, the whole delivery counts as failed and the
    event is retried as a unit on the next dispatch: subscribers that
    already got it receive it again.
    """

    kind = HandlerKind.TOPIC.value

    def dispatch(self) -> bool:
        return self.receive(self._broadcast)

    def _broadcast(self, event: Event) -> None:
        for subscriber in list(self._subscribers):
            subscriber.callback(event)

    def _post_publish(self, event: Event) -> None:
        self._scheduler.schedule(self.dispatch)

    def _pre_subscribe(self, subscriber: Subscriber) -> bool:
        if self.is_subscribed(subscriber.name):
            raise DuplicationError(
                f"Subscriber with name '{subscriber.name}' already exists",
                {"handler": self.name, "subscriber": subscriber.name},
            )
        return True
