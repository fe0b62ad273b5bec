"""simplemq: in-process publish/subscribe and work queues.

Topics broadcast every event to every subscriber; queues hand each event
to one subscriber in round-robin order.  An :class:`EventBroker` looks
handlers up by name and creates them on first use.
"""

from simplemq.broker import EventBroker
from simplemq.domain.entities import Event, HandlerOptions, Payload, Subscriber
from simplemq.domain.enums import HandlerKind
from simplemq.domain.exceptions import (
    DuplicationError,
    IllegalOperationError,
    NotFoundError,
    SimpleMQError,
    ValidationError,
)
from simplemq.domain.identifiers import IdAllocator
from simplemq.handlers import EventHandler, HandlerRegistry, Queue, Topic, create_default_registry
from simplemq.infrastructure.scheduling import AsyncioScheduler, ManualScheduler

__version__ = "0.1.0"

__all__ = [
    "AsyncioScheduler",
    "DuplicationError",
    "Event",
    "EventBroker",
    "EventHandler",
    "HandlerKind",
    "HandlerOptions",
    "HandlerRegistry",
    "IdAllocator",
    "IllegalOperationError",
    "ManualScheduler",
    "NotFoundError",
    "Payload",
    "Queue",
    "SimpleMQError",
    "Subscriber",
    "Topic",
    "ValidationError",
    "create_default_registry",
]
