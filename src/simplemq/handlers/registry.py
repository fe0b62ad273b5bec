"""Handler registry: maps a kind name to the factory that builds it.

The broker resolves ``create_event_handler(kind, ...)`` through a registry,
so host code can plug in its own delivery policies with :meth:`register`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from simplemq.domain.entities import HandlerOptions
from simplemq.domain.enums import HandlerKind
from simplemq.domain.exceptions import ValidationError
from simplemq.domain.identifiers import IdAllocator
from simplemq.domain.ports import Scheduler
from simplemq.handlers.base import EventHandler

# factory(name, options, *, scheduler=..., ids=...) -> EventHandler
HandlerFactory = Callable[..., EventHandler]

KindLike = HandlerKind | str | type[EventHandler]


def kind_key(kind: KindLike) -> str:
    """Normalise a kind given as enum, string or handler class."""
    if isinstance(kind, HandlerKind):
        return kind.value
    if isinstance(kind, str) and kind.strip():
        return kind.strip().lower()
    if isinstance(kind, type) and issubclass(kind, EventHandler) and getattr(kind, "kind", None):
        return kind.kind
    raise ValidationError("type is invalid", {"field": "type", "value": kind})


class HandlerRegistry:
    """Registry that maps kind names to :data:`HandlerFactory` callables."""

    def __init__(self) -> None:
        self._factories: dict[str, HandlerFactory] = {}

    def register(self, kind: KindLike, factory: HandlerFactory | None = None) -> None:
        """Register *factory* under *kind*.

        A handler class can be registered on its own: ``register(MyHandler)``
        uses ``MyHandler.kind`` as the key and the class as the factory.
        """
        if factory is None:
            if not (isinstance(kind, type) and issubclass(kind, EventHandler)):
                raise ValidationError("factory is required", {"field": "factory"})
            factory = kind
        if not callable(factory):
            raise ValidationError("factory is not callable", {"field": "factory"})
        self._factories[kind_key(kind)] = factory

    def unregister(self, kind: KindLike) -> None:
        self._factories.pop(kind_key(kind), None)

    def get(self, kind: KindLike) -> HandlerFactory | None:
        """Return the factory for *kind*, or ``None``."""
        return self._factories.get(kind_key(kind))

    def resolve(self, kind: KindLike) -> HandlerFactory:
        """Return the factory for *kind* or raise ``ValidationError``.

        An unregistered ``EventHandler`` subclass resolves to itself.
        """
        factory = self.get(kind)
        if factory is not None:
            return factory
        if isinstance(kind, type) and issubclass(kind, EventHandler):
            return kind
        raise ValidationError(f"Unknown event handler type '{kind}'", {"field": "type", "value": kind})

    def create(
        self,
        kind: KindLike,
        name: str,
        options: HandlerOptions | Mapping[str, Any] | None = None,
        *,
        scheduler: Scheduler | None = None,
        ids: IdAllocator | None = None,
    ) -> EventHandler:
        factory = self.resolve(kind)
        handler = factory(name, options, scheduler=scheduler, ids=ids)
        if not isinstance(handler, EventHandler):
            raise ValidationError(
                f"Factory for '{kind}' did not return an EventHandler",
                {"field": "type", "value": kind},
            )
        return handler

    @property
    def registered_kinds(self) -> set[str]:
        return set(self._factories.keys())

    def __contains__(self, kind: object) -> bool:
        try:
            return kind_key(kind) in self._factories  # type: ignore[arg-type]
        except ValidationError:
            return False

    def __len__(self) -> int:
        return len(self._factories)


def create_default_registry() -> HandlerRegistry:
    """Create a registry pre-loaded with the built-in Topic and Queue."""
    from simplemq.handlers.queue import Queue
    from simplemq.handlers.topic import Topic

    registry = HandlerRegistry()
    registry.register(HandlerKind.TOPIC, Topic)
    registry.register(HandlerKind.QUEUE, Queue)
    return registry
