"""Event broker: a name -> handler registry with lazy handler creation.

Handlers created through the broker share its scheduler and id allocator.
A handler belongs to at most one broker; the broker's map and the handler's
``broker`` back-reference are kept in step by ``add_event_handler`` /
``remove_event_handler`` and ``EventHandler.add_to_broker`` /
``EventHandler.remove_from_broker``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from simplemq.config.settings import Settings, get_settings
from simplemq.domain.entities import HandlerOptions
from simplemq.domain.exceptions import (
    DuplicationError,
    IllegalOperationError,
    NotFoundError,
    ValidationError,
)
from simplemq.domain.identifiers import DEFAULT_ALLOCATOR, IdAllocator
from simplemq.domain.ports import Callback, Scheduler
from simplemq.domain.rules import require_callback, require_name
from simplemq.handlers.base import EventHandler
from simplemq.handlers.registry import HandlerRegistry, KindLike, create_default_registry
from simplemq.infrastructure.scheduling import ManualScheduler

logger = structlog.get_logger(__name__)

Options = HandlerOptions | Mapping[str, Any] | None


class EventBroker:
    """Resolves handler names to handlers and creates them on demand."""

    def __init__(
        self,
        *,
        registry: HandlerRegistry | None = None,
        scheduler: Scheduler | None = None,
        ids: IdAllocator | None = None,
        strict: bool | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._ids = ids or DEFAULT_ALLOCATOR
        self._id = self._ids.next_id("broker")
        self._registry = registry or create_default_registry()
        self._scheduler: Scheduler = scheduler or ManualScheduler()
        self._strict = settings.strict_lookups if strict is None else strict
        self._default_fail_on_existence = settings.default_fail_on_existence
        self._handlers: dict[str, EventHandler] = {}

    def __repr__(self) -> str:
        return f"EventBroker(id={self._id}, handlers={len(self._handlers)})"

    @property
    def _log(self) -> structlog.stdlib.BoundLogger:
        return logger.bind(broker=self._id)

    @property
    def id(self) -> int:
        return self._id

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def strict(self) -> bool:
        return self._strict

    # -- lookups ------------------------------------------------------------

    def has_event_handler(self, name: str) -> bool:
        return require_name(name, "handler name").strip() in self._handlers

    def get_event_handler(self, name: str) -> EventHandler | None:
        return self._handlers.get(require_name(name, "handler name").strip())

    def get_all_event_handlers(self) -> list[EventHandler]:
        return list(self._handlers.values())

    def _lookup(self, name: str) -> EventHandler | None:
        handler = self.get_event_handler(name)
        if handler is None and self._strict:
            raise NotFoundError(f"Event handler '{name}' not found", {"handler": name})
        return handler

    # -- registration -------------------------------------------------------

    def create_event_handler(
        self,
        kind: KindLike,
        name: str,
        options: Options = None,
        fail_on_existence: bool | None = None,
    ) -> EventHandler:
        """Create and register a handler of *kind* named *name*.

        If the name is taken, raise ``DuplicationError`` when
        *fail_on_existence* is true, otherwise return the existing handler.
        """
        self._registry.resolve(kind)
        name = require_name(name, "handler name").strip()
        if fail_on_existence is None:
            fail_on_existence = self._default_fail_on_existence

        existing = self._handlers.get(name)
        if existing is not None:
            if fail_on_existence:
                raise DuplicationError(
                    f"Event handler with name '{name}' already exists",
                    {"handler": name},
                )
            return existing

        handler = self._registry.create(
            kind, name, options, scheduler=self._scheduler, ids=self._ids
        )
        self.add_event_handler(handler)
        self._log.info("broker.handler_created", handler=name, kind=handler.kind)
        return handler

    def add_event_handler(self, handler: EventHandler) -> None:
        """Register an existing handler. Re-adding the same instance is a no-op."""
        if not isinstance(handler, EventHandler):
            raise ValidationError("Object of type EventHandler expected", {"field": "handler"})
        name = handler.name
        existing = self._handlers.get(name)
        if existing is not None and existing is not handler:
            raise DuplicationError(
                f"Event handler with name '{name}' already exists",
                {"handler": name},
            )
        if handler.broker is not None and handler.broker is not self:
            raise IllegalOperationError(
                f"Handler '{name}' already belongs to another broker",
                {"handler": name},
            )
        self._handlers[name] = handler
        if handler.broker is None:
            handler.add_to_broker(self)
            self._log.debug("broker.handler_added", handler=name, kind=handler.kind)

    def remove_event_handler(self, name: str) -> None:
        """Deregister *name* and clear the handler's back-reference."""
        handler = self._lookup(name)
        if handler is None:
            return
        del self._handlers[handler.name]
        if handler.broker is self:
            handler.remove_from_broker(self)
        self._log.debug("broker.handler_removed", handler=handler.name)

    # -- subscriptions ------------------------------------------------------

    def subscribe_to_event_handler(
        self,
        kind: KindLike,
        name: str,
        subscriber_name: str,
        callback: Callback,
        options: Options = None,
    ) -> EventHandler:
        """Subscribe to *name*, creating the handler first if needed."""
        require_name(subscriber_name, "subscriber name")
        require_callback(callback)
        handler = self.create_event_handler(kind, name, options, fail_on_existence=False)
        handler.subscribe(subscriber_name, callback)
        return handler

    def unsubscribe_from_event_handler(self, name: str, subscriber_name: str) -> None:
        handler = self._lookup(name)
        if handler is not None:
            handler.unsubscribe(subscriber_name)

    # -- inspection ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        handlers = [h.to_dict() for h in self._handlers.values()]
        return {
            "id": self._id,
            "handler_count": len(handlers),
            "handlers": handlers,
        }
