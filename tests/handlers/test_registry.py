"""Tests for simplemq.handlers.registry."""

import pytest

from simplemq.domain.enums import HandlerKind
from simplemq.domain.exceptions import ValidationError
from simplemq.handlers.base import EventHandler
from simplemq.handlers.queue import Queue
from simplemq.handlers.registry import HandlerRegistry, create_default_registry, kind_key
from simplemq.handlers.topic import Topic


class AuditLog(Topic):
    kind = "audit-log"


class TestKindKey:
    def test_enum(self):
        assert kind_key(HandlerKind.QUEUE) == "queue"

    def test_string_normalised(self):
        assert kind_key(" Topic ") == "topic"

    def test_class(self):
        assert kind_key(AuditLog) == "audit-log"

    @pytest.mark.parametrize("value", ["", None, 3, dict])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            kind_key(value)


class TestHandlerRegistry:
    def test_register_and_get(self):
        registry = HandlerRegistry()
        registry.register("topic", Topic)
        assert registry.get(HandlerKind.TOPIC) is Topic
        assert "topic" in registry
        assert len(registry) == 1

    def test_get_unknown_returns_none(self):
        assert HandlerRegistry().get("queue") is None

    def test_register_class_alone(self):
        registry = HandlerRegistry()
        registry.register(AuditLog)
        assert registry.registered_kinds == {"audit-log"}

    def test_register_requires_callable_factory(self):
        with pytest.raises(ValidationError):
            HandlerRegistry().register("x", "not callable")
        with pytest.raises(ValidationError):
            HandlerRegistry().register("x")

    def test_resolve_unknown_raises(self):
        with pytest.raises(ValidationError):
            HandlerRegistry().resolve("carrier-pigeon")

    def test_resolve_unregistered_handler_class(self):
        assert HandlerRegistry().resolve(AuditLog) is AuditLog

    def test_unregister(self):
        registry = create_default_registry()
        registry.unregister("queue")
        assert "queue" not in registry

    def test_contains_tolerates_garbage(self):
        assert None not in HandlerRegistry()

    def test_create_passes_scheduler_and_ids(self, scheduler, ids):
        registry = create_default_registry()
        handler = registry.create("queue", "jobs", {"a": 1}, scheduler=scheduler, ids=ids)
        assert isinstance(handler, Queue)
        assert handler.scheduler is scheduler
        assert handler.id == 1
        assert handler.options.get("a") == 1

    def test_custom_factory(self, scheduler):
        created = []

        def factory(name, options, *, scheduler=None, ids=None):
            handler = Topic(name, options, scheduler=scheduler, ids=ids)
            created.append(handler)
            return handler

        registry = HandlerRegistry()
        registry.register("custom", factory)
        handler = registry.create("custom", "c", scheduler=scheduler)
        assert created == [handler]

    def test_factory_must_return_handler(self):
        registry = HandlerRegistry()
        registry.register("bad", lambda name, options, **kw: object())
        with pytest.raises(ValidationError):
            registry.create("bad", "x")


class TestCreateDefaultRegistry:
    def test_has_builtin_kinds(self):
        registry = create_default_registry()
        assert registry.registered_kinds == {k.value for k in HandlerKind}

    def test_each_factory_has_matching_kind(self):
        registry = create_default_registry()
        for kind in registry.registered_kinds:
            factory = registry.get(kind)
            assert issubclass(factory, EventHandler)
            assert factory.kind == kind
