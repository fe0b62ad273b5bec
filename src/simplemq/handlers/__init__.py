"""Event handlers: the dispatch engine and its delivery policies."""

from simplemq.handlers.base import EventHandler
from simplemq.handlers.queue import Queue
from simplemq.handlers.registry import HandlerRegistry, create_default_registry
from simplemq.handlers.topic import Topic

__all__ = ["EventHandler", "HandlerRegistry", "Queue", "Topic", "create_default_registry"]
