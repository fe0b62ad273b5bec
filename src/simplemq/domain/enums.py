"""Domain enumerations for simplemq."""

from __future__ import annotations

from enum import Enum


class HandlerKind(str, Enum):
    """Built-in event handler kinds.

    Each value is the key under which the handler class is registered in
    the default :class:`~simplemq.handlers.registry.HandlerRegistry`.
    """

    TOPIC = "topic"
    QUEUE = "queue"
