"""Port definitions.

The dispatch engine only depends on these Protocols; concrete schedulers
live in ``simplemq.infrastructure``.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

from simplemq.domain.entities import Event

Callback = Callable[[Event], Any]
Task = Callable[[], None]


@runtime_checkable
class Scheduler(Protocol):
    """Runs tasks on a later turn, in the order they were scheduled."""

    def schedule(self, task: Task) -> None: ...
