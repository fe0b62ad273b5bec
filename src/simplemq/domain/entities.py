"""Domain entities for simplemq.

Events and payloads are frozen dataclasses, created together and never
mutated.  Handler options are a Pydantic model that keeps unknown keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from pydantic import BaseModel, ConfigDict

from simplemq.domain.exceptions import ValidationError
from simplemq.domain.identifiers import DEFAULT_ALLOCATOR, IdAllocator
from simplemq.domain.rules import require_callback, require_data, require_name

if TYPE_CHECKING:
    from simplemq.handlers.base import EventHandler


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Payload:
    """Typed data carried by exactly one :class:`Event`."""

    id: int
    type: str
    data: Any

    def __post_init__(self) -> None:
        require_name(self.type, "type")
        require_data(self.data)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "data": self.data}


@dataclass(frozen=True)
class Event:
    """A named event owned by the handler it was created for.

    Use :meth:`create` (or ``EventHandler.create_event``) rather than the
    constructor: the payload is built in the same step so it never exists
    on its own.
    """

    id: int
    name: str
    payload: Payload
    handler: EventHandler | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        require_name(self.name, "name")
        if not isinstance(self.payload, Payload):
            raise ValidationError("payload is invalid", {"field": "payload"})

    @classmethod
    def create(
        cls,
        handler: EventHandler | None,
        name: str,
        data_type: str,
        data: Any,
        *,
        ids: IdAllocator | None = None,
    ) -> Event:
        """Validate the arguments and build an event with its payload."""
        ids = ids or DEFAULT_ALLOCATOR
        require_name(name, "name")
        require_name(data_type, "type")
        require_data(data)
        event_id = ids.next_id("event")
        payload = Payload(id=ids.next_id("payload"), type=data_type, data=data)
        return cls(id=event_id, name=name, payload=payload, handler=handler)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "handler": self.handler.name if self.handler is not None else None,
            "name": self.name,
            "payload": self.payload.to_dict(),
        }


# ---------------------------------------------------------------------------
# Subscriptions and options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Subscriber:
    """A named callback registered on an event handler."""

    name: str
    callback: Callable[[Event], Any] = field(compare=False)

    def __post_init__(self) -> None:
        require_name(self.name, "subscriber name")
        require_callback(self.callback)


class HandlerOptions(BaseModel):
    """Construction-time handler configuration.

    No keys are required; any key passed in is kept as an extra field.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    @classmethod
    def coerce(cls, value: HandlerOptions | Mapping[str, Any] | None) -> HandlerOptions:
        """Accept ``None``, a mapping or an existing instance."""
        if value is None:
            return cls()
        if isinstance(value, HandlerOptions):
            return value
        if isinstance(value, Mapping):
            if not all(isinstance(key, str) for key in value):
                raise ValidationError("options keys must be strings", {"field": "options"})
            return cls.model_validate(dict(value))
        raise ValidationError("options is invalid", {"field": "options"})

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_dict().get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
