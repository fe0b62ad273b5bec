"""Argument validation rules as pure functions.

Every public operation funnels its arguments through these checks, so a
malformed name, callback or payload is rejected with a
:class:`~simplemq.domain.exceptions.ValidationError` before any state changes.
"""

from __future__ import annotations

from typing import Any

from simplemq.domain.exceptions import ValidationError


def is_blank(value: Any) -> bool:
    """Return True for non-strings and strings that are empty after stripping."""
    return not isinstance(value, str) or not value.strip()


def require_name(value: Any, field: str = "name") -> str:
    """Return *value* if it is a non-blank string, else raise."""
    if is_blank(value):
        raise ValidationError(f"{field} is invalid", {"field": field, "value": value})
    return value


def require_callback(callback: Any, field: str = "callback") -> None:
    if not callable(callback):
        raise ValidationError(f"{field} is not callable", {"field": field})


def require_data(data: Any) -> None:
    """Payload data must be present; blank strings count as absent."""
    if data is None or (isinstance(data, str) and not data.strip()):
        raise ValidationError("data is invalid", {"field": "data"})
