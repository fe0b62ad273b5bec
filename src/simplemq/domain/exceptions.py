"""Custom exceptions for simplemq."""


class SimpleMQError(Exception):
    """Base exception for all simplemq errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(SimpleMQError, ValueError):
    """Raised when an argument to a public operation is malformed or missing."""

    pass


class DuplicationError(SimpleMQError):
    """Raised when registering a name that already exists."""

    pass


class IllegalOperationError(SimpleMQError):
    """Raised when a handler's broker ownership would be violated."""

    pass


class NotFoundError(SimpleMQError):
    """Raised by strict lookups when a referenced handler does not exist."""

    pass
