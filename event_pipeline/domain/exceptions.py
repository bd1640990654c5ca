"""Domain-specific exceptions. Pure domain layer, no infrastructure."""

from typing import Iterable, List, Optional


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""


class SchemaValidationError(DomainValidationError):
    """
    Raised when an event payload does not satisfy the schema of its event type.
    `fields` names the offending field paths (dotted, wire names).
    """

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None) -> None:
        self.fields: List[str] = list(fields or [])
        super().__init__(message)


class UnknownEventTypeError(SchemaValidationError):
    """Raised when an event type is not part of the event catalogue."""

    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(f"Unknown event type: {event_type!r}", fields=["type"])


class EventVersionError(SchemaValidationError):
    """Raised when no migration path exists between two payload versions."""


class EmptyBatchError(DomainError):
    """Raised when a submission carries neither `event` nor a non-empty `events` list."""
