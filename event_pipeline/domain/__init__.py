"""Domain layer: event model, payload schemas, factories, ingress validation. Pure business logic only."""

from event_pipeline.domain.exceptions import (
    DomainError,
    DomainValidationError,
    EmptyBatchError,
    EventVersionError,
    SchemaValidationError,
    UnknownEventTypeError,
)
from event_pipeline.domain.models import DomainEvent, EventType, ProcessingStatus

__all__ = [
    "DomainError",
    "DomainEvent",
    "DomainValidationError",
    "EmptyBatchError",
    "EventType",
    "EventVersionError",
    "ProcessingStatus",
    "SchemaValidationError",
    "UnknownEventTypeError",
]
