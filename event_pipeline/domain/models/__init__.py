"""Domain models. Pure business entities."""

from event_pipeline.domain.models.event import (
    CURRENT_EVENT_VERSION,
    DomainEvent,
    EventType,
    ProcessingStatus,
)

__all__ = [
    "CURRENT_EVENT_VERSION",
    "DomainEvent",
    "EventType",
    "ProcessingStatus",
]
