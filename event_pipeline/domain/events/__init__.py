"""Event construction and payload versioning."""

from event_pipeline.domain.events.factory import (
    coerce_timestamp,
    create_event,
    parse_event_type,
    rehydrate,
    validate_payload,
)
from event_pipeline.domain.events.versioning import EventVersionRegistry, default_registry

__all__ = [
    "EventVersionRegistry",
    "coerce_timestamp",
    "create_event",
    "default_registry",
    "parse_event_type",
    "rehydrate",
    "validate_payload",
]
