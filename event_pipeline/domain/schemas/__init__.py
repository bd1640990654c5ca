"""Domain schemas. Payload models per event type; the wire envelope and API schemas live in schemas.event."""

from event_pipeline.domain.schemas.payloads import PAYLOAD_SCHEMAS, EventPayload

__all__ = [
    "EventPayload",
    "PAYLOAD_SCHEMAS",
]
