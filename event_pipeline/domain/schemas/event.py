"""Pydantic schemas for the event API and wire serialization. No DB or infrastructure."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from event_pipeline.domain.events.factory import coerce_timestamp, rehydrate
from event_pipeline.domain.events.versioning import EventVersionRegistry
from event_pipeline.domain.exceptions import SchemaValidationError
from event_pipeline.domain.models.event import CURRENT_EVENT_VERSION, DomainEvent, ProcessingStatus


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Event envelope
# ---------------------------------------------------------------------------

class EventEnvelope(WireModel):
    """
    Wire form of a DomainEvent as submitted over HTTP and stored in the dead-letter sink.
    Accepts anything ingress lets through: scalars are coerced to strings, and timestamp,
    metadata and payload are kept raw until rehydration, where a bad value dead-letters the event.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    payload: Any
    timestamp: Any = Field(None, description="Unix ms or ISO-8601")
    version: str = CURRENT_EVENT_VERSION
    correlation_id: Optional[str] = None
    causation_id: Optional[str] = None
    metadata: Any = None

    @field_validator("id", "type", "correlation_id", "causation_id", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("version", mode="before")
    @classmethod
    def _version_to_str(cls, value: Any) -> str:
        if value is None:
            return CURRENT_EVENT_VERSION
        return value if isinstance(value, str) else str(value)

    def to_domain_event(self, versions: Optional[EventVersionRegistry] = None) -> DomainEvent:
        """Validate the payload against its type's schema. Raises SchemaValidationError."""
        return rehydrate(
            event_id=self.id,
            event_type=self.type,
            payload=self.payload,
            timestamp=self.timestamp,
            version=self.version,
            correlation_id=self.correlation_id,
            causation_id=self.causation_id,
            metadata=self.metadata,
            versions=versions,
        )

    def timestamp_ms(self) -> int:
        """Event time as unix ms; falls back to now when the wire value is absent or unparseable."""
        try:
            timestamp = coerce_timestamp(self.timestamp)
        except SchemaValidationError:
            timestamp = None
        timestamp = timestamp or datetime.now(timezone.utc)
        return int(timestamp.timestamp() * 1000)

    def to_record(self) -> Dict[str, Any]:
        """Verbatim JSON-compatible record (camelCase) for durable storage."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ProcessEventsRequest(BaseModel):
    """Single `event` or a list of `events`. Entries are untyped until ingress validation."""

    event: Optional[Any] = None
    events: Optional[List[Any]] = None

    def candidates(self) -> List[Any]:
        if self.events is not None:
            return list(self.events)
        if self.event is not None:
            return [self.event]
        return []


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ProcessorResultResponse(BaseModel):
    success: bool
    processor: str
    error: Optional[str] = None


class ProcessEventsResponse(BaseModel):
    """Batch response. `processed` counts events that passed ingress validation."""

    success: bool = True
    processed: int
    results: List[ProcessorResultResponse] = Field(default_factory=list)


class ProcessingStatusResponse(WireModel):
    event_id: str
    processor_name: str
    status: ProcessingStatus
    error_message: Optional[str] = None
    attempt_count: int = 0
    last_attempt_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DeadLetterItemResponse(WireModel):
    id: str
    original_event_id: str
    event_data: Dict[str, Any]
    processor_name: str
    failure_reason: str
    failure_count: int
    first_failed_at: Optional[datetime] = None
    last_failed_at: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DeadLetterStatsResponse(WireModel):
    total: int
    by_processor: Dict[str, int]
    total_failures: int


class ReprocessResponse(WireModel):
    success: int
    failed: int
    errors: List[str] = Field(default_factory=list)
