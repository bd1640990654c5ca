"""Status ledger and dead-letter sink protocols. Application layer depends on these; infrastructure implements them."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from event_pipeline.domain.models.event import ProcessingStatus
from event_pipeline.domain.schemas.event import EventEnvelope

EVENT_LEVEL_PROCESSOR = "event-processor"


@dataclass(frozen=True)
class ProcessorResult:
    """Settled outcome of one processor for one event."""

    processor: str
    success: bool
    error: Optional[str] = None

    @property
    def status(self) -> ProcessingStatus:
        return ProcessingStatus.COMPLETED if self.success else ProcessingStatus.FAILED


@dataclass(frozen=True)
class StatusRecord:
    """One ledger row, keyed by (event_id, processor_name)."""

    event_id: str
    processor_name: str
    status: ProcessingStatus
    error_message: Optional[str] = None
    attempt_count: int = 1
    last_attempt_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class DeadLetterRecord:
    """An event whose own processing loop raised. `event_data` is the original envelope verbatim."""

    id: str
    original_event_id: str
    event_data: Dict[str, Any]
    processor_name: str
    failure_reason: str
    failure_count: int = 1
    first_failed_at: Optional[datetime] = None
    last_failed_at: Optional[datetime] = None


class StatusLedger(Protocol):
    """Durable, idempotent (event_id, processor_name) -> outcome record. Observability only, not a scheduler."""

    async def record_outcome(
        self,
        event_id: str,
        processor_name: str,
        outcome: ProcessingStatus,
        error: Optional[str] = None,
    ) -> None:
        """Upsert one row. Re-recording the same key overwrites the previous outcome."""
        ...

    async def record_outcomes(self, event_id: str, results: Sequence[ProcessorResult]) -> None:
        """Upsert one row per result, all or nothing."""
        ...

    async def get_statuses(self, event_id: str) -> List[StatusRecord]:
        """Return ledger rows for event_id (empty when the event has none)."""
        ...


class DeadLetterSink(Protocol):
    """Durable store of dead-lettered events. Never retried automatically."""

    async def record(self, envelope: EventEnvelope, processor_name: str, reason: str) -> None:
        """Store the complete original event with a human-readable reason."""
        ...

    async def get(self, dlq_id: str) -> Optional[DeadLetterRecord]:
        ...

    async def list(
        self,
        processor_name: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[DeadLetterRecord]:
        """Newest failures first."""
        ...

    async def delete(self, dlq_id: str) -> bool:
        ...

    async def mark_failed(self, dlq_id: str, reason: str) -> None:
        """Increment failure_count and bump last_failed_at after a failed manual replay."""
        ...
