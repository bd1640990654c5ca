"""Event processing service: the fan-out engine. Orchestrates ingress, publish, processors, ledger, dead-letter."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Set

from event_pipeline.application.ledger import (
    EVENT_LEVEL_PROCESSOR,
    DeadLetterSink,
    ProcessorResult,
    StatusLedger,
)
from event_pipeline.application.processors.base import EventProcessor
from event_pipeline.application.store import CanonicalStore
from event_pipeline.application.stream_publisher import StreamPublisher
from event_pipeline.domain.events.versioning import EventVersionRegistry
from event_pipeline.domain.exceptions import EmptyBatchError
from event_pipeline.domain.models.event import DomainEvent
from event_pipeline.domain.schemas.event import EventEnvelope
from event_pipeline.domain.validators.ingress_validator import filter_valid

# Stream appends outlive the request that scheduled them.
_publish_tasks: Set[asyncio.Task] = set()


async def drain_publishes() -> None:
    """Wait for in-flight stream appends. Used at shutdown and in tests."""
    if _publish_tasks:
        await asyncio.gather(*list(_publish_tasks), return_exceptions=True)


@dataclass(frozen=True)
class EventOutcome:
    """What happened to one event: settled processor results, or a dead-letter reason."""

    event_id: str
    results: List[ProcessorResult] = field(default_factory=list)
    dead_lettered: bool = False
    failure_reason: Optional[str] = None


@dataclass(frozen=True)
class BatchResult:
    processed: int
    outcomes: List[EventOutcome] = field(default_factory=list)
    success: bool = True

    @property
    def results(self) -> List[ProcessorResult]:
        return [result for outcome in self.outcomes for result in outcome.results]


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class EventProcessingService:
    """
    Stateless per request. Events in a batch run sequentially; the processors of one event run
    concurrently and are awaited together (settle-all). Failures are contained at the narrowest scope:
    a processor failure is a `failed` ledger row, an exception escaping the per-event block is a
    dead-letter row, and the two never coexist for the same event.
    """

    def __init__(
        self,
        store: CanonicalStore,
        ledger: StatusLedger,
        dead_letters: DeadLetterSink,
        publisher: StreamPublisher,
        processors: Sequence[EventProcessor],
        logger: logging.Logger,
        versions: Optional[EventVersionRegistry] = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._dead_letters = dead_letters
        self._publisher = publisher
        self._processors = list(processors)
        self._logger = logger
        self._versions = versions

    async def process_batch(self, candidates: Sequence[Any]) -> BatchResult:
        """
        Single entry point for a submission. Drops malformed entries, publishes each valid one
        (best-effort, not awaited), then processes them in submission order.
        """
        if not candidates:
            raise EmptyBatchError("Invalid request: events must be a non-empty array")

        # Step 1: Ingress validation (malformed entries are dropped and logged)
        envelopes = filter_valid(list(candidates))
        self._logger.info(
            "batch_received",
            extra={"submitted": len(candidates), "valid": len(envelopes)},
        )

        outcomes: List[EventOutcome] = []
        for envelope in envelopes:
            # Step 2: Stream publish; never blocks local processing
            self._schedule_publish(envelope)

            # Step 3: Fan-out, ledger, dead-letter
            outcomes.append(await self.process_event(envelope))

        return BatchResult(processed=len(envelopes), outcomes=outcomes)

    async def process(self, envelope: EventEnvelope) -> List[ProcessorResult]:
        """Process one structurally valid event. Empty when the event was dead-lettered."""
        outcome = await self.process_event(envelope)
        return outcome.results

    async def process_event(self, envelope: EventEnvelope, *, dead_letter: bool = True) -> EventOutcome:
        """
        Rehydrate, fan out, record. Anything raised here, outside a processor's own settled result,
        dead-letters the event (unless dead_letter=False, used by manual replay) and writes no ledger rows.
        """
        try:
            event = envelope.to_domain_event(self._versions)
            results = await self._fan_out(event)
            # All rows in one call: either every outcome is recorded or none is.
            await self._ledger.record_outcomes(event.id, results)
        except Exception as e:
            reason = _error_message(e)
            self._logger.error(
                "event_processing_failed",
                extra={
                    "event_id": envelope.id,
                    "event_type": envelope.type,
                    "correlation_id": envelope.correlation_id,
                    "error": reason,
                },
            )
            if dead_letter:
                await self._write_dead_letter(envelope, reason)
            return EventOutcome(
                event_id=envelope.id,
                dead_lettered=True,
                failure_reason=reason,
            )

        self._logger.info(
            "event_processed",
            extra={
                "event_id": event.id,
                "event_type": event.type.value,
                "correlation_id": event.correlation_id,
                "failed_processors": [r.processor for r in results if not r.success],
            },
        )
        return EventOutcome(event_id=event.id, results=results)

    async def _write_dead_letter(self, envelope: EventEnvelope, reason: str) -> None:
        # A sink failure loses this event's record but must not abort the rest of the batch.
        try:
            await self._dead_letters.record(envelope, EVENT_LEVEL_PROCESSOR, reason)
        except Exception as e:
            self._logger.error(
                "dead_letter_write_failed",
                extra={
                    "event_id": envelope.id,
                    "event_type": envelope.type,
                    "reason": reason,
                    "error": _error_message(e),
                },
            )
            return
        self._logger.warning(
            "event_dead_lettered",
            extra={"event_id": envelope.id, "event_type": envelope.type, "reason": reason},
        )

    async def _fan_out(self, event: DomainEvent) -> List[ProcessorResult]:
        settled = await asyncio.gather(
            *(processor.process(event, self._store) for processor in self._processors),
            return_exceptions=True,
        )
        results: List[ProcessorResult] = []
        for processor, outcome in zip(self._processors, settled):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    # CancelledError, KeyboardInterrupt: not a processor failure.
                    raise outcome
                message = _error_message(outcome)
                self._logger.error(
                    "processor_failed",
                    extra={
                        "event_id": event.id,
                        "event_type": event.type.value,
                        "processor": processor.name,
                        "error": message,
                    },
                )
                results.append(ProcessorResult(processor=processor.name, success=False, error=message))
            else:
                results.append(ProcessorResult(processor=processor.name, success=True))
        return results

    def _schedule_publish(self, envelope: EventEnvelope) -> None:
        if not self._publisher.enabled:
            return
        task = asyncio.create_task(self._publisher.publish(envelope))
        _publish_tasks.add(task)
        task.add_done_callback(_publish_tasks.discard)
