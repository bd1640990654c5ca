"""Dead-letter service: manual inspection and replay of dead-lettered events."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import ValidationError

from event_pipeline.application.exceptions import DeadLetterNotFoundError
from event_pipeline.application.ledger import DeadLetterRecord, DeadLetterSink
from event_pipeline.application.processing_service import EventProcessingService
from event_pipeline.domain.schemas.event import EventEnvelope

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class DeadLetterStats:
    total: int
    by_processor: Dict[str, int]
    total_failures: int


@dataclass(frozen=True)
class ReprocessSummary:
    success: int
    failed: int
    errors: List[str] = field(default_factory=list)


class DeadLetterService:
    """
    Replay is an explicit operator action; nothing here runs on a schedule.
    A successful replay removes the item; a failed one bumps its failure count and keeps it.
    """

    def __init__(
        self,
        sink: DeadLetterSink,
        processing: EventProcessingService,
        logger: logging.Logger,
    ) -> None:
        self._sink = sink
        self._processing = processing
        self._logger = logger

    async def list_items(
        self,
        processor_name: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> List[DeadLetterRecord]:
        return await self._sink.list(processor_name=processor_name, limit=limit, offset=offset)

    async def get_stats(self) -> DeadLetterStats:
        items = await self._sink.list()
        by_processor: Dict[str, int] = {}
        total_failures = 0
        for item in items:
            by_processor[item.processor_name] = by_processor.get(item.processor_name, 0) + 1
            total_failures += item.failure_count
        return DeadLetterStats(total=len(items), by_processor=by_processor, total_failures=total_failures)

    async def delete_item(self, dlq_id: str) -> bool:
        deleted = await self._sink.delete(dlq_id)
        if deleted:
            self._logger.info("dead_letter_deleted", extra={"dlq_id": dlq_id})
        return deleted

    async def reprocess(self, dlq_id: str) -> bool:
        """Re-run one dead-lettered event through the pipeline. Raises DeadLetterNotFoundError."""
        item = await self._sink.get(dlq_id)
        if item is None:
            raise DeadLetterNotFoundError(f"Dead-letter item {dlq_id} not found")

        try:
            envelope = EventEnvelope.model_validate(item.event_data)
        except ValidationError as e:
            await self._sink.mark_failed(dlq_id, f"Stored event is not a valid envelope: {e}")
            self._logger.error("dead_letter_reprocess_failed", extra={"dlq_id": dlq_id, "error": str(e)})
            return False

        outcome = await self._processing.process_event(envelope, dead_letter=False)
        if outcome.dead_lettered:
            await self._sink.mark_failed(dlq_id, outcome.failure_reason or "unknown error")
            self._logger.error(
                "dead_letter_reprocess_failed",
                extra={
                    "dlq_id": dlq_id,
                    "event_id": item.original_event_id,
                    "error": outcome.failure_reason,
                },
            )
            return False

        await self._sink.delete(dlq_id)
        self._logger.info(
            "dead_letter_reprocessed",
            extra={"dlq_id": dlq_id, "event_id": item.original_event_id},
        )
        return True

    async def reprocess_all(self, processor_name: Optional[str] = None) -> ReprocessSummary:
        items = await self._sink.list(processor_name=processor_name)
        success = 0
        failed = 0
        errors: List[str] = []
        for item in items:
            if await self.reprocess(item.id):
                success += 1
            else:
                failed += 1
                errors.append(f"Failed to reprocess {item.id}")
        return ReprocessSummary(success=success, failed=failed, errors=errors)
