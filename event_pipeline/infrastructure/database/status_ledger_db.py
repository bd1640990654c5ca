"""DB-backed status ledger. Upserts into event_processing_status keyed by (event_id, processor_name)."""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import Insert, insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from event_pipeline.application.ledger import ProcessorResult, StatusRecord
from event_pipeline.domain.models.event import ProcessingStatus
from event_pipeline.infrastructure.database.models import EventProcessingStatus
from event_pipeline.infrastructure.database.repository import upsert_statement

LEDGER_KEY = ("event_id", "processor_name")


def ledger_upsert(
    event_id: str,
    processor_name: str,
    outcome: ProcessingStatus,
    error: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Insert:
    """Overwrite status for the key; attempt_count counts every recorded attempt."""
    now = now or datetime.now(timezone.utc)
    completed = outcome == ProcessingStatus.COMPLETED
    values = {
        "event_id": event_id,
        "processor_name": processor_name,
        "status": outcome.value,
        "error_message": None if completed else error,
        "last_attempt_at": now,
        "completed_at": now if completed else None,
        "attempt_count": 1,
    }
    excluded = insert(EventProcessingStatus).excluded
    return upsert_statement(
        EventProcessingStatus,
        values,
        LEDGER_KEY,
        set_={
            "status": excluded.status,
            "error_message": excluded.error_message,
            "last_attempt_at": excluded.last_attempt_at,
            "completed_at": excluded.completed_at,
            "attempt_count": EventProcessingStatus.attempt_count + 1,
        },
    )


def _to_record(row: EventProcessingStatus) -> StatusRecord:
    return StatusRecord(
        event_id=row.event_id,
        processor_name=row.processor_name,
        status=ProcessingStatus(row.status),
        error_message=row.error_message,
        attempt_count=row.attempt_count or 0,
        last_attempt_at=row.last_attempt_at,
        completed_at=row.completed_at,
    )


class DbStatusLedger:
    """Implements StatusLedger protocol against PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record_outcome(
        self,
        event_id: str,
        processor_name: str,
        outcome: ProcessingStatus,
        error: Optional[str] = None,
    ) -> None:
        async with self._session_factory() as session:
            await session.execute(ledger_upsert(event_id, processor_name, outcome, error))
            await session.commit()

    async def record_outcomes(self, event_id: str, results: Sequence[ProcessorResult]) -> None:
        """One transaction for all processors of the event."""
        now = datetime.now(timezone.utc)
        async with self._session_factory() as session:
            async with session.begin():
                for result in results:
                    await session.execute(
                        ledger_upsert(event_id, result.processor, result.status, result.error, now)
                    )

    async def get_statuses(self, event_id: str) -> List[StatusRecord]:
        stmt = (
            select(EventProcessingStatus)
            .where(EventProcessingStatus.event_id == event_id)
            .order_by(EventProcessingStatus.processor_name)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_record(row) for row in result.scalars().all()]
