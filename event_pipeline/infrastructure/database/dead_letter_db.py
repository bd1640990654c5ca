"""DB-backed dead-letter sink over event_dead_letter_queue."""

import uuid
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import func

from event_pipeline.application.ledger import DeadLetterRecord
from event_pipeline.domain.schemas.event import EventEnvelope
from event_pipeline.infrastructure.database.models import EventDeadLetter


def _parse_id(dlq_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(dlq_id))
    except ValueError:
        return None


def _to_record(row: EventDeadLetter) -> DeadLetterRecord:
    return DeadLetterRecord(
        id=str(row.id),
        original_event_id=row.original_event_id,
        event_data=dict(row.event_data or {}),
        processor_name=row.processor_name,
        failure_reason=row.failure_reason,
        failure_count=row.failure_count or 1,
        first_failed_at=row.first_failed_at,
        last_failed_at=row.last_failed_at,
    )


class DbDeadLetterSink:
    """Implements DeadLetterSink protocol against PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(self, envelope: EventEnvelope, processor_name: str, reason: str) -> None:
        row = EventDeadLetter(
            original_event_id=envelope.id,
            event_data=envelope.to_record(),
            processor_name=processor_name,
            failure_reason=reason,
            failure_count=1,
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()

    async def get(self, dlq_id: str) -> Optional[DeadLetterRecord]:
        key = _parse_id(dlq_id)
        if key is None:
            return None
        async with self._session_factory() as session:
            row = await session.get(EventDeadLetter, key)
            return _to_record(row) if row is not None else None

    async def list(
        self,
        processor_name: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[DeadLetterRecord]:
        stmt = select(EventDeadLetter).order_by(EventDeadLetter.first_failed_at.desc())
        if processor_name:
            stmt = stmt.where(EventDeadLetter.processor_name == processor_name)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_record(row) for row in result.scalars().all()]

    async def delete(self, dlq_id: str) -> bool:
        key = _parse_id(dlq_id)
        if key is None:
            return False
        async with self._session_factory() as session:
            result = await session.execute(delete(EventDeadLetter).where(EventDeadLetter.id == key))
            await session.commit()
            return (result.rowcount or 0) > 0

    async def mark_failed(self, dlq_id: str, reason: str) -> None:
        key = _parse_id(dlq_id)
        if key is None:
            return
        stmt = (
            update(EventDeadLetter)
            .where(EventDeadLetter.id == key)
            .values(
                failure_count=EventDeadLetter.failure_count + 1,
                last_failed_at=func.now(),
                failure_reason=reason,
            )
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()
