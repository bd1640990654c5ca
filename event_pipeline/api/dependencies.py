"""FastAPI dependency injection: session factory, stream publisher, notifier, services."""

import logging
from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from event_pipeline.application.dead_letter_service import DeadLetterService
from event_pipeline.application.ledger import DeadLetterSink, StatusLedger
from event_pipeline.application.processing_service import EventProcessingService
from event_pipeline.application.processors import build_default_processors
from event_pipeline.application.store import CanonicalStore
from event_pipeline.application.stream_publisher import StreamPublisher
from event_pipeline.config.settings import get_settings
from event_pipeline.infrastructure.database.canonical_store_db import DbCanonicalStore
from event_pipeline.infrastructure.database.dead_letter_db import DbDeadLetterSink
from event_pipeline.infrastructure.database.session import get_session_factory
from event_pipeline.infrastructure.database.status_ledger_db import DbStatusLedger
from event_pipeline.infrastructure.streaming.redis_stream_publisher import build_stream_publisher
from event_pipeline.notifications.interface import Notifier
from event_pipeline.notifications.logging_notifier import LoggingNotifier

_publisher: Optional[StreamPublisher] = None
_notifier: Optional[Notifier] = None


def get_db_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory."""
    return get_session_factory()


def get_stream_publisher() -> StreamPublisher:
    """Return singleton stream publisher, chosen once from settings."""
    global _publisher
    if _publisher is None:
        _publisher = build_stream_publisher(get_settings())
    return _publisher


def get_notifier() -> Notifier:
    """Return singleton notifier."""
    global _notifier
    if _notifier is None:
        _notifier = LoggingNotifier()
    return _notifier


def get_canonical_store(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_db_session_factory)],
) -> CanonicalStore:
    return DbCanonicalStore(session_factory)


def get_status_ledger(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_db_session_factory)],
) -> StatusLedger:
    return DbStatusLedger(session_factory)


def get_dead_letter_sink(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_db_session_factory)],
) -> DeadLetterSink:
    return DbDeadLetterSink(session_factory)


async def get_processing_service(
    store: Annotated[CanonicalStore, Depends(get_canonical_store)],
    ledger: Annotated[StatusLedger, Depends(get_status_ledger)],
    dead_letters: Annotated[DeadLetterSink, Depends(get_dead_letter_sink)],
    publisher: Annotated[StreamPublisher, Depends(get_stream_publisher)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> EventProcessingService:
    """Build EventProcessingService with injected store, ledger, dead-letter sink, publisher, processors, logger."""
    return EventProcessingService(
        store=store,
        ledger=ledger,
        dead_letters=dead_letters,
        publisher=publisher,
        processors=build_default_processors(notifier),
        logger=logging.getLogger("event_pipeline.processing"),
    )


async def get_dead_letter_service(
    dead_letters: Annotated[DeadLetterSink, Depends(get_dead_letter_sink)],
    processing: Annotated[EventProcessingService, Depends(get_processing_service)],
) -> DeadLetterService:
    return DeadLetterService(
        sink=dead_letters,
        processing=processing,
        logger=logging.getLogger("event_pipeline.dead_letters"),
    )


async def close_stream_publisher() -> None:
    """Release the publisher's connection, if one was built."""
    global _publisher
    if _publisher is not None:
        await _publisher.close()
        _publisher = None
