# Application layer: services that orchestrate domain and infrastructure.

from event_pipeline.application.dead_letter_service import DeadLetterService
from event_pipeline.application.exceptions import (
    ApplicationError,
    DeadLetterNotFoundError,
    ProcessorError,
)
from event_pipeline.application.ledger import (
    DeadLetterRecord,
    DeadLetterSink,
    ProcessorResult,
    StatusLedger,
    StatusRecord,
)
from event_pipeline.application.processing_service import EventProcessingService
from event_pipeline.application.store import CanonicalStore
from event_pipeline.application.stream_publisher import DisabledStreamPublisher, StreamPublisher

__all__ = [
    "ApplicationError",
    "CanonicalStore",
    "DeadLetterNotFoundError",
    "DeadLetterRecord",
    "DeadLetterService",
    "DeadLetterSink",
    "DisabledStreamPublisher",
    "EventProcessingService",
    "ProcessorError",
    "ProcessorResult",
    "StatusLedger",
    "StatusRecord",
    "StreamPublisher",
]
