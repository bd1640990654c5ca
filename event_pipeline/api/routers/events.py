"""Events API router: POST /events/process, GET /events/{event_id}/status."""

from typing import Annotated, List

from fastapi import APIRouter, Depends

from event_pipeline.api.dependencies import get_processing_service, get_status_ledger
from event_pipeline.application.ledger import StatusLedger
from event_pipeline.application.processing_service import EventProcessingService
from event_pipeline.domain.schemas.event import (
    ProcessEventsRequest,
    ProcessEventsResponse,
    ProcessingStatusResponse,
    ProcessorResultResponse,
)

router = APIRouter()


@router.post("/process", response_model=ProcessEventsResponse)
async def process_events(
    body: ProcessEventsRequest,
    service: Annotated[EventProcessingService, Depends(get_processing_service)],
):
    """
    Accept one `event` or a batch of `events`. Malformed entries are dropped; each remaining event
    is published and processed. Processor failures are reported per result, never as an HTTP error.
    """
    batch = await service.process_batch(body.candidates())
    return ProcessEventsResponse(
        success=batch.success,
        processed=batch.processed,
        results=[
            ProcessorResultResponse(success=r.success, processor=r.processor, error=r.error)
            for r in batch.results
        ],
    )


@router.get("/{event_id}/status", response_model=List[ProcessingStatusResponse])
async def get_event_status(
    event_id: str,
    ledger: Annotated[StatusLedger, Depends(get_status_ledger)],
):
    """Ledger rows for an event, one per processor. Empty when the event has none."""
    records = await ledger.get_statuses(event_id)
    return [ProcessingStatusResponse.model_validate(record) for record in records]
