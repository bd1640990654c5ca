"""Dead-letter API router: inspect, delete, and manually replay dead-lettered events."""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from event_pipeline.api.dependencies import get_dead_letter_service
from event_pipeline.application.dead_letter_service import DEFAULT_PAGE_SIZE, DeadLetterService
from event_pipeline.domain.schemas.event import (
    DeadLetterItemResponse,
    DeadLetterStatsResponse,
    ReprocessResponse,
)

router = APIRouter()


@router.get("", response_model=List[DeadLetterItemResponse])
async def list_dead_letters(
    service: Annotated[DeadLetterService, Depends(get_dead_letter_service)],
    processor: Optional[str] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """Newest failures first, optionally filtered by processor name."""
    items = await service.list_items(processor_name=processor, limit=limit, offset=offset)
    return [DeadLetterItemResponse.model_validate(item) for item in items]


@router.get("/stats", response_model=DeadLetterStatsResponse)
async def dead_letter_stats(
    service: Annotated[DeadLetterService, Depends(get_dead_letter_service)],
):
    stats = await service.get_stats()
    return DeadLetterStatsResponse(
        total=stats.total,
        by_processor=stats.by_processor,
        total_failures=stats.total_failures,
    )


@router.post("/reprocess", response_model=ReprocessResponse)
async def reprocess_all(
    service: Annotated[DeadLetterService, Depends(get_dead_letter_service)],
    processor: Optional[str] = None,
):
    """Replay every dead-lettered event (optionally one processor's). Items are replayed in list order."""
    summary = await service.reprocess_all(processor_name=processor)
    return ReprocessResponse(success=summary.success, failed=summary.failed, errors=summary.errors)


@router.post("/{dlq_id}/reprocess")
async def reprocess_one(
    dlq_id: str,
    service: Annotated[DeadLetterService, Depends(get_dead_letter_service)],
):
    """Replay one item. 404 if it does not exist; `success: false` if the replay failed again."""
    success = await service.reprocess(dlq_id)
    return {"success": success}


@router.delete("/{dlq_id}")
async def delete_dead_letter(
    dlq_id: str,
    service: Annotated[DeadLetterService, Depends(get_dead_letter_service)],
):
    if not await service.delete_item(dlq_id):
        return JSONResponse(status_code=404, content={"detail": "Dead-letter item not found"})
    return {"success": True}
