# event_pipeline/api/routers/health.py

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from event_pipeline.api.dependencies import get_stream_publisher
from event_pipeline.application.stream_publisher import StreamPublisher
from event_pipeline.config.settings import get_settings

router = APIRouter()


@router.get("/health")
async def health(
    request: Request,
    publisher: Annotated[StreamPublisher, Depends(get_stream_publisher)],
):
    """Health check with correlation ID and whether stream publishing is on."""
    settings = get_settings()
    return {
        "status": "ok",
        "correlation_id": request.state.correlation_id,
        "environment": settings.environment,
        "version": settings.version,
        "stream_publishing": publisher.enabled,
    }
