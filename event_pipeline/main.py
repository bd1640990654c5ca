# event_pipeline/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from event_pipeline.api.dependencies import close_stream_publisher
from event_pipeline.api.middleware import AuditTriggerMiddleware, CorrelationIdMiddleware
from event_pipeline.api.routers import dead_letters, events, health
from event_pipeline.application.exceptions import ApplicationError, DeadLetterNotFoundError
from event_pipeline.application.processing_service import drain_publishes
from event_pipeline.config.logging import configure_logging
from event_pipeline.config.settings import get_settings
from event_pipeline.domain.exceptions import DomainError, DomainValidationError
from event_pipeline.infrastructure.database.session import dispose_engine

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Pending stream appends finish before their connection goes away.
    await drain_publishes()
    await close_stream_publisher()
    await dispose_engine()
    logger.info("shutdown_complete")


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> AuditTrigger.
app.add_middleware(AuditTriggerMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(DeadLetterNotFoundError)
async def dead_letter_not_found_handler(request, exc: DeadLetterNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /events, /dead-letters
app.include_router(health.router)
app.include_router(events.router, prefix="/events")
app.include_router(dead_letters.router, prefix="/dead-letters")
