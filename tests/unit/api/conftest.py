"""Fixtures for API unit tests: services over in-memory fakes, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from event_pipeline.application.dead_letter_service import DeadLetterService
from event_pipeline.main import app


@pytest.fixture
def app_with_overrides(processing_service, ledger, dead_letters, publisher, logger):
    """App with database-backed collaborators and the stream publisher replaced by fakes."""
    from event_pipeline.api import dependencies

    dead_letter_service = DeadLetterService(sink=dead_letters, processing=processing_service, logger=logger)
    app.dependency_overrides[dependencies.get_processing_service] = lambda: processing_service
    app.dependency_overrides[dependencies.get_status_ledger] = lambda: ledger
    app.dependency_overrides[dependencies.get_dead_letter_service] = lambda: dead_letter_service
    app.dependency_overrides[dependencies.get_stream_publisher] = lambda: publisher
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
