"""Stream publisher capability. Publishing is optional: a disabled implementation is selected at startup."""

import logging
from typing import Protocol

from event_pipeline.domain.schemas.event import EventEnvelope

logger = logging.getLogger(__name__)


class StreamPublisher(Protocol):
    """
    Best-effort append of an event to a distributed stream for out-of-process consumers.
    Implementations must never raise: failures are logged and swallowed.
    """

    @property
    def enabled(self) -> bool:
        ...

    async def publish(self, envelope: EventEnvelope) -> None:
        ...

    async def close(self) -> None:
        ...


class DisabledStreamPublisher:
    """StreamPublisher used when no stream is configured. Does nothing."""

    enabled = False

    def __init__(self, reason: str = "not configured") -> None:
        self.reason = reason

    async def publish(self, envelope: EventEnvelope) -> None:
        logger.debug(
            "stream_publish_skipped",
            extra={"event_id": envelope.id, "reason": self.reason},
        )

    async def close(self) -> None:
        return None
