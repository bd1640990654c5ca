# event_pipeline/infrastructure/streaming/redis_stream_publisher.py

import json
import logging
from typing import Dict, Optional

import redis.asyncio as redis

from event_pipeline.application.stream_publisher import DisabledStreamPublisher, StreamPublisher
from event_pipeline.config.settings import AppSettings
from event_pipeline.domain.schemas.event import EventEnvelope

logger = logging.getLogger(__name__)


def stream_fields(envelope: EventEnvelope) -> Dict[str, str]:
    """Flat string fields for XADD. Payload is JSON; timestamp is unix ms."""
    return {
        "id": envelope.id,
        "type": envelope.type,
        "payload": json.dumps(envelope.payload, default=str),
        "timestamp": str(envelope.timestamp_ms()),
        "version": envelope.version,
        "correlationId": envelope.correlation_id or "",
    }


class RedisStreamPublisher:
    """Appends events to a Redis stream. Implements StreamPublisher; never raises from publish()."""

    enabled = True

    def __init__(
        self,
        client: "redis.Redis",
        stream_name: str,
        maxlen: Optional[int] = None,
    ) -> None:
        self._client = client
        self._stream_name = stream_name
        self._maxlen = maxlen

    async def publish(self, envelope: EventEnvelope) -> None:
        try:
            entry_id = await self._client.xadd(
                self._stream_name,
                stream_fields(envelope),
                maxlen=self._maxlen,
                approximate=True,
            )
        except Exception as e:
            logger.error(
                "stream_publish_failed",
                extra={"event_id": envelope.id, "stream": self._stream_name, "error": str(e)},
            )
            return
        logger.debug(
            "stream_published",
            extra={"event_id": envelope.id, "stream": self._stream_name, "entry_id": entry_id},
        )

    async def close(self) -> None:
        await self._client.aclose()


def build_stream_publisher(settings: AppSettings) -> StreamPublisher:
    """Pick the publisher at startup. No URL, or a URL the client rejects, means publishing is off."""
    if not settings.event_stream_url:
        logger.info("stream_publisher_disabled", extra={"reason": "event_stream_url not set"})
        return DisabledStreamPublisher("event_stream_url not set")
    try:
        client = redis.from_url(settings.event_stream_url, decode_responses=True)
    except ValueError as e:
        logger.warning("stream_publisher_disabled", extra={"reason": str(e)})
        return DisabledStreamPublisher(str(e))
    return RedisStreamPublisher(
        client,
        settings.event_stream_name,
        maxlen=settings.event_stream_maxlen,
    )
