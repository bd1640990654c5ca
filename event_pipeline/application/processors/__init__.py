"""The four fan-out processors. Order here is the order of results and ledger rows."""

from typing import List, Optional

from event_pipeline.application.processors.analytics import AnalyticsProcessor
from event_pipeline.application.processors.base import EventProcessor
from event_pipeline.application.processors.cache_invalidation import CacheInvalidationProcessor, StaleKeyHook
from event_pipeline.application.processors.notifications import NotificationsProcessor
from event_pipeline.application.processors.projections import ProjectionsProcessor
from event_pipeline.notifications.interface import Notifier


def build_default_processors(
    notifier: Notifier,
    on_stale: Optional[StaleKeyHook] = None,
) -> List[EventProcessor]:
    return [
        AnalyticsProcessor(),
        NotificationsProcessor(notifier),
        CacheInvalidationProcessor(on_stale),
        ProjectionsProcessor(),
    ]


__all__ = [
    "AnalyticsProcessor",
    "CacheInvalidationProcessor",
    "EventProcessor",
    "NotificationsProcessor",
    "ProjectionsProcessor",
    "build_default_processors",
]
