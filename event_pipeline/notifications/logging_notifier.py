"""Logging notifier: logs only. Used when no delivery integration is wired."""

import logging

from event_pipeline.notifications.interface import Notification

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Placeholder Notifier that records the decision in the log."""

    async def send(self, notification: Notification) -> None:
        logger.info(
            "notification_requested",
            extra={
                "event_id": notification.event_id,
                "recipient_id": notification.recipient_id,
                "template": notification.template,
                "data": notification.data,
            },
        )
