"""Outbound notification decisions and delivery seam."""

from event_pipeline.notifications.interface import Notification, Notifier
from event_pipeline.notifications.logging_notifier import LoggingNotifier

__all__ = [
    "LoggingNotifier",
    "Notification",
    "Notifier",
]
