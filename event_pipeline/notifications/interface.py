"""Notifier interface. Processors decide that a notification fires and with what payload; delivery is external."""

from dataclasses import dataclass, field
from typing import Any, Dict, Protocol


@dataclass(frozen=True)
class Notification:
    """Outbound notification request. `recipient_id` is a user or organization id."""

    recipient_id: str
    template: str
    data: Dict[str, Any] = field(default_factory=dict)
    event_id: str = ""


class Notifier(Protocol):
    """Protocol for handing a notification to the delivery system."""

    async def send(self, notification: Notification) -> None:
        ...
