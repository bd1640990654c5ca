"""
Processor base. Each processor owns an explicit dispatch table over the closed EventType catalogue.
Every member must be mapped, to a handler or to None (ignored); a missing entry fails at import.
"""

import logging
from typing import Any, Awaitable, Callable, ClassVar, Dict, Optional

from event_pipeline.application.store import CanonicalStore
from event_pipeline.domain.models.event import DomainEvent, EventType

logger = logging.getLogger(__name__)

Handler = Callable[[Any, DomainEvent, CanonicalStore], Awaitable[None]]


class EventProcessor:
    """Base for the fan-out processors. Subclasses set `name` and `dispatch`."""

    name: ClassVar[str] = ""
    dispatch: ClassVar[Dict[EventType, Optional[Handler]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.name:
            raise TypeError(f"{cls.__name__} must define a processor name")
        missing = [event_type.value for event_type in EventType if event_type not in cls.dispatch]
        if missing:
            raise TypeError(f"{cls.__name__} has no dispatch entry for: {', '.join(missing)}")

    def handles(self, event_type: EventType) -> bool:
        return self.dispatch.get(event_type) is not None

    async def process(self, event: DomainEvent, store: CanonicalStore) -> None:
        """Run the handler for event.type. Exceptions propagate to the fan-out engine."""
        handler = self.dispatch[event.type]
        if handler is None:
            logger.debug(
                "processor_no_handler",
                extra={"processor": self.name, "event_id": event.id, "event_type": event.type.value},
            )
            return
        await handler(self, event, store)
