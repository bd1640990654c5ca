"""Cache-invalidation processor: works out which cache keys an event made stale and marks them."""

import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from event_pipeline.application.processors.base import EventProcessor
from event_pipeline.application.store import CanonicalStore
from event_pipeline.domain.models.event import DomainEvent, EventType

logger = logging.getLogger(__name__)

StaleKeyHook = Callable[[Sequence[str]], Awaitable[None]]

RBAC_ALL = "rbac:all"


def campaign_key(campaign_id: str) -> str:
    return f"campaign:{campaign_id}"


def campaign_stats_key(campaign_id: str) -> str:
    return f"campaign:{campaign_id}:stats"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def organization_key(organization_id: str) -> str:
    return f"organization:{organization_id}"


def rbac_key(user_id: Optional[str]) -> str:
    return f"rbac:{user_id}" if user_id else RBAC_ALL


class CacheInvalidationProcessor(EventProcessor):
    """
    Marks keys stale by logging them and, when configured, passing them to `on_stale`.
    Eviction itself belongs to the external cache store.
    """

    name = "cache"

    def __init__(self, on_stale: Optional[StaleKeyHook] = None) -> None:
        self._on_stale = on_stale

    async def _mark_stale(self, event: DomainEvent, keys: List[str]) -> None:
        logger.info(
            "cache_marked_stale",
            extra={"event_id": event.id, "event_type": event.type.value, "keys": keys},
        )
        if self._on_stale is not None:
            await self._on_stale(keys)

    async def _campaign(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._mark_stale(event, [campaign_key(event.payload.campaign_id)])

    async def _campaign_stats(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._mark_stale(event, [campaign_stats_key(event.payload.campaign_id)])

    async def _user(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._mark_stale(event, [user_key(event.payload.user_id)])

    async def _organization(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._mark_stale(event, [organization_key(event.payload.organization_id)])

    async def _rbac(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._mark_stale(event, [rbac_key(getattr(event.payload, "user_id", None))])

    dispatch = {
        EventType.DONATION_COMPLETED: _campaign_stats,
        EventType.CAMPAIGN_CREATED: _campaign,
        EventType.CAMPAIGN_UPDATED: _campaign,
        EventType.CAMPAIGN_DELETED: _campaign,
        EventType.CAMPAIGN_GOAL_REACHED: None,
        EventType.CAMPAIGN_STATUS_CHANGED: None,
        EventType.USER_REGISTERED: None,
        EventType.USER_LOGGED_IN: None,
        EventType.USER_PROFILE_UPDATED: _user,
        EventType.ORGANIZATION_CREATED: None,
        EventType.ORGANIZATION_VERIFIED: _organization,
        EventType.ORGANIZATION_REJECTED: _organization,
        EventType.ORGANIZATION_UPDATED: _organization,
        EventType.ADMIN_USER_SUSPENDED: _user,
        EventType.ADMIN_USER_UNSUSPENDED: _user,
        EventType.ADMIN_USER_PROFILE_UPDATED: _user,
        EventType.ADMIN_USER_DELETED: None,
        EventType.ADMIN_USER_ROLE_ASSIGNED: _rbac,
        EventType.ADMIN_USER_ROLE_REVOKED: _rbac,
        EventType.ADMIN_CAMPAIGN_APPROVED: _campaign,
        EventType.ADMIN_CAMPAIGN_REJECTED: _campaign,
        EventType.ADMIN_CAMPAIGN_PAUSED: _campaign,
        EventType.ADMIN_CAMPAIGN_CLOSED: _campaign,
        EventType.ADMIN_ROLE_CREATED: None,
        EventType.ADMIN_ROLE_PERMISSIONS_UPDATED: _rbac,
    }
