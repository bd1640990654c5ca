"""Analytics processor: atomic donation counters plus log-only tracking hooks."""

import logging
from typing import cast

from event_pipeline.application.exceptions import ProcessorError
from event_pipeline.application.processors.base import EventProcessor
from event_pipeline.application.store import CanonicalStore
from event_pipeline.domain.models.event import DomainEvent, EventType
from event_pipeline.domain.schemas.payloads import DonationCompletedPayload

logger = logging.getLogger(__name__)


class AnalyticsProcessor(EventProcessor):
    """
    donation.completed increments campaign analytics, then donor history when the donor is known.
    Both increments are single atomic store procedures; nothing is read back here.
    """

    name = "analytics"

    async def _donation_completed(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(DonationCompletedPayload, event.payload)

        updated = await store.increment_campaign_analytics(
            payload.campaign_id,
            payload.amount,
            payload.user_id,
        )
        if not updated:
            raise ProcessorError(
                self.name,
                f"Failed to update campaign analytics for campaign {payload.campaign_id}",
            )

        if payload.user_id:
            updated = await store.increment_donor_history(
                payload.user_id,
                payload.amount,
                payload.campaign_id,
            )
            if not updated:
                raise ProcessorError(
                    self.name,
                    f"Failed to update donor history for user {payload.user_id}",
                )

        logger.info(
            "analytics_donation_recorded",
            extra={
                "event_id": event.id,
                "campaign_id": payload.campaign_id,
                "donor_id": payload.user_id,
                "amount": str(payload.amount),
            },
        )

    async def _track(self, event: DomainEvent, category: str) -> None:
        logger.info(
            "analytics_event_tracked",
            extra={
                "event_id": event.id,
                "event_type": event.type.value,
                "category": category,
                "payload": event.payload.model_dump(mode="json", by_alias=True),
            },
        )

    async def _track_campaign(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._track(event, "campaign")

    async def _track_user(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._track(event, "user")

    async def _track_organization(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._track(event, "organization")

    async def _track_admin_action(self, event: DomainEvent, store: CanonicalStore) -> None:
        # Compliance trail for admin operations.
        await self._track(event, "admin")

    async def _track_role(self, event: DomainEvent, store: CanonicalStore) -> None:
        await self._track(event, "role")

    dispatch = {
        EventType.DONATION_COMPLETED: _donation_completed,
        EventType.CAMPAIGN_CREATED: _track_campaign,
        EventType.CAMPAIGN_UPDATED: _track_campaign,
        EventType.CAMPAIGN_DELETED: _track_campaign,
        EventType.CAMPAIGN_GOAL_REACHED: _track_campaign,
        EventType.CAMPAIGN_STATUS_CHANGED: _track_campaign,
        EventType.USER_REGISTERED: _track_user,
        EventType.USER_LOGGED_IN: _track_user,
        EventType.USER_PROFILE_UPDATED: _track_user,
        EventType.ORGANIZATION_CREATED: _track_organization,
        EventType.ORGANIZATION_VERIFIED: _track_organization,
        EventType.ORGANIZATION_REJECTED: _track_organization,
        EventType.ORGANIZATION_UPDATED: _track_organization,
        EventType.ADMIN_USER_SUSPENDED: _track_admin_action,
        EventType.ADMIN_USER_UNSUSPENDED: _track_admin_action,
        EventType.ADMIN_USER_PROFILE_UPDATED: _track_admin_action,
        EventType.ADMIN_USER_DELETED: _track_admin_action,
        EventType.ADMIN_CAMPAIGN_APPROVED: _track_admin_action,
        EventType.ADMIN_CAMPAIGN_REJECTED: _track_admin_action,
        EventType.ADMIN_CAMPAIGN_PAUSED: _track_admin_action,
        EventType.ADMIN_CAMPAIGN_CLOSED: _track_admin_action,
        EventType.ADMIN_USER_ROLE_ASSIGNED: _track_role,
        EventType.ADMIN_USER_ROLE_REVOKED: _track_role,
        EventType.ADMIN_ROLE_CREATED: _track_role,
        EventType.ADMIN_ROLE_PERMISSIONS_UPDATED: _track_role,
    }
