"""Notifications processor: decides which notifications fire and with what data. Delivery is the Notifier's job."""

import logging
from typing import Any, Dict, Optional, cast

from event_pipeline.application.processors.base import EventProcessor
from event_pipeline.application.store import CampaignRecord, CanonicalStore
from event_pipeline.domain.models.event import DomainEvent, EventType
from event_pipeline.domain.schemas.payloads import (
    CampaignApprovedPayload,
    CampaignGoalReachedPayload,
    CampaignRejectedPayload,
    CampaignUpdatedPayload,
    DonationCompletedPayload,
    OrganizationRejectedPayload,
    OrganizationVerifiedPayload,
    UserRoleAssignedPayload,
    UserSuspendedPayload,
    UserUnsuspendedPayload,
)
from event_pipeline.notifications.interface import Notification, Notifier

logger = logging.getLogger(__name__)


class NotificationsProcessor(EventProcessor):
    name = "notifications"

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier

    async def _notify(
        self,
        event: DomainEvent,
        recipient_id: str,
        template: str,
        data: Dict[str, Any],
    ) -> None:
        await self._notifier.send(
            Notification(
                recipient_id=recipient_id,
                template=template,
                data=data,
                event_id=event.id,
            )
        )

    async def _owned_campaign(
        self, store: CanonicalStore, campaign_id: str, event: DomainEvent
    ) -> Optional[CampaignRecord]:
        """The campaign when it exists and has an owner to notify; otherwise None, logged."""
        campaign = await store.get_campaign(campaign_id)
        if campaign is None or not campaign.owner_user_id:
            logger.info(
                "notification_skipped_no_owner",
                extra={"event_id": event.id, "campaign_id": campaign_id},
            )
            return None
        return campaign

    async def _campaign_owner(self, store: CanonicalStore, campaign_id: str, event: DomainEvent) -> Optional[str]:
        campaign = await self._owned_campaign(store, campaign_id, event)
        return campaign.owner_user_id if campaign is not None else None

    async def _donation_completed(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(DonationCompletedPayload, event.payload)
        campaign = await self._owned_campaign(store, payload.campaign_id, event)
        if campaign is None:
            return
        await self._notify(
            event,
            campaign.owner_user_id,
            "donation_received",
            {
                "campaignId": payload.campaign_id,
                "campaignTitle": campaign.title,
                "amount": str(payload.amount),
                "currency": payload.currency,
                "donorId": payload.user_id,
            },
        )

    async def _goal_reached(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(CampaignGoalReachedPayload, event.payload)
        owner_id = await self._campaign_owner(store, payload.campaign_id, event)
        if owner_id is None:
            return
        await self._notify(
            event,
            owner_id,
            "campaign_goal_reached",
            {
                "campaignId": payload.campaign_id,
                "goalAmount": str(payload.goal_amount),
                "totalRaised": str(payload.total_raised),
                "donorCount": payload.donor_count,
            },
        )

    async def _campaign_edited(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(CampaignUpdatedPayload, event.payload)
        owner_id = (payload.previous_values or {}).get("ownerId")
        # Only edits by someone other than the owner are announced.
        if not owner_id or owner_id == payload.user_id:
            return
        await self._notify(
            event,
            owner_id,
            "campaign_edited_by_admin",
            {
                "campaignId": payload.campaign_id,
                "editedBy": payload.user_id,
                "changedFields": sorted(payload.changes),
            },
        )

    async def _user_suspended(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(UserSuspendedPayload, event.payload)
        await self._notify(
            event,
            payload.user_id,
            "account_suspended",
            {
                "reason": payload.reason,
                "durationDays": payload.duration,
                "suspendedUntil": payload.suspended_until,
            },
        )

    async def _user_unsuspended(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(UserUnsuspendedPayload, event.payload)
        await self._notify(event, payload.user_id, "account_unsuspended", {})

    async def _campaign_approved(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(CampaignApprovedPayload, event.payload)
        owner_id = await self._campaign_owner(store, payload.campaign_id, event)
        if owner_id is None:
            return
        await self._notify(event, owner_id, "campaign_approved", {"campaignId": payload.campaign_id})

    async def _campaign_rejected(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(CampaignRejectedPayload, event.payload)
        owner_id = await self._campaign_owner(store, payload.campaign_id, event)
        if owner_id is None:
            return
        await self._notify(
            event,
            owner_id,
            "campaign_rejected",
            {"campaignId": payload.campaign_id, "reason": payload.reason},
        )

    async def _organization_verified(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(OrganizationVerifiedPayload, event.payload)
        await self._notify(
            event,
            payload.organization_id,
            "organization_verified",
            {"verifiedAt": payload.verified_at},
        )

    async def _organization_rejected(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(OrganizationRejectedPayload, event.payload)
        await self._notify(
            event,
            payload.organization_id,
            "organization_rejected",
            {"reason": payload.reason},
        )

    async def _role_assigned(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(UserRoleAssignedPayload, event.payload)
        await self._notify(
            event,
            payload.user_id,
            "role_assigned",
            {
                "roleId": payload.role_id,
                "roleName": payload.role_name,
                "assignedBy": payload.assigned_by,
            },
        )

    dispatch = {
        EventType.DONATION_COMPLETED: _donation_completed,
        EventType.CAMPAIGN_CREATED: None,
        EventType.CAMPAIGN_UPDATED: _campaign_edited,
        EventType.CAMPAIGN_DELETED: None,
        EventType.CAMPAIGN_GOAL_REACHED: _goal_reached,
        EventType.CAMPAIGN_STATUS_CHANGED: None,
        EventType.USER_REGISTERED: None,
        EventType.USER_LOGGED_IN: None,
        EventType.USER_PROFILE_UPDATED: None,
        EventType.ORGANIZATION_CREATED: None,
        EventType.ORGANIZATION_VERIFIED: _organization_verified,
        EventType.ORGANIZATION_REJECTED: _organization_rejected,
        EventType.ORGANIZATION_UPDATED: None,
        EventType.ADMIN_USER_SUSPENDED: _user_suspended,
        EventType.ADMIN_USER_UNSUSPENDED: _user_unsuspended,
        EventType.ADMIN_USER_PROFILE_UPDATED: None,
        EventType.ADMIN_USER_DELETED: None,
        EventType.ADMIN_USER_ROLE_ASSIGNED: _role_assigned,
        EventType.ADMIN_USER_ROLE_REVOKED: None,
        EventType.ADMIN_CAMPAIGN_APPROVED: _campaign_approved,
        EventType.ADMIN_CAMPAIGN_REJECTED: _campaign_rejected,
        EventType.ADMIN_CAMPAIGN_PAUSED: None,
        EventType.ADMIN_CAMPAIGN_CLOSED: None,
        EventType.ADMIN_ROLE_CREATED: None,
        EventType.ADMIN_ROLE_PERMISSIONS_UPDATED: None,
    }
