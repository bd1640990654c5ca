"""Projections processor: idempotent upserts into read models and canonical status writes."""

import logging
import re
from typing import Optional, cast

from event_pipeline.application.processors.base import EventProcessor
from event_pipeline.application.store import CampaignRecord, CampaignSearchRow, CanonicalStore, RoleRecord
from event_pipeline.domain.models.event import DomainEvent, EventType
from event_pipeline.domain.schemas.payloads import (
    CampaignStatusChangedPayload,
    CampaignUpdatedPayload,
    RoleCreatedPayload,
    RolePermissionsUpdatedPayload,
    UserRoleAssignedPayload,
    UserRoleRevokedPayload,
)

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")


def strip_html(html: Optional[str]) -> Optional[str]:
    if html is None:
        return None
    return _TAG_RE.sub("", html)


def search_row_from_campaign(campaign: CampaignRecord) -> CampaignSearchRow:
    return CampaignSearchRow(
        campaign_id=campaign.id,
        title=campaign.title,
        slug=campaign.slug,
        summary=campaign.summary,
        story_text=strip_html(campaign.story_html),
        beneficiary_name=campaign.beneficiary_name,
        location=campaign.location,
        tags=list(campaign.tags),
        status=campaign.status,
        visibility=campaign.visibility,
    )


class ProjectionsProcessor(EventProcessor):
    """Donation counters live in AnalyticsProcessor; this processor handles campaign and role read models."""

    name = "projections"

    async def _campaign_status_changed(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(CampaignStatusChangedPayload, event.payload)
        await store.update_campaign_status(payload.campaign_id, payload.new_status)
        logger.info(
            "projection_campaign_status_updated",
            extra={
                "event_id": event.id,
                "campaign_id": payload.campaign_id,
                "previous_status": payload.previous_status,
                "new_status": payload.new_status,
                "reason": payload.reason or "N/A",
            },
        )

    async def _campaign_updated(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(CampaignUpdatedPayload, event.payload)
        campaign = await store.get_campaign(payload.campaign_id)
        if campaign is None:
            logger.warning(
                "projection_campaign_missing",
                extra={"event_id": event.id, "campaign_id": payload.campaign_id},
            )
            return

        await store.upsert_campaign_search_projection(search_row_from_campaign(campaign))

        terms = [term for term in (campaign.title, campaign.slug) if term]
        removed = await store.invalidate_search_cache(terms)
        logger.info(
            "projection_campaign_search_updated",
            extra={
                "event_id": event.id,
                "campaign_id": payload.campaign_id,
                "search_cache_rows_removed": removed,
            },
        )

    async def _role_assigned(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(UserRoleAssignedPayload, event.payload)
        await store.assign_role(
            payload.user_id,
            payload.role_id,
            payload.context_type,
            payload.context_id,
            assigned_by=payload.assigned_by,
        )
        logger.info(
            "projection_role_assigned",
            extra={"event_id": event.id, "user_id": payload.user_id, "role_id": payload.role_id},
        )

    async def _role_revoked(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(UserRoleRevokedPayload, event.payload)
        await store.revoke_role(payload.user_id, payload.role_id)
        logger.info(
            "projection_role_revoked",
            extra={"event_id": event.id, "user_id": payload.user_id, "role_id": payload.role_id},
        )

    async def _role_created(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(RoleCreatedPayload, event.payload)
        await store.create_role(
            RoleRecord(
                id=payload.role_id,
                name=payload.name,
                display_name=payload.display_name,
                description=payload.description,
                hierarchy_level=payload.hierarchy_level,
                is_system_role=payload.is_system_role,
            )
        )
        logger.info(
            "projection_role_created",
            extra={"event_id": event.id, "role_id": payload.role_id, "role_name": payload.name},
        )

    async def _role_permissions_updated(self, event: DomainEvent, store: CanonicalStore) -> None:
        payload = cast(RolePermissionsUpdatedPayload, event.payload)
        await store.update_role_permissions(
            payload.role_id,
            payload.added_permissions,
            payload.removed_permissions,
        )
        logger.info(
            "projection_role_permissions_updated",
            extra={
                "event_id": event.id,
                "role_id": payload.role_id,
                "added": len(payload.added_permissions),
                "removed": len(payload.removed_permissions),
            },
        )

    dispatch = {
        EventType.DONATION_COMPLETED: None,
        EventType.CAMPAIGN_CREATED: None,
        EventType.CAMPAIGN_UPDATED: _campaign_updated,
        EventType.CAMPAIGN_DELETED: None,
        EventType.CAMPAIGN_GOAL_REACHED: None,
        EventType.CAMPAIGN_STATUS_CHANGED: _campaign_status_changed,
        EventType.USER_REGISTERED: None,
        EventType.USER_LOGGED_IN: None,
        EventType.USER_PROFILE_UPDATED: None,
        EventType.ORGANIZATION_CREATED: None,
        EventType.ORGANIZATION_VERIFIED: None,
        EventType.ORGANIZATION_REJECTED: None,
        EventType.ORGANIZATION_UPDATED: None,
        EventType.ADMIN_USER_SUSPENDED: None,
        EventType.ADMIN_USER_UNSUSPENDED: None,
        EventType.ADMIN_USER_PROFILE_UPDATED: None,
        EventType.ADMIN_USER_DELETED: None,
        EventType.ADMIN_USER_ROLE_ASSIGNED: _role_assigned,
        EventType.ADMIN_USER_ROLE_REVOKED: _role_revoked,
        EventType.ADMIN_CAMPAIGN_APPROVED: None,
        EventType.ADMIN_CAMPAIGN_REJECTED: None,
        EventType.ADMIN_CAMPAIGN_PAUSED: None,
        EventType.ADMIN_CAMPAIGN_CLOSED: None,
        EventType.ADMIN_ROLE_CREATED: _role_created,
        EventType.ADMIN_ROLE_PERMISSIONS_UPDATED: _role_permissions_updated,
    }
