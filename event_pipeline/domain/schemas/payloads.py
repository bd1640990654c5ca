"""Pydantic payload schemas, one per event type. Wire names are camelCase; attributes are snake_case."""

from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from event_pipeline.domain.models.event import EventType

Identifier = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Money = Annotated[Decimal, Field(gt=0)]
CampaignStatus = Literal["draft", "active", "paused", "completed", "cancelled"]


class EventPayload(BaseModel):
    """Base for all payloads: immutable, camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Donations
# ---------------------------------------------------------------------------

class DonationCompletedPayload(EventPayload):
    campaign_id: Identifier
    amount: Money
    user_id: Optional[Identifier] = Field(None, description="Absent for anonymous donations")
    donation_id: Optional[Identifier] = None
    currency: Optional[str] = None


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------

class CampaignCreatedPayload(EventPayload):
    campaign_id: Identifier
    user_id: Identifier
    title: str
    description: str
    goal_amount: Money
    category_id: Identifier
    visibility: Literal["public", "private"]
    end_date: Optional[str] = None


class CampaignUpdatedPayload(EventPayload):
    campaign_id: Identifier
    user_id: Identifier
    changes: Dict[str, Any]
    previous_values: Optional[Dict[str, Any]] = None


class CampaignDeletedPayload(EventPayload):
    campaign_id: Identifier
    user_id: Identifier
    reason: Optional[str] = None


class CampaignGoalReachedPayload(EventPayload):
    campaign_id: Identifier
    goal_amount: Decimal
    total_raised: Decimal
    donor_count: int = Field(..., ge=0)


class CampaignStatusChangedPayload(EventPayload):
    campaign_id: Identifier
    previous_status: CampaignStatus
    new_status: CampaignStatus
    reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserRegisteredPayload(EventPayload):
    user_id: Identifier
    email: Optional[str] = None
    display_name: Optional[str] = None


class UserLoggedInPayload(EventPayload):
    user_id: Identifier


class UserProfileUpdatedPayload(EventPayload):
    user_id: Identifier
    changes: Dict[str, Any]


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

class OrganizationCreatedPayload(EventPayload):
    organization_id: Identifier
    legal_name: str
    created_by: Identifier
    verification_status: Literal["pending", "verified", "rejected"]


class OrganizationVerifiedPayload(EventPayload):
    organization_id: Identifier
    verified_by: Identifier
    verified_at: int = Field(..., description="Unix timestamp (ms)")


class OrganizationRejectedPayload(EventPayload):
    organization_id: Identifier
    rejected_by: Identifier
    reason: str


class OrganizationUpdatedPayload(EventPayload):
    organization_id: Identifier
    updated_by: Identifier
    changes: Dict[str, Any]


# ---------------------------------------------------------------------------
# Admin actions
# ---------------------------------------------------------------------------

class UserSuspendedPayload(EventPayload):
    user_id: Identifier
    suspended_by: Identifier
    reason: str
    duration: int = Field(..., ge=0, description="Suspension length in days")
    suspended_until: str


class UserUnsuspendedPayload(EventPayload):
    user_id: Identifier
    unsuspended_by: Identifier


class AdminUserProfileUpdatedPayload(EventPayload):
    user_id: Identifier
    updated_by: Identifier
    changes: Dict[str, Any]


class UserDeletedPayload(EventPayload):
    user_id: Identifier
    deleted_by: Identifier
    reason: Optional[str] = None


class UserRoleAssignedPayload(EventPayload):
    user_id: Identifier
    role_id: Identifier
    role_name: str
    assigned_by: Identifier
    context_type: Optional[str] = None
    context_id: Optional[Identifier] = None


class UserRoleRevokedPayload(EventPayload):
    user_id: Identifier
    role_id: Identifier
    role_name: str
    revoked_by: Identifier


class CampaignApprovedPayload(EventPayload):
    campaign_id: Identifier
    approved_by: Identifier


class CampaignRejectedPayload(EventPayload):
    campaign_id: Identifier
    rejected_by: Identifier
    reason: str


class CampaignPausedPayload(EventPayload):
    campaign_id: Identifier
    paused_by: Identifier
    reason: Optional[str] = None


class CampaignClosedPayload(EventPayload):
    campaign_id: Identifier
    closed_by: Identifier
    reason: Optional[str] = None


class RoleCreatedPayload(EventPayload):
    role_id: Identifier
    name: str
    display_name: str
    description: Optional[str] = None
    hierarchy_level: int
    is_system_role: bool
    created_by: Identifier


class RolePermissionsUpdatedPayload(EventPayload):
    role_id: Identifier
    role_name: str
    added_permissions: List[str] = Field(default_factory=list)
    removed_permissions: List[str] = Field(default_factory=list)
    updated_by: Identifier


PAYLOAD_SCHEMAS: Dict[EventType, Type[EventPayload]] = {
    EventType.DONATION_COMPLETED: DonationCompletedPayload,
    EventType.CAMPAIGN_CREATED: CampaignCreatedPayload,
    EventType.CAMPAIGN_UPDATED: CampaignUpdatedPayload,
    EventType.CAMPAIGN_DELETED: CampaignDeletedPayload,
    EventType.CAMPAIGN_GOAL_REACHED: CampaignGoalReachedPayload,
    EventType.CAMPAIGN_STATUS_CHANGED: CampaignStatusChangedPayload,
    EventType.USER_REGISTERED: UserRegisteredPayload,
    EventType.USER_LOGGED_IN: UserLoggedInPayload,
    EventType.USER_PROFILE_UPDATED: UserProfileUpdatedPayload,
    EventType.ORGANIZATION_CREATED: OrganizationCreatedPayload,
    EventType.ORGANIZATION_VERIFIED: OrganizationVerifiedPayload,
    EventType.ORGANIZATION_REJECTED: OrganizationRejectedPayload,
    EventType.ORGANIZATION_UPDATED: OrganizationUpdatedPayload,
    EventType.ADMIN_USER_SUSPENDED: UserSuspendedPayload,
    EventType.ADMIN_USER_UNSUSPENDED: UserUnsuspendedPayload,
    EventType.ADMIN_USER_PROFILE_UPDATED: AdminUserProfileUpdatedPayload,
    EventType.ADMIN_USER_DELETED: UserDeletedPayload,
    EventType.ADMIN_USER_ROLE_ASSIGNED: UserRoleAssignedPayload,
    EventType.ADMIN_USER_ROLE_REVOKED: UserRoleRevokedPayload,
    EventType.ADMIN_CAMPAIGN_APPROVED: CampaignApprovedPayload,
    EventType.ADMIN_CAMPAIGN_REJECTED: CampaignRejectedPayload,
    EventType.ADMIN_CAMPAIGN_PAUSED: CampaignPausedPayload,
    EventType.ADMIN_CAMPAIGN_CLOSED: CampaignClosedPayload,
    EventType.ADMIN_ROLE_CREATED: RoleCreatedPayload,
    EventType.ADMIN_ROLE_PERMISSIONS_UPDATED: RolePermissionsUpdatedPayload,
}
