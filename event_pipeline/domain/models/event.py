"""Domain model for events. Pure business semantics. No ORM or infrastructure."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel

CURRENT_EVENT_VERSION = "1.0.0"


class EventType(str, Enum):
    """Closed catalogue of event types. Every processor must map every member."""

    DONATION_COMPLETED = "donation.completed"

    CAMPAIGN_CREATED = "campaign.created"
    CAMPAIGN_UPDATED = "campaign.updated"
    CAMPAIGN_DELETED = "campaign.deleted"
    CAMPAIGN_GOAL_REACHED = "campaign.goal_reached"
    CAMPAIGN_STATUS_CHANGED = "campaign.status_changed"

    USER_REGISTERED = "user.registered"
    USER_LOGGED_IN = "user.logged_in"
    USER_PROFILE_UPDATED = "user.profile_updated"

    ORGANIZATION_CREATED = "organization.created"
    ORGANIZATION_VERIFIED = "organization.verified"
    ORGANIZATION_REJECTED = "organization.rejected"
    ORGANIZATION_UPDATED = "organization.updated"

    ADMIN_USER_SUSPENDED = "admin.user.suspended"
    ADMIN_USER_UNSUSPENDED = "admin.user.unsuspended"
    ADMIN_USER_PROFILE_UPDATED = "admin.user.profile_updated"
    ADMIN_USER_DELETED = "admin.user.deleted"
    ADMIN_USER_ROLE_ASSIGNED = "admin.user.role_assigned"
    ADMIN_USER_ROLE_REVOKED = "admin.user.role_revoked"

    ADMIN_CAMPAIGN_APPROVED = "admin.campaign.approved"
    ADMIN_CAMPAIGN_REJECTED = "admin.campaign.rejected"
    ADMIN_CAMPAIGN_PAUSED = "admin.campaign.paused"
    ADMIN_CAMPAIGN_CLOSED = "admin.campaign.closed"

    ADMIN_ROLE_CREATED = "admin.role.created"
    ADMIN_ROLE_PERMISSIONS_UPDATED = "admin.role.permissions_updated"


class ProcessingStatus(str, Enum):
    """Per-(event, processor) outcome. PENDING is implicit: no ledger row yet."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class DomainEvent:
    """
    Immutable record of something that happened. Built only through the factories in
    event_pipeline.domain.events.factory, so `payload` always matches the schema of `type`.
    """

    id: str
    type: EventType
    payload: BaseModel
    timestamp: datetime
    version: str = CURRENT_EVENT_VERSION
    correlation_id: Optional[str] = None
    causation_id: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view; the dataclass itself is frozen.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata or {})))

    def to_wire(self) -> dict:
        """JSON-compatible wire form (camelCase), as accepted at ingress."""
        return {
            "id": self.id,
            "type": self.type.value,
            "payload": self.payload.model_dump(mode="json", by_alias=True, exclude_none=True),
            "timestamp": int(self.timestamp.timestamp() * 1000),
            "version": self.version,
            "correlationId": self.correlation_id,
            "causationId": self.causation_id,
            "metadata": dict(self.metadata) or None,
        }
