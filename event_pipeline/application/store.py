"""Canonical store protocol: the hosted relational store and its atomic counter procedures."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class CampaignRecord:
    """Read-only view of a canonical campaign row."""

    id: str
    title: str
    owner_user_id: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
    story_html: Optional[str] = None
    beneficiary_name: Optional[str] = None
    location: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    status: Optional[str] = None
    visibility: Optional[str] = None


@dataclass(frozen=True)
class CampaignSearchRow:
    """Denormalized searchable text for one campaign."""

    campaign_id: str
    title: str
    slug: Optional[str] = None
    summary: Optional[str] = None
    story_text: Optional[str] = None
    beneficiary_name: Optional[str] = None
    location: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    status: Optional[str] = None
    visibility: Optional[str] = None


@dataclass(frozen=True)
class RoleRecord:
    id: str
    name: str
    display_name: str
    hierarchy_level: int
    is_system_role: bool
    description: Optional[str] = None


class CanonicalStore(Protocol):
    """
    Access to canonical rows and projection tables.
    Counter mutations are single atomic store-side operations; callers never read-then-write counters.
    """

    async def increment_campaign_analytics(
        self,
        campaign_id: str,
        amount: Decimal,
        donor_id: Optional[str],
    ) -> bool:
        """
        Atomically add one donation of `amount` to the campaign's analytics. Returns success;
        a store that can name the cause raises StoreOperationError instead of returning False.
        """
        ...

    async def increment_donor_history(
        self,
        user_id: str,
        amount: Decimal,
        campaign_id: str,
    ) -> bool:
        """Atomically add one donation of `amount` to the donor's history. Returns success."""
        ...

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignRecord]:
        ...

    async def update_campaign_status(self, campaign_id: str, status: str) -> None:
        ...

    async def upsert_campaign_search_projection(self, row: CampaignSearchRow) -> None:
        ...

    async def invalidate_search_cache(self, terms: Sequence[str]) -> int:
        """Drop cached search results whose query matches any term. Returns rows removed."""
        ...

    async def assign_role(
        self,
        user_id: str,
        role_id: str,
        context_type: Optional[str],
        context_id: Optional[str],
        assigned_by: Optional[str] = None,
    ) -> None:
        """Insert the assignment, or reactivate it if it exists. Idempotent."""
        ...

    async def revoke_role(self, user_id: str, role_id: str) -> None:
        """Deactivate the assignment if present. Idempotent."""
        ...

    async def create_role(self, role: RoleRecord) -> None:
        """Insert the role unless it already exists. Idempotent."""
        ...

    async def update_role_permissions(
        self,
        role_id: str,
        added: Sequence[str],
        removed: Sequence[str],
    ) -> None:
        ...
