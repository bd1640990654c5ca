# event_pipeline/infrastructure/database/models.py

import uuid

from sqlalchemy import (
    ARRAY,
    Boolean,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func

from event_pipeline.infrastructure.database.session import Base


# ---------------------------------------------------------------------------
# Pipeline bookkeeping
# ---------------------------------------------------------------------------

class EventProcessingStatus(Base):
    """Status ledger: one row per (event_id, processor_name), upserted."""

    __tablename__ = "event_processing_status"
    __table_args__ = (UniqueConstraint("event_id", "processor_name"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(String, nullable=False, index=True)
    processor_name = Column(String, nullable=False)
    status = Column(String, nullable=False)
    attempt_count = Column(Integer, nullable=False, default=0)
    last_attempt_at = Column(DateTime(timezone=True))
    error_message = Column(Text)
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class EventDeadLetter(Base):
    """Dead-letter sink: the original event verbatim plus the failure reason."""

    __tablename__ = "event_dead_letter_queue"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    original_event_id = Column(String, nullable=False, index=True)
    event_data = Column(JSONB, nullable=False)
    processor_name = Column(String, nullable=False)
    failure_reason = Column(Text, nullable=False)
    failure_count = Column(Integer, nullable=False, default=1)
    first_failed_at = Column(DateTime(timezone=True), server_default=func.now())
    last_failed_at = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# ---------------------------------------------------------------------------
# Canonical rows (owned by the hosted store; read here, status written)
# ---------------------------------------------------------------------------

class Fundraiser(Base):
    __tablename__ = "fundraisers"

    id = Column(String, primary_key=True)
    owner_user_id = Column(String)
    title = Column(Text, nullable=False)
    slug = Column(Text)
    summary = Column(Text)
    story_html = Column(Text)
    beneficiary_name = Column(Text)
    location = Column(Text)
    tags = Column(ARRAY(Text))
    status = Column(String)
    visibility = Column(String)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

class CampaignAnalyticsProjection(Base):
    """Written only by the update_campaign_analytics_safe procedure."""

    __tablename__ = "campaign_analytics_projection"

    campaign_id = Column(String, primary_key=True)
    total_donations = Column(Numeric, default=0)
    donation_count = Column(Integer, default=0)
    unique_donors = Column(Integer, default=0)
    last_donation_at = Column(DateTime(timezone=True))
    first_donation_at = Column(DateTime(timezone=True))
    average_donation = Column(Numeric, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())


class DonorHistoryProjection(Base):
    """Written only by the update_donor_history_safe procedure."""

    __tablename__ = "donor_history_projection"

    user_id = Column(String, primary_key=True)
    total_donated = Column(Numeric, default=0)
    donation_count = Column(Integer, default=0)
    campaigns_supported = Column(Integer, default=0)
    last_donation_at = Column(DateTime(timezone=True))
    first_donation_at = Column(DateTime(timezone=True))
    average_donation = Column(Numeric, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())


class CampaignSearchProjection(Base):
    __tablename__ = "campaign_search_projection"

    campaign_id = Column(String, primary_key=True)
    title = Column(Text, nullable=False)
    slug = Column(Text)
    summary = Column(Text)
    story_text = Column(Text)
    beneficiary_name = Column(Text)
    location = Column(Text)
    tags = Column(ARRAY(Text))
    status = Column(String)
    visibility = Column(String)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SearchResultsCache(Base):
    __tablename__ = "search_results_cache"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    query = Column(Text, nullable=False)
    results = Column(JSONB)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Role(Base):
    __tablename__ = "roles"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    display_name = Column(String, nullable=False)
    description = Column(Text)
    hierarchy_level = Column(Integer, nullable=False)
    is_system_role = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class RolePermission(Base):
    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    role_id = Column(String, nullable=False, index=True)
    permission_id = Column(String, nullable=False)


class UserRoleAssignment(Base):
    __tablename__ = "user_role_assignments"
    __table_args__ = (UniqueConstraint("user_id", "role_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String, nullable=False, index=True)
    role_id = Column(String, nullable=False)
    context_type = Column(String)
    context_id = Column(String)
    assigned_by = Column(String)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
