"""Shared fixtures for unit tests: in-memory canonical store, ledger, dead-letter sink, notifier, publisher."""

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from unittest.mock import MagicMock

import pytest

from event_pipeline.application.ledger import DeadLetterRecord, ProcessorResult, StatusRecord
from event_pipeline.application.processing_service import EventProcessingService, drain_publishes
from event_pipeline.application.processors import build_default_processors
from event_pipeline.application.store import CampaignRecord, CampaignSearchRow, RoleRecord
from event_pipeline.application.stream_publisher import DisabledStreamPublisher
from event_pipeline.domain.models.event import ProcessingStatus
from event_pipeline.domain.schemas.event import EventEnvelope
from event_pipeline.notifications.interface import Notification


class FakeCanonicalStore:
    """In-memory canonical store. Each increment is one synchronous step, so it is atomic under asyncio."""

    def __init__(self) -> None:
        self.campaigns: Dict[str, CampaignRecord] = {}
        self.campaign_analytics: Dict[str, Dict[str, Any]] = {}
        self.donor_history: Dict[str, Dict[str, Any]] = {}
        self.search_rows: Dict[str, CampaignSearchRow] = {}
        self.search_cache: List[str] = []
        self.roles: Dict[str, RoleRecord] = {}
        self.role_permissions: Dict[str, set] = {}
        self.assignments: Dict[tuple, Dict[str, Any]] = {}
        self.fail_campaign_analytics = False
        self.fail_donor_history = False

    async def increment_campaign_analytics(self, campaign_id: str, amount: Decimal, donor_id: Optional[str]) -> bool:
        if self.fail_campaign_analytics:
            return False
        row = self.campaign_analytics.setdefault(
            campaign_id, {"total_donations": Decimal("0"), "donation_count": 0, "donors": set()}
        )
        row["total_donations"] += amount
        row["donation_count"] += 1
        row["average_donation"] = row["total_donations"] / row["donation_count"]
        if donor_id:
            row["donors"].add(donor_id)
        row["unique_donors"] = len(row["donors"])
        return True

    async def increment_donor_history(self, user_id: str, amount: Decimal, campaign_id: str) -> bool:
        if self.fail_donor_history:
            return False
        row = self.donor_history.setdefault(
            user_id, {"total_donated": Decimal("0"), "donation_count": 0, "campaigns": set()}
        )
        row["total_donated"] += amount
        row["donation_count"] += 1
        row["campaigns"].add(campaign_id)
        return True

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignRecord]:
        return self.campaigns.get(campaign_id)

    async def update_campaign_status(self, campaign_id: str, status: str) -> None:
        campaign = self.campaigns.get(campaign_id)
        if campaign is not None:
            self.campaigns[campaign_id] = replace(campaign, status=status)

    async def upsert_campaign_search_projection(self, row: CampaignSearchRow) -> None:
        self.search_rows[row.campaign_id] = row

    async def invalidate_search_cache(self, terms: Sequence[str]) -> int:
        lowered = [term.lower() for term in terms]
        kept = [q for q in self.search_cache if not any(term in q.lower() for term in lowered)]
        removed = len(self.search_cache) - len(kept)
        self.search_cache = kept
        return removed

    async def assign_role(self, user_id, role_id, context_type, context_id, assigned_by=None) -> None:
        key = (user_id, role_id)
        if key in self.assignments:
            self.assignments[key]["is_active"] = True
        else:
            self.assignments[key] = {
                "context_type": context_type,
                "context_id": context_id,
                "assigned_by": assigned_by,
                "is_active": True,
            }

    async def revoke_role(self, user_id: str, role_id: str) -> None:
        key = (user_id, role_id)
        if key in self.assignments:
            self.assignments[key]["is_active"] = False

    async def create_role(self, role: RoleRecord) -> None:
        self.roles.setdefault(role.id, role)

    async def update_role_permissions(self, role_id: str, added: Sequence[str], removed: Sequence[str]) -> None:
        perms = self.role_permissions.setdefault(role_id, set())
        perms.difference_update(removed)
        perms.update(added)


class FakeStatusLedger:
    """In-memory ledger keyed by (event_id, processor_name). `fail` makes every write raise."""

    def __init__(self) -> None:
        self.rows: Dict[tuple, StatusRecord] = {}
        self.fail = False

    async def record_outcome(self, event_id, processor_name, outcome, error=None) -> None:
        if self.fail:
            raise RuntimeError("ledger unavailable")
        self._write(event_id, processor_name, outcome, error)

    async def record_outcomes(self, event_id: str, results: Sequence[ProcessorResult]) -> None:
        if self.fail:
            raise RuntimeError("ledger unavailable")
        for result in results:
            self._write(event_id, result.processor, result.status, result.error)

    def _write(self, event_id, processor_name, outcome, error) -> None:
        key = (event_id, processor_name)
        previous = self.rows.get(key)
        now = datetime.now(timezone.utc)
        completed = outcome == ProcessingStatus.COMPLETED
        self.rows[key] = StatusRecord(
            event_id=event_id,
            processor_name=processor_name,
            status=outcome,
            error_message=None if completed else error,
            attempt_count=(previous.attempt_count if previous else 0) + 1,
            last_attempt_at=now,
            completed_at=now if completed else None,
        )

    async def get_statuses(self, event_id: str) -> List[StatusRecord]:
        return sorted(
            (row for (eid, _), row in self.rows.items() if eid == event_id),
            key=lambda row: row.processor_name,
        )

    def for_event(self, event_id: str) -> Dict[str, StatusRecord]:
        return {proc: row for (eid, proc), row in self.rows.items() if eid == event_id}


class FakeDeadLetterSink:
    def __init__(self) -> None:
        self.items: Dict[str, DeadLetterRecord] = {}

    async def record(self, envelope: EventEnvelope, processor_name: str, reason: str) -> None:
        dlq_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        self.items[dlq_id] = DeadLetterRecord(
            id=dlq_id,
            original_event_id=envelope.id,
            event_data=envelope.to_record(),
            processor_name=processor_name,
            failure_reason=reason,
            failure_count=1,
            first_failed_at=now,
            last_failed_at=now,
        )

    async def get(self, dlq_id: str) -> Optional[DeadLetterRecord]:
        return self.items.get(dlq_id)

    async def list(self, processor_name=None, limit=None, offset=0) -> List[DeadLetterRecord]:
        items = [i for i in reversed(list(self.items.values())) if not processor_name or i.processor_name == processor_name]
        items = items[offset:]
        return items[:limit] if limit is not None else items

    async def delete(self, dlq_id: str) -> bool:
        return self.items.pop(dlq_id, None) is not None

    async def mark_failed(self, dlq_id: str, reason: str) -> None:
        item = self.items.get(dlq_id)
        if item is not None:
            self.items[dlq_id] = replace(
                item,
                failure_count=item.failure_count + 1,
                failure_reason=reason,
                last_failed_at=datetime.now(timezone.utc),
            )


class RecordingNotifier:
    """Records sent notifications. `fail` makes every send raise."""

    def __init__(self) -> None:
        self.sent: List[Notification] = []
        self.fail = False

    async def send(self, notification: Notification) -> None:
        if self.fail:
            raise ConnectionError("notification provider unavailable")
        self.sent.append(notification)

    def templates(self) -> List[str]:
        return [n.template for n in self.sent]


class RecordingPublisher:
    """Enabled publisher that records envelopes. `gate` holds publishes until set."""

    enabled = True

    def __init__(self) -> None:
        self.published: List[EventEnvelope] = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    async def publish(self, envelope: EventEnvelope) -> None:
        if self.gate is not None:
            await self.gate.wait()
        self.published.append(envelope)

    async def close(self) -> None:
        self.closed = True


def wire_event(event_type: str, payload: Any, **overrides: Any) -> Dict[str, Any]:
    data = {
        "id": str(uuid.uuid4()),
        "type": event_type,
        "payload": payload,
        "timestamp": int(datetime.now(timezone.utc).timestamp() * 1000),
        "version": "1.0.0",
        "correlationId": "corr-test",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_event():
    """Build a wire-form event dict: make_event(type, payload, **overrides)."""
    return wire_event


@pytest.fixture
def store():
    s = FakeCanonicalStore()
    s.campaigns["camp-1"] = CampaignRecord(
        id="camp-1",
        title="Clean Water for Kisumu",
        owner_user_id="owner-1",
        slug="clean-water-kisumu",
        summary="Wells for three villages",
        story_html="<p>We are <b>building</b> wells.</p>",
        beneficiary_name="Kisumu Water Trust",
        location="Kisumu, Kenya",
        tags=["water", "health"],
        status="active",
        visibility="public",
    )
    return s


@pytest.fixture
def ledger():
    return FakeStatusLedger()


@pytest.fixture
def dead_letters():
    return FakeDeadLetterSink()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def publisher():
    return DisabledStreamPublisher()


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def recording_publisher():
    return RecordingPublisher()


@pytest.fixture
async def build_service(store, ledger, dead_letters, publisher, notifier, logger):
    """Factory for EventProcessingService over the in-memory fakes. Drains stream appends on teardown."""

    def _build(publisher_override=None, processors=None) -> EventProcessingService:
        return EventProcessingService(
            store=store,
            ledger=ledger,
            dead_letters=dead_letters,
            publisher=publisher_override or publisher,
            processors=processors if processors is not None else build_default_processors(notifier),
            logger=logger,
        )

    yield _build
    await drain_publishes()


@pytest.fixture
def processing_service(build_service):
    return build_service()
