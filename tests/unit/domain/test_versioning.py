"""Tests for payload migrations between event versions."""

import pytest

from event_pipeline.domain.events.factory import rehydrate
from event_pipeline.domain.events.versioning import EventVersionRegistry
from event_pipeline.domain.exceptions import EventVersionError
from event_pipeline.domain.models.event import CURRENT_EVENT_VERSION, EventType


def _rename_donor(payload):
    data = dict(payload)
    data["userId"] = data.pop("donorId", None)
    return data


def _add_currency(payload):
    return {**payload, "currency": payload.get("currency", "USD")}


@pytest.fixture
def registry():
    r = EventVersionRegistry()
    r.register_migration(EventType.DONATION_COMPLETED, "0.8.0", "0.9.0", _rename_donor)
    r.register_migration(EventType.DONATION_COMPLETED.value, "0.9.0", CURRENT_EVENT_VERSION, _add_currency)
    return r


def test_migrates_along_shortest_chain(registry):
    migrated = registry.migrate_payload(
        "donation.completed",
        {"campaignId": "camp-1", "amount": 5, "donorId": "user-9"},
        "0.8.0",
        CURRENT_EVENT_VERSION,
    )
    assert migrated == {"campaignId": "camp-1", "amount": 5, "userId": "user-9", "currency": "USD"}


def test_same_version_passes_through(registry):
    payload = {"campaignId": "camp-1", "amount": 5}
    assert registry.migrate_payload("donation.completed", payload, "0.9.0", "0.9.0") is payload


def test_type_without_migrations_passes_through(registry):
    payload = {"userId": "user-1"}
    assert registry.migrate_payload("user.logged_in", payload, "0.1.0", CURRENT_EVENT_VERSION) is payload


def test_missing_path_raises(registry):
    with pytest.raises(EventVersionError) as exc_info:
        registry.migrate_payload("donation.completed", {}, "0.5.0", CURRENT_EVENT_VERSION)
    assert exc_info.value.fields == ["version"]


def test_rehydrate_migrates_older_payload_and_records_original_version(registry):
    event = rehydrate(
        event_id="evt-1",
        event_type="donation.completed",
        payload={"campaignId": "camp-1", "amount": 5, "donorId": "user-9"},
        version="0.8.0",
        versions=registry,
    )
    assert event.version == CURRENT_EVENT_VERSION
    assert event.payload.user_id == "user-9"
    assert event.payload.currency == "USD"
    assert event.metadata["originalVersion"] == "0.8.0"
    assert "migratedAt" in event.metadata
