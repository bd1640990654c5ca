"""Tests for event construction: factories, payload validation, immutability, wire form."""

import dataclasses
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from event_pipeline.domain.events import factory
from event_pipeline.domain.events.factory import (
    coerce_timestamp,
    create_admin_user_role_assigned_event,
    create_donation_completed_event,
    create_event,
    parse_event_type,
    rehydrate,
)
from event_pipeline.domain.exceptions import SchemaValidationError, UnknownEventTypeError
from event_pipeline.domain.models.event import CURRENT_EVENT_VERSION, EventType
from event_pipeline.domain.schemas.payloads import PAYLOAD_SCHEMAS, DonationCompletedPayload


def test_every_event_type_has_a_payload_schema_and_factory():
    """The catalogue, the schema table and the factory functions cover the same types."""
    assert set(PAYLOAD_SCHEMAS) == set(EventType)
    for event_type in EventType:
        assert callable(getattr(factory, f"create_{event_type.name.lower()}_event"))


def test_create_donation_event_assigns_id_timestamp_and_version():
    event = create_donation_completed_event(
        {"campaignId": "camp-1", "amount": 25, "userId": "user-1"},
        correlation_id="corr-1",
    )
    assert event.type == EventType.DONATION_COMPLETED
    assert event.id
    assert event.timestamp.tzinfo is not None
    assert event.version == CURRENT_EVENT_VERSION
    assert event.correlation_id == "corr-1"
    assert isinstance(event.payload, DonationCompletedPayload)
    assert event.payload.amount == Decimal("25")
    assert event.payload.user_id == "user-1"


def test_each_created_event_gets_a_distinct_id():
    a = create_donation_completed_event({"campaignId": "camp-1", "amount": 5})
    b = create_donation_completed_event({"campaignId": "camp-1", "amount": 5})
    assert a.id != b.id


def test_missing_required_field_names_the_field():
    with pytest.raises(SchemaValidationError) as exc_info:
        create_donation_completed_event({"campaignId": "camp-1"})
    assert exc_info.value.fields == ["amount"]
    assert "amount" in exc_info.value.message


def test_non_positive_amount_is_rejected():
    with pytest.raises(SchemaValidationError) as exc_info:
        create_donation_completed_event({"campaignId": "camp-1", "amount": 0})
    assert "amount" in exc_info.value.fields


def test_blank_identifier_is_rejected():
    with pytest.raises(SchemaValidationError) as exc_info:
        create_admin_user_role_assigned_event(
            {"userId": "  ", "roleId": "role-1", "roleName": "moderator", "assignedBy": "admin-1"}
        )
    assert exc_info.value.fields == ["userId"]


def test_non_mapping_payload_is_rejected():
    with pytest.raises(SchemaValidationError):
        create_event(EventType.USER_LOGGED_IN, "not-a-mapping")


def test_unknown_event_type_raises():
    with pytest.raises(UnknownEventTypeError) as exc_info:
        parse_event_type("donation.refunded")
    assert exc_info.value.fields == ["type"]


def test_event_is_immutable():
    event = create_donation_completed_event({"campaignId": "camp-1", "amount": 10}, metadata={"source": "web"})
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.type = EventType.CAMPAIGN_CREATED  # type: ignore[misc]
    with pytest.raises(TypeError):
        event.metadata["source"] = "mobile"  # type: ignore[index]
    with pytest.raises(Exception):
        event.payload.amount = Decimal("1")  # type: ignore[misc]


def test_rehydrate_keeps_wire_id_and_timestamp():
    ts = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    event = rehydrate(
        event_id="evt-42",
        event_type="campaign.status_changed",
        payload={"campaignId": "camp-1", "previousStatus": "draft", "newStatus": "active"},
        timestamp=ts,
    )
    assert event.id == "evt-42"
    assert event.timestamp == ts
    assert event.payload.new_status == "active"


def test_rehydrate_treats_naive_timestamp_as_utc():
    event = rehydrate(
        event_id="evt-1",
        event_type="user.logged_in",
        payload={"userId": "user-1"},
        timestamp=datetime(2024, 1, 1, 8, 30),
    )
    assert event.timestamp.tzinfo == timezone.utc


def test_to_wire_round_trips_through_rehydrate():
    event = create_donation_completed_event({"campaignId": "camp-1", "amount": "12.50", "userId": "u-1"})
    wire = event.to_wire()
    assert wire["type"] == "donation.completed"
    assert wire["payload"]["campaignId"] == "camp-1"
    assert isinstance(wire["timestamp"], int)

    again = rehydrate(
        event_id=wire["id"],
        event_type=wire["type"],
        payload=wire["payload"],
        timestamp=datetime.fromtimestamp(wire["timestamp"] / 1000, tz=timezone.utc),
    )
    assert again.payload == event.payload


def test_rehydrate_accepts_unix_ms_timestamp():
    event = rehydrate(
        event_id="evt-1",
        event_type="user.logged_in",
        payload={"userId": "user-1"},
        timestamp=1704067200000,
    )
    assert event.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_unparseable_timestamp_names_the_field():
    with pytest.raises(SchemaValidationError) as exc_info:
        rehydrate(event_id="evt-1", event_type="user.logged_in", payload={"userId": "u-1"}, timestamp="yesterday")
    assert exc_info.value.fields == ["timestamp"]


def test_non_mapping_metadata_names_the_field():
    with pytest.raises(SchemaValidationError) as exc_info:
        rehydrate(event_id="evt-1", event_type="user.logged_in", payload={"userId": "u-1"}, metadata="src")
    assert exc_info.value.fields == ["metadata"]


def test_coerce_timestamp_passes_none_through():
    assert coerce_timestamp(None) is None
